"""
KB eHoldings facade - Application Factory
"""

import logging
import sys
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from config import config
from utils.rate_limit import limiter
from schemas.jsonapi import JSONAPI_MEDIA_TYPE, error_document
from middleware.error_handler import ErrorHandlerMiddleware, register_exception_handlers
from app.api.routes import configuration, health, packages, providers, resources, titles


# Configure logging
def setup_logging():
    """Setup structured logging for production"""
    log_level = getattr(logging, config.LOG_LEVEL.upper(), logging.INFO)

    # Clear any existing handlers
    logging.root.handlers = []

    if config.STRUCTURED_LOGGING:
        # JSON-like structured logging for production
        formatter = logging.Formatter(
            '{"time":"%(asctime)s", "level":"%(levelname)s", "name":"%(name)s", "message":"%(message)s"}'
        )
    else:
        # Human-readable logging for development
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)

    logging.root.setLevel(log_level)
    logging.root.addHandler(console_handler)

    # Set specific levels for noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""

    # Setup logging first
    setup_logging()
    logger = logging.getLogger(__name__)

    config_errors = config.validate()
    if config_errors:
        logger.error(f"Configuration errors: {', '.join(config_errors)}")
        if config.IS_PRODUCTION:
            raise ValueError(f"Production configuration invalid: {', '.join(config_errors)}")
        else:
            logger.warning("Configuration warnings (development mode - proceeding anyway)")

    logger.info(f"Starting application with config: {config.get_summary()}")

    app = FastAPI(
        title="KB eHoldings facade",
        description="JSON:API facade over the upstream knowledge base API",
        version="1.0.0"
    )

    # Add error handling middleware (first, to catch all errors)
    app.add_middleware(ErrorHandlerMiddleware)

    if config.ALLOWED_ORIGINS:
        allowed_origins = config.ALLOWED_ORIGINS
        logger.info(f"CORS configured with {len(allowed_origins)} allowed origins")
    else:
        allowed_origins = ["*"]
        logger.warning("ALLOWED_ORIGINS not set - using permissive CORS policy")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "X-Okapi-Tenant", "X-Okapi-Url", "X-Okapi-Token"],
    )

    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request, exc):
        return JSONResponse(
            status_code=429,
            content=error_document([{"title": f"Rate limit exceeded: {exc.detail}"}]),
            media_type=JSONAPI_MEDIA_TYPE,
        )

    register_exception_handlers(app)

    app.include_router(health.router, tags=["health"])
    app.include_router(configuration.router, prefix="/eholdings", tags=["configuration"])
    app.include_router(providers.router, prefix="/eholdings", tags=["providers"])
    app.include_router(packages.router, prefix="/eholdings", tags=["packages"])
    app.include_router(titles.router, prefix="/eholdings", tags=["titles"])
    app.include_router(resources.router, prefix="/eholdings", tags=["resources"])

    return app
