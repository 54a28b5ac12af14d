"""Global error handling: unhandled exceptions and the domain error taxonomy"""

import logging
import traceback
import uuid
from typing import Callable

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.middleware.base import BaseHTTPMiddleware

from schemas.jsonapi import JSONAPI_MEDIA_TYPE, error_document
from utils.errors import (
    HeaderContractError,
    InvalidDocumentError,
    KBNotConfiguredError,
    MalformedIdentifierError,
    UpstreamError,
)

logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Catch unhandled exceptions and return user-friendly errors"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            response = await call_next(request)
            return response

        except Exception as e:
            # Catch-all for unexpected errors
            error_id = uuid.uuid4().hex[:12]
            logger.error(
                f"[{error_id}] Unhandled exception in {request.url.path}: {type(e).__name__}: {str(e)}\n"
                f"Traceback:\n{traceback.format_exc()}"
            )

            return JSONResponse(
                status_code=500,
                content=error_document([{
                    "title": "An unexpected error occurred. Please try again later.",
                    "detail": f"error id {error_id}",
                }]),
                media_type=JSONAPI_MEDIA_TYPE,
            )


def _errors(status_code: int, errors) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=error_document(errors), media_type=JSONAPI_MEDIA_TYPE)


def upstream_status(exc: UpstreamError) -> int:
    """Upstream client errors pass through; everything else is a server side failure."""
    if exc.unreachable:
        return 503
    if 400 <= exc.status_code < 500:
        return exc.status_code
    return 500


def register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(HeaderContractError)
    async def header_contract_handler(request: Request, exc: HeaderContractError):
        return PlainTextResponse(status_code=400, content=exc.message)

    @app.exception_handler(MalformedIdentifierError)
    async def malformed_identifier_handler(request: Request, exc: MalformedIdentifierError):
        logger.info(f"Malformed identifier in {request.url.path}: {exc}")
        return _errors(400, [{"title": "Invalid identifier", "detail": exc.detail}])

    @app.exception_handler(InvalidDocumentError)
    async def invalid_document_handler(request: Request, exc: InvalidDocumentError):
        return _errors(422, [{"title": "Invalid request body", "detail": exc.detail}])

    @app.exception_handler(KBNotConfiguredError)
    async def not_configured_handler(request: Request, exc: KBNotConfiguredError):
        logger.warning(str(exc))
        return _errors(400, [{"title": "KB API credentials are not configured"}])

    @app.exception_handler(UpstreamError)
    async def upstream_error_handler(request: Request, exc: UpstreamError):
        status_code = upstream_status(exc)
        logger.error(f"Upstream failure in {request.method} {request.url.path}: {exc.detail} -> {status_code}")
        return _errors(status_code, exc.to_errors())
