"""Production configuration and environment settings"""

import os
from typing import List


class Config:
    """Application configuration from environment variables"""

    # Environment
    ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
    IS_PRODUCTION = ENVIRONMENT == "production"

    # CORS Configuration
    ALLOWED_ORIGINS: List[str] = []
    allowed_origins_env = os.getenv("ALLOWED_ORIGINS")
    if allowed_origins_env:
        ALLOWED_ORIGINS = [origin.strip() for origin in allowed_origins_env.split(",")]
    elif not IS_PRODUCTION:
        # Development fallback - but warn about it
        ALLOWED_ORIGINS = ["*"]

    # Upstream KB API
    KB_API_DEFAULT_BASE_URL = os.getenv("KB_API_DEFAULT_BASE_URL", "https://sandbox.ebsco.io")
    KB_API_TIMEOUT = float(os.getenv("KB_API_TIMEOUT", "10"))
    KB_API_MAX_RETRIES = int(os.getenv("KB_API_MAX_RETRIES", "3"))

    # Tenant configuration store
    CONFIG_DB_PATH = os.getenv("CONFIG_DB_PATH", "kb_configuration.db")

    # Pagination
    PAGE_SIZE = int(os.getenv("PAGE_SIZE", "25"))

    # Rate Limiting
    RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
    DEFAULT_RATE_LIMIT = os.getenv("DEFAULT_RATE_LIMIT", "120/minute")
    WRITE_RATE_LIMIT = os.getenv("WRITE_RATE_LIMIT", "30/minute")

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    STRUCTURED_LOGGING = os.getenv("STRUCTURED_LOGGING", "true").lower() == "true"

    @classmethod
    def validate(cls):
        """Validate critical configuration at startup"""
        errors = []

        if cls.IS_PRODUCTION and not cls.ALLOWED_ORIGINS:
            errors.append("ALLOWED_ORIGINS must be set in production")

        if not cls.KB_API_DEFAULT_BASE_URL.startswith(("http://", "https://")):
            errors.append("KB_API_DEFAULT_BASE_URL must be an http(s) URL")

        if cls.PAGE_SIZE < 1:
            errors.append("PAGE_SIZE must be positive")

        return errors

    @classmethod
    def get_summary(cls) -> dict:
        """Get configuration summary for logging (without secrets)"""
        return {
            "environment": cls.ENVIRONMENT,
            "kb_api_default_base_url": cls.KB_API_DEFAULT_BASE_URL,
            "config_db_path": cls.CONFIG_DB_PATH,
            "page_size": cls.PAGE_SIZE,
            "rate_limit_enabled": cls.RATE_LIMIT_ENABLED,
            "cors_origins_count": len(cls.ALLOWED_ORIGINS),
            "structured_logging": cls.STRUCTURED_LOGGING,
        }


config = Config()
