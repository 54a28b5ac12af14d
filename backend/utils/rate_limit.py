"""Rate limiting utilities"""

from fastapi import Request
from slowapi import Limiter

from config import config


def get_tenant_or_ip_key(request: Request) -> str:
    """Get unique identifier for rate limiting - tenant if present, otherwise IP"""
    tenant = request.headers.get("X-Okapi-Tenant")
    if tenant:
        return f"tenant_{tenant}"

    # Fallback to IP-based rate limiting
    client_ip = request.client.host if request.client else "unknown"
    return f"ip_{client_ip}"


# Shared limiter instance - can be imported by route modules and app factory
limiter = Limiter(
    key_func=get_tenant_or_ip_key,
    default_limits=[config.DEFAULT_RATE_LIMIT],
    enabled=config.RATE_LIMIT_ENABLED,
)
