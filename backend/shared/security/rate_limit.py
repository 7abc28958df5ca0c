"""
Rate limiting for expensive or privileged endpoints (slowapi).

Requests are keyed by the bearer token's subject when one is present, so
owners behind a shared NAT do not throttle each other; anonymous requests
fall back to the client IP.
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from shared.config.settings import settings
from shared.config.logging import get_logger

logger = get_logger(__name__)

# Limits applied by the routers
UPLOAD_LIMIT = "20/minute"
ADMIN_MUTATION_LIMIT = "60/minute"


def identity_or_ip(request: Request) -> str:
    """Rate-limit key: ``uid:<sub>`` for authenticated calls, else the client IP."""
    identity = getattr(request.state, "identity", None)
    if identity is not None:
        return f"uid:{identity.uid}"
    return get_remote_address(request)


limiter = Limiter(key_func=identity_or_ip, enabled=settings.rate_limit_enabled)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """JSON 429 response with retry information."""
    logger.warning(
        "Rate limit exceeded",
        path=request.url.path,
        key=identity_or_ip(request),
        limit=str(exc.detail),
    )
    return JSONResponse(
        status_code=429,
        content={
            "detail": "Rate limit exceeded. Please try again later.",
            "limit": str(exc.detail),
        },
    )
