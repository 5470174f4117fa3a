"""
Rate Limiting for the Classdesk API
===================================
Implements rate limiting using slowapi. Storage is in-process memory unless
RATE_LIMIT_STORAGE_URI points somewhere shared.

Limits are applied per endpoint:
- /auth/login: 5 req/min (brute force protection)
- /auth/register: 3 req/min
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.exceptions import AppError, error_response
from app.core.logging_config import logger

LOGIN_RATE_LIMIT = "5/minute"
REGISTER_RATE_LIMIT = "3/minute"


def get_client_identifier(request: Request) -> str:
    """
    Get rate limit key for a request.

    Authenticated principals are keyed by id, everyone else by IP address.
    """
    principal = getattr(request.state, "principal", None)
    if principal is not None:
        return f"user:{principal.id}"
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_client_identifier,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """Render a 429 in the standard error envelope with a Retry-After header"""
    logger.warning(
        f"[RateLimit] Exceeded for {get_client_identifier(request)}: {exc.detail}"
    )

    error = AppError(
        "Too many requests. Please slow down.",
        status_code=429,
        code="RATE_LIMIT_EXCEEDED",
        details={"limit": str(exc.detail)},
    )
    return JSONResponse(
        status_code=error.status_code,
        content=error_response(error),
        headers={"Retry-After": "60"},
    )


def auth_rate_limit():
    """Rate limit for login (5/min)"""
    return limiter.limit(LOGIN_RATE_LIMIT)


def strict_rate_limit():
    """Very strict rate limit for account creation (3/min)"""
    return limiter.limit(REGISTER_RATE_LIMIT)
