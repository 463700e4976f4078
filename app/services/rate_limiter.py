"""
Rate Limiting Service

IP-based rate limiting with slowapi.

Rate Limit Tiers:
=================
- Default (reads): settings.rate_limit_default, e.g. 100/minute
- Writes (create/update/delete, register/login): settings.rate_limit_write

Storage defaults to in-process memory; point RATE_LIMIT_STORAGE_URI at
redis://... to share counters between instances. Tests run with
RATE_LIMIT_ENABLED=false.
"""

import logging

from fastapi import Request
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from app.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()


def get_client_ip(request: Request) -> str:
    """
    Client IP for rate limiting, honouring common proxy headers.

    X-Forwarded-For may hold a chain of addresses; the first is the client.
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    return get_remote_address(request)


def create_limiter() -> Limiter:
    limiter = Limiter(
        key_func=get_client_ip,
        default_limits=[settings.rate_limit_default],
        storage_uri=settings.rate_limit_storage_uri,
        strategy="fixed-window",
        enabled=settings.rate_limit_enabled,
    )

    logger.info(
        f"Rate limiter initialized - enabled: {settings.rate_limit_enabled}, "
        f"default: {settings.rate_limit_default}, write: {settings.rate_limit_write}"
    )
    return limiter


limiter = create_limiter()
WRITE_LIMIT = settings.rate_limit_write


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """
    429 response in the API's error envelope, with a Retry-After header.
    """
    limit_detail = str(exc.detail)

    response = JSONResponse(
        status_code=429,
        content={
            "error": "rate_limit_exceeded",
            "message": "Too many requests. Please slow down.",
            "details": [{"field": "limit", "message": limit_detail}],
        },
    )
    response.headers["Retry-After"] = "60"
    response.headers["X-RateLimit-Limit"] = limit_detail

    logger.warning(f"Rate limit exceeded for {get_client_ip(request)}: {limit_detail}")
    return response
