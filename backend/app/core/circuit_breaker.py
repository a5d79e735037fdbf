# app/core/circuit_breaker.py

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

logger = logging.getLogger(__name__)

# Initialize limiter, keyed by client address
limiter = Limiter(key_func=get_remote_address)

# Rate limit constants
RECEIVE_LIMIT = "5/minute"
RECEIVE_WINDOW_SECONDS = 60
RECEIVE_LIMIT_WARNING = (
    "You have exceeded the limit of 5 attempts per minute. "
    "Please wait before trying again."
)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """
    Reply for throttled /receive calls.
    Runs before the route body, so the store is never queried.
    """
    logger.warning("Rate limit hit by %s on %s", get_remote_address(request), request.url.path)
    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "warning": RECEIVE_LIMIT_WARNING,
            "retryAfter": RECEIVE_WINDOW_SECONDS,
        },
        headers={"Retry-After": str(RECEIVE_WINDOW_SECONDS)},
    )
