# app/core/security.py

from typing import Optional

from cryptography.hazmat.primitives import constant_time
from fastapi import Header, Request

from app.core.errors import AuthError

ADMIN_HEADER = "X-Admin-Key"


def admin_key_matches(configured_key: str, supplied_key: Optional[str]) -> bool:
    """
    Constant-time comparison of the admin shared secret.
    An unset configured key never matches anything.
    """
    if not configured_key or supplied_key is None:
        return False
    return constant_time.bytes_eq(
        configured_key.encode("utf-8"),
        supplied_key.encode("utf-8"),
    )


def require_admin(request: Request, x_admin_key: Optional[str] = Header(None)):
    """FastAPI dependency guarding the admin routes."""
    settings = request.app.state.settings
    if not admin_key_matches(settings.admin_key, x_admin_key):
        raise AuthError()
