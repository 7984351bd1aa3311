from __future__ import annotations
import logging
from typing import Any, Dict, Optional

import jwt  # PyJWT
from fastapi import Request

from chronochat.config import get_settings
from chronochat.core.errors import Unauthorized

logger = logging.getLogger(__name__)


class AuthUser(Dict[str, Any]):
    """Claims of a verified identity-provider JWT."""

    @property
    def id(self) -> str:
        return str(self["sub"])


def bearer_token(request: Request) -> Optional[str]:
    auth = request.headers.get("authorization")
    if not auth or not auth.lower().startswith("bearer "):
        return None
    token = auth.split(" ", 1)[1].strip()
    return token or None


def verify_token(token: str) -> AuthUser:
    """
    Verify an identity-provider JWT (HS256, shared secret).
    - Checks the audience when AUTH_JWT_AUDIENCE is set.
    - Requires a ``sub`` claim, which becomes the user id.
    Raises Unauthorized on any failure.
    """
    settings = get_settings()
    if not settings.auth_jwt_secret:
        logger.error("AUTH_JWT_SECRET is not configured; rejecting request")
        raise Unauthorized()
    options = {"require": ["sub"]}
    if not settings.auth_jwt_audience:
        options["verify_aud"] = False
    try:
        payload = jwt.decode(
            token,
            settings.auth_jwt_secret,
            algorithms=["HS256"],
            audience=settings.auth_jwt_audience or None,
            options=options,
        )
    except jwt.PyJWTError as e:
        logger.info("Rejected bearer token: %s", e)
        raise Unauthorized() from e
    return AuthUser(payload)


def current_user(request: Request) -> AuthUser:
    """FastAPI dependency resolving the caller from ``Authorization: Bearer <jwt>``."""
    token = bearer_token(request)
    if not token:
        raise Unauthorized()
    return verify_token(token)
