"""
Authentication utilities.

Identities are carried as HS256 JWTs: ``sub`` is the tenant/identity id and
``email`` the account e-mail. Sign-in itself happens upstream; this module
only issues tokens for development and tests and verifies incoming ones.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass
from typing import Any

import jwt
from fastapi import Header, HTTPException, status

from shared.config.settings import settings
from shared.config.logging import get_logger
from shared.utils.validators import validate_document_id

logger = get_logger(__name__)


@dataclass(frozen=True)
class Identity:
    """An authenticated principal. ``uid`` doubles as the tenant id."""

    uid: str
    email: str = ""


# =============================================================================
# JWT Functions
# =============================================================================


def sign_jwt(payload: dict[str, Any], ttl_seconds: int | None = None) -> str:
    """
    Sign a JWT token with the given payload.

    Args:
        payload: Claims to include (sub, email, ...).
        ttl_seconds: Token lifetime in seconds. Defaults to the access token expiry.

    Returns:
        Signed JWT token string.
    """
    if ttl_seconds is None:
        ttl_seconds = settings.jwt_access_token_expire_minutes * 60

    now = int(time.time())
    data = {
        **payload,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "iat": now,
        "exp": now + ttl_seconds,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(data, settings.jwt_secret, algorithm="HS256")


def sign_identity_token(uid: str, email: str = "", ttl_seconds: int | None = None) -> str:
    """Issue an identity token for ``uid``."""
    return sign_jwt({"sub": uid, "email": email}, ttl_seconds=ttl_seconds)


def verify_jwt(token: str) -> dict[str, Any]:
    """
    Verify and decode a JWT token.

    Raises:
        HTTPException: 401 if the token is invalid, expired, or lacks a usable subject.
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=["HS256"],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
        )
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except jwt.InvalidTokenError as e:
        # Log the actual error for debugging, return a generic message to the client
        logger.warning("JWT validation failed", error=str(e))
        raise _unauthorized("Invalid token")

    sub = payload.get("sub")
    try:
        validate_document_id(sub, "subject")
    except ValueError:
        raise _unauthorized("Invalid token: malformed subject claim")

    return payload


def identity_from_token(token: str) -> Identity:
    payload = verify_jwt(token)
    return Identity(uid=payload["sub"], email=payload.get("email") or "")


def get_bearer_token(authorization: str | None) -> str:
    """
    Extract bearer token from Authorization header.

    Raises:
        HTTPException: If header is missing or malformed.
    """
    if not authorization:
        raise _unauthorized("Missing Authorization header")
    if not authorization.startswith("Bearer "):
        raise _unauthorized("Invalid Authorization header format. Expected: Bearer <token>")
    return authorization.split(" ", 1)[1].strip()


def optional_identity(
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> Identity | None:
    """
    FastAPI dependency: the caller's identity, or None when no token is sent.

    A token that is present but invalid is still rejected with 401.
    """
    if not authorization:
        return None
    return identity_from_token(get_bearer_token(authorization))


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )
