"""
Security module: identity tokens and rate limiting.
"""

from shared.security.auth import (
    Identity,
    sign_jwt,
    sign_identity_token,
    verify_jwt,
    identity_from_token,
    get_bearer_token,
    optional_identity,
)
from shared.security.rate_limit import limiter, rate_limit_exceeded_handler

__all__ = [
    # auth
    "Identity",
    "sign_jwt",
    "sign_identity_token",
    "verify_jwt",
    "identity_from_token",
    "get_bearer_token",
    "optional_identity",
    # rate limiting
    "limiter",
    "rate_limit_exceeded_handler",
]
