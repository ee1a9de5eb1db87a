"""Password hashing and bearer-token services."""

from kolhub.auth.passwords import (
    PASSWORD_POLICY_MESSAGE,
    PASSWORD_TOO_LONG_MESSAGE,
    PasswordHasher,
    fits_hash_limit,
    meets_password_policy,
)
from kolhub.auth.tokens import InvalidTokenError, TokenService

__all__ = [
    "PASSWORD_POLICY_MESSAGE",
    "PASSWORD_TOO_LONG_MESSAGE",
    "InvalidTokenError",
    "PasswordHasher",
    "TokenService",
    "fits_hash_limit",
    "meets_password_policy",
]
