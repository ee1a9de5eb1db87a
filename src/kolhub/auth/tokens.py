"""Signed bearer tokens carrying the caller's id, username and role."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import jwt
import structlog
from pydantic import ValidationError

from kolhub.domain.errors import KolHubError
from kolhub.domain.models import Principal

logger = structlog.get_logger()


class InvalidTokenError(KolHubError):
    """Raised when a bearer token is malformed, expired, or badly signed."""


class TokenService:
    """Issue and verify HS256 JWTs for authenticated users.

    Args:
        secret: Signing secret.
        algorithm: JWT algorithm name.
        expiration: Lifetime of an issued token.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expiration: timedelta = timedelta(hours=24),
    ) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self._expiration = expiration

    def issue(self, principal: Principal) -> str:
        """Sign a token for *principal*."""
        now = datetime.now(tz=UTC)
        payload = {
            "id": principal.id,
            "username": principal.username,
            "role": principal.role.value,
            "iat": now,
            "exp": now + self._expiration,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> Principal:
        """Decode *token* back into the principal it was issued for.

        Raises:
            InvalidTokenError: If the signature, expiry, or claims are invalid.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["exp"]},
            )
            return Principal.model_validate(
                {key: payload.get(key) for key in ("id", "username", "role")}
            )
        except jwt.PyJWTError as exc:
            logger.info("Rejected bearer token", reason=str(exc))
            raise InvalidTokenError(str(exc)) from exc
        except ValidationError as exc:
            logger.info("Rejected bearer token", reason="claims")
            raise InvalidTokenError("Token claims are invalid") from exc
