"""Bearer-token authentication and role gating as FastAPI dependencies.

``get_current_principal`` verifies the ``Authorization: Bearer`` token with
the ``TokenService`` held in ``app.state.services`` and returns the caller.
``require_roles(...)`` builds a dependency that additionally rejects callers
whose role is not listed.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from kolhub.auth import InvalidTokenError, TokenService
from kolhub.domain.errors import ApiError
from kolhub.domain.models import Principal
from kolhub.domain.types import UserRole

bearer_scheme = HTTPBearer(auto_error=False)

NO_TOKEN = "No token, access denied"
INVALID_TOKEN = "Invalid token"
FORBIDDEN = "Access denied: you do not have permission"


async def get_current_principal(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> Principal:
    """Resolve the authenticated caller or fail with 401.

    Raises:
        ApiError: 401 when the token is missing or does not verify.
    """
    if credentials is None or not credentials.credentials:
        raise ApiError(401, NO_TOKEN)

    tokens: TokenService = request.app.state.services["tokens"]
    try:
        return tokens.verify(credentials.credentials)
    except InvalidTokenError:
        raise ApiError(401, INVALID_TOKEN) from None


def require_roles(*roles: UserRole) -> Callable[..., Awaitable[Principal]]:
    """Build a dependency admitting only callers holding one of *roles*.

    Args:
        roles: Roles allowed through.

    Returns:
        An async dependency returning the ``Principal``.
    """
    allowed = frozenset(roles)

    async def role_checker(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role not in allowed:
            raise ApiError(403, FORBIDDEN)
        return principal

    return role_checker


require_admin = require_roles(UserRole.ADMIN)
require_kol_manager = require_roles(UserRole.KOL_MANAGER)
