"""Request helpers shared by the API routers."""

from __future__ import annotations

from typing import Any

from fastapi import Request

from kolhub.domain.errors import ApiError


async def read_json(request: Request) -> Any:
    """Parse the request body as JSON.

    Raises:
        ApiError: 400 when the body is missing or not valid JSON.
    """
    try:
        return await request.json()
    except ValueError:
        raise ApiError(400, "Request body must be valid JSON.") from None


def handler(request: Request, name: str) -> Any:
    """Fetch the resource handler registered under *name* at startup."""
    return request.app.state.services["handlers"][name]
