"""JSON response envelope shared by every resource handler.

Every endpoint answers with ``{success, message, ...}``; optional keys
(``data``, ``error``, ``pagination``, ``errors``, ``results``,
``insertedCount``) appear only when a handler sets them.  The HTTP status
travels with the envelope but is never serialized into the body.
"""

from __future__ import annotations

import functools
from collections.abc import Callable
from typing import Any, ParamSpec

import structlog
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from kolhub.domain.errors import ConflictError, GatewayError, RecordNotFoundError
from kolhub.domain.types import INTEGER_MAX
from kolhub.pagination import Pagination

logger = structlog.get_logger()

P = ParamSpec("P")


class Envelope(BaseModel):
    """A handler result: response body plus its HTTP status."""

    model_config = ConfigDict(populate_by_name=True)

    status_code: int = Field(default=200, exclude=True)
    success: bool
    message: str
    data: Any = None
    error: str | None = None
    pagination: Pagination | None = None
    errors: list[dict[str, Any]] | None = None
    results: list[dict[str, Any]] | None = None
    inserted_count: int | None = Field(default=None, alias="insertedCount")

    def body(self) -> dict[str, Any]:
        """Serialize only the keys that were explicitly set."""
        return self.model_dump(mode="json", exclude_unset=True, by_alias=True)

    def to_response(self) -> JSONResponse:
        return JSONResponse(content=self.body(), status_code=self.status_code)


def success(message: str, status_code: int = 200, **fields: Any) -> Envelope:
    """Build a ``success=True`` envelope carrying *fields*."""
    return Envelope(success=True, message=message, status_code=status_code, **fields)


def failure(status_code: int, message: str, error: str | None = None) -> Envelope:
    """Build a ``success=False`` envelope, with ``error`` only when given."""
    fields: dict[str, Any] = {} if error is None else {"error": error}
    return Envelope(success=False, message=message, status_code=status_code, **fields)


def parse_id(raw: Any) -> int | None:
    """Read a positive integer id from a path segment or body value.

    Returns ``None`` for anything that is not a positive integer that fits
    a 64-bit column.
    """
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, float) and raw.is_integer():
        value = int(raw)
    elif isinstance(raw, str) and raw.strip().isdecimal():
        value = int(raw.strip())
    else:
        return None
    return value if 0 < value <= INTEGER_MAX else None


def gateway_failures(
    message: str,
) -> Callable[[Callable[P, Envelope]], Callable[P, Envelope]]:
    """Convert gateway exceptions raised by a handler method into envelopes.

    ``RecordNotFoundError`` becomes 404, ``ConflictError`` 400 and any other
    ``GatewayError`` 500, each with *message* and the error text.

    Args:
        message: Envelope message used for every converted failure.
    """

    def decorator(func: Callable[P, Envelope]) -> Callable[P, Envelope]:
        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> Envelope:
            try:
                return func(*args, **kwargs)
            except RecordNotFoundError as exc:
                logger.info("Referenced record not found", table=exc.table, key=exc.key)
                return failure(404, message, str(exc))
            except ConflictError as exc:
                return failure(400, message, str(exc))
            except GatewayError as exc:
                logger.exception("Gateway failure", operation=func.__name__)
                return failure(500, message, str(exc))

        return wrapper

    return decorator
