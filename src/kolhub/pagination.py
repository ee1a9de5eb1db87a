"""Page metadata for list endpoints."""

from __future__ import annotations

import math

from pydantic import BaseModel, ConfigDict, Field


class Pagination(BaseModel):
    """Pagination block attached to list envelopes.

    Serialized with camelCase aliases (``totalPages``, ``currentPage``).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    total: int
    total_pages: int = Field(alias="totalPages")
    current_page: int = Field(alias="currentPage")
    limit: int


def paginate(page: int, limit: int, total: int) -> Pagination:
    """Map ``(page, limit, total)`` to a pagination block.

    ``totalPages`` is ``ceil(total / limit)``; a non-positive *limit* yields
    zero pages rather than dividing by zero.
    """
    total_pages = math.ceil(total / limit) if limit > 0 else 0
    return Pagination(total=total, total_pages=total_pages, current_page=page, limit=limit)


def offset_for(page: int, limit: int) -> int:
    """Row offset of the first item on *page* (1-based)."""
    return max(page - 1, 0) * limit
