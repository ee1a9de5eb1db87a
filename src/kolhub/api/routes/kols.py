"""``/api/kol`` routes (KOL managers only)."""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from kolhub.api.deps import handler, read_json
from kolhub.api.security import require_kol_manager
from kolhub.domain.models import Principal

router = APIRouter(prefix="/api/kol", tags=["kol"])


@router.post("")
async def create_kols(
    request: Request, principal: Principal = Depends(require_kol_manager)
) -> JSONResponse:
    """Create one KOL (object body) or many (array body)."""
    body = await read_json(request)
    envelope = await asyncio.to_thread(handler(request, "kols").create, body)
    return envelope.to_response()


@router.get("")
async def list_kols(
    request: Request,
    page: int = 1,
    limit: int = 10,
    search: str = "",
    niche: str | None = None,
    principal: Principal = Depends(require_kol_manager),
) -> JSONResponse:
    envelope = await asyncio.to_thread(
        handler(request, "kols").list_page, page, limit, search, niche
    )
    return envelope.to_response()


@router.patch("")
async def update_kol(
    request: Request, principal: Principal = Depends(require_kol_manager)
) -> JSONResponse:
    body = await read_json(request)
    envelope = await asyncio.to_thread(handler(request, "kols").update, body)
    return envelope.to_response()


@router.delete("/{kol_id}")
async def delete_kol(
    kol_id: str, request: Request, principal: Principal = Depends(require_kol_manager)
) -> JSONResponse:
    envelope = await asyncio.to_thread(handler(request, "kols").delete, kol_id)
    return envelope.to_response()
