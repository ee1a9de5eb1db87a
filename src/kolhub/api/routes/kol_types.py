"""``/api/kol-type`` routes (KOL managers only)."""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from kolhub.api.deps import handler, read_json
from kolhub.api.security import require_kol_manager
from kolhub.domain.models import Principal

router = APIRouter(prefix="/api/kol-type", tags=["kol-type"])


@router.post("")
async def create_kol_type(
    request: Request, principal: Principal = Depends(require_kol_manager)
) -> JSONResponse:
    body = await read_json(request)
    envelope = await asyncio.to_thread(handler(request, "kol_types").create, body)
    return envelope.to_response()


@router.get("")
async def list_kol_types(
    request: Request,
    page: int = 1,
    limit: int = 10,
    search: str = "",
    principal: Principal = Depends(require_kol_manager),
) -> JSONResponse:
    envelope = await asyncio.to_thread(handler(request, "kol_types").list_page, page, limit, search)
    return envelope.to_response()


@router.patch("")
async def update_kol_type(
    request: Request, principal: Principal = Depends(require_kol_manager)
) -> JSONResponse:
    body = await read_json(request)
    envelope = await asyncio.to_thread(handler(request, "kol_types").update, body)
    return envelope.to_response()


@router.delete("/{kol_type_id}")
async def delete_kol_type(
    kol_type_id: str, request: Request, principal: Principal = Depends(require_kol_manager)
) -> JSONResponse:
    envelope = await asyncio.to_thread(handler(request, "kol_types").delete, kol_type_id)
    return envelope.to_response()
