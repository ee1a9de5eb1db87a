"""``/api/campaign`` routes (KOL managers only)."""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from kolhub.api.deps import handler, read_json
from kolhub.api.security import require_kol_manager
from kolhub.domain.models import Principal

router = APIRouter(prefix="/api/campaign", tags=["campaign"])


@router.post("")
async def create_campaign(
    request: Request, principal: Principal = Depends(require_kol_manager)
) -> JSONResponse:
    body = await read_json(request)
    envelope = await asyncio.to_thread(handler(request, "campaigns").create, body, principal)
    return envelope.to_response()


@router.get("")
async def list_campaigns(
    request: Request,
    page: int = 1,
    limit: int = 10,
    search: str = "",
    principal: Principal = Depends(require_kol_manager),
) -> JSONResponse:
    envelope = await asyncio.to_thread(handler(request, "campaigns").list_page, page, limit, search)
    return envelope.to_response()


@router.patch("")
async def update_campaign(
    request: Request, principal: Principal = Depends(require_kol_manager)
) -> JSONResponse:
    body = await read_json(request)
    envelope = await asyncio.to_thread(handler(request, "campaigns").update, body)
    return envelope.to_response()


@router.delete("/{campaign_id}")
async def delete_campaign(
    campaign_id: str, request: Request, principal: Principal = Depends(require_kol_manager)
) -> JSONResponse:
    envelope = await asyncio.to_thread(handler(request, "campaigns").delete, campaign_id)
    return envelope.to_response()
