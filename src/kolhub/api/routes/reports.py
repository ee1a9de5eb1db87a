"""``/api/report`` routes.

Reading a campaign's reports needs only a valid token; every write is limited
to KOL managers.
"""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from kolhub.api.deps import handler, read_json
from kolhub.api.security import get_current_principal, require_kol_manager
from kolhub.domain.models import Principal

router = APIRouter(prefix="/api/report", tags=["report"])


@router.post("")
async def create_reports(
    request: Request, principal: Principal = Depends(require_kol_manager)
) -> JSONResponse:
    """Batch-insert reports; 207 when some items were rejected."""
    body = await read_json(request)
    envelope = await asyncio.to_thread(handler(request, "reports").create_batch, body)
    return envelope.to_response()


@router.get("/{campaign_id}")
async def list_campaign_reports(
    campaign_id: str, request: Request, principal: Principal = Depends(get_current_principal)
) -> JSONResponse:
    envelope = await asyncio.to_thread(handler(request, "reports").list_for_campaign, campaign_id)
    return envelope.to_response()


@router.patch("/{report_id}")
async def update_report(
    report_id: str, request: Request, principal: Principal = Depends(require_kol_manager)
) -> JSONResponse:
    body = await read_json(request)
    envelope = await asyncio.to_thread(handler(request, "reports").update, report_id, body)
    return envelope.to_response()


@router.delete("/{report_id}")
async def delete_report(
    report_id: str, request: Request, principal: Principal = Depends(require_kol_manager)
) -> JSONResponse:
    envelope = await asyncio.to_thread(handler(request, "reports").delete, report_id)
    return envelope.to_response()
