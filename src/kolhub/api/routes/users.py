"""``/api/user`` routes: public login, admin CRUD, self-service updates."""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from kolhub.api.deps import handler, read_json
from kolhub.api.security import get_current_principal, require_admin
from kolhub.domain.models import Principal

router = APIRouter(prefix="/api/user", tags=["user"])


@router.post("/login")
async def login(request: Request) -> JSONResponse:
    body = await read_json(request)
    envelope = await asyncio.to_thread(handler(request, "users").login, body)
    return envelope.to_response()


@router.post("/change-password")
async def change_password(
    request: Request, principal: Principal = Depends(get_current_principal)
) -> JSONResponse:
    body = await read_json(request)
    envelope = await asyncio.to_thread(handler(request, "users").change_password, body, principal)
    return envelope.to_response()


@router.post("")
async def create_user(
    request: Request, principal: Principal = Depends(require_admin)
) -> JSONResponse:
    body = await read_json(request)
    envelope = await asyncio.to_thread(handler(request, "users").create, body)
    return envelope.to_response()


@router.get("")
async def list_users(
    request: Request,
    page: int = 1,
    limit: int = 10,
    search: str = "",
    sort_by: str = Query("created_at", alias="sortBy"),
    order: str = "asc",
    principal: Principal = Depends(require_admin),
) -> JSONResponse:
    envelope = await asyncio.to_thread(
        handler(request, "users").list_page, page, limit, search, sort_by, order
    )
    return envelope.to_response()


@router.patch("")
async def update_user(
    request: Request, principal: Principal = Depends(get_current_principal)
) -> JSONResponse:
    body = await read_json(request)
    envelope = await asyncio.to_thread(handler(request, "users").update, body, principal)
    return envelope.to_response()


@router.delete("/{user_id}")
async def delete_user(
    user_id: str, request: Request, principal: Principal = Depends(require_admin)
) -> JSONResponse:
    envelope = await asyncio.to_thread(handler(request, "users").delete, user_id)
    return envelope.to_response()
