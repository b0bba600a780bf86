"""FastAPI router for technicians, departments and geography lookups."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request

from smartcity.auth.middleware import require_actor
from smartcity.core.errors import NotFound
from smartcity.core.types import Actor
from smartcity.directory.models import Department, User

router = APIRouter()


@router.get("/api/technicians", response_model=list[User])
async def list_technicians(
    request: Request,
    governorate: str | None = None,
    actor: Actor = Depends(require_actor),
) -> list[User]:
    """Active technicians, optionally limited to one governorate (staff only)."""
    return await request.app.state.complaint_service.list_technicians(actor, governorate)


@router.get("/api/departments", response_model=list[Department])
async def list_departments(
    request: Request,
    actor: Actor = Depends(require_actor),
) -> list[Department]:
    return await request.app.state.complaint_service.list_departments()


@router.get("/api/geography/governorates")
async def list_governorates(request: Request) -> dict[str, Any]:
    return {"governorates": request.app.state.geography.governorates()}


@router.get("/api/geography/governorates/{name}/municipalities")
async def list_municipalities(name: str, request: Request) -> dict[str, Any]:
    geography = request.app.state.geography
    if name not in geography.governorates():
        raise NotFound("governorate", name)
    return {"governorate": name, "municipalities": geography.municipalities(name)}
