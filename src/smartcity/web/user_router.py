"""FastAPI router for admin user management."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel

from smartcity.auth.middleware import require_actor
from smartcity.core.types import Actor, Role
from smartcity.directory.models import (
    User,
    UserCreate,
    UserFilter,
    UserPage,
    UserStats,
    UserUpdate,
)
from smartcity.directory.service import DirectoryService

router = APIRouter(prefix="/api/admin/users")


def get_service(request: Request) -> DirectoryService:
    return request.app.state.directory_service


class RoleUpdateRequest(BaseModel):
    role: Role


class ActiveUpdateRequest(BaseModel):
    is_active: bool


@router.get("", response_model=UserPage)
async def list_users(
    search: str | None = None,
    role: Role | None = None,
    is_active: bool | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    actor: Actor = Depends(require_actor),
    service: DirectoryService = Depends(get_service),
) -> UserPage:
    filters = UserFilter(search=search, role=role, is_active=is_active, page=page, limit=limit)
    return await service.list_users(actor, filters)


@router.get("/stats", response_model=UserStats)
async def user_stats(
    actor: Actor = Depends(require_actor),
    service: DirectoryService = Depends(get_service),
) -> UserStats:
    return await service.stats(actor)


@router.get("/{user_id}", response_model=User)
async def get_user(
    user_id: str,
    actor: Actor = Depends(require_actor),
    service: DirectoryService = Depends(get_service),
) -> User:
    return await service.get_user(actor, user_id)


@router.post("", response_model=User, status_code=201)
async def create_user(
    body: UserCreate,
    actor: Actor = Depends(require_actor),
    service: DirectoryService = Depends(get_service),
) -> User:
    return await service.create_user(actor, body)


@router.patch("/{user_id}", response_model=User)
async def update_user(
    user_id: str,
    body: UserUpdate,
    actor: Actor = Depends(require_actor),
    service: DirectoryService = Depends(get_service),
) -> User:
    return await service.update_user(actor, user_id, body)


@router.patch("/{user_id}/role", response_model=User)
async def update_role(
    user_id: str,
    body: RoleUpdateRequest,
    actor: Actor = Depends(require_actor),
    service: DirectoryService = Depends(get_service),
) -> User:
    return await service.update_role(actor, user_id, body.role)


@router.patch("/{user_id}/active", response_model=User)
async def set_active(
    user_id: str,
    body: ActiveUpdateRequest,
    actor: Actor = Depends(require_actor),
    service: DirectoryService = Depends(get_service),
) -> User:
    return await service.set_active(actor, user_id, body.is_active)


@router.delete("/{user_id}", status_code=204)
async def delete_user(
    user_id: str,
    actor: Actor = Depends(require_actor),
    service: DirectoryService = Depends(get_service),
) -> None:
    await service.delete_user(actor, user_id)
