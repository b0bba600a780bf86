"""FastAPI router for login, logout and the acting user."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from smartcity.auth.middleware import bearer_token, require_actor
from smartcity.auth.models import AuthCredentials
from smartcity.core.errors import NotFound
from smartcity.core.types import Actor
from smartcity.directory.models import User
from smartcity.repositories import resolve

router = APIRouter()


class AuthLoginRequest(BaseModel):
    email: str
    code: str


class AuthLogoutRequest(BaseModel):
    token: str | None = None


@router.post("/api/auth/login")
async def auth_login(body: AuthLoginRequest, request: Request) -> dict[str, Any]:
    """Authenticate and get a bearer token."""
    provider = request.app.state.auth_provider
    result = await provider.authenticate(AuthCredentials(email=body.email, code=body.code))
    if not result.success:
        raise HTTPException(status_code=401, detail=result.error)
    return result.model_dump(mode="json")


@router.post("/api/auth/logout")
async def auth_logout(request: Request, body: AuthLogoutRequest | None = None) -> dict[str, Any]:
    """Revoke a token; defaults to the one on the request."""
    token = (body.token if body else None) or bearer_token(request)
    if not token:
        return {"revoked": False}
    return {"revoked": request.app.state.auth_provider.revoke_token(token)}


@router.get("/api/me", response_model=User)
async def me(request: Request, actor: Actor = Depends(require_actor)) -> User:
    user = await resolve(request.app.state.directory.find_user_by_id(actor.id))
    if user is None:
        raise NotFound("user", actor.id)
    return user
