"""Authentication middleware and dependencies."""

from __future__ import annotations

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from smartcity.core.errors import Unauthenticated
from smartcity.core.types import Actor
from smartcity.repositories import resolve


def bearer_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:]
    return None


class AuthMiddleware(BaseHTTPMiddleware):
    """Resolves the Bearer token to the acting user on ``request.state.actor``.

    The actor is rebuilt from the directory on every request so role and
    scoping changes apply immediately.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request.state.actor = None

        token = bearer_token(request)
        provider = getattr(request.app.state, "auth_provider", None)
        directory = getattr(request.app.state, "directory", None)
        if token and provider is not None and directory is not None:
            validation = provider.validate_token(token)
            if validation.valid:
                user = await resolve(directory.find_user_by_id(validation.user_id))
                if user is not None and user.is_active:
                    request.state.actor = user.as_actor()

        return await call_next(request)


def require_actor(request: Request) -> Actor:
    """FastAPI dependency returning the acting user or failing with 401."""
    actor = getattr(request.state, "actor", None)
    if actor is None:
        raise Unauthenticated()
    return actor
