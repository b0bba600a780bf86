"""FastAPI router for the caller's notification inbox."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request

from smartcity.auth.middleware import require_actor
from smartcity.core.errors import Forbidden, NotFound
from smartcity.core.types import Actor, Role
from smartcity.repositories import resolve

router = APIRouter()


def _recipients_for(actor: Actor, admin_recipient: str) -> list[str]:
    """Admins also read the shared admin inbox."""
    if actor.role == Role.ADMIN:
        return [actor.id, admin_recipient]
    return [actor.id]


def _serialize(n: Any) -> dict[str, Any]:
    return {
        "id": n.id,
        "recipient": n.recipient,
        "channel": n.channel,
        "subject": n.subject,
        "body": n.body,
        "complaint_id": n.complaint_id,
        "template_id": n.template_id,
        "status": n.status,
        "is_read": n.is_read,
        "created_at": n.created_at.isoformat(),
    }


@router.get("/api/notifications")
async def list_notifications(
    request: Request,
    unread_only: bool = False,
    actor: Actor = Depends(require_actor),
) -> list[dict[str, Any]]:
    """List the caller's notifications, newest first."""
    store = request.app.state.notification_store
    admin_recipient = request.app.state.settings.notification.admin_recipient

    notifications = []
    for recipient in _recipients_for(actor, admin_recipient):
        notifications.extend(await resolve(store.list_for_recipient(recipient, unread_only)))
    notifications.sort(key=lambda n: n.created_at, reverse=True)
    return [_serialize(n) for n in notifications]


@router.post("/api/notifications/{notification_id}/read")
async def mark_notification_read(
    notification_id: str,
    request: Request,
    actor: Actor = Depends(require_actor),
) -> dict[str, Any]:
    store = request.app.state.notification_store
    admin_recipient = request.app.state.settings.notification.admin_recipient

    notification = await resolve(store.get(notification_id))
    if notification is None:
        raise NotFound("notification", notification_id)
    if notification.recipient not in _recipients_for(actor, admin_recipient):
        raise Forbidden("mark_read")

    notification = await resolve(store.mark_read(notification_id))
    return _serialize(notification)
