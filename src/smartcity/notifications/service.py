"""Notification delivery Protocol and mock implementation."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Protocol, runtime_checkable

from smartcity.notifications.models import Notification, NotificationStatus
from smartcity.notifications.store import NotificationStore
from smartcity.repositories import resolve


@runtime_checkable
class NotificationService(Protocol):
    """Protocol for notification delivery services.

    Implementations may be sync or async; callers go through ``resolve()``.
    """

    def send(self, notification: Notification) -> Any: ...


class MockNotificationService:
    """Mock delivery service: marks every notification delivered and stores it.

    ``store`` may be the in-memory ``NotificationStore`` or a Postgres
    notification repository.
    """

    def __init__(self, store: Any | None = None) -> None:
        self._store = store if store is not None else NotificationStore()

    @property
    def store(self) -> Any:
        return self._store

    async def send(self, notification: Notification) -> Notification:
        notification.status = NotificationStatus.DELIVERED
        notification.delivered_at = datetime.now(timezone.utc)
        await resolve(self._store.save(notification))
        return notification
