"""In-memory notification store."""

from __future__ import annotations

from smartcity.notifications.models import Notification


class NotificationStore:
    """In-memory store for notifications, keyed by id."""

    def __init__(self) -> None:
        self._notifications: dict[str, Notification] = {}

    def save(self, notification: Notification) -> Notification:
        self._notifications[notification.id] = notification
        return notification

    def get(self, notification_id: str) -> Notification | None:
        return self._notifications.get(notification_id)

    def list_for_recipient(self, recipient: str, unread_only: bool = False) -> list[Notification]:
        items = [
            n for n in self._notifications.values()
            if n.recipient == recipient and not (unread_only and n.is_read)
        ]
        return sorted(items, key=lambda n: n.created_at, reverse=True)

    def list_for_complaint(self, complaint_id: str) -> list[Notification]:
        return [
            n for n in self._notifications.values()
            if n.complaint_id == complaint_id
        ]

    def mark_read(self, notification_id: str) -> Notification | None:
        notification = self._notifications.get(notification_id)
        if notification is not None:
            notification.is_read = True
        return notification

    def list_all(self) -> list[Notification]:
        return list(self._notifications.values())

    @property
    def count(self) -> int:
        return len(self._notifications)
