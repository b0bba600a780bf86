"""PostgreSQL notification repository."""

from __future__ import annotations

from sqlalchemy import func, select

from smartcity.db.engine import DatabaseManager
from smartcity.db.models import NotificationRow
from smartcity.notifications.models import (
    Notification,
    NotificationChannel,
    NotificationStatus,
)


class PostgresNotificationRepository:
    """Postgres-backed notification storage."""

    def __init__(self, db: DatabaseManager) -> None:
        self._db = db

    async def save(self, notification: Notification) -> Notification:
        async with self._db.session() as db:
            row = await db.get(NotificationRow, notification.id)
            if row is None:
                row = NotificationRow(id=notification.id, created_at=notification.created_at)
                db.add(row)
            row.recipient = notification.recipient
            row.channel = notification.channel.value
            row.subject = notification.subject
            row.body = notification.body
            row.complaint_id = notification.complaint_id
            row.status = notification.status.value
            row.template_id = notification.template_id
            row.metadata_json = notification.metadata
            row.is_read = notification.is_read
            row.delivered_at = notification.delivered_at
            await db.commit()
        return notification

    async def get(self, notification_id: str) -> Notification | None:
        async with self._db.session() as db:
            row = await db.get(NotificationRow, notification_id)
            if row is None:
                return None
            return self._row_to_notification(row)

    async def list_for_recipient(self, recipient: str, unread_only: bool = False) -> list[Notification]:
        stmt = select(NotificationRow).where(NotificationRow.recipient == recipient)
        if unread_only:
            stmt = stmt.where(NotificationRow.is_read.is_(False))
        stmt = stmt.order_by(NotificationRow.created_at.desc())
        async with self._db.session() as db:
            result = await db.execute(stmt)
            return [self._row_to_notification(r) for r in result.scalars().all()]

    async def list_for_complaint(self, complaint_id: str) -> list[Notification]:
        async with self._db.session() as db:
            result = await db.execute(
                select(NotificationRow).where(NotificationRow.complaint_id == complaint_id)
            )
            return [self._row_to_notification(r) for r in result.scalars().all()]

    async def mark_read(self, notification_id: str) -> Notification | None:
        async with self._db.session() as db:
            row = await db.get(NotificationRow, notification_id)
            if row is None:
                return None
            row.is_read = True
            await db.commit()
            return self._row_to_notification(row)

    async def list_all(self) -> list[Notification]:
        async with self._db.session() as db:
            result = await db.execute(select(NotificationRow))
            return [self._row_to_notification(r) for r in result.scalars().all()]

    @property
    def count(self) -> int:
        raise NotImplementedError("Use async_count() instead for Postgres")

    async def async_count(self) -> int:
        async with self._db.session() as db:
            result = await db.execute(select(func.count()).select_from(NotificationRow))
            return result.scalar_one()

    @staticmethod
    def _row_to_notification(row: NotificationRow) -> Notification:
        return Notification(
            id=row.id,
            recipient=row.recipient,
            channel=NotificationChannel(row.channel),
            subject=row.subject,
            body=row.body,
            complaint_id=row.complaint_id,
            status=NotificationStatus(row.status),
            template_id=row.template_id,
            metadata=row.metadata_json or {},
            is_read=row.is_read,
            created_at=row.created_at,
            delivered_at=row.delivered_at,
        )
