"""Tests for PostgresNotificationRepository with SQLite async."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from smartcity.db.engine import DatabaseManager
from smartcity.notifications.models import Notification, NotificationChannel
from smartcity.repositories.postgres.notifications import PostgresNotificationRepository


@pytest.fixture
async def repo():
    db = DatabaseManager("sqlite+aiosqlite:///:memory:")
    await db.create_all()
    yield PostgresNotificationRepository(db)
    await db.close()


async def test_save_and_get(repo):
    n = Notification(
        recipient="citizen-1",
        subject="Hi",
        channel=NotificationChannel.EMAIL,
        complaint_id="c1",
        metadata={"status": "VALIDATED"},
    )
    await repo.save(n)
    found = await repo.get(n.id)
    assert found is not None
    assert found.recipient == "citizen-1"
    assert found.channel == NotificationChannel.EMAIL
    assert found.metadata == {"status": "VALIDATED"}


async def test_list_for_recipient(repo):
    now = datetime.now(timezone.utc)
    await repo.save(Notification(recipient="citizen-1", subject="old", created_at=now - timedelta(hours=1)))
    await repo.save(Notification(recipient="citizen-1", subject="new", created_at=now))
    await repo.save(Notification(recipient="citizen-2", subject="other"))
    assert [n.subject for n in await repo.list_for_recipient("citizen-1")] == ["new", "old"]


async def test_mark_read_and_unread_only(repo):
    a = await repo.save(Notification(recipient="citizen-1"))
    await repo.save(Notification(recipient="citizen-1"))
    marked = await repo.mark_read(a.id)
    assert marked.is_read
    assert len(await repo.list_for_recipient("citizen-1", unread_only=True)) == 1
    assert await repo.mark_read("nope") is None


async def test_list_for_complaint(repo):
    await repo.save(Notification(complaint_id="c1"))
    await repo.save(Notification(complaint_id="c2"))
    assert len(await repo.list_for_complaint("c1")) == 1


async def test_update_notification(repo):
    n = Notification(recipient="citizen-1", subject="Original")
    await repo.save(n)
    n.subject = "Updated"
    await repo.save(n)
    assert (await repo.get(n.id)).subject == "Updated"
    assert len(await repo.list_all()) == 1
    assert await repo.async_count() == 1
