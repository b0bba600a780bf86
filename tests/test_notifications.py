"""Tests for notification engine, service, and store."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
import yaml

from smartcity.notifications.engine import NotificationEngine
from smartcity.notifications.models import (
    Notification,
    NotificationChannel,
    NotificationEvent,
    NotificationStatus,
)
from smartcity.notifications.service import MockNotificationService
from smartcity.notifications.store import NotificationStore


class TestNotificationStore:
    def setup_method(self) -> None:
        self.store = NotificationStore()

    def test_save_and_get(self) -> None:
        n = Notification(recipient="citizen-1", subject="Test")
        self.store.save(n)
        assert self.store.get(n.id) is n

    def test_get_nonexistent(self) -> None:
        assert self.store.get("nope") is None

    def test_list_for_recipient_newest_first(self) -> None:
        now = datetime.now(timezone.utc)
        old = Notification(recipient="citizen-1", subject="old", created_at=now - timedelta(hours=1))
        new = Notification(recipient="citizen-1", subject="new", created_at=now)
        self.store.save(old)
        self.store.save(new)
        self.store.save(Notification(recipient="citizen-2"))
        assert [n.subject for n in self.store.list_for_recipient("citizen-1")] == ["new", "old"]

    def test_unread_only(self) -> None:
        a = self.store.save(Notification(recipient="citizen-1"))
        self.store.save(Notification(recipient="citizen-1"))
        self.store.mark_read(a.id)
        assert len(self.store.list_for_recipient("citizen-1", unread_only=True)) == 1

    def test_list_for_complaint(self) -> None:
        self.store.save(Notification(complaint_id="c1"))
        self.store.save(Notification(complaint_id="c2"))
        self.store.save(Notification(complaint_id="c1"))
        assert len(self.store.list_for_complaint("c1")) == 2

    def test_mark_read_missing(self) -> None:
        assert self.store.mark_read("nope") is None

    def test_count(self) -> None:
        self.store.save(Notification())
        assert self.store.count == 1


class TestMockNotificationService:
    def setup_method(self) -> None:
        self.service = MockNotificationService()

    async def test_send_immediately_delivers(self) -> None:
        result = await self.service.send(Notification(recipient="citizen-1", subject="Hi"))
        assert result.status == NotificationStatus.DELIVERED
        assert result.delivered_at is not None
        assert self.service.store.get(result.id) is result


@pytest.fixture
def templates_path(tmp_path: Path) -> Path:
    path = tmp_path / "templates.yml"
    path.write_text(yaml.dump({
        "templates": {
            "complaint_status_changed": {
                "subject": "Complaint update: {title}",
                "body": "Your complaint is now {status}. Ref {unknown}.",
                "channel": "email",
            },
        },
    }))
    return path


class TestNotificationEngine:
    @pytest.fixture(autouse=True)
    def _engine(self, templates_path: Path) -> None:
        self.store = NotificationStore()
        self.engine = NotificationEngine(
            MockNotificationService(store=self.store),
            templates_path=templates_path,
        )

    def test_templates_loaded(self) -> None:
        assert "complaint_status_changed" in self.engine.templates

    async def test_renders_template(self) -> None:
        n = await self.engine.notify(
            "citizen-1",
            "fallback text",
            "c1",
            template_id="complaint_status_changed",
            context={"title": "Pothole", "status": "RESOLVED"},
        )
        assert n.subject == "Complaint update: Pothole"
        assert n.body == "Your complaint is now RESOLVED. Ref {unknown}."
        assert n.channel == NotificationChannel.EMAIL
        assert n.complaint_id == "c1"
        assert n.metadata == {"title": "Pothole", "status": "RESOLVED"}
        assert self.store.list_for_recipient("citizen-1") == [n]

    async def test_unknown_template_uses_message(self) -> None:
        n = await self.engine.notify("tech-1", "You were assigned", "c1", template_id="technician_assigned")
        assert n.body == "You were assigned"
        assert n.subject == "Technician assigned"
        assert n.channel == NotificationChannel.IN_APP

    async def test_plain_message(self) -> None:
        n = await self.engine.notify("citizen-1", "Hello")
        assert n.body == "Hello"
        assert n.complaint_id is None
        assert n.status == NotificationStatus.DELIVERED

    def test_missing_templates_file(self, tmp_path: Path) -> None:
        engine = NotificationEngine(MockNotificationService(), templates_path=tmp_path / "none.yml")
        assert engine.templates == {}


def test_shipped_templates_cover_every_event() -> None:
    engine = NotificationEngine(MockNotificationService())
    assert {event.value for event in NotificationEvent} <= set(engine.templates)
