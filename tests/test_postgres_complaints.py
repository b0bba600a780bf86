"""Tests for PostgresComplaintRepository with SQLite async."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from smartcity.complaints.models import Comment, Complaint, Location
from smartcity.core.types import ComplaintStatus, Urgency
from smartcity.db.engine import DatabaseManager
from smartcity.repositories.postgres.complaints import PostgresComplaintRepository


@pytest.fixture
async def repo():
    db = DatabaseManager("sqlite+aiosqlite:///:memory:")
    await db.create_all()
    yield PostgresComplaintRepository(db)
    await db.close()


def _complaint(**kwargs) -> Complaint:
    data = {
        "title": "Pothole",
        "description": "Deep pothole on the main road",
        "category": "ROAD",
        "created_by": "citizen-1",
        "governorate": "Tunis",
        "municipality": "Le Bardo",
    }
    data.update(kwargs)
    return Complaint(**data)


async def test_save_and_get(repo):
    c = _complaint(
        urgency=Urgency.HIGH,
        priority_score=7,
        location=Location(latitude=36.8, longitude=10.1, address="Av. Habib Bourguiba"),
    )
    await repo.save_complaint(c)
    found = await repo.get_complaint(c.id)
    assert found is not None
    assert found.title == "Pothole"
    assert found.urgency == Urgency.HIGH
    assert found.priority_score == 7
    assert found.location.address == "Av. Habib Bourguiba"
    assert found.location.latitude == pytest.approx(36.8)


async def test_get_missing(repo):
    assert await repo.get_complaint("nope") is None


async def test_no_location_round_trips_as_none(repo):
    c = _complaint()
    await repo.save_complaint(c)
    assert (await repo.get_complaint(c.id)).location is None


async def test_update_keeps_single_row(repo):
    c = _complaint()
    await repo.save_complaint(c)
    c.status = ComplaintStatus.ASSIGNED
    c.assigned_to = "tech-1"
    c.comments.append(Comment(text="On it", author="tech-1"))
    await repo.save_complaint(c)

    found = await repo.get_complaint(c.id)
    assert found.status == ComplaintStatus.ASSIGNED
    assert found.assigned_to == "tech-1"
    assert [cm.text for cm in found.comments] == ["On it"]
    assert await repo.async_count() == 1


async def test_list_filters(repo):
    await repo.save_complaint(_complaint(title="A"))
    await repo.save_complaint(_complaint(title="B", category="WATER", municipality="Tunis"))
    await repo.save_complaint(_complaint(
        title="C", created_by="citizen-2", governorate="Sfax", municipality="Sfax",
        status=ComplaintStatus.REJECTED,
    ))

    assert len(await repo.list_complaints()) == 3
    assert [c.title for c in await repo.list_complaints(category="WATER")] == ["B"]
    assert [c.title for c in await repo.list_complaints(governorate="Sfax")] == ["C"]
    assert [c.title for c in await repo.list_complaints(municipality="Le Bardo")] == ["A"]
    assert len(await repo.list_complaints(created_by="citizen-1")) == 2
    assert [c.title for c in await repo.list_complaints(status=ComplaintStatus.REJECTED)] == ["C"]


async def test_search_is_case_insensitive(repo):
    await repo.save_complaint(_complaint(title="Broken Street Light", description="Dark corner"))
    await repo.save_complaint(_complaint(title="Leak", description="Water on the STREET"))
    await repo.save_complaint(_complaint(title="Noise", description="Loud music"))
    titles = {c.title for c in await repo.list_complaints(search="street")}
    assert titles == {"Broken Street Light", "Leak"}


async def test_list_newest_first(repo):
    now = datetime.now(timezone.utc)
    await repo.save_complaint(_complaint(title="old", created_at=now - timedelta(days=1)))
    await repo.save_complaint(_complaint(title="new", created_at=now))
    assert [c.title for c in await repo.list_complaints()] == ["new", "old"]


async def test_sync_count_not_supported(repo):
    with pytest.raises(NotImplementedError):
        repo.complaint_count


async def test_delete_complaint(repo):
    kept, dropped = _complaint(), _complaint(title="Duplicate")
    await repo.save_complaint(kept)
    await repo.save_complaint(dropped)

    assert await repo.delete_complaint(dropped.id) is True
    assert await repo.delete_complaint(dropped.id) is False
    assert await repo.get_complaint(dropped.id) is None
    assert [c.id for c in await repo.list_complaints()] == [kept.id]
