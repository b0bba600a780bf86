"""Complaint data models."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from smartcity.core.types import ComplaintStatus, Urgency


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Location(BaseModel):
    latitude: float | None = None
    longitude: float | None = None
    address: str = ""


class Comment(BaseModel):
    """A single entry in a complaint's append-only comment thread."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    text: str
    author: str
    created_at: datetime = Field(default_factory=_utcnow)


class Complaint(BaseModel):
    """A citizen-filed report of a municipal issue."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    title: str
    description: str
    category: str = "OTHER"
    status: ComplaintStatus = ComplaintStatus.SUBMITTED
    urgency: Urgency = Urgency.MEDIUM
    priority_score: int = 5
    created_by: str
    governorate: str | None = None
    municipality: str | None = None
    location: Location | None = None
    assigned_department: str | None = None
    assigned_to: str | None = None
    rejection_reason: str | None = None
    resolved_at: datetime | None = None
    is_anonymous: bool = False
    comments: list[Comment] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    def touch(self) -> None:
        self.updated_at = _utcnow()


class ComplaintCreate(BaseModel):
    """Payload for filing a new complaint."""

    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    category: str | None = None
    urgency: Urgency | None = None
    priority_score: int | None = None
    governorate: str | None = None
    municipality: str | None = None
    location: Location | None = None
    is_anonymous: bool = False


class ComplaintFilter(BaseModel):
    """List filters and pagination for complaint queries."""

    status: ComplaintStatus | None = None
    category: str | None = None
    governorate: str | None = None
    municipality: str | None = None
    search: str | None = None
    mine: bool = False
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)


class CitizenIdentity(BaseModel):
    """Citizen fields exposed in a complaint view; withheld fields stay None."""

    id: str | None = None
    full_name: str | None = None
    email: str | None = None
    phone: str | None = None


class ComplaintView(BaseModel):
    """A complaint as returned to a permitted viewer."""

    id: str
    title: str
    description: str
    category: str
    status: ComplaintStatus
    urgency: Urgency
    priority_score: int
    citizen: CitizenIdentity
    governorate: str | None = None
    municipality: str | None = None
    location: Location | None = None
    assigned_department: str | None = None
    assigned_to: str | None = None
    rejection_reason: str | None = None
    resolved_at: datetime | None = None
    is_anonymous: bool = False
    comments: list[Comment] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class ComplaintPage(BaseModel):
    items: list[ComplaintView] = Field(default_factory=list)
    page: int
    limit: int
    total: int
    pages: int


class ComplaintStats(BaseModel):
    total: int = 0
    by_status: dict[str, int] = Field(default_factory=dict)
    by_category: dict[str, int] = Field(default_factory=dict)
    by_governorate: dict[str, int] = Field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        return self.model_dump()
