"""Notification data models."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum, StrEnum
from typing import Any

from pydantic import BaseModel, Field


class NotificationChannel(str, Enum):
    EMAIL = "email"
    SMS = "sms"
    IN_APP = "in_app"


class NotificationStatus(str, Enum):
    PENDING = "pending"
    DELIVERED = "delivered"
    FAILED = "failed"


class NotificationEvent(StrEnum):
    """Complaint events that notify someone; values double as template ids."""

    COMPLAINT_SUBMITTED = "complaint_submitted"
    STATUS_CHANGED = "complaint_status_changed"
    TECHNICIAN_ASSIGNED = "technician_assigned"
    DEPARTMENT_ASSIGNED = "department_assigned"


class Notification(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    recipient: str = ""
    channel: NotificationChannel = NotificationChannel.IN_APP
    subject: str = ""
    body: str = ""
    complaint_id: str | None = None
    status: NotificationStatus = NotificationStatus.PENDING
    template_id: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    is_read: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    delivered_at: datetime | None = None


class NotificationTemplate(BaseModel):
    id: str
    subject: str
    body: str
    channel: NotificationChannel = NotificationChannel.IN_APP
