"""Core type definitions shared across all smart-city modules."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class Role(StrEnum):
    """Roles a user can hold."""

    CITIZEN = "CITIZEN"
    MUNICIPAL_AGENT = "MUNICIPAL_AGENT"
    DEPARTMENT_MANAGER = "DEPARTMENT_MANAGER"
    TECHNICIAN = "TECHNICIAN"
    ADMIN = "ADMIN"


STAFF_ROLES: frozenset[Role] = frozenset(
    {Role.MUNICIPAL_AGENT, Role.DEPARTMENT_MANAGER, Role.ADMIN}
)


class ComplaintStatus(StrEnum):
    """Lifecycle status of a complaint."""

    SUBMITTED = "SUBMITTED"
    VALIDATED = "VALIDATED"
    ASSIGNED = "ASSIGNED"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"
    REJECTED = "REJECTED"


class Urgency(StrEnum):
    """Citizen- or staff-supplied urgency."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class Operation(StrEnum):
    """Operations gated by the authorization matrix."""

    READ = "read"
    UPDATE_STATUS = "update_status"
    ASSIGN_TECHNICIAN = "assign_technician"
    ASSIGN_DEPARTMENT = "assign_department"
    UPDATE_PRIORITY = "update_priority"
    ADD_COMMENT = "add_comment"


class Actor(BaseModel):
    """The acting user as seen by the authorization matrix."""

    id: str
    role: Role
    municipality: str | None = None
    governorate: str | None = None
    department: str | None = None


class AuditEvent(BaseModel):
    """Immutable audit log entry."""

    event_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    actor: str
    action: str
    resource: str
    details: dict[str, Any] = Field(default_factory=dict)


class HealthStatus(BaseModel):
    """Health check response."""

    service: str
    healthy: bool
    details: dict[str, Any] = Field(default_factory=dict)
