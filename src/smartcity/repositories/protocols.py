"""Protocol definitions for all repository interfaces.

Each protocol mirrors the public methods of the corresponding in-memory
store class, so both the sync in-memory stores and the async Postgres
repositories satisfy the same interface.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from smartcity.complaints.models import Complaint
from smartcity.core.types import ComplaintStatus
from smartcity.directory.models import Department, User
from smartcity.notifications.models import Notification


@runtime_checkable
class ComplaintRepository(Protocol):
    """Protocol for complaint storage."""

    def save_complaint(self, complaint: Complaint) -> Complaint: ...

    def get_complaint(self, complaint_id: str) -> Complaint | None: ...

    def delete_complaint(self, complaint_id: str) -> bool: ...

    def list_complaints(
        self,
        status: ComplaintStatus | None = None,
        category: str | None = None,
        governorate: str | None = None,
        municipality: str | None = None,
        created_by: str | None = None,
        search: str | None = None,
    ) -> list[Complaint]: ...

    @property
    def complaint_count(self) -> int: ...


@runtime_checkable
class DirectoryRepository(Protocol):
    """Protocol for user and department lookups."""

    def save_user(self, user: User) -> User: ...

    def find_user_by_id(self, user_id: str) -> User | None: ...

    def find_user_by_email(self, email: str) -> User | None: ...

    def list_users(self) -> list[User]: ...

    def delete_user(self, user_id: str) -> bool: ...

    def list_technicians(self, governorate: str | None = None) -> list[User]: ...

    def save_department(self, department: Department) -> Department: ...

    def find_department_by_id(self, department_id: str) -> Department | None: ...

    def find_department_by_responsable(self, user_id: str) -> Department | None: ...

    def list_departments(self) -> list[Department]: ...


@runtime_checkable
class NotificationRepository(Protocol):
    """Protocol for notification storage."""

    def save(self, notification: Notification) -> Notification: ...

    def get(self, notification_id: str) -> Notification | None: ...

    def list_for_recipient(self, recipient: str, unread_only: bool = False) -> list[Notification]: ...

    def list_for_complaint(self, complaint_id: str) -> list[Notification]: ...

    def mark_read(self, notification_id: str) -> Notification | None: ...

    def list_all(self) -> list[Notification]: ...
