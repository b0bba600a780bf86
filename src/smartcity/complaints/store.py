"""In-memory complaint store."""

from __future__ import annotations

from smartcity.complaints.models import Complaint
from smartcity.core.types import ComplaintStatus


class ComplaintStore:
    """In-memory dict store for complaints.

    Suitable for single-instance deployment; the Postgres repository exposes
    the same methods as coroutines.
    """

    def __init__(self) -> None:
        self._complaints: dict[str, Complaint] = {}

    def save_complaint(self, complaint: Complaint) -> Complaint:
        self._complaints[complaint.id] = complaint
        return complaint

    def get_complaint(self, complaint_id: str) -> Complaint | None:
        return self._complaints.get(complaint_id)

    def delete_complaint(self, complaint_id: str) -> bool:
        return self._complaints.pop(complaint_id, None) is not None

    def list_complaints(
        self,
        status: ComplaintStatus | None = None,
        category: str | None = None,
        governorate: str | None = None,
        municipality: str | None = None,
        created_by: str | None = None,
        search: str | None = None,
    ) -> list[Complaint]:
        """Complaints matching every given filter, newest first."""
        needle = search.lower() if search else None
        results = [
            c for c in self._complaints.values()
            if (status is None or c.status == status)
            and (category is None or c.category == category)
            and (governorate is None or c.governorate == governorate)
            and (municipality is None or c.municipality == municipality)
            and (created_by is None or c.created_by == created_by)
            and (
                needle is None
                or needle in c.title.lower()
                or needle in c.description.lower()
            )
        ]
        return sorted(results, key=lambda c: c.created_at, reverse=True)

    @property
    def complaint_count(self) -> int:
        return len(self._complaints)
