"""PostgreSQL complaint repository."""

from __future__ import annotations

from sqlalchemy import func, or_, select

from smartcity.complaints.models import Comment, Complaint, Location
from smartcity.core.types import ComplaintStatus, Urgency
from smartcity.db.engine import DatabaseManager
from smartcity.db.models import ComplaintRow


class PostgresComplaintRepository:
    """Postgres-backed complaint storage with the ComplaintStore interface."""

    def __init__(self, db: DatabaseManager) -> None:
        self._db = db

    async def save_complaint(self, complaint: Complaint) -> Complaint:
        async with self._db.session() as db:
            row = await db.get(ComplaintRow, complaint.id)
            if row is None:
                row = ComplaintRow(id=complaint.id, created_at=complaint.created_at)
                db.add(row)
            self._copy_to_row(complaint, row)
            await db.commit()
        return complaint

    async def get_complaint(self, complaint_id: str) -> Complaint | None:
        async with self._db.session() as db:
            row = await db.get(ComplaintRow, complaint_id)
            if row is None:
                return None
            return self._row_to_complaint(row)

    async def delete_complaint(self, complaint_id: str) -> bool:
        async with self._db.session() as db:
            row = await db.get(ComplaintRow, complaint_id)
            if row is None:
                return False
            await db.delete(row)
            await db.commit()
        return True

    async def list_complaints(
        self,
        status: ComplaintStatus | None = None,
        category: str | None = None,
        governorate: str | None = None,
        municipality: str | None = None,
        created_by: str | None = None,
        search: str | None = None,
    ) -> list[Complaint]:
        stmt = select(ComplaintRow)
        if status is not None:
            stmt = stmt.where(ComplaintRow.status == ComplaintStatus(status).value)
        if category is not None:
            stmt = stmt.where(ComplaintRow.category == category)
        if governorate is not None:
            stmt = stmt.where(ComplaintRow.governorate == governorate)
        if municipality is not None:
            stmt = stmt.where(ComplaintRow.municipality == municipality)
        if created_by is not None:
            stmt = stmt.where(ComplaintRow.created_by == created_by)
        if search:
            pattern = f"%{search.lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(ComplaintRow.title).like(pattern),
                    func.lower(ComplaintRow.description).like(pattern),
                )
            )
        stmt = stmt.order_by(ComplaintRow.created_at.desc())

        async with self._db.session() as db:
            result = await db.execute(stmt)
            return [self._row_to_complaint(r) for r in result.scalars().all()]

    @property
    def complaint_count(self) -> int:
        raise NotImplementedError("Use async_count() instead for Postgres")

    async def async_count(self) -> int:
        async with self._db.session() as db:
            result = await db.execute(select(func.count()).select_from(ComplaintRow))
            return result.scalar_one()

    @staticmethod
    def _copy_to_row(complaint: Complaint, row: ComplaintRow) -> None:
        location = complaint.location or Location()
        row.title = complaint.title
        row.description = complaint.description
        row.category = complaint.category
        row.status = complaint.status.value
        row.urgency = complaint.urgency.value
        row.priority_score = complaint.priority_score
        row.created_by = complaint.created_by
        row.governorate = complaint.governorate
        row.municipality = complaint.municipality
        row.latitude = location.latitude
        row.longitude = location.longitude
        row.address = location.address or None
        row.assigned_department = complaint.assigned_department
        row.assigned_to = complaint.assigned_to
        row.rejection_reason = complaint.rejection_reason
        row.resolved_at = complaint.resolved_at
        row.is_anonymous = complaint.is_anonymous
        row.comments = [c.model_dump(mode="json") for c in complaint.comments]
        row.updated_at = complaint.updated_at

    @staticmethod
    def _row_to_complaint(row: ComplaintRow) -> Complaint:
        has_location = row.latitude is not None or row.longitude is not None or row.address
        return Complaint(
            id=row.id,
            title=row.title,
            description=row.description,
            category=row.category,
            status=ComplaintStatus(row.status),
            urgency=Urgency(row.urgency),
            priority_score=row.priority_score,
            created_by=row.created_by,
            governorate=row.governorate,
            municipality=row.municipality,
            location=Location(
                latitude=row.latitude,
                longitude=row.longitude,
                address=row.address or "",
            ) if has_location else None,
            assigned_department=row.assigned_department,
            assigned_to=row.assigned_to,
            rejection_reason=row.rejection_reason,
            resolved_at=row.resolved_at,
            is_anonymous=row.is_anonymous,
            comments=[Comment(**c) for c in row.comments or []],
            created_at=row.created_at,
            updated_at=row.updated_at,
        )
