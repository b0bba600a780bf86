"""Complaint application service.

Thin layer between the HTTP handlers and the lifecycle engine: resolves ids
to records (raising NotFound), validates creation payloads, builds the
visibility projection for reads and applies list filters and pagination.
Every gated mutation goes through ``ComplaintLifecycleEngine``.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from typing import Any

from smartcity.complaints.lifecycle import ComplaintLifecycleEngine, Notifier
from smartcity.complaints.models import (
    Comment,
    Complaint,
    ComplaintCreate,
    ComplaintFilter,
    ComplaintPage,
    ComplaintStats,
    ComplaintView,
)
from smartcity.complaints.policy import is_allowed
from smartcity.complaints.priority import resolve_priority_score
from smartcity.complaints.visibility import to_view
from smartcity.core.config import ComplaintConfig
from smartcity.core.errors import Forbidden, InvalidCategory, InvalidLocation, NotFound
from smartcity.core.types import Actor, ComplaintStatus, Operation, Role, Urgency
from smartcity.directory.models import Department, User
from smartcity.geography.lookup import GeographyLookup
from smartcity.governance.audit import AuditLogger
from smartcity.notifications.models import NotificationEvent
from smartcity.repositories import resolve

logger = logging.getLogger(__name__)


class ComplaintService:
    def __init__(
        self,
        store: Any,
        directory: Any,
        engine: ComplaintLifecycleEngine,
        geography: GeographyLookup | None = None,
        notifier: Notifier | None = None,
        audit_logger: AuditLogger | None = None,
        config: ComplaintConfig | None = None,
        admin_recipient: str = "admins",
    ) -> None:
        self._store = store
        self._directory = directory
        self._engine = engine
        self._geography = geography
        self._notifier = notifier
        self._audit = audit_logger
        self._config = config or ComplaintConfig()
        self._admin_recipient = admin_recipient

    @property
    def engine(self) -> ComplaintLifecycleEngine:
        return self._engine

    # -- Lookups --

    async def get_or_raise(self, complaint_id: str) -> Complaint:
        complaint = await resolve(self._store.get_complaint(complaint_id))
        if complaint is None:
            raise NotFound("complaint", complaint_id)
        return complaint

    async def _citizen(self, complaint: Complaint) -> User | None:
        return await resolve(self._directory.find_user_by_id(complaint.created_by))

    async def view(self, actor: Actor, complaint: Complaint) -> ComplaintView:
        return to_view(actor, complaint, await self._citizen(complaint))

    # -- Create / read --

    async def create_complaint(self, actor: Actor, payload: ComplaintCreate) -> ComplaintView:
        """File a new complaint owned by ``actor``.

        Raises:
            InvalidCategory: The category is not in the configured set.
            InvalidLocation: The municipality is not part of the governorate.
        """
        category = payload.category or self._config.default_category
        if category not in self._config.categories:
            raise InvalidCategory(category, self._config.categories)

        if (
            self._geography is not None
            and not self._geography.is_empty
            and payload.governorate
            and payload.municipality
            and not self._geography.contains(payload.governorate, payload.municipality)
        ):
            raise InvalidLocation(payload.governorate, payload.municipality)

        # Citizens pick an urgency; only staff may pin an explicit score.
        explicit = payload.priority_score if actor.role != Role.CITIZEN else None
        urgency = payload.urgency or Urgency.MEDIUM

        complaint = Complaint(
            title=payload.title.strip(),
            description=payload.description.strip(),
            category=category,
            urgency=urgency,
            priority_score=resolve_priority_score(urgency, explicit),
            created_by=actor.id,
            governorate=payload.governorate or None,
            municipality=payload.municipality or None,
            location=payload.location,
            is_anonymous=payload.is_anonymous,
        )
        await resolve(self._store.save_complaint(complaint))
        logger.info("Complaint %s filed by %s", complaint.id, actor.id)

        if self._audit is not None:
            self._audit.record(actor.id, "complaint.created", complaint.id, {
                "category": complaint.category,
                "urgency": complaint.urgency.value,
                "priority_score": complaint.priority_score,
            })
        await self._notify_admins(complaint)
        return await self.view(actor, complaint)

    async def get_complaint(self, actor: Actor, complaint_id: str) -> ComplaintView:
        complaint = await self.get_or_raise(complaint_id)
        if not await self._engine.can_read(actor, complaint):
            raise Forbidden(Operation.READ.value, complaint_id)
        return await self.view(actor, complaint)

    async def visible_complaints(
        self, actor: Actor, filters: ComplaintFilter | None = None
    ) -> list[Complaint]:
        """All complaints matching ``filters`` that ``actor`` may see in a list."""
        filters = filters or ComplaintFilter()
        candidates = await resolve(
            self._store.list_complaints(
                status=filters.status,
                category=filters.category,
                governorate=filters.governorate,
                municipality=filters.municipality,
                created_by=actor.id if filters.mine else None,
                search=filters.search,
            )
        )
        ctx = await self._engine.access_context(actor)
        return [c for c in candidates if is_allowed(ctx, c, Operation.READ, listing=True)]

    async def list_complaints(
        self, actor: Actor, filters: ComplaintFilter | None = None
    ) -> ComplaintPage:
        filters = filters or ComplaintFilter()
        visible = await self.visible_complaints(actor, filters)
        start = (filters.page - 1) * filters.limit
        page_items = visible[start:start + filters.limit]
        return ComplaintPage(
            items=[await self.view(actor, c) for c in page_items],
            page=filters.page,
            limit=filters.limit,
            total=len(visible),
            pages=math.ceil(len(visible) / filters.limit),
        )

    async def stats(self, actor: Actor) -> ComplaintStats:
        visible = await self.visible_complaints(actor)
        by_status = {status.value: 0 for status in ComplaintStatus}
        by_status.update(Counter(c.status.value for c in visible))
        return ComplaintStats(
            total=len(visible),
            by_status=by_status,
            by_category=dict(Counter(c.category for c in visible)),
            by_governorate=dict(Counter(c.governorate for c in visible if c.governorate)),
        )

    # -- Mutations --

    async def update_status(
        self,
        actor: Actor,
        complaint_id: str,
        status: str,
        rejection_reason: str | None = None,
    ) -> ComplaintView:
        complaint = await self.get_or_raise(complaint_id)
        await self._engine.apply_status_transition(actor, complaint, status, rejection_reason)
        return await self.view(actor, complaint)

    async def assign_technician(
        self, actor: Actor, complaint_id: str, technician_id: str
    ) -> ComplaintView:
        complaint = await self.get_or_raise(complaint_id)
        await self._engine.apply_technician_assignment(actor, complaint, technician_id)
        return await self.view(actor, complaint)

    async def assign_department(
        self, actor: Actor, complaint_id: str, department_id: str
    ) -> ComplaintView:
        complaint = await self.get_or_raise(complaint_id)
        await self._engine.apply_department_assignment(actor, complaint, department_id)
        return await self.view(actor, complaint)

    async def update_priority(
        self,
        actor: Actor,
        complaint_id: str,
        urgency: str | None = None,
        priority_score: int | None = None,
    ) -> ComplaintView:
        complaint = await self.get_or_raise(complaint_id)
        await self._engine.apply_priority_update(actor, complaint, urgency, priority_score)
        return await self.view(actor, complaint)

    async def add_comment(self, actor: Actor, complaint_id: str, text: str) -> Comment:
        complaint = await self.get_or_raise(complaint_id)
        return await self._engine.apply_comment(actor, complaint, text)

    async def delete_complaint(self, actor: Actor, complaint_id: str) -> None:
        """Remove a complaint permanently. Admin only."""
        if actor.role != Role.ADMIN:
            raise Forbidden("delete_complaint", complaint_id)
        complaint = await self.get_or_raise(complaint_id)
        await resolve(self._store.delete_complaint(complaint.id))
        logger.info("Complaint %s deleted by %s", complaint.id, actor.id)
        if self._audit is not None:
            self._audit.record(actor.id, "complaint.deleted", complaint.id, {
                "status": complaint.status.value,
                "created_by": complaint.created_by,
            })

    # -- Directory helpers --

    async def list_technicians(self, actor: Actor, governorate: str | None = None) -> list[User]:
        if actor.role in (Role.CITIZEN, Role.TECHNICIAN):
            raise Forbidden("list_technicians")
        return await resolve(self._directory.list_technicians(governorate))

    async def list_departments(self) -> list[Department]:
        return await resolve(self._directory.list_departments())

    async def _notify_admins(self, complaint: Complaint) -> None:
        if self._notifier is None:
            return
        try:
            await resolve(
                self._notifier.notify(
                    self._admin_recipient,
                    f"New complaint submitted: {complaint.title}",
                    complaint.id,
                    template_id=NotificationEvent.COMPLAINT_SUBMITTED,
                    context={"complaint_id": complaint.id, "title": complaint.title},
                )
            )
        except Exception:
            logger.warning("Failed to notify admins about complaint %s", complaint.id, exc_info=True)
