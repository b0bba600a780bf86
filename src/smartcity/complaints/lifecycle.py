"""Complaint lifecycle engine: authorization checks and state-changing operations.

The engine is stateless. Every call evaluates a single snapshot of the
complaint and the acting user; collaborators (store, directory, notifier) may
be sync or async and are awaited through ``resolve()``. Nothing is retried.
Notification failures are logged and never fail the operation that caused
them.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Protocol

from smartcity.complaints.models import Comment, Complaint
from smartcity.complaints.policy import AccessContext, is_allowed
from smartcity.complaints.priority import resolve_priority_score
from smartcity.core.config import ComplaintConfig
from smartcity.core.errors import (
    Forbidden,
    InvalidAssignee,
    InvalidComment,
    InvalidDepartment,
    InvalidStatus,
    InvalidTransition,
    InvalidUrgency,
)
from smartcity.core.types import Actor, ComplaintStatus, Operation, Role, Urgency
from smartcity.governance.audit import AuditLogger
from smartcity.notifications.models import NotificationEvent
from smartcity.repositories import resolve

logger = logging.getLogger(__name__)

# Forward-only workflow, used only when ComplaintConfig.enforce_transition_order is set.
ORDERED_TRANSITIONS: dict[ComplaintStatus, frozenset[ComplaintStatus]] = {
    ComplaintStatus.SUBMITTED: frozenset({ComplaintStatus.VALIDATED, ComplaintStatus.REJECTED}),
    ComplaintStatus.VALIDATED: frozenset(
        {ComplaintStatus.ASSIGNED, ComplaintStatus.IN_PROGRESS, ComplaintStatus.REJECTED}
    ),
    ComplaintStatus.ASSIGNED: frozenset({ComplaintStatus.IN_PROGRESS, ComplaintStatus.REJECTED}),
    ComplaintStatus.IN_PROGRESS: frozenset({ComplaintStatus.RESOLVED}),
    ComplaintStatus.RESOLVED: frozenset({ComplaintStatus.CLOSED, ComplaintStatus.IN_PROGRESS}),
    ComplaintStatus.CLOSED: frozenset(),
    ComplaintStatus.REJECTED: frozenset(),
}

_ASSIGNABLE_STATUSES = frozenset({ComplaintStatus.SUBMITTED, ComplaintStatus.VALIDATED})


class Notifier(Protocol):
    def notify(
        self,
        target_user_id: str,
        message: str,
        related_complaint_id: str | None = None,
        template_id: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> Any: ...


class Directory(Protocol):
    def find_user_by_id(self, user_id: str) -> Any: ...

    def find_department_by_id(self, department_id: str) -> Any: ...

    def find_department_by_responsable(self, user_id: str) -> Any: ...


def parse_status(value: ComplaintStatus | str) -> ComplaintStatus:
    """Return the status enum for ``value`` or raise InvalidStatus."""
    try:
        return ComplaintStatus(value)
    except ValueError:
        raise InvalidStatus(value) from None


class ComplaintLifecycleEngine:
    """Owns the complaint state machine and the role-based authorization matrix."""

    def __init__(
        self,
        store: Any,
        directory: Directory,
        notifier: Notifier | None = None,
        audit_logger: AuditLogger | None = None,
        config: ComplaintConfig | None = None,
    ) -> None:
        self._store = store
        self._directory = directory
        self._notifier = notifier
        self._audit = audit_logger
        self._config = config or ComplaintConfig()

    # -- Authorization --

    async def access_context(self, actor: Actor) -> AccessContext:
        """Resolve the scoping data the rule table needs for ``actor``."""
        if actor.role != Role.DEPARTMENT_MANAGER:
            return AccessContext(actor=actor)
        department = await resolve(self._directory.find_department_by_responsable(actor.id))
        return AccessContext(
            actor=actor,
            manager_department_id=department.id if department is not None else None,
        )

    async def is_allowed(
        self,
        actor: Actor,
        complaint: Complaint,
        operation: Operation,
        listing: bool = False,
    ) -> bool:
        ctx = await self.access_context(actor)
        return is_allowed(ctx, complaint, operation, listing)

    async def can_read(self, actor: Actor, complaint: Complaint, listing: bool = False) -> bool:
        return await self.is_allowed(actor, complaint, Operation.READ, listing)

    async def can_update_status(self, actor: Actor, complaint: Complaint) -> bool:
        return await self.is_allowed(actor, complaint, Operation.UPDATE_STATUS)

    async def can_assign_technician(self, actor: Actor, complaint: Complaint) -> bool:
        return await self.is_allowed(actor, complaint, Operation.ASSIGN_TECHNICIAN)

    async def can_assign_department(self, actor: Actor, complaint: Complaint) -> bool:
        return await self.is_allowed(actor, complaint, Operation.ASSIGN_DEPARTMENT)

    async def can_update_priority(self, actor: Actor, complaint: Complaint) -> bool:
        return await self.is_allowed(actor, complaint, Operation.UPDATE_PRIORITY)

    async def can_add_comment(self, actor: Actor, complaint: Complaint) -> bool:
        return await self.is_allowed(actor, complaint, Operation.ADD_COMMENT)

    async def require(self, actor: Actor, complaint: Complaint, operation: Operation) -> None:
        if not await self.is_allowed(actor, complaint, operation):
            logger.info(
                "Denied %s on complaint %s for %s user %s",
                operation, complaint.id, actor.role, actor.id,
            )
            raise Forbidden(operation.value, complaint.id)

    # -- Mutations --

    async def apply_status_transition(
        self,
        actor: Actor,
        complaint: Complaint,
        status: ComplaintStatus | str,
        rejection_reason: str | None = None,
    ) -> Complaint:
        """Move ``complaint`` to ``status``.

        Raises:
            Forbidden: The actor may not update this complaint's status.
            InvalidStatus: ``status`` is not a known complaint status.
            InvalidTransition: Ordered transitions are enforced and the jump
                is not allowed.
        """
        await self.require(actor, complaint, Operation.UPDATE_STATUS)
        target = parse_status(status)
        previous = complaint.status

        if (
            self._config.enforce_transition_order
            and target != previous
            and target not in ORDERED_TRANSITIONS[previous]
        ):
            raise InvalidTransition(previous.value, target.value)

        complaint.status = target
        if target == ComplaintStatus.REJECTED:
            reason = (rejection_reason or "").strip()
            if not reason:
                logger.warning("Complaint %s rejected without a reason", complaint.id)
            complaint.rejection_reason = reason
        if target == ComplaintStatus.RESOLVED and complaint.resolved_at is None:
            complaint.resolved_at = datetime.now(timezone.utc)

        await self._save(complaint)
        self._record(actor, "complaint.status_changed", complaint, {
            "from": previous.value,
            "to": target.value,
            "rejection_reason": complaint.rejection_reason if target == ComplaintStatus.REJECTED else None,
        })
        await self._notify_status_change(complaint)
        return complaint

    async def apply_technician_assignment(
        self,
        actor: Actor,
        complaint: Complaint,
        technician_id: str,
    ) -> Complaint:
        """Assign a technician; SUBMITTED/VALIDATED complaints become ASSIGNED.

        Raises:
            Forbidden: The actor may not assign technicians on this complaint.
            InvalidAssignee: The target user is missing or not a TECHNICIAN.
        """
        await self.require(actor, complaint, Operation.ASSIGN_TECHNICIAN)
        technician = await resolve(self._directory.find_user_by_id(technician_id))
        if technician is None or technician.role != Role.TECHNICIAN:
            raise InvalidAssignee(technician_id)

        previous = complaint.status
        complaint.assigned_to = technician.id
        if previous in _ASSIGNABLE_STATUSES:
            complaint.status = ComplaintStatus.ASSIGNED

        await self._save(complaint)
        self._record(actor, "complaint.technician_assigned", complaint, {
            "assigned_to": technician.id,
            "from": previous.value,
            "to": complaint.status.value,
        })
        await self._notify(
            technician.id,
            f"You have been assigned to complaint: {complaint.title}",
            complaint,
            NotificationEvent.TECHNICIAN_ASSIGNED,
        )
        if complaint.status != previous:
            await self._notify_status_change(complaint)
        return complaint

    async def apply_department_assignment(
        self,
        actor: Actor,
        complaint: Complaint,
        department_id: str,
    ) -> Complaint:
        """Route a complaint to a department; SUBMITTED complaints become VALIDATED.

        Raises:
            Forbidden: The actor may not assign departments on this complaint.
            InvalidDepartment: ``department_id`` does not resolve.
        """
        await self.require(actor, complaint, Operation.ASSIGN_DEPARTMENT)
        department = await resolve(self._directory.find_department_by_id(department_id))
        if department is None:
            raise InvalidDepartment(department_id)

        previous = complaint.status
        complaint.assigned_department = department.id
        if previous == ComplaintStatus.SUBMITTED:
            complaint.status = ComplaintStatus.VALIDATED

        await self._save(complaint)
        self._record(actor, "complaint.department_assigned", complaint, {
            "department_id": department.id,
            "from": previous.value,
            "to": complaint.status.value,
        })
        if complaint.status != previous:
            await self._notify_status_change(complaint)
        if department.responsable:
            await self._notify(
                department.responsable,
                f"Complaint routed to {department.name}: {complaint.title}",
                complaint,
                NotificationEvent.DEPARTMENT_ASSIGNED,
                {"department": department.name},
            )
        return complaint

    async def apply_priority_update(
        self,
        actor: Actor,
        complaint: Complaint,
        urgency: Urgency | str | None = None,
        priority_score: int | None = None,
    ) -> Complaint:
        """Set urgency and/or an explicit score; without a score it is re-derived.

        Raises:
            Forbidden: The actor may not change this complaint's priority.
        """
        await self.require(actor, complaint, Operation.UPDATE_PRIORITY)
        if urgency is not None:
            try:
                complaint.urgency = Urgency(urgency)
            except ValueError:
                raise InvalidUrgency(urgency) from None
        complaint.priority_score = resolve_priority_score(complaint.urgency, priority_score)

        await self._save(complaint)
        self._record(actor, "complaint.priority_updated", complaint, {
            "urgency": complaint.urgency.value,
            "priority_score": complaint.priority_score,
        })
        return complaint

    async def apply_comment(self, actor: Actor, complaint: Complaint, text: str) -> Comment:
        """Append a comment to the complaint's thread.

        Raises:
            Forbidden: The actor may not comment on this complaint.
            InvalidComment: ``text`` is empty after trimming.
        """
        await self.require(actor, complaint, Operation.ADD_COMMENT)
        text = (text or "").strip()
        if not text:
            raise InvalidComment()

        comment = Comment(text=text, author=actor.id)
        complaint.comments.append(comment)
        await self._save(complaint)
        self._record(actor, "complaint.comment_added", complaint, {"comment_id": comment.id})
        return comment

    # -- Helpers --

    async def _save(self, complaint: Complaint) -> None:
        complaint.touch()
        await resolve(self._store.save_complaint(complaint))

    def _record(
        self,
        actor: Actor,
        action: str,
        complaint: Complaint,
        details: dict[str, Any],
    ) -> None:
        if self._audit is not None:
            self._audit.record(actor.id, action, complaint.id, details)

    async def _notify_status_change(self, complaint: Complaint) -> None:
        await self._notify(
            complaint.created_by,
            f'Your complaint "{complaint.title}" is now {complaint.status.value.lower()}',
            complaint,
            NotificationEvent.STATUS_CHANGED,
            {"status": complaint.status.value},
        )

    async def _notify(
        self,
        target_user_id: str,
        message: str,
        complaint: Complaint,
        event: NotificationEvent,
        context: dict[str, Any] | None = None,
    ) -> None:
        if self._notifier is None or not target_user_id:
            return
        context = {"complaint_id": complaint.id, "title": complaint.title, **(context or {})}
        try:
            await resolve(
                self._notifier.notify(
                    target_user_id,
                    message,
                    complaint.id,
                    template_id=event,
                    context=context,
                )
            )
        except Exception:
            logger.warning(
                "Failed to notify %s about complaint %s", target_user_id, complaint.id,
                exc_info=True,
            )
