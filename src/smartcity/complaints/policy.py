"""Role-based authorization rules for complaint operations.

Each role maps to a rule function deciding whether an actor may perform an
operation on a complaint. Rules are pure: anything that needs I/O (the
department a manager runs) is resolved beforehand into an ``AccessContext``.

Precedence, first match decides:

  1. ADMIN may do everything.
  2. The complaint's owner may read and comment, nothing else.
  3. The per-role rule in ``ROLE_RULES``.
  4. Anything not covered is denied.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from smartcity.complaints.models import Complaint
from smartcity.core.types import Actor, ComplaintStatus, Operation, Role

OWNER_OPERATIONS: frozenset[Operation] = frozenset({Operation.READ, Operation.ADD_COMMENT})
TECHNICIAN_OPERATIONS: frozenset[Operation] = OWNER_OPERATIONS

# Statuses a department manager sees when listing their department's complaints.
MANAGER_LISTABLE_STATUSES: frozenset[ComplaintStatus] = frozenset(
    {
        ComplaintStatus.VALIDATED,
        ComplaintStatus.ASSIGNED,
        ComplaintStatus.IN_PROGRESS,
        ComplaintStatus.RESOLVED,
    }
)


@dataclass(frozen=True)
class AccessContext:
    """Everything a rule needs to know about the acting user."""

    actor: Actor
    manager_department_id: str | None = None


RoleRule = Callable[[AccessContext, Complaint, Operation, bool], bool]


def _deny(ctx: AccessContext, complaint: Complaint, operation: Operation, listing: bool) -> bool:
    return False


def _allow(ctx: AccessContext, complaint: Complaint, operation: Operation, listing: bool) -> bool:
    return True


def _municipal_agent(
    ctx: AccessContext, complaint: Complaint, operation: Operation, listing: bool
) -> bool:
    # An agent without a municipality is unrestricted.
    if not ctx.actor.municipality or not complaint.municipality:
        return True
    return ctx.actor.municipality == complaint.municipality


def _department_manager(
    ctx: AccessContext, complaint: Complaint, operation: Operation, listing: bool
) -> bool:
    if ctx.manager_department_id is None:
        return False
    if complaint.assigned_department != ctx.manager_department_id:
        return False
    if operation == Operation.READ and listing:
        return complaint.status in MANAGER_LISTABLE_STATUSES
    return True


def _technician(
    ctx: AccessContext, complaint: Complaint, operation: Operation, listing: bool
) -> bool:
    if operation not in TECHNICIAN_OPERATIONS:
        return False
    return complaint.assigned_to is not None and complaint.assigned_to == ctx.actor.id


ROLE_RULES: dict[Role, RoleRule] = {
    Role.ADMIN: _allow,
    Role.CITIZEN: _deny,
    Role.MUNICIPAL_AGENT: _municipal_agent,
    Role.DEPARTMENT_MANAGER: _department_manager,
    Role.TECHNICIAN: _technician,
}


def is_owner(actor: Actor, complaint: Complaint) -> bool:
    return complaint.created_by == actor.id


def is_allowed(
    ctx: AccessContext,
    complaint: Complaint,
    operation: Operation,
    listing: bool = False,
) -> bool:
    """Decide whether ``ctx.actor`` may perform ``operation`` on ``complaint``.

    Args:
        ctx: The acting user plus pre-resolved scoping data.
        complaint: Snapshot of the complaint.
        operation: The gated operation.
        listing: True when the read happens through a list/filter query.
    """
    if ctx.actor.role == Role.ADMIN:
        return True
    if is_owner(ctx.actor, complaint):
        return operation in OWNER_OPERATIONS
    rule = ROLE_RULES.get(ctx.actor.role, _deny)
    return rule(ctx, complaint, operation, listing)
