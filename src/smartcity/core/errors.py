"""Exceptions surfaced by the complaint lifecycle.

Each error carries a stable ``code`` so API clients can tell a denial
(``FORBIDDEN``) from a rejected value (``INVALID_*``) or a missing record
(``NOT_FOUND``) without parsing the message.

Usage::

    from smartcity.core.errors import Forbidden, NotFound

    if complaint is None:
        raise NotFound("complaint", complaint_id)
"""

from __future__ import annotations

from typing import Any


class ComplaintError(Exception):
    """Base exception for all complaint-management errors."""

    code = "COMPLAINT_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.message, "code": self.code, "details": self.details}


class Forbidden(ComplaintError):
    """The authorization matrix denied the operation."""

    code = "FORBIDDEN"

    def __init__(self, operation: str, complaint_id: str | None = None) -> None:
        target = f" on complaint {complaint_id!r}" if complaint_id else ""
        super().__init__(
            f"You are not allowed to {operation.replace('_', ' ')}{target}",
            details={"operation": operation, "complaint_id": complaint_id},
        )


class Unauthenticated(ComplaintError):
    """No valid bearer token accompanied the request."""

    code = "UNAUTHENTICATED"

    def __init__(self) -> None:
        super().__init__("Authentication required")


class NotFound(ComplaintError):
    """A complaint, user or department id does not resolve."""

    code = "NOT_FOUND"

    def __init__(self, kind: str, identifier: str) -> None:
        super().__init__(
            f"{kind.capitalize()} {identifier!r} not found",
            details={"kind": kind, "id": identifier},
        )


class ValidationFailed(ComplaintError):
    """A supplied value is not acceptable."""

    code = "VALIDATION_FAILED"


class InvalidStatus(ValidationFailed):
    code = "INVALID_STATUS"

    def __init__(
        self,
        status: Any,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message or f"Invalid status: {status!r}",
            details=details if details is not None else {"status": status},
        )


class InvalidTransition(InvalidStatus):
    code = "INVALID_TRANSITION"

    def __init__(self, current: str, target: str) -> None:
        super().__init__(
            target,
            f"Cannot move a complaint from {current} to {target}",
            details={"from": current, "to": target},
        )


class InvalidAssignee(ValidationFailed):
    code = "INVALID_ASSIGNEE"

    def __init__(self, user_id: str) -> None:
        super().__init__(
            f"User {user_id!r} is not a technician",
            details={"assigned_to": user_id},
        )


class InvalidDepartment(ValidationFailed):
    code = "INVALID_DEPARTMENT"

    def __init__(self, department_id: str) -> None:
        super().__init__(
            f"Department {department_id!r} does not exist",
            details={"department_id": department_id},
        )


class InvalidCategory(ValidationFailed):
    code = "INVALID_CATEGORY"

    def __init__(self, category: str, allowed: list[str]) -> None:
        super().__init__(
            f"Invalid category: {category!r}",
            details={"category": category, "allowed": allowed},
        )


class InvalidLocation(ValidationFailed):
    code = "INVALID_LOCATION"

    def __init__(self, governorate: str, municipality: str) -> None:
        super().__init__(
            f"Municipality {municipality!r} is not in governorate {governorate!r}",
            details={"governorate": governorate, "municipality": municipality},
        )


class InvalidComment(ValidationFailed):
    code = "INVALID_COMMENT"

    def __init__(self) -> None:
        super().__init__("Comment text is required")


class InvalidUrgency(ValidationFailed):
    code = "INVALID_URGENCY"

    def __init__(self, urgency: Any) -> None:
        super().__init__(f"Invalid urgency: {urgency!r}", details={"urgency": urgency})


class InvalidUser(ValidationFailed):
    """An account change the directory refuses to apply."""

    code = "INVALID_USER"

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message, details={"field": field})
