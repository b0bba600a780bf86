"""Admin user management over the directory.

Every operation here is reserved to ``ADMIN`` actors. Mutations are written to
the audit log under a ``user:<id>`` resource so account changes share the
hash chain with complaint mutations.
"""

from __future__ import annotations

import logging
import math
import re
from collections import Counter
from typing import Any

from smartcity.core.errors import (
    Forbidden,
    InvalidDepartment,
    InvalidLocation,
    InvalidUser,
    NotFound,
)
from smartcity.core.types import Actor, AuditEvent, Role
from smartcity.directory.models import (
    User,
    UserCreate,
    UserFilter,
    UserPage,
    UserStats,
    UserUpdate,
)
from smartcity.geography.lookup import GeographyLookup
from smartcity.governance.audit import AuditLogger
from smartcity.repositories import resolve

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_MIN_NAME_LENGTH = 3


def _normalize_email(email: str) -> str:
    normalized = email.strip().lower()
    if not _EMAIL_RE.match(normalized):
        raise InvalidUser("email", f"Invalid email format: {email!r}")
    return normalized


def _clean_name(full_name: str) -> str:
    cleaned = full_name.strip()
    if len(cleaned) < _MIN_NAME_LENGTH:
        raise InvalidUser("full_name", f"Full name must be at least {_MIN_NAME_LENGTH} characters")
    return cleaned


class DirectoryService:
    def __init__(
        self,
        directory: Any,
        geography: GeographyLookup | None = None,
        audit_logger: AuditLogger | None = None,
    ) -> None:
        self._directory = directory
        self._geography = geography
        self._audit = audit_logger

    # -- Guards --

    @staticmethod
    def _require_admin(actor: Actor, operation: str) -> None:
        if actor.role != Role.ADMIN:
            raise Forbidden(operation)

    async def _get_or_raise(self, user_id: str) -> User:
        user = await resolve(self._directory.find_user_by_id(user_id))
        if user is None:
            raise NotFound("user", user_id)
        return user

    async def _check_email_free(self, email: str, user_id: str | None = None) -> None:
        existing = await resolve(self._directory.find_user_by_email(email))
        if existing is not None and existing.id != user_id:
            raise InvalidUser("email", f"Email {email!r} is already in use")

    def _check_location(self, governorate: str | None, municipality: str | None) -> None:
        if self._geography is None or self._geography.is_empty:
            return
        if governorate and governorate not in self._geography.governorates():
            raise InvalidUser("governorate", f"Unknown governorate: {governorate!r}")
        if municipality:
            if not governorate:
                raise InvalidUser(
                    "municipality", "A governorate is required when setting a municipality"
                )
            if not self._geography.contains(governorate, municipality):
                raise InvalidLocation(governorate, municipality)

    async def _check_department(self, department_id: str | None) -> None:
        if department_id and await resolve(
            self._directory.find_department_by_id(department_id)
        ) is None:
            raise InvalidDepartment(department_id)

    def _audit_user(
        self, actor: Actor, action: str, user_id: str, details: dict[str, Any] | None = None
    ) -> None:
        if self._audit is None:
            return
        self._audit.log(
            AuditEvent(
                actor=actor.id,
                action=action,
                resource=f"user:{user_id}",
                details=details or {},
            )
        )

    # -- Reads --

    async def list_users(self, actor: Actor, filters: UserFilter | None = None) -> UserPage:
        """Page through accounts, matching ``search`` against name and email."""
        self._require_admin(actor, "list_users")
        filters = filters or UserFilter()
        needle = filters.search.strip().lower() if filters.search else None
        users = [
            u for u in await resolve(self._directory.list_users())
            if (filters.role is None or u.role == filters.role)
            and (filters.is_active is None or u.is_active == filters.is_active)
            and (
                not needle
                or needle in u.full_name.lower()
                or needle in u.email.lower()
            )
        ]
        users.sort(key=lambda u: (u.full_name.lower(), u.id))
        start = (filters.page - 1) * filters.limit
        return UserPage(
            items=users[start:start + filters.limit],
            page=filters.page,
            limit=filters.limit,
            total=len(users),
            pages=math.ceil(len(users) / filters.limit),
        )

    async def get_user(self, actor: Actor, user_id: str) -> User:
        self._require_admin(actor, "read_user")
        return await self._get_or_raise(user_id)

    async def stats(self, actor: Actor) -> UserStats:
        self._require_admin(actor, "read_user_stats")
        users = await resolve(self._directory.list_users())
        active = sum(1 for u in users if u.is_active)
        by_role = {role.value: 0 for role in Role}
        by_role.update(Counter(u.role.value for u in users))
        return UserStats(
            total=len(users),
            active=active,
            inactive=len(users) - active,
            by_role=by_role,
        )

    # -- Mutations --

    async def create_user(self, actor: Actor, payload: UserCreate) -> User:
        """Provision a new active account.

        Raises:
            Forbidden: ``actor`` is not an admin.
            InvalidUser: Bad name or email, or the email is already registered.
            InvalidLocation: The municipality is not part of the governorate.
            InvalidDepartment: The department id does not resolve.
        """
        self._require_admin(actor, "create_user")
        full_name = _clean_name(payload.full_name)
        email = _normalize_email(payload.email)
        await self._check_email_free(email)
        self._check_location(payload.governorate, payload.municipality)
        await self._check_department(payload.department)

        user = User(
            full_name=full_name,
            email=email,
            phone=payload.phone,
            role=payload.role,
            municipality=payload.municipality or None,
            governorate=payload.governorate or None,
            department=payload.department or None,
        )
        await resolve(self._directory.save_user(user))
        logger.info("User %s (%s) created by %s", user.id, user.role.value, actor.id)
        self._audit_user(actor, "user.created", user.id, {
            "email": user.email,
            "role": user.role.value,
        })
        return user

    async def update_user(self, actor: Actor, user_id: str, payload: UserUpdate) -> User:
        """Apply the fields present in ``payload`` to an account.

        Scoping attributes are validated against the resulting governorate, so
        moving a user to another governorate and municipality can happen in
        one call. Admins cannot change their own role.
        """
        self._require_admin(actor, "update_user")
        user = await self._get_or_raise(user_id)
        fields = payload.model_fields_set
        changes: dict[str, Any] = {}

        if "full_name" in fields and payload.full_name is not None:
            changes["full_name"] = _clean_name(payload.full_name)
        if "email" in fields and payload.email is not None:
            email = _normalize_email(payload.email)
            await self._check_email_free(email, user.id)
            changes["email"] = email
        if "phone" in fields:
            changes["phone"] = payload.phone
        if "role" in fields and payload.role is not None and payload.role != user.role:
            if user.id == actor.id:
                raise Forbidden("change_own_role")
            changes["role"] = payload.role

        if "governorate" in fields or "municipality" in fields:
            governorate = (
                payload.governorate if "governorate" in fields else user.governorate
            ) or None
            municipality = (
                payload.municipality if "municipality" in fields else user.municipality
            ) or None
            self._check_location(governorate, municipality)
            changes["governorate"] = governorate
            changes["municipality"] = municipality
        if "department" in fields:
            await self._check_department(payload.department)
            changes["department"] = payload.department or None

        updated = user.model_copy(update=changes)
        await resolve(self._directory.save_user(updated))
        logger.info("User %s updated by %s: %s", user.id, actor.id, sorted(changes))
        self._audit_user(actor, "user.updated", user.id, {
            key: value.value if isinstance(value, Role) else value
            for key, value in changes.items()
        })
        return updated

    async def update_role(self, actor: Actor, user_id: str, role: Role) -> User:
        return await self.update_user(actor, user_id, UserUpdate(role=role))

    async def set_active(self, actor: Actor, user_id: str, is_active: bool) -> User:
        """Activate or deactivate an account. Inactive users cannot authenticate."""
        self._require_admin(actor, "toggle_user_active")
        if user_id == actor.id:
            raise InvalidUser("is_active", "You cannot change your own status")
        user = await self._get_or_raise(user_id)
        if user.role == Role.ADMIN and not is_active:
            raise InvalidUser("is_active", "Admin accounts cannot be deactivated")

        updated = user.model_copy(update={"is_active": is_active})
        await resolve(self._directory.save_user(updated))
        logger.info(
            "User %s %s by %s", user.id, "activated" if is_active else "deactivated", actor.id
        )
        self._audit_user(actor, "user.activated" if is_active else "user.deactivated", user.id)
        return updated

    async def delete_user(self, actor: Actor, user_id: str) -> None:
        self._require_admin(actor, "delete_user")
        if user_id == actor.id:
            raise InvalidUser("id", "You cannot delete your own account")
        user = await self._get_or_raise(user_id)
        if user.role == Role.ADMIN:
            raise InvalidUser("role", "Admin accounts cannot be deleted")

        await resolve(self._directory.delete_user(user.id))
        logger.info("User %s deleted by %s", user.id, actor.id)
        self._audit_user(actor, "user.deleted", user.id, {"email": user.email})
