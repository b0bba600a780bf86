"""Tests for admin user management."""

from __future__ import annotations

import pytest

from smartcity.core.config import AuditConfig
from smartcity.core.errors import (
    Forbidden,
    InvalidDepartment,
    InvalidLocation,
    InvalidUser,
    NotFound,
)
from smartcity.core.types import Role
from smartcity.directory.models import UserCreate, UserFilter, UserUpdate
from smartcity.directory.service import DirectoryService
from smartcity.governance.audit import AuditLogger
from tests.conftest import actor


@pytest.fixture
def audit(tmp_path) -> AuditLogger:
    return AuditLogger(config=AuditConfig(log_dir=str(tmp_path)))


@pytest.fixture
def service(directory, geography, audit) -> DirectoryService:
    return DirectoryService(directory, geography=geography, audit_logger=audit)


@pytest.fixture
def admin(directory):
    return actor(directory, "admin-1")


class TestAdminOnly:
    @pytest.mark.parametrize("user_id", ["citizen-1", "agent-tunis", "manager-roads", "tech-1"])
    async def test_non_admin_rejected(self, service, directory, user_id) -> None:
        caller = actor(directory, user_id)
        with pytest.raises(Forbidden):
            await service.list_users(caller)
        with pytest.raises(Forbidden):
            await service.get_user(caller, "citizen-2")
        with pytest.raises(Forbidden):
            await service.stats(caller)
        with pytest.raises(Forbidden):
            await service.create_user(caller, UserCreate(full_name="New One", email="n@example.tn"))
        with pytest.raises(Forbidden):
            await service.set_active(caller, "citizen-2", False)
        with pytest.raises(Forbidden):
            await service.delete_user(caller, "citizen-2")


class TestListUsers:
    async def test_all_users_sorted_by_name(self, service, admin) -> None:
        page = await service.list_users(admin)
        assert page.total == 10
        names = [u.full_name for u in page.items]
        assert names == sorted(names, key=str.lower)

    async def test_search_matches_name_and_email(self, service, admin) -> None:
        by_name = await service.list_users(admin, UserFilter(search="trabelsi"))
        assert [u.id for u in by_name.items] == ["citizen-2"]
        by_email = await service.list_users(admin, UserFilter(search="AGENT.TUNIS@"))
        assert [u.id for u in by_email.items] == ["agent-tunis"]

    async def test_role_and_active_filters(self, service, admin) -> None:
        page = await service.list_users(admin, UserFilter(role=Role.TECHNICIAN, is_active=True))
        assert {u.id for u in page.items} == {"tech-1", "tech-2"}

    async def test_pagination(self, service, admin) -> None:
        page = await service.list_users(admin, UserFilter(page=3, limit=4))
        assert page.total == 10
        assert page.pages == 3
        assert len(page.items) == 2


class TestReadUser:
    async def test_get_user(self, service, admin) -> None:
        user = await service.get_user(admin, "tech-1")
        assert user.email == "mehdi@example.tn"

    async def test_missing_user(self, service, admin) -> None:
        with pytest.raises(NotFound):
            await service.get_user(admin, "ghost")

    async def test_stats(self, service, admin) -> None:
        stats = await service.stats(admin)
        assert stats.total == 10
        assert stats.active == 9
        assert stats.inactive == 1
        assert stats.by_role == {
            "CITIZEN": 2,
            "MUNICIPAL_AGENT": 2,
            "DEPARTMENT_MANAGER": 2,
            "TECHNICIAN": 3,
            "ADMIN": 1,
        }


class TestCreateUser:
    async def test_creates_scoped_staff_account(self, service, directory, admin, audit) -> None:
        user = await service.create_user(
            admin,
            UserCreate(
                full_name="  Rim Bouazizi ",
                email=" Rim@Example.TN ",
                role=Role.MUNICIPAL_AGENT,
                governorate="Sfax",
                municipality="Sakiet Ezzit",
            ),
        )
        assert user.full_name == "Rim Bouazizi"
        assert user.email == "rim@example.tn"
        assert user.is_active is True
        assert directory.find_user_by_id(user.id).as_actor().municipality == "Sakiet Ezzit"

        events = audit.query({"resource": f"user:{user.id}"})
        assert [e.action for e in events] == ["user.created"]
        assert events[0].actor == "admin-1"
        assert events[0].details["role"] == "MUNICIPAL_AGENT"

    async def test_defaults_to_citizen(self, service, admin) -> None:
        user = await service.create_user(admin, UserCreate(full_name="Ali Ben", email="ali@example.tn"))
        assert user.role == Role.CITIZEN

    async def test_duplicate_email_rejected(self, service, admin) -> None:
        with pytest.raises(InvalidUser) as exc_info:
            await service.create_user(
                admin, UserCreate(full_name="Copy Cat", email="AMIRA@example.tn")
            )
        assert exc_info.value.details == {"field": "email"}

    @pytest.mark.parametrize(
        ("full_name", "email", "field"),
        [("Al", "al@example.tn", "full_name"), ("Valid Name", "not-an-email", "email")],
    )
    async def test_bad_identity_rejected(self, service, admin, full_name, email, field) -> None:
        with pytest.raises(InvalidUser) as exc_info:
            await service.create_user(admin, UserCreate(full_name=full_name, email=email))
        assert exc_info.value.details["field"] == field

    async def test_unknown_governorate(self, service, admin) -> None:
        with pytest.raises(InvalidUser):
            await service.create_user(
                admin, UserCreate(full_name="Sana Amri", email="sana@example.tn", governorate="Atlantis")
            )

    async def test_municipality_outside_governorate(self, service, admin) -> None:
        with pytest.raises(InvalidLocation):
            await service.create_user(
                admin,
                UserCreate(
                    full_name="Sana Amri",
                    email="sana@example.tn",
                    governorate="Sfax",
                    municipality="Carthage",
                ),
            )

    async def test_unknown_department(self, service, admin) -> None:
        with pytest.raises(InvalidDepartment):
            await service.create_user(
                admin,
                UserCreate(
                    full_name="Sana Amri",
                    email="sana@example.tn",
                    role=Role.DEPARTMENT_MANAGER,
                    department="dept-water",
                ),
            )


class TestUpdateUser:
    async def test_promote_and_scope(self, service, directory, admin, audit) -> None:
        updated = await service.update_user(
            admin,
            "citizen-2",
            UserUpdate(role=Role.DEPARTMENT_MANAGER, department="dept-light"),
        )
        assert updated.role == Role.DEPARTMENT_MANAGER
        stored = directory.find_user_by_id("citizen-2")
        assert stored.department == "dept-light"
        assert stored.email == "karim@example.tn"

        event = audit.query({"resource": "user:citizen-2"})[-1]
        assert event.action == "user.updated"
        assert event.details == {"role": "DEPARTMENT_MANAGER", "department": "dept-light"}

    async def test_municipality_checked_against_existing_governorate(self, service, admin) -> None:
        with pytest.raises(InvalidLocation):
            await service.update_user(admin, "tech-2", UserUpdate(municipality="Carthage"))

    async def test_move_governorate_and_municipality_together(self, service, admin) -> None:
        updated = await service.update_user(
            admin, "tech-2", UserUpdate(governorate="Tunis", municipality="Carthage")
        )
        assert (updated.governorate, updated.municipality) == ("Tunis", "Carthage")

    async def test_clear_department(self, service, admin) -> None:
        updated = await service.update_user(admin, "manager-roads", UserUpdate(department=None))
        assert updated.department is None

    async def test_email_taken_by_other_user(self, service, admin) -> None:
        with pytest.raises(InvalidUser):
            await service.update_user(admin, "citizen-2", UserUpdate(email="amira@example.tn"))

    async def test_keeping_own_email_allowed(self, service, admin) -> None:
        updated = await service.update_user(admin, "citizen-2", UserUpdate(email="KARIM@example.tn"))
        assert updated.email == "karim@example.tn"

    async def test_admin_cannot_change_own_role(self, service, admin) -> None:
        with pytest.raises(Forbidden):
            await service.update_role(admin, "admin-1", Role.CITIZEN)

    async def test_role_change_applies_to_next_actor(self, service, directory, admin) -> None:
        await service.update_role(admin, "citizen-1", Role.TECHNICIAN)
        assert actor(directory, "citizen-1").role == Role.TECHNICIAN


class TestActivation:
    async def test_deactivate_and_reactivate(self, service, directory, admin, audit) -> None:
        await service.set_active(admin, "tech-1", False)
        assert directory.find_user_by_id("tech-1").is_active is False
        assert "tech-1" not in {t.id for t in directory.list_technicians()}

        await service.set_active(admin, "tech-1", True)
        assert directory.find_user_by_id("tech-1").is_active is True
        actions = [e.action for e in audit.query({"resource": "user:tech-1"})]
        assert actions == ["user.deactivated", "user.activated"]

    async def test_cannot_toggle_self(self, service, admin) -> None:
        with pytest.raises(InvalidUser):
            await service.set_active(admin, "admin-1", False)

    async def test_cannot_deactivate_admin(self, service, directory, admin) -> None:
        await service.create_user(
            admin, UserCreate(full_name="Second Admin", email="admin2@example.tn", role=Role.ADMIN)
        )
        other = directory.find_user_by_email("admin2@example.tn")
        with pytest.raises(InvalidUser):
            await service.set_active(admin, other.id, False)


class TestDeleteUser:
    async def test_delete(self, service, directory, admin, audit) -> None:
        await service.delete_user(admin, "citizen-2")
        assert directory.find_user_by_id("citizen-2") is None
        assert audit.query({"action": "user.deleted"})[0].resource == "user:citizen-2"

    async def test_cannot_delete_self(self, service, admin) -> None:
        with pytest.raises(InvalidUser):
            await service.delete_user(admin, "admin-1")

    async def test_missing(self, service, admin) -> None:
        with pytest.raises(NotFound):
            await service.delete_user(admin, "ghost")
