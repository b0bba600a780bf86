"""PostgreSQL user and department directory."""

from __future__ import annotations

from sqlalchemy import func, select

from smartcity.core.types import Role
from smartcity.db.engine import DatabaseManager
from smartcity.db.models import DepartmentRow, UserRow
from smartcity.directory.models import Department, User


class PostgresDirectoryRepository:
    """Postgres-backed directory with the DirectoryStore interface."""

    def __init__(self, db: DatabaseManager) -> None:
        self._db = db

    # -- Users --

    async def save_user(self, user: User) -> User:
        async with self._db.session() as db:
            row = await db.get(UserRow, user.id)
            if row is None:
                row = UserRow(id=user.id)
                db.add(row)
            row.full_name = user.full_name
            row.email = user.email.lower()
            row.phone = user.phone
            row.role = user.role.value
            row.is_active = user.is_active
            row.municipality = user.municipality
            row.governorate = user.governorate
            row.department = user.department
            await db.commit()
        return user

    async def find_user_by_id(self, user_id: str) -> User | None:
        async with self._db.session() as db:
            row = await db.get(UserRow, user_id)
            return self._row_to_user(row) if row is not None else None

    async def find_user_by_email(self, email: str) -> User | None:
        async with self._db.session() as db:
            result = await db.execute(select(UserRow).where(UserRow.email == email.lower()))
            row = result.scalars().first()
            return self._row_to_user(row) if row is not None else None

    async def list_users(self) -> list[User]:
        async with self._db.session() as db:
            result = await db.execute(select(UserRow).order_by(UserRow.full_name))
            return [self._row_to_user(r) for r in result.scalars().all()]

    async def delete_user(self, user_id: str) -> bool:
        async with self._db.session() as db:
            row = await db.get(UserRow, user_id)
            if row is None:
                return False
            await db.delete(row)
            await db.commit()
        return True

    async def list_technicians(self, governorate: str | None = None) -> list[User]:
        stmt = select(UserRow).where(
            UserRow.role == Role.TECHNICIAN.value,
            UserRow.is_active.is_(True),
        )
        if governorate is not None:
            stmt = stmt.where(UserRow.governorate == governorate)
        async with self._db.session() as db:
            result = await db.execute(stmt)
            return [self._row_to_user(r) for r in result.scalars().all()]

    # -- Departments --

    async def save_department(self, department: Department) -> Department:
        async with self._db.session() as db:
            row = await db.get(DepartmentRow, department.id)
            if row is None:
                row = DepartmentRow(id=department.id)
                db.add(row)
            row.name = department.name
            row.description = department.description
            row.email = department.email
            row.phone = department.phone
            row.responsable = department.responsable
            row.municipality = department.municipality
            await db.commit()
        return department

    async def find_department_by_id(self, department_id: str) -> Department | None:
        async with self._db.session() as db:
            row = await db.get(DepartmentRow, department_id)
            return self._row_to_department(row) if row is not None else None

    async def find_department_by_responsable(self, user_id: str) -> Department | None:
        async with self._db.session() as db:
            result = await db.execute(
                select(DepartmentRow).where(DepartmentRow.responsable == user_id)
            )
            row = result.scalars().first()
            return self._row_to_department(row) if row is not None else None

    async def list_departments(self) -> list[Department]:
        async with self._db.session() as db:
            result = await db.execute(select(DepartmentRow).order_by(DepartmentRow.name))
            return [self._row_to_department(r) for r in result.scalars().all()]

    @property
    def user_count(self) -> int:
        raise NotImplementedError("Use async_user_count() instead for Postgres")

    async def async_user_count(self) -> int:
        async with self._db.session() as db:
            result = await db.execute(select(func.count()).select_from(UserRow))
            return result.scalar_one()

    @staticmethod
    def _row_to_user(row: UserRow) -> User:
        return User(
            id=row.id,
            full_name=row.full_name,
            email=row.email,
            phone=row.phone,
            role=Role(row.role),
            is_active=row.is_active,
            municipality=row.municipality,
            governorate=row.governorate,
            department=row.department,
        )

    @staticmethod
    def _row_to_department(row: DepartmentRow) -> Department:
        return Department(
            id=row.id,
            name=row.name,
            description=row.description or "",
            email=row.email,
            phone=row.phone,
            responsable=row.responsable,
            municipality=row.municipality,
        )
