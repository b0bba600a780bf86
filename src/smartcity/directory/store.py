"""In-memory user and department directory."""

from __future__ import annotations

from pathlib import Path

import yaml

from smartcity.core.types import Role
from smartcity.directory.models import Department, User

_DEFAULT_SEED_PATH = Path(__file__).resolve().parents[3] / "config" / "directory_seed.yml"


class DirectoryStore:
    """In-memory dict store for users and departments.

    Optionally seeded from a YAML file with ``users`` and ``departments`` lists.
    Suitable for single-instance deployment and tests.
    """

    def __init__(self, seed_path: str | Path | None = None, load_seed: bool = False) -> None:
        self._users: dict[str, User] = {}
        self._departments: dict[str, Department] = {}
        if load_seed:
            self._load_seed(Path(seed_path) if seed_path else _DEFAULT_SEED_PATH)

    def _load_seed(self, path: Path) -> None:
        if not path.exists():
            return
        with open(path) as fh:
            data = yaml.safe_load(fh) or {}
        for user_data in data.get("users", []):
            self.save_user(User(**user_data))
        for dept_data in data.get("departments", []):
            self.save_department(Department(**dept_data))

    # -- Users --

    def save_user(self, user: User) -> User:
        self._users[user.id] = user
        return user

    def find_user_by_id(self, user_id: str) -> User | None:
        return self._users.get(user_id)

    def find_user_by_email(self, email: str) -> User | None:
        email = email.lower()
        for user in self._users.values():
            if user.email.lower() == email:
                return user
        return None

    def list_users(self) -> list[User]:
        return list(self._users.values())

    def delete_user(self, user_id: str) -> bool:
        return self._users.pop(user_id, None) is not None

    def list_technicians(self, governorate: str | None = None) -> list[User]:
        return [
            u for u in self._users.values()
            if u.role == Role.TECHNICIAN
            and u.is_active
            and (governorate is None or u.governorate == governorate)
        ]

    # -- Departments --

    def save_department(self, department: Department) -> Department:
        self._departments[department.id] = department
        return department

    def find_department_by_id(self, department_id: str) -> Department | None:
        return self._departments.get(department_id)

    def find_department_by_responsable(self, user_id: str) -> Department | None:
        for dept in self._departments.values():
            if dept.responsable == user_id:
                return dept
        return None

    def list_departments(self) -> list[Department]:
        return sorted(self._departments.values(), key=lambda d: d.name)

    @property
    def user_count(self) -> int:
        return len(self._users)
