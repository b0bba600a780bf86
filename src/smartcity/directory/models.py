"""Directory data models: users, departments and municipalities."""

from __future__ import annotations

import uuid

from pydantic import BaseModel, Field

from smartcity.core.types import Actor, Role


class User(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    full_name: str
    email: str
    phone: str | None = None
    role: Role = Role.CITIZEN
    is_active: bool = True
    municipality: str | None = None
    governorate: str | None = None
    department: str | None = None

    def as_actor(self) -> Actor:
        return Actor(
            id=self.id,
            role=self.role,
            municipality=self.municipality,
            governorate=self.governorate,
            department=self.department,
        )


class Department(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    description: str = ""
    email: str | None = None
    phone: str | None = None
    responsable: str | None = None
    municipality: str | None = None


class UserCreate(BaseModel):
    """Admin payload for provisioning an account."""

    full_name: str
    email: str
    phone: str | None = None
    role: Role = Role.CITIZEN
    municipality: str | None = None
    governorate: str | None = None
    department: str | None = None


class UserUpdate(BaseModel):
    """Partial admin update; only fields present in the payload are applied."""

    full_name: str | None = None
    email: str | None = None
    phone: str | None = None
    role: Role | None = None
    municipality: str | None = None
    governorate: str | None = None
    department: str | None = None


class UserFilter(BaseModel):
    search: str | None = None
    role: Role | None = None
    is_active: bool | None = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)


class UserPage(BaseModel):
    items: list[User]
    page: int
    limit: int
    total: int
    pages: int


class UserStats(BaseModel):
    total: int
    active: int
    inactive: int
    by_role: dict[str, int]
