"""Shared test fixtures and helpers."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from smartcity.core.config import AuditConfig, Settings
from smartcity.core.types import Actor, Role
from smartcity.directory.models import Department, User
from smartcity.directory.store import DirectoryStore
from smartcity.geography.lookup import GeographyLookup


GEOGRAPHY = {
    "Tunis": ["Tunis", "Le Bardo", "Carthage"],
    "Sfax": ["Sfax", "Sakiet Ezzit"],
    "Ariana": ["Ariana", "La Soukra"],
}


def make_directory() -> DirectoryStore:
    """A small directory: one user per role plus two departments."""
    directory = DirectoryStore()
    for user in [
        User(id="citizen-1", full_name="Amira Ben Salah", email="amira@example.tn",
             phone="+21620000001", role=Role.CITIZEN, municipality="Tunis"),
        User(id="citizen-2", full_name="Karim Trabelsi", email="karim@example.tn",
             phone="+21620000002", role=Role.CITIZEN, municipality="Sfax"),
        User(id="agent-tunis", full_name="Sami Gharbi", email="agent.tunis@example.tn",
             role=Role.MUNICIPAL_AGENT, municipality="Tunis", governorate="Tunis"),
        User(id="agent-free", full_name="Leila Mansour", email="agent.free@example.tn",
             role=Role.MUNICIPAL_AGENT),
        User(id="manager-roads", full_name="Hichem Jaziri", email="roads@example.tn",
             role=Role.DEPARTMENT_MANAGER, municipality="Tunis", department="dept-roads"),
        User(id="manager-orphan", full_name="Nadia Khelifi", email="orphan@example.tn",
             role=Role.DEPARTMENT_MANAGER, municipality="Tunis"),
        User(id="tech-1", full_name="Mehdi Ayari", email="mehdi@example.tn",
             phone="+21671000030", role=Role.TECHNICIAN, governorate="Tunis"),
        User(id="tech-2", full_name="Yosra Hammami", email="yosra@example.tn",
             role=Role.TECHNICIAN, governorate="Sfax"),
        User(id="tech-retired", full_name="Old Hand", email="old@example.tn",
             role=Role.TECHNICIAN, governorate="Tunis", is_active=False),
        User(id="admin-1", full_name="Platform Admin", email="admin@example.tn", role=Role.ADMIN),
    ]:
        directory.save_user(user)
    directory.save_department(
        Department(id="dept-roads", name="Voirie", responsable="manager-roads", municipality="Tunis")
    )
    directory.save_department(
        Department(id="dept-light", name="Eclairage Public", municipality="Tunis")
    )
    return directory


def actor(directory: DirectoryStore, user_id: str) -> Actor:
    return directory.find_user_by_id(user_id).as_actor()


def settings_for(tmp_path: Path) -> Settings:
    """Settings that keep audit logs inside the test's tmp dir."""
    return Settings(audit=AuditConfig(log_dir=str(tmp_path / "audit")))


def install_token(app, user_id: str, token: str | None = None) -> str:
    """Register an auth token for ``user_id`` on the app's auth provider.

    Returns the token string for use in Authorization headers.
    """
    token = token or f"test-token-{user_id}"
    user = app.state.directory.find_user_by_id(user_id)
    app.state.auth_provider._tokens[token] = {
        "user_id": user_id,
        "role": user.role,
        "expires_at": datetime.now(timezone.utc) + timedelta(hours=1),
    }
    return token


def auth_headers(app, user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {install_token(app, user_id)}"}


@pytest.fixture
def directory() -> DirectoryStore:
    return make_directory()


@pytest.fixture
def geography() -> GeographyLookup:
    return GeographyLookup.from_mapping(GEOGRAPHY)
