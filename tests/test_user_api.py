"""Tests for the admin user management endpoints."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from smartcity.geography.lookup import GeographyLookup
from smartcity.web.app import create_app
from tests.conftest import GEOGRAPHY, auth_headers, make_directory, settings_for


@pytest.fixture
def app(tmp_path):
    return create_app(
        settings=settings_for(tmp_path),
        directory=make_directory(),
        geography=GeographyLookup.from_mapping(GEOGRAPHY),
    )


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def admin(app):
    return auth_headers(app, "admin-1")


class TestAccess:
    def test_requires_auth(self, client):
        assert client.get("/api/admin/users").status_code == 401

    @pytest.mark.parametrize("user_id", ["citizen-1", "agent-tunis", "manager-roads"])
    def test_staff_forbidden(self, client, app, user_id):
        resp = client.get("/api/admin/users", headers=auth_headers(app, user_id))
        assert resp.status_code == 403
        assert resp.json()["code"] == "FORBIDDEN"


class TestListAndRead:
    def test_search_paged(self, client, admin):
        resp = client.get(
            "/api/admin/users", params={"search": "example.tn", "limit": 3}, headers=admin
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["total"] == 10
        assert data["pages"] == 4
        assert len(data["items"]) == 3

    def test_filter_inactive(self, client, admin):
        resp = client.get("/api/admin/users", params={"is_active": False}, headers=admin)
        assert [u["id"] for u in resp.json()["items"]] == ["tech-retired"]

    def test_get_and_missing(self, client, admin):
        assert client.get("/api/admin/users/tech-1", headers=admin).json()["full_name"] == "Mehdi Ayari"
        resp = client.get("/api/admin/users/ghost", headers=admin)
        assert resp.status_code == 404

    def test_stats(self, client, admin):
        data = client.get("/api/admin/users/stats", headers=admin).json()
        assert data["total"] == 10
        assert data["inactive"] == 1
        assert data["by_role"]["TECHNICIAN"] == 3


class TestMutations:
    def test_create_then_login_as_new_user(self, client, app, admin):
        resp = client.post(
            "/api/admin/users",
            json={
                "full_name": "Rim Bouazizi",
                "email": "rim@example.tn",
                "role": "MUNICIPAL_AGENT",
                "governorate": "Tunis",
                "municipality": "Carthage",
            },
            headers=admin,
        )
        assert resp.status_code == 201, resp.text
        user_id = resp.json()["id"]

        me = client.get("/api/me", headers=auth_headers(app, user_id))
        assert me.status_code == 200

    def test_create_duplicate_email(self, client, admin):
        resp = client.post(
            "/api/admin/users",
            json={"full_name": "Copy Cat", "email": "amira@example.tn"},
            headers=admin,
        )
        assert resp.status_code == 400
        assert resp.json()["code"] == "INVALID_USER"

    def test_update_scoping(self, client, admin):
        resp = client.patch(
            "/api/admin/users/manager-orphan", json={"department": "dept-light"}, headers=admin
        )
        assert resp.status_code == 200
        assert resp.json()["department"] == "dept-light"

    def test_update_role(self, client, admin):
        resp = client.patch(
            "/api/admin/users/citizen-2/role", json={"role": "TECHNICIAN"}, headers=admin
        )
        assert resp.json()["role"] == "TECHNICIAN"

    def test_unknown_role_rejected(self, client, admin):
        resp = client.patch(
            "/api/admin/users/citizen-2/role", json={"role": "MAYOR"}, headers=admin
        )
        assert resp.status_code == 422

    def test_deactivated_user_loses_access(self, client, app, admin):
        citizen = auth_headers(app, "citizen-1")
        assert client.get("/api/me", headers=citizen).status_code == 200

        resp = client.patch(
            "/api/admin/users/citizen-1/active", json={"is_active": False}, headers=admin
        )
        assert resp.status_code == 200
        assert resp.json()["is_active"] is False
        assert client.get("/api/me", headers=citizen).status_code == 401

    def test_cannot_deactivate_self(self, client, admin):
        resp = client.patch(
            "/api/admin/users/admin-1/active", json={"is_active": False}, headers=admin
        )
        assert resp.status_code == 400

    def test_delete(self, client, admin):
        resp = client.delete("/api/admin/users/citizen-2", headers=admin)
        assert resp.status_code == 204
        assert client.get("/api/admin/users/citizen-2", headers=admin).status_code == 404

    def test_changes_are_audited(self, client, app, admin):
        client.patch("/api/admin/users/tech-2/role", json={"role": "MUNICIPAL_AGENT"}, headers=admin)
        events = app.state.audit_logger.query({"resource": "user:tech-2"})
        assert [e.action for e in events] == ["user.updated"]
        assert app.state.audit_logger.verify_chain()
