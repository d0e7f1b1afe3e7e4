"""
Tests for the HTTP auth endpoint.

The request router is swapped for one backed by the in-memory
repository, so these run without a database.
"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from api import app
from api.dependencies import get_request_router


@pytest.fixture
def client(request_router):
    app.dependency_overrides[get_request_router] = lambda: request_router
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestAuthEndpoint:
    def test_login(self, client, admin_user):
        response = client.post(
            "/api/auth", json={"action": "login", "email": "ADMIN@x.com", "password": "secret123"}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["user"]["email"] == "admin@x.com"
        assert data["must_change_password"] is False
        assert data["token"].count(".") == 2

    def test_token_from_login_opens_protected_actions(self, client, admin_user):
        token = client.post(
            "/api/auth", json={"action": "login", "email": "admin@x.com", "password": "secret123"}
        ).json()["token"]

        response = client.post(
            "/api/auth", json={"action": "me"}, headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 200
        assert response.json()["id"] == "admin-1"

    def test_lowercase_bearer_rejected(self, client, user_headers):
        token = user_headers["Authorization"].split(" ", 1)[1]
        response = client.post(
            "/api/auth", json={"action": "me"}, headers={"Authorization": f"bearer {token}"}
        )
        assert response.status_code == 401

    def test_register_created(self, client, admin_headers):
        response = client.post(
            "/api/auth",
            json={"action": "register", "email": "new@x.com", "password": "longenough"},
            headers=admin_headers,
        )
        assert response.status_code == 201

    def test_unknown_action(self, client):
        response = client.post("/api/auth", json={"action": "dance"})
        assert response.status_code == 400
        assert response.json() == {"error": "Unknown action"}

    def test_invalid_json_body(self, client):
        response = client.post(
            "/api/auth", content=b"{not json", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Unknown action"}

    def test_empty_body(self, client):
        response = client.post("/api/auth")
        assert response.status_code == 400

    def test_error_bodies_have_only_error_key(self, client, user_headers):
        response = client.post("/api/auth", json={"action": "listUsers"}, headers=user_headers)
        assert response.status_code == 403
        assert list(response.json()) == ["error"]


class TestCors:
    def test_plain_options(self, client):
        response = client.options("/api/auth")
        assert response.status_code == 204

    def test_preflight(self, client):
        response = client.options(
            "/api/auth",
            headers={
                "Origin": "http://localhost:5173",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "Content-Type, Authorization",
            },
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
        assert "POST" in response.headers["access-control-allow-methods"]

    def test_simple_request_carries_cors_header(self, client):
        response = client.post(
            "/api/auth", json={"action": "verify"}, headers={"Origin": "http://localhost:5173"}
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.json() == {"valid": False, "payload": None}


class TestVerifyEmailPage:
    def test_verified(self, client, verifications, users, regular_user):
        verifications.create("user-1", "tok", datetime.now(timezone.utc) + timedelta(days=1))

        response = client.get("/api/auth/verify-email", params={"token": "tok"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "Email verified!" in response.text
        assert users.rows["user-1"]["email_verified"] is True

    def test_second_visit(self, client, verifications, regular_user):
        verifications.create("user-1", "tok", datetime.now(timezone.utc) + timedelta(days=1))
        client.get("/api/auth/verify-email", params={"token": "tok"})

        response = client.get("/api/auth/verify-email", params={"token": "tok"})
        assert response.status_code == 200
        assert "Already verified" in response.text

    def test_missing_token(self, client):
        response = client.get("/api/auth/verify-email")
        assert response.status_code == 400
        assert "Invalid link" in response.text

    def test_unknown_token(self, client):
        response = client.get("/api/auth/verify-email", params={"token": "nope"})
        assert response.status_code == 404
        assert "Link not found" in response.text

    def test_expired(self, client, verifications, regular_user):
        verifications.create("user-1", "tok", datetime.now(timezone.utc) - timedelta(minutes=1))

        response = client.get("/api/auth/verify-email", params={"token": "tok"})
        assert response.status_code == 410
        assert "Link expired" in response.text
