"""
Tests for the auth HTTP endpoints.
"""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from common.exceptions import LoginFailedError, StoreUnavailableError
from services.auth_service.api.dependencies import get_authenticator
from services.auth_service.main import app

API = "/api/v1/auth"


@pytest.fixture
def client(authenticator):
    """Return a test client whose endpoints use the in-memory authenticator."""
    app.dependency_overrides[get_authenticator] = lambda: authenticator
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def stored_alice(credential_store, tenant_directory, make_user):
    tenant_directory.add("acme", name="Acme Corp")
    return credential_store.add(make_user("alice", email="alice@acme.example"), "pw-alice")


class TestLoginEndpoint:
    """Tests for POST /login."""

    def test_login_success(self, client, stored_alice):
        """Test that valid credentials return the user and tenant."""
        response = client.post(f"{API}/login", json={"username": "alice", "password": "pw-alice"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["tenant_id"] == "acme"
        assert body["user"]["username"] == "alice"
        assert "credential" not in body["user"]
        assert "pw-alice" not in response.text

    def test_wrong_password_is_401_with_generic_message(self, client, stored_alice):
        """Test that invalid credentials do not reveal which field was wrong."""
        response = client.post(f"{API}/login", json={"username": "alice", "password": "nope"})

        assert response.status_code == 401
        assert response.json()["detail"].startswith("Invalid credentials")

    def test_unexpected_failure_is_500_without_internal_detail(self, client, authenticator):
        """Test that wrapped internal errors are not leaked."""
        authenticator.login = AsyncMock(
            side_effect=LoginFailedError(internal_error=RuntimeError("password for db is hunter2"))
        )

        response = client.post(f"{API}/login", json={"username": "alice", "password": "pw"})

        assert response.status_code == 500
        assert "hunter2" not in response.text

    def test_missing_password_is_422(self, client):
        """Test that request validation rejects incomplete bodies."""
        response = client.post(f"{API}/login", json={"username": "alice"})

        assert response.status_code == 422


class TestSessionEndpoints:
    """Tests for GET /session and POST /logout."""

    def test_session_requires_login(self, client):
        """Test that reading the session without one is 401."""
        assert client.get(f"{API}/session").status_code == 401

    def test_session_after_login_and_logout(self, client, stored_alice):
        """Test the session lifecycle over HTTP."""
        client.post(f"{API}/login", json={"username": "alice", "password": "pw-alice"})

        response = client.get(f"{API}/session")
        assert response.status_code == 200
        assert response.json()["tenant_id"] == "acme"
        assert response.json()["tenant_name"] == "Acme Corp"

        logout = client.post(f"{API}/logout")
        assert logout.status_code == 200
        assert logout.json()["success"] is True

        assert client.get(f"{API}/session").status_code == 401


class TestRegisterEndpoint:
    """Tests for POST /register."""

    def test_register_then_duplicate(self, client, credential_store, tenant_directory):
        """Test that registration creates once and conflicts after."""
        tenant_directory.add("acme")
        payload = {"username": "dave", "password": "pw-dave", "tenant_id": "acme"}

        created = client.post(f"{API}/register", json=payload)
        duplicate = client.post(f"{API}/register", json=payload)

        assert created.status_code == 201
        assert created.json()["role"] == "user"
        assert "password" not in created.json()
        assert duplicate.status_code == 409
        assert len(credential_store.rows) == 1

    def test_register_ignores_requested_role(self, client, tenant_directory):
        """Test that a caller cannot register itself as an admin."""
        tenant_directory.add("acme")
        payload = {"username": "mallory", "password": "x", "tenant_id": "acme", "role": "admin"}

        created = client.post(f"{API}/register", json=payload)
        login = client.post(f"{API}/login", json={"username": "mallory", "password": "x"})

        assert created.status_code == 201
        assert created.json()["role"] == "user"
        assert login.status_code == 200
        assert login.json()["user"]["role"] == "user"

    def test_register_unknown_tenant_is_422(self, client, credential_store):
        """Test that a tenant missing from the directory is not reported as a conflict."""
        response = client.post(
            f"{API}/register", json={"username": "dave", "password": "pw", "tenant_id": "nowhere"}
        )

        assert response.status_code == 422
        assert response.json()["detail"] == "Unknown tenant."
        assert credential_store.rows == []

    def test_register_store_unavailable_is_503(self, client, authenticator):
        """Test that an unreachable store returns 503."""
        authenticator.register = AsyncMock(side_effect=StoreUnavailableError())

        response = client.post(
            f"{API}/register", json={"username": "dave", "password": "pw", "tenant_id": "acme"}
        )

        assert response.status_code == 503


class TestServiceEndpoints:
    """Tests for the app factory endpoints."""

    def test_health(self, client):
        """Test the health check endpoint."""
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["service"] == "auth-service"
