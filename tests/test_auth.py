from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from fastapi import status

from bookstore.core.security import issue_token
from conftest import TEST_PASSWORD

if TYPE_CHECKING:
    from fastapi.testclient import TestClient


class TestRegister:
    """Test account registration."""

    def test_register_success(self, test_client: TestClient) -> None:
        resp = test_client.post(
            "/auth/register",
            json={"email": "new@example.com", "password": TEST_PASSWORD, "username": "newbie"},
        )
        assert resp.status_code == status.HTTP_201_CREATED
        body = resp.json()
        assert body["success"] is True
        assert body["message"] == "User registered"
        assert uuid.UUID(body["data"]["user_id"])

    def test_register_requires_email_and_password(self, test_client: TestClient) -> None:
        resp = test_client.post("/auth/register", json={"email": "x@example.com"})
        assert resp.status_code == status.HTTP_400_BAD_REQUEST
        assert resp.json()["message"] == "Email and password are required"

        resp = test_client.post("/auth/register", json={"password": TEST_PASSWORD})
        assert resp.status_code == status.HTTP_400_BAD_REQUEST

    def test_register_invalid_email(self, test_client: TestClient) -> None:
        resp = test_client.post("/auth/register", json={"email": "not-an-email", "password": "x"})
        assert resp.status_code == status.HTTP_400_BAD_REQUEST
        assert resp.json()["error"]["type"] == "validation_error"

    def test_register_duplicate_email(self, test_client: TestClient) -> None:
        payload = {"email": "dup@example.com", "password": TEST_PASSWORD}
        assert test_client.post("/auth/register", json=payload).status_code == 201

        resp = test_client.post("/auth/register", json=payload)
        assert resp.status_code == status.HTTP_409_CONFLICT
        assert resp.json()["error"]["type"] == "conflict"

    def test_register_duplicate_username(self, test_client: TestClient) -> None:
        first = {"email": "a@example.com", "password": TEST_PASSWORD, "username": "reader"}
        second = {"email": "b@example.com", "password": TEST_PASSWORD, "username": "reader"}
        assert test_client.post("/auth/register", json=first).status_code == 201
        assert test_client.post("/auth/register", json=second).status_code == status.HTTP_409_CONFLICT

    def test_register_without_username_twice(self, test_client: TestClient) -> None:
        """Null usernames never collide with each other."""
        for email in ("one@example.com", "two@example.com"):
            resp = test_client.post("/auth/register", json={"email": email, "password": TEST_PASSWORD})
            assert resp.status_code == status.HTTP_201_CREATED


class TestLogin:
    """Test login and token issuing."""

    def test_login_success(self, test_client: TestClient) -> None:
        test_client.post("/auth/register", json={"email": "log@example.com", "password": TEST_PASSWORD})
        resp = test_client.post("/auth/login", json={"email": "log@example.com", "password": TEST_PASSWORD})
        assert resp.status_code == status.HTTP_200_OK
        data = resp.json()["data"]
        assert data["token"]
        assert data["token_type"] == "bearer"

    def test_login_wrong_password(self, test_client: TestClient) -> None:
        test_client.post("/auth/register", json={"email": "log@example.com", "password": TEST_PASSWORD})
        resp = test_client.post("/auth/login", json={"email": "log@example.com", "password": "wrong"})
        assert resp.status_code == status.HTTP_401_UNAUTHORIZED
        assert resp.json()["message"] == "Invalid email or password"

    def test_login_unknown_email(self, test_client: TestClient) -> None:
        resp = test_client.post("/auth/login", json={"email": "ghost@example.com", "password": "x"})
        assert resp.status_code == status.HTTP_401_UNAUTHORIZED

    def test_login_missing_fields(self, test_client: TestClient) -> None:
        resp = test_client.post("/auth/login", json={})
        assert resp.status_code == status.HTTP_400_BAD_REQUEST


class TestMe:
    """Test the bearer-protected profile endpoint."""

    def test_me_returns_profile(self, test_client: TestClient) -> None:
        test_client.post(
            "/auth/register",
            json={"email": "me@example.com", "password": TEST_PASSWORD, "username": "me"},
        )
        token = test_client.post(
            "/auth/login", json={"email": "me@example.com", "password": TEST_PASSWORD}
        ).json()["data"]["token"]

        resp = test_client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == status.HTTP_200_OK
        data = resp.json()["data"]
        assert data["email"] == "me@example.com"
        assert data["username"] == "me"
        assert "password_hash" not in data

    def test_me_without_token(self, test_client: TestClient) -> None:
        resp = test_client.get("/auth/me")
        assert resp.status_code == status.HTTP_401_UNAUTHORIZED
        assert resp.json()["error"]["type"] == "unauthorized"

    def test_me_with_garbage_token(self, test_client: TestClient) -> None:
        resp = test_client.get("/auth/me", headers={"Authorization": "Bearer not.a.jwt"})
        assert resp.status_code == status.HTTP_403_FORBIDDEN
        assert resp.json()["error"]["type"] == "forbidden"

    def test_me_with_non_bearer_scheme(self, test_client: TestClient) -> None:
        resp = test_client.get("/auth/me", headers={"Authorization": "Basic abc"})
        assert resp.status_code == status.HTTP_401_UNAUTHORIZED

    def test_me_with_expired_token(self, test_client: TestClient, test_settings) -> None:
        issued = datetime.now(timezone.utc) - timedelta(minutes=test_settings.JWT_EXPIRES_MINUTES + 5)
        token = issue_token(test_settings, uuid.uuid4(), now=issued)
        resp = test_client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == status.HTTP_403_FORBIDDEN

    def test_me_for_unknown_user(self, test_client: TestClient, test_settings) -> None:
        token = issue_token(test_settings, uuid.uuid4())
        resp = test_client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == status.HTTP_404_NOT_FOUND
        assert resp.json()["message"] == "User not found"
