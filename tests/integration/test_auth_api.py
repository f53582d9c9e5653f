"""
Integration tests for the account endpoints under /api/auth.

Covers registration (happy path, validation, duplicates), login (good and
bad credentials) and the authenticated profile endpoint, plus the full
register-then-use-the-token flow.
"""

from __future__ import annotations

import pytest

from tests.conftest import TEST_PASSWORD

pytestmark = pytest.mark.integration


class TestRegister:
    def test_register_returns_user_and_token(self, client, db_session):
        """Test that registration creates the account and logs it in."""
        # Arrange
        payload = {"name": "Ada", "email": "Ada@Example.com", "password": "pa55word!"}

        # Act
        response = client.post("/api/auth/register", json=payload)

        # Assert
        assert response.status_code == 201
        data = response.get_json()
        assert data["user"]["name"] == "Ada"
        assert data["user"]["email"] == "ada@example.com"
        assert "password_hash" not in data["user"]
        assert isinstance(data["token"], str) and data["token"]

    @pytest.mark.parametrize("missing", ["name", "email", "password"])
    def test_register_requires_every_field(self, client, db_session, missing):
        # Arrange
        payload = {"name": "Ada", "email": "ada@example.com", "password": "pa55word!"}
        payload[missing] = "  "

        # Act
        response = client.post("/api/auth/register", json=payload)

        # Assert
        assert response.status_code == 400
        assert missing in response.get_json()["message"]

    def test_register_duplicate_email_returns_409(self, client, user_one):
        response = client.post(
            "/api/auth/register",
            json={"name": "Copy", "email": "USER.ONE@example.com", "password": "whatever1"},
        )

        assert response.status_code == 409
        assert response.get_json() == {"message": "User already exists"}

    def test_register_rejects_overlong_name(self, client, db_session):
        response = client.post(
            "/api/auth/register",
            json={"name": "n" * 81, "email": "long@example.com", "password": "whatever1"},
        )

        assert response.status_code == 400


class TestLogin:
    def test_login_with_valid_credentials(self, client, user_one):
        response = client.post(
            "/api/auth/login",
            json={"email": "user.one@example.com", "password": TEST_PASSWORD},
        )

        assert response.status_code == 200
        data = response.get_json()
        assert data["user"]["id"] == user_one.id
        assert data["token"]

    @pytest.mark.parametrize(
        ("email", "password"),
        [
            ("user.one@example.com", "wrong-password"),
            ("nobody@example.com", TEST_PASSWORD),
        ],
    )
    def test_login_with_bad_credentials_returns_generic_401(self, client, user_one, email, password):
        response = client.post("/api/auth/login", json={"email": email, "password": password})

        assert response.status_code == 401
        assert response.get_json() == {"message": "Invalid email or password"}

    def test_login_without_body_returns_400(self, client, db_session):
        response = client.post("/api/auth/login")

        assert response.status_code == 400


class TestMe:
    def test_me_returns_current_user(self, client, user_one, api_headers):
        response = client.get("/api/auth/me", headers=api_headers)

        assert response.status_code == 200
        assert response.get_json()["user"]["email"] == "user.one@example.com"

    def test_me_requires_token(self, client, db_session):
        assert client.get("/api/auth/me").status_code == 401


def test_registered_token_can_manage_tasks(client, db_session):
    """Test the full flow: register, create a task with the token, list it."""
    # Arrange
    registered = client.post(
        "/api/auth/register",
        json={"name": "Flow", "email": "flow@example.com", "password": "flow-pass-1"},
    ).get_json()
    headers = {"Authorization": f"Bearer {registered['token']}"}

    # Act
    created = client.post("/api/tasks", json={"title": "First task"}, headers=headers)
    listing = client.get("/api/tasks", headers=headers).get_json()

    # Assert
    assert created.status_code == 201
    assert created.get_json()["user"] == registered["user"]["id"]
    assert [t["title"] for t in listing["tasks"]] == ["First task"]
