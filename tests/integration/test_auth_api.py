# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for the authentication endpoints.

Runs the full token lifecycle through HTTP: register, login, refresh,
logout-all and /me, with the session registry held in memory.
"""

from fastapi.testclient import TestClient

REGISTER_URL = "/api/v1/auth/register/student"
LOGIN_URL = "/api/v1/auth/login"
REFRESH_URL = "/api/v1/auth/refresh"
ME_URL = "/api/v1/auth/me"

CREDENTIALS = {"email": "ada@school.edu", "password": "S3cure!pass"}


def _login(client: TestClient, mock_db, make_result, student) -> dict:
    mock_db.execute.return_value = make_result(student)
    response = client.post(LOGIN_URL, json=CREDENTIALS)
    assert response.status_code == 200
    return response.json()["tokens"]


class TestRegister:
    """Tests for POST /auth/register/student."""

    def test_register(self, client, mock_db, make_result) -> None:
        mock_db.execute.return_value = make_result(None)

        response = client.post(
            REGISTER_URL,
            json={
                "email": "Ada@School.edu",
                "password": "S3cure!pass",
                "firstName": "Ada",
                "lastName": "Lovelace",
                "studentId": "STU12345",
            },
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Student registered successfully"
        assert body["student"]["email"] == "ada@school.edu"
        assert body["student"]["studentId"] == "STU12345"
        assert "passwordHash" not in body["student"]

    def test_register_conflict(self, client, mock_db, make_result, student) -> None:
        mock_db.execute.return_value = make_result(student)

        response = client.post(
            REGISTER_URL,
            json={
                "email": "ada@school.edu",
                "password": "S3cure!pass",
                "firstName": "Ada",
                "lastName": "Lovelace",
                "studentId": "STU99999",
            },
        )

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "ConflictError"
        assert response.json()["error"]["message"] == "Email already registered"

    def test_weak_password_rejected(self, client, mock_db) -> None:
        response = client.post(
            REGISTER_URL,
            json={
                "email": "ada@school.edu",
                "password": "password",
                "firstName": "Ada",
                "lastName": "Lovelace",
                "studentId": "STU12345",
            },
        )

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "ValidationError"
        assert "password" in error["message"]
        mock_db.execute.assert_not_awaited()


class TestLogin:
    """Tests for POST /auth/login."""

    def test_login(self, client, mock_db, make_result, student) -> None:
        mock_db.execute.return_value = make_result(student)

        response = client.post(LOGIN_URL, json=CREDENTIALS)

        assert response.status_code == 200
        body = response.json()
        assert body["user"]["id"] == student.id
        assert body["user"]["type"] == "student"
        assert body["user"]["studentId"] == "STU12345"
        assert body["tokens"]["tokenType"] == "Bearer"
        assert body["tokens"]["expiresIn"] == 900

    def test_wrong_password(self, client, mock_db, make_result, student) -> None:
        mock_db.execute.return_value = make_result(student)

        response = client.post(LOGIN_URL, json={"email": "ada@school.edu", "password": "nope"})

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert response.json()["error"]["message"] == "Invalid credentials"

    def test_unknown_email(self, client, mock_db, make_result) -> None:
        mock_db.execute.return_value = make_result(None)

        response = client.post(LOGIN_URL, json=CREDENTIALS)

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid credentials"


class TestTokenLifecycle:
    """Tests for refresh rotation and revocation."""

    def test_refresh_rotates(self, client, mock_db, make_result, student) -> None:
        tokens = _login(client, mock_db, make_result, student)

        first = client.post(REFRESH_URL, json={"refreshToken": tokens["refreshToken"]})
        replay = client.post(REFRESH_URL, json={"refreshToken": tokens["refreshToken"]})

        assert first.status_code == 200
        assert first.json()["tokens"]["refreshToken"] != tokens["refreshToken"]
        assert replay.status_code == 401
        assert replay.json()["error"]["message"] == "Invalid refresh token"

    def test_logout_all_revokes_refresh(self, client, mock_db, make_result, student) -> None:
        tokens = _login(client, mock_db, make_result, student)

        logout = client.post(
            "/api/v1/auth/logout-all",
            headers={"Authorization": f"Bearer {tokens['accessToken']}"},
        )
        refresh = client.post(REFRESH_URL, json={"refreshToken": tokens["refreshToken"]})

        assert logout.status_code == 200
        assert logout.json()["message"] == "Logged out from all devices successfully"
        assert refresh.status_code == 401

    def test_logout_without_token(self, client) -> None:
        response = client.post("/api/v1/auth/logout")

        assert response.status_code == 200
        assert response.json()["message"] == "Logged out successfully"

    def test_garbage_refresh_token(self, client) -> None:
        response = client.post(REFRESH_URL, json={"refreshToken": "garbage"})

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "AuthenticationError"


class TestMe:
    """Tests for GET /auth/me."""

    def test_me(self, client, mock_db, make_result, student, auth_header) -> None:
        mock_db.execute.return_value = make_result(student)

        response = client.get(ME_URL, headers=auth_header(student))

        assert response.status_code == 200
        user = response.json()["user"]
        assert user["email"] == "ada@school.edu"
        assert user["isActive"] is True

    def test_me_without_token(self, client) -> None:
        response = client.get(ME_URL)

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Access token required"

    def test_me_for_deactivated_principal(self, client, mock_db, make_result, make_student, auth_header) -> None:
        student = make_student(is_active=False)
        mock_db.execute.return_value = make_result(student)

        response = client.get(ME_URL, headers=auth_header(student))

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid user"
