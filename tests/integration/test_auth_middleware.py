# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for the authentication and request-context middleware
and the error envelope.

The middleware is tested in isolation on small apps, then through the
full application for envelope formatting.
"""

from uuid import uuid4

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from lms.api.errors import register_exception_handlers
from lms.api.middleware.auth import AuthMiddleware, get_current_user
from lms.api.middleware.request_context import REQUEST_ID_HEADER, RequestContextMiddleware
from lms.domains.auth.jwt import JWTManager


@pytest.fixture
def state_app(jwt_manager: JWTManager) -> FastAPI:
    """App reporting what AuthMiddleware put on request.state."""
    app = FastAPI()
    app.add_middleware(AuthMiddleware, jwt_manager=jwt_manager)

    @app.get("/api/v1/state")
    async def report_state(request: Request) -> dict:
        user = get_current_user(request)
        error = request.state.auth_error
        return {
            "user_id": user.id if user else None,
            "role": user.role if user else None,
            "error": error.message if error else None,
        }

    @app.get("/health")
    async def health(request: Request) -> dict:
        return {"user": get_current_user(request)}

    return app


class TestAuthMiddleware:
    """Tests for AuthMiddleware."""

    def test_valid_token_sets_user(self, state_app, jwt_manager) -> None:
        user_id = str(uuid4())
        token = jwt_manager.create_access_token(
            user_id=user_id,
            email="ada@school.edu",
            role="student",
            student_id="STU12345",
        )

        response = TestClient(state_app).get(
            "/api/v1/state",
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.json() == {"user_id": user_id, "role": "student", "error": None}

    def test_no_token_sets_user_none(self, state_app) -> None:
        response = TestClient(state_app).get("/api/v1/state")

        assert response.status_code == 200
        assert response.json() == {"user_id": None, "role": None, "error": None}

    def test_invalid_token_recorded(self, state_app) -> None:
        response = TestClient(state_app).get(
            "/api/v1/state",
            headers={"Authorization": "Bearer not-a-token"},
        )

        assert response.json()["user_id"] is None
        assert response.json()["error"] == "Invalid token"

    def test_refresh_token_is_not_an_access_token(self, state_app, jwt_manager) -> None:
        token = jwt_manager.create_refresh_token(user_id=str(uuid4()), role="student")

        response = TestClient(state_app).get(
            "/api/v1/state",
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.json()["user_id"] is None

    def test_non_bearer_scheme_ignored(self, state_app) -> None:
        response = TestClient(state_app).get(
            "/api/v1/state",
            headers={"Authorization": "Basic dXNlcjpwYXNz"},
        )

        assert response.json() == {"user_id": None, "role": None, "error": None}

    def test_public_path_skips_verification(self, state_app) -> None:
        response = TestClient(state_app).get(
            "/health",
            headers={"Authorization": "Bearer not-a-token"},
        )

        assert response.status_code == 200
        assert response.json() == {"user": None}


class TestRequestContextMiddleware:
    @pytest.fixture
    def context_app(self) -> FastAPI:
        app = FastAPI()
        app.add_middleware(RequestContextMiddleware)

        @app.get("/ping")
        async def ping(request: Request) -> dict:
            return {"request_id": request.state.request_id}

        return app

    def test_echoes_request_id(self, context_app) -> None:
        response = TestClient(context_app).get("/ping", headers={REQUEST_ID_HEADER: "abc123"})

        assert response.headers[REQUEST_ID_HEADER] == "abc123"
        assert response.json()["request_id"] == "abc123"

    def test_generates_request_id(self, context_app) -> None:
        response = TestClient(context_app).get("/ping")

        assert len(response.headers[REQUEST_ID_HEADER]) == 32


class TestErrorEnvelope:
    """Tests for the error envelope on the full application."""

    def test_unknown_route(self, client) -> None:
        response = client.get("/api/v1/nothing-here")

        assert response.status_code == 404
        error = response.json()["error"]
        assert error["code"] == "NotFoundError"
        assert set(error) == {"code", "message", "timestamp"}

    def test_unhandled_error_is_generic_500(self) -> None:
        app = FastAPI()
        register_exception_handlers(app)

        @app.get("/boom")
        async def boom() -> dict:
            raise RuntimeError("secret internals")

        response = TestClient(app, raise_server_exceptions=False).get("/boom")

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "InternalServerError"
        assert response.json()["error"]["message"] == "Internal server error"

    def test_full_app_sets_request_id(self, client) -> None:
        response = client.get("/health/live")

        assert REQUEST_ID_HEADER in response.headers
