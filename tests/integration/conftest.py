# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Fixtures for API integration tests.

The full application is built with create_app(). The database session and
Redis client are replaced through dependency overrides; the lifespan is not
run, so no real store is contacted.
"""

from collections.abc import Callable

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from lms.api.app import create_app
from lms.api.dependencies import get_db, get_redis_client
from lms.domains.auth.jwt import JWTManager
from lms.infrastructure.database.models import Student, Teacher


@pytest.fixture
def app(mock_db, fake_redis) -> FastAPI:
    """Create the application with store dependencies overridden."""
    app = create_app()

    async def _get_db():
        yield mock_db

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_redis_client] = lambda: fake_redis
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def student(make_student) -> Student:
    return make_student()


@pytest.fixture
def teacher(make_teacher) -> Teacher:
    return make_teacher()


@pytest.fixture
def auth_header(jwt_manager: JWTManager) -> Callable[[Student | Teacher], dict[str, str]]:
    """Build an Authorization header carrying an access token for a principal."""

    def _header(principal: Student | Teacher) -> dict[str, str]:
        if isinstance(principal, Student):
            token = jwt_manager.create_access_token(
                user_id=principal.id,
                email=principal.email,
                role="student",
                student_id=principal.student_id,
            )
        else:
            token = jwt_manager.create_access_token(
                user_id=principal.id,
                email=principal.email,
                role="teacher",
                teacher_id=principal.teacher_id,
            )
        return {"Authorization": f"Bearer {token}"}

    return _header
