# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests (services against a mocked AsyncSession)
- Integration tests (FastAPI app through TestClient)
"""

import asyncio
import os
from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

# Settings are read at import time by the rate limiter; set them first
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("JWT_SECRET", "test-access-secret-for-testing-only")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret-for-testing-only")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from pydantic import SecretStr

from lms.core.config.settings import JWTSettings
from lms.domains.auth.jwt import JWTManager
from lms.domains.auth.password import PasswordHasher
from lms.domains.auth.session_registry import SessionRegistry
from lms.infrastructure.database.models import Student, Teacher


# =============================================================================
# Fakes
# =============================================================================


class FakeRedisClient:
    """In-memory stand-in for RedisClient with the same async interface.

    get() yields to the event loop once, so concurrent callers interleave
    the way they would against a real server.
    """

    def __init__(self) -> None:
        self.values: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    async def set(self, key: str, value: str, expire_seconds: int | None = None) -> None:
        self.values[key] = value
        if expire_seconds is not None:
            self.ttls[key] = expire_seconds

    async def get(self, key: str) -> str | None:
        await asyncio.sleep(0)
        return self.values.get(key)

    async def delete(self, key: str) -> bool:
        self.ttls.pop(key, None)
        return self.values.pop(key, None) is not None

    async def compare_and_set(self, key: str, expected: str, value: str, expire_seconds: int) -> bool:
        if self.values.get(key) != expected:
            return False
        self.values[key] = value
        self.ttls[key] = expire_seconds
        return True

    async def ping(self) -> bool:
        return True


def db_result(value: Any = None, *, scalars: list | None = None, rows: list | None = None) -> MagicMock:
    """Build a mock result for AsyncSession.execute().

    Args:
        value: Returned by scalar_one_or_none() and scalar_one().
        scalars: Returned by scalars().all().
        rows: Returned by all().
    """
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    result.scalar_one.return_value = value
    result.scalars.return_value.all.return_value = scalars if scalars is not None else []
    result.all.return_value = rows if rows is not None else []
    return result


# =============================================================================
# Auth Fixtures
# =============================================================================


@pytest.fixture
def jwt_settings() -> JWTSettings:
    """JWT settings matching the secrets the test app is configured with."""
    return JWTSettings(
        access_secret=SecretStr(os.environ["JWT_SECRET"]),
        refresh_secret=SecretStr(os.environ["JWT_REFRESH_SECRET"]),
        access_token_expire_minutes=15,
        refresh_token_expire_days=7,
    )


@pytest.fixture
def jwt_manager(jwt_settings: JWTSettings) -> JWTManager:
    """Create JWT manager with test settings."""
    return JWTManager(jwt_settings)


@pytest.fixture
def fake_redis() -> FakeRedisClient:
    return FakeRedisClient()


@pytest.fixture
def registry(fake_redis: FakeRedisClient, jwt_manager: JWTManager) -> SessionRegistry:
    return SessionRegistry(fake_redis, ttl_seconds=jwt_manager.refresh_token_ttl_seconds)


@pytest.fixture(scope="session")
def password_hasher() -> PasswordHasher:
    """Cheap bcrypt cost so tests stay fast."""
    return PasswordHasher(rounds=4)


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
def mock_db() -> AsyncMock:
    """Create mock database session."""
    db = AsyncMock()
    db.add = MagicMock()
    db.add_all = MagicMock()
    db.flush = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.refresh = AsyncMock()
    db.execute = AsyncMock()
    return db


@pytest.fixture
def make_student(password_hasher: PasswordHasher) -> Callable[..., Student]:
    """Factory for Student rows with a hashed password."""

    def _make(
        email: str = "ada@school.edu",
        password: str = "S3cure!pass",
        student_id: str = "STU12345",
        is_active: bool = True,
    ) -> Student:
        return Student(
            email=email,
            first_name="Ada",
            last_name="Lovelace",
            student_id=student_id,
            password_hash=password_hasher.hash(password),
            is_active=is_active,
        )

    return _make


@pytest.fixture
def make_teacher(password_hasher: PasswordHasher) -> Callable[..., Teacher]:
    """Factory for Teacher rows with a hashed password."""

    def _make(
        email: str = "grace@school.edu",
        password: str = "T3acher!pass",
        is_active: bool = True,
    ) -> Teacher:
        return Teacher(
            email=email,
            first_name="Grace",
            last_name="Hopper",
            teacher_id="TCH001",
            password_hash=password_hasher.hash(password),
            is_active=is_active,
        )

    return _make


@pytest.fixture
def make_result() -> Callable[..., MagicMock]:
    """Expose db_result to tests."""
    return db_result
