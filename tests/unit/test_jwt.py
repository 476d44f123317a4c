# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for JWT token utilities.

Tests the JWTManager class and token operations.
"""

from uuid import uuid4

import pytest
from pydantic import SecretStr

from lms.core.config.settings import JWTSettings
from lms.core.exceptions import AuthenticationError, ConfigurationError
from lms.domains.auth.jwt import (
    AccessTokenPayload,
    InvalidTokenError,
    JWTManager,
    RefreshTokenPayload,
    TokenExpiredError,
    TokenPair,
)


def _manager(**overrides) -> JWTManager:
    values = {
        "access_secret": SecretStr("access-secret"),
        "refresh_secret": SecretStr("refresh-secret"),
    }
    values.update(overrides)
    return JWTManager(JWTSettings(**values))


class TestJWTManager:
    """Tests for JWTManager class."""

    def test_create_token_pair_returns_valid_tokens(self, jwt_manager: JWTManager) -> None:
        """Test that create_token_pair returns a pair with both lifetimes."""
        result = jwt_manager.create_token_pair(
            user_id=str(uuid4()),
            email="ada@school.edu",
            role="student",
            student_id="STU12345",
        )

        assert isinstance(result, TokenPair)
        assert result.access_token != result.refresh_token
        assert result.token_type == "Bearer"
        assert result.expires_in == 15 * 60
        assert result.refresh_expires_in == 7 * 24 * 60 * 60

    def test_verify_access_returns_claims(self, jwt_manager: JWTManager) -> None:
        """Test that an access token round-trips its claims."""
        user_id = str(uuid4())
        token = jwt_manager.create_access_token(
            user_id=user_id,
            email="ada@school.edu",
            role="student",
            student_id="STU12345",
        )

        payload = jwt_manager.verify_access(token)

        assert isinstance(payload, AccessTokenPayload)
        assert payload.sub == user_id
        assert payload.email == "ada@school.edu"
        assert payload.role == "student"
        assert payload.student_id == "STU12345"
        assert payload.teacher_id is None
        assert payload.token_type == "access"

    def test_teacher_token_carries_teacher_id_only(self, jwt_manager: JWTManager) -> None:
        token = jwt_manager.create_access_token(
            user_id=str(uuid4()),
            email="grace@school.edu",
            role="teacher",
            student_id="ignored",
            teacher_id="TCH001",
        )

        payload = jwt_manager.verify_access(token)

        assert payload.teacher_id == "TCH001"
        assert payload.student_id is None

    def test_verify_refresh_returns_claims(self, jwt_manager: JWTManager) -> None:
        user_id = str(uuid4())
        token = jwt_manager.create_refresh_token(user_id=user_id, role="teacher")

        payload = jwt_manager.verify_refresh(token)

        assert isinstance(payload, RefreshTokenPayload)
        assert payload.sub == user_id
        assert payload.role == "teacher"
        assert payload.token_type == "refresh"

    def test_tokens_issued_together_are_distinct(self, jwt_manager: JWTManager) -> None:
        """Two pairs issued within the same second never collide."""
        user_id = str(uuid4())

        first = jwt_manager.create_token_pair(user_id=user_id, email="a@b.edu", role="student")
        second = jwt_manager.create_token_pair(user_id=user_id, email="a@b.edu", role="student")

        assert first.access_token != second.access_token
        assert first.refresh_token != second.refresh_token

    def test_refresh_token_rejected_as_access(self, jwt_manager: JWTManager) -> None:
        token = jwt_manager.create_refresh_token(user_id=str(uuid4()), role="student")

        with pytest.raises(InvalidTokenError):
            jwt_manager.verify_access(token)

    def test_access_token_rejected_as_refresh(self, jwt_manager: JWTManager) -> None:
        token = jwt_manager.create_access_token(
            user_id=str(uuid4()), email="a@b.edu", role="student"
        )

        with pytest.raises(InvalidTokenError):
            jwt_manager.verify_refresh(token)

    def test_same_secret_still_checks_token_type(self) -> None:
        """Test type check when both kinds share a secret."""
        manager = _manager(refresh_secret=SecretStr("access-secret"))
        token = manager.create_refresh_token(user_id=str(uuid4()), role="student")

        with pytest.raises(InvalidTokenError):
            manager.verify_access(token)

    def test_expired_token_raises(self) -> None:
        manager = _manager(access_token_expire_minutes=-1)
        token = manager.create_access_token(user_id=str(uuid4()), email="a@b.edu", role="student")

        with pytest.raises(TokenExpiredError):
            manager.verify_access(token)

    def test_wrong_audience_rejected(self, jwt_manager: JWTManager) -> None:
        other = _manager(
            access_secret=SecretStr("test-access-secret-for-testing-only"),
            audience="someone-else",
        )
        token = other.create_access_token(user_id=str(uuid4()), email="a@b.edu", role="student")

        with pytest.raises(InvalidTokenError):
            jwt_manager.verify_access(token)

    def test_wrong_issuer_rejected(self, jwt_manager: JWTManager) -> None:
        other = _manager(
            access_secret=SecretStr("test-access-secret-for-testing-only"),
            issuer="another-service",
        )
        token = other.create_access_token(user_id=str(uuid4()), email="a@b.edu", role="student")

        with pytest.raises(InvalidTokenError):
            jwt_manager.verify_access(token)

    def test_malformed_token_rejected(self, jwt_manager: JWTManager) -> None:
        with pytest.raises(InvalidTokenError):
            jwt_manager.verify_access("not-a-jwt")

    def test_token_errors_are_authentication_errors(self) -> None:
        assert issubclass(InvalidTokenError, AuthenticationError)
        assert issubclass(TokenExpiredError, AuthenticationError)

    def test_missing_secret_raises_configuration_error(self) -> None:
        manager = _manager(refresh_secret=SecretStr(""))

        with pytest.raises(ConfigurationError):
            manager.create_token_pair(user_id=str(uuid4()), email="a@b.edu", role="student")
