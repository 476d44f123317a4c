# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""JWT token management utilities.

This module provides JWT token creation and validation using python-jose.
Access and refresh tokens are signed with separate secrets, carry the same
issuer and audience, and each gets a random jti so that two tokens issued
within the same second never collide.

Example:
    >>> from lms.core.config import get_settings
    >>> jwt_manager = JWTManager(get_settings().jwt)
    >>> tokens = jwt_manager.create_token_pair(
    ...     user_id="f3c1...", email="a@b.edu", role="student", student_id="STU12345"
    ... )
    >>> claims = jwt_manager.verify_access(tokens.access_token)
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Literal

from jose import ExpiredSignatureError, JWTError as JoseJWTError, jwt
from pydantic import BaseModel

from lms.core.config.settings import JWTSettings
from lms.core.exceptions import AuthenticationError, ConfigurationError

logger = logging.getLogger(__name__)

Role = Literal["student", "teacher"]


class AccessTokenPayload(BaseModel):
    """Verified access token claims.

    Attributes:
        sub: Principal ID.
        email: Principal email at issue time.
        role: student or teacher.
        student_id: Institutional student ID (students only).
        teacher_id: Institutional teacher ID (teachers only).
        token_type: Always "access".
        exp: Expiration timestamp.
        iat: Issued at timestamp.
        jti: Random token ID.
    """

    sub: str
    email: str
    role: Role
    student_id: str | None = None
    teacher_id: str | None = None
    token_type: Literal["access"]
    exp: int
    iat: int
    jti: str


class RefreshTokenPayload(BaseModel):
    """Verified refresh token claims."""

    sub: str
    role: Role
    token_type: Literal["refresh"]
    exp: int
    iat: int
    jti: str


class TokenPair(BaseModel):
    """Access and refresh token pair.

    Attributes:
        access_token: JWT access token string.
        refresh_token: JWT refresh token string.
        token_type: Token type (always "Bearer").
        expires_in: Access token expiration in seconds.
        refresh_expires_in: Refresh token expiration in seconds.
    """

    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int
    refresh_expires_in: int


class JWTError(AuthenticationError):
    """Base exception for JWT operations."""

    def __init__(self, message: str = "Invalid token", details: dict | None = None):
        super().__init__(message, details)


class TokenExpiredError(JWTError):
    """Raised when a token has expired."""

    def __init__(self, message: str = "Token expired", details: dict | None = None):
        super().__init__(message, details)


class InvalidTokenError(JWTError):
    """Raised when a token is malformed, mis-signed or of the wrong kind."""

    pass


class JWTManager:
    """JWT token creation and validation manager.

    Stateless: depends only on JWTSettings. Secrets are resolved on every
    call, so a missing secret surfaces as ConfigurationError at the first
    issue or verify rather than at import time.

    Attributes:
        _settings: JWT configuration settings.
    """

    def __init__(self, settings: JWTSettings) -> None:
        """Initialize the JWT manager.

        Args:
            settings: JWT configuration settings.
        """
        self._settings = settings

    @property
    def access_token_ttl_seconds(self) -> int:
        return self._settings.access_token_expire_minutes * 60

    @property
    def refresh_token_ttl_seconds(self) -> int:
        return self._settings.refresh_token_ttl_seconds

    def _access_secret(self) -> str:
        secret = self._settings.access_secret
        if secret is None or not secret.get_secret_value():
            raise ConfigurationError("JWT access secret not configured")
        return secret.get_secret_value()

    def _refresh_secret(self) -> str:
        secret = self._settings.refresh_secret
        if secret is None or not secret.get_secret_value():
            raise ConfigurationError("JWT refresh secret not configured")
        return secret.get_secret_value()

    def create_token_pair(
        self,
        user_id: str,
        email: str,
        role: Role,
        student_id: str | None = None,
        teacher_id: str | None = None,
    ) -> TokenPair:
        """Create an access and refresh token pair.

        Args:
            user_id: Principal identifier.
            email: Principal email.
            role: student or teacher.
            student_id: Institutional student ID (students only).
            teacher_id: Institutional teacher ID (teachers only).

        Returns:
            TokenPair with access and refresh tokens.

        Raises:
            ConfigurationError: If either signing secret is unset.
        """
        access_token = self.create_access_token(
            user_id=user_id,
            email=email,
            role=role,
            student_id=student_id,
            teacher_id=teacher_id,
        )
        refresh_token = self.create_refresh_token(user_id=user_id, role=role)

        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            token_type="Bearer",
            expires_in=self.access_token_ttl_seconds,
            refresh_expires_in=self.refresh_token_ttl_seconds,
        )

    def create_access_token(
        self,
        user_id: str,
        email: str,
        role: Role,
        student_id: str | None = None,
        teacher_id: str | None = None,
    ) -> str:
        """Create an access token.

        Args:
            user_id: Principal identifier.
            email: Principal email.
            role: student or teacher.
            student_id: Institutional student ID (students only).
            teacher_id: Institutional teacher ID (teachers only).

        Returns:
            JWT access token string.
        """
        secret = self._access_secret()
        now = datetime.now(timezone.utc)
        exp = now + timedelta(minutes=self._settings.access_token_expire_minutes)

        payload = {
            "sub": str(user_id),
            "email": email,
            "role": role,
            "token_type": "access",
            "iss": self._settings.issuer,
            "aud": self._settings.audience,
            "exp": int(exp.timestamp()),
            "iat": int(now.timestamp()),
            "jti": secrets.token_urlsafe(16),
        }
        if role == "student" and student_id:
            payload["student_id"] = student_id
        if role == "teacher" and teacher_id:
            payload["teacher_id"] = teacher_id

        return jwt.encode(payload, secret, algorithm=self._settings.algorithm)

    def create_refresh_token(self, user_id: str, role: Role) -> str:
        """Create a refresh token.

        Args:
            user_id: Principal identifier.
            role: student or teacher.

        Returns:
            JWT refresh token string.
        """
        secret = self._refresh_secret()
        now = datetime.now(timezone.utc)
        exp = now + timedelta(days=self._settings.refresh_token_expire_days)

        payload = {
            "sub": str(user_id),
            "role": role,
            "token_type": "refresh",
            "iss": self._settings.issuer,
            "aud": self._settings.audience,
            "exp": int(exp.timestamp()),
            "iat": int(now.timestamp()),
            "jti": secrets.token_urlsafe(16),
        }

        return jwt.encode(payload, secret, algorithm=self._settings.algorithm)

    def verify_access(self, token: str) -> AccessTokenPayload:
        """Verify an access token and return its claims.

        Args:
            token: JWT access token string.

        Returns:
            AccessTokenPayload with verified claims.

        Raises:
            TokenExpiredError: If the token has expired.
            InvalidTokenError: If the token is invalid or not an access token.
            ConfigurationError: If the access secret is unset.
        """
        payload = self._decode(token, self._access_secret(), "access")
        try:
            return AccessTokenPayload.model_validate(payload)
        except ValueError as e:
            raise InvalidTokenError("Invalid token") from e

    def verify_refresh(self, token: str) -> RefreshTokenPayload:
        """Verify a refresh token and return its claims.

        Args:
            token: JWT refresh token string.

        Returns:
            RefreshTokenPayload with verified claims.

        Raises:
            TokenExpiredError: If the token has expired.
            InvalidTokenError: If the token is invalid or not a refresh token.
            ConfigurationError: If the refresh secret is unset.
        """
        payload = self._decode(token, self._refresh_secret(), "refresh")
        try:
            return RefreshTokenPayload.model_validate(payload)
        except ValueError as e:
            raise InvalidTokenError("Invalid token") from e

    def _decode(
        self,
        token: str,
        secret: str,
        expected_type: Literal["access", "refresh"],
    ) -> dict:
        """Decode a token, checking signature, expiry, issuer, audience and type."""
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[self._settings.algorithm],
                audience=self._settings.audience,
                issuer=self._settings.issuer,
            )
        except ExpiredSignatureError as e:
            raise TokenExpiredError() from e
        except JoseJWTError as e:
            logger.debug("Token decode failed: %s", str(e))
            raise InvalidTokenError() from e

        if payload.get("token_type") != expected_type:
            logger.debug(
                "Token type mismatch: expected %s, got %s",
                expected_type,
                payload.get("token_type"),
            )
            raise InvalidTokenError()

        return payload
