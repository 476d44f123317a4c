# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication service.

Orchestrates the session-token lifecycle for students and teachers:
registration, login, refresh-token rotation, logout and identity lookup.
Credentials live in the relational store; the single valid refresh token
per principal lives in the SessionRegistry.

Example:
    >>> auth_service = AuthService(db, jwt_manager, registry)
    >>> result = await auth_service.login("ada@school.edu", "S3cure!pass")
    >>> tokens = await auth_service.refresh(result.tokens.refresh_token)
"""

import logging
import secrets
from typing import NamedTuple

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from lms.core.exceptions import AuthenticationError, ConflictError, LMSError, ValidationError
from lms.domains.auth.jwt import JWTError, JWTManager, Role, TokenPair
from lms.domains.auth.password import PasswordHasher
from lms.domains.auth.session_registry import SessionRegistry
from lms.infrastructure.database.connection import translate_integrity_error
from lms.infrastructure.database.models import Student, Teacher
from lms.utils.datetime import utc_now

logger = logging.getLogger(__name__)

Principal = Student | Teacher

INVALID_CREDENTIALS = "Invalid credentials"
INVALID_REFRESH_TOKEN = "Invalid refresh token"
INVALID_USER = "Invalid user"
EMAIL_TAKEN = "Email already registered"
STUDENT_ID_TAKEN = "Student ID already exists"


class LoginResult(NamedTuple):
    """Result of a successful login."""

    principal: Principal
    tokens: TokenPair


class AuthService:
    """Service for principal authentication and token lifecycle.

    Attributes:
        _db: Database session.
        _jwt_manager: JWT token manager.
        _registry: Refresh-token session registry.
        _password_hasher: Password hashing utility.
    """

    def __init__(
        self,
        db: AsyncSession,
        jwt_manager: JWTManager,
        registry: SessionRegistry,
        password_hasher: PasswordHasher | None = None,
    ) -> None:
        """Initialize the authentication service.

        Args:
            db: Async database session.
            jwt_manager: JWT token manager.
            registry: Refresh-token session registry.
            password_hasher: Password hasher (uses default if not provided).
        """
        self._db = db
        self._jwt_manager = jwt_manager
        self._registry = registry
        self._password_hasher = password_hasher or PasswordHasher()

    async def register_student(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        student_id: str,
    ) -> Student:
        """Create a new student account.

        Args:
            email: Login email; stored lower-cased.
            password: Plain text password.
            first_name: Given name.
            last_name: Family name.
            student_id: Institutional student ID.

        Returns:
            The persisted Student.

        Raises:
            ConflictError: If the email or student ID is already taken.
            ValidationError: If the password cannot be hashed.
        """
        email = email.strip().lower()

        stmt = select(Student).where(
            or_(Student.email == email, Student.student_id == student_id)
        ).limit(1)
        result = await self._db.execute(stmt)
        existing = result.scalar_one_or_none()

        if existing is not None:
            if existing.email == email:
                raise ConflictError(EMAIL_TAKEN)
            raise ConflictError(STUDENT_ID_TAKEN)

        try:
            password_hash = self._password_hasher.hash(password)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        student = Student(
            email=email,
            first_name=first_name,
            last_name=last_name,
            student_id=student_id,
            password_hash=password_hash,
            is_active=True,
        )
        self._db.add(student)

        try:
            await self._db.commit()
        except IntegrityError as e:
            # Lost a race with a concurrent registration
            await self._db.rollback()
            raise self._registration_conflict(e) from e

        logger.info("Student registered: %s", student.id)
        return student

    async def login(self, email: str, password: str) -> LoginResult:
        """Authenticate a principal by email and password.

        Students are looked up first, then teachers. Unknown email, inactive
        account and wrong password all fail with the same message.

        Args:
            email: Login email.
            password: Plain text password.

        Returns:
            LoginResult with the principal and a fresh token pair.

        Raises:
            AuthenticationError: If the credentials are not accepted.
        """
        email = email.strip().lower()
        principal = await self._find_by_email(email)

        if principal is None:
            self._password_hasher.burn(password)
            logger.warning("Login failed: no account for submitted email")
            raise AuthenticationError(INVALID_CREDENTIALS)

        # Verify before the active check so every failure costs one bcrypt run
        password_ok = self._password_hasher.verify(password, principal.password_hash)

        if not principal.is_active:
            logger.warning("Login failed: inactive %s %s", principal.role, principal.id)
            raise AuthenticationError(INVALID_CREDENTIALS)

        if not password_ok:
            logger.warning("Login failed: wrong password for %s %s", principal.role, principal.id)
            raise AuthenticationError(INVALID_CREDENTIALS)

        tokens = self._issue_tokens(principal)
        await self._registry.store(principal.id, tokens.refresh_token)

        if isinstance(principal, Student):
            principal.last_login_at = utc_now()
        await self._db.commit()

        logger.info("%s logged in: %s", principal.role.capitalize(), principal.id)
        return LoginResult(principal=principal, tokens=tokens)

    async def refresh(self, refresh_token: str) -> TokenPair:
        """Exchange a refresh token for a new token pair.

        The presented token must be the one currently registered for its
        principal. The registry entry is swapped with a compare-and-set, so
        of two concurrent refreshes with the same token only one succeeds.

        Args:
            refresh_token: The refresh token issued by login or the previous refresh.

        Returns:
            New TokenPair; the presented refresh token is no longer valid.

        Raises:
            AuthenticationError: If the token is invalid, not current, or
                its principal is missing or inactive.
        """
        try:
            payload = self._jwt_manager.verify_refresh(refresh_token)
        except JWTError as e:
            logger.info("Refresh rejected: %s", e.message)
            raise AuthenticationError(INVALID_REFRESH_TOKEN) from e

        stored = await self._registry.get(payload.sub)
        if stored is None or not secrets.compare_digest(stored, refresh_token):
            logger.info("Refresh rejected: token not current for %s", payload.sub)
            raise AuthenticationError(INVALID_REFRESH_TOKEN)

        principal = await self.load_principal(payload.sub, payload.role)
        if principal is None or not principal.is_active:
            await self._registry.revoke(payload.sub)
            logger.info("Refresh rejected: principal %s missing or inactive", payload.sub)
            raise AuthenticationError(INVALID_USER)

        tokens = self._issue_tokens(principal)
        if not await self._registry.rotate(payload.sub, refresh_token, tokens.refresh_token):
            raise AuthenticationError(INVALID_REFRESH_TOKEN)

        logger.info("Tokens refreshed for %s %s", principal.role, principal.id)
        return tokens

    async def logout(self, access_token: str | None) -> None:
        """End the current session.

        Access tokens are not persisted and expire on their own, so there
        is no server-side state to change. Never fails.

        Args:
            access_token: Bearer token from the request, if any.
        """
        if access_token:
            logger.info("Principal logged out")

    async def logout_all(self, access_token: str | None) -> None:
        """Revoke the principal's refresh token, ending every session.

        Verification failures are ignored: the call always succeeds, and
        only a verifiable access token causes a revocation.

        Args:
            access_token: Bearer token from the request, if any.
        """
        if not access_token:
            return

        try:
            payload = self._jwt_manager.verify_access(access_token)
        except LMSError as e:
            logger.debug("Logout-all with unverifiable token: %s", e.message)
            return

        await self._registry.revoke(payload.sub)
        logger.info("Principal %s logged out from all devices", payload.sub)

    async def who_am_i(self, access_token: str) -> Principal:
        """Resolve an access token to the live principal record.

        Claims are never trusted for profile data; the record is re-read.

        Args:
            access_token: Bearer access token.

        Returns:
            The active Student or Teacher.

        Raises:
            AuthenticationError: If the token is invalid or the principal
                is missing or inactive.
        """
        payload = self._jwt_manager.verify_access(access_token)
        return await self.get_active_principal(payload.sub, payload.role)

    async def load_principal(self, principal_id: str, role: Role) -> Principal | None:
        """Load a principal by ID from the table matching its role.

        Args:
            principal_id: Principal ID (token subject).
            role: student or teacher.

        Returns:
            The Student or Teacher, or None if not found.
        """
        model = Student if role == "student" else Teacher
        stmt = select(model).where(model.id == principal_id)
        result = await self._db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_active_principal(self, principal_id: str, role: Role) -> Principal:
        """Load a principal and require it to be active.

        Raises:
            AuthenticationError: If the principal is missing or inactive.
        """
        principal = await self.load_principal(principal_id, role)
        if principal is None or not principal.is_active:
            raise AuthenticationError(INVALID_USER)
        return principal

    async def _find_by_email(self, email: str) -> Principal | None:
        """Find a student, then a teacher, by email."""
        result = await self._db.execute(select(Student).where(Student.email == email))
        student = result.scalar_one_or_none()
        if student is not None:
            return student

        result = await self._db.execute(select(Teacher).where(Teacher.email == email))
        return result.scalar_one_or_none()

    def _issue_tokens(self, principal: Principal) -> TokenPair:
        """Issue a token pair carrying the principal's role-specific ID."""
        if isinstance(principal, Student):
            return self._jwt_manager.create_token_pair(
                user_id=principal.id,
                email=principal.email,
                role="student",
                student_id=principal.student_id,
            )
        return self._jwt_manager.create_token_pair(
            user_id=principal.id,
            email=principal.email,
            role="teacher",
            teacher_id=principal.teacher_id,
        )

    @staticmethod
    def _registration_conflict(error: IntegrityError) -> LMSError:
        """Translate a registration integrity failure into a conflict message."""
        translated = translate_integrity_error(error)
        field = translated.details.get("field")
        if field == "email":
            return ConflictError(EMAIL_TAKEN)
        if field == "student_id":
            return ConflictError(STUDENT_ID_TAKEN)
        return translated
