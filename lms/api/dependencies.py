# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

This module provides dependency functions for FastAPI endpoints.
Dependencies are used to:
- Get a database session per request
- Get the Redis-backed session registry
- Resolve the authenticated principal
- Build service instances

Example:
    @router.get("/gpa")
    async def get_gpa(
        student: StudentPrincipal,
        grading_service: GradingServiceDep,
    ):
        ...
"""

import logging
from typing import Annotated, AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from lms.api.middleware.auth import extract_token, get_current_user
from lms.core.config import get_settings
from lms.core.exceptions import AuthenticationError, AuthorizationError
from lms.domains.auth.jwt import JWTManager
from lms.domains.auth.service import AuthService, Principal
from lms.domains.auth.session_registry import SessionRegistry
from lms.domains.course.service import CourseService
from lms.domains.enrollment.service import EnrollmentService
from lms.domains.grading.service import GradingService
from lms.domains.progress.service import ProgressService
from lms.domains.student.service import StudentService
from lms.infrastructure.cache import RedisClient, get_redis
from lms.infrastructure.database import get_session
from lms.infrastructure.database.models import Student

logger = logging.getLogger(__name__)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get a database session for the request.

    Yields:
        AsyncSession, closed when the request finishes.
    """
    async with get_session() as session:
        yield session


def get_redis_client() -> RedisClient:
    """Get the shared Redis client."""
    return get_redis()


def get_jwt_manager() -> JWTManager:
    """Get a JWT manager built from current settings."""
    return JWTManager(get_settings().jwt)


def get_session_registry(
    redis: Annotated[RedisClient, Depends(get_redis_client)],
    jwt_manager: Annotated[JWTManager, Depends(get_jwt_manager)],
) -> SessionRegistry:
    """Get the refresh-token session registry."""
    return SessionRegistry(redis, ttl_seconds=jwt_manager.refresh_token_ttl_seconds)


def get_auth_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    jwt_manager: Annotated[JWTManager, Depends(get_jwt_manager)],
    registry: Annotated[SessionRegistry, Depends(get_session_registry)],
) -> AuthService:
    """Get the authentication service."""
    return AuthService(db, jwt_manager, registry)


def get_bearer_token(request: Request) -> str | None:
    """Get the raw bearer token from the request, if any."""
    return extract_token(request)


# =========================================================================
# Authentication Dependencies
# =========================================================================


async def require_auth(
    request: Request,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> Principal:
    """Require an authenticated, active principal.

    The token was verified by AuthMiddleware; the principal record is
    re-read so that deactivation takes effect immediately.

    Returns:
        The live Student or Teacher.

    Raises:
        AuthenticationError: If the token is missing or invalid, or the
            principal is missing or inactive.
    """
    user = get_current_user(request)
    if user is None:
        auth_error = getattr(request.state, "auth_error", None)
        if auth_error is not None:
            raise auth_error
        raise AuthenticationError("Access token required")

    return await auth_service.get_active_principal(user.id, user.role)


async def require_student(
    principal: Annotated[Principal, Depends(require_auth)],
) -> Student:
    """Require the authenticated principal to be a student.

    Raises:
        AuthorizationError: If the principal is a teacher.
    """
    if not isinstance(principal, Student):
        raise AuthorizationError("Student access required")
    return principal


# =========================================================================
# Service Dependencies
# =========================================================================


def get_enrollment_service(db: Annotated[AsyncSession, Depends(get_db)]) -> EnrollmentService:
    return EnrollmentService(db)


def get_progress_service(db: Annotated[AsyncSession, Depends(get_db)]) -> ProgressService:
    return ProgressService(db)


def get_course_service(db: Annotated[AsyncSession, Depends(get_db)]) -> CourseService:
    return CourseService(db)


def get_grading_service(db: Annotated[AsyncSession, Depends(get_db)]) -> GradingService:
    return GradingService(db)


def get_student_service(db: Annotated[AsyncSession, Depends(get_db)]) -> StudentService:
    return StudentService(db)


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
BearerToken = Annotated[str | None, Depends(get_bearer_token)]
AuthenticatedPrincipal = Annotated[Principal, Depends(require_auth)]
StudentPrincipal = Annotated[Student, Depends(require_student)]
EnrollmentServiceDep = Annotated[EnrollmentService, Depends(get_enrollment_service)]
ProgressServiceDep = Annotated[ProgressService, Depends(get_progress_service)]
CourseServiceDep = Annotated[CourseService, Depends(get_course_service)]
GradingServiceDep = Annotated[GradingService, Depends(get_grading_service)]
StudentServiceDep = Annotated[StudentService, Depends(get_student_service)]
