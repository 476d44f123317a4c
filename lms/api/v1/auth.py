# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication API endpoints.

This module provides endpoints for the session-token lifecycle:
- POST /register/student - Student self-registration
- POST /login - Email and password login (students and teachers)
- POST /refresh - Exchange a refresh token for a new pair
- POST /logout - End the current session
- POST /logout-all - Revoke the refresh token, ending every session
- GET /me - Get the current principal

Example:
    POST /api/v1/auth/login
    Body:
        {"email": "ada@school.edu", "password": "S3cure!pass"}
"""

import logging

from fastapi import APIRouter, Request, status

from lms.api.dependencies import AuthServiceDep, BearerToken
from lms.api.middleware.rate_limit import RATE_LIMIT_AUTH, get_ip_only, limiter
from lms.core.exceptions import AuthenticationError
from lms.domains.auth.service import Principal
from lms.infrastructure.database.models import Student
from lms.models.auth import (
    LoginRequest,
    LoginResponse,
    MeResponse,
    PrincipalProfile,
    PrincipalSummary,
    RefreshResponse,
    RefreshTokenRequest,
    RegisteredStudent,
    RegisterResponse,
    RegisterStudentRequest,
    TokenResponse,
)
from lms.models.common import MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _summary(principal: Principal) -> PrincipalSummary:
    """Build the identity summary for a student or teacher."""
    is_student = isinstance(principal, Student)
    return PrincipalSummary(
        id=principal.id,
        email=principal.email,
        first_name=principal.first_name,
        last_name=principal.last_name,
        student_id=principal.student_id if is_student else None,
        teacher_id=None if is_student else principal.teacher_id,
        type=principal.role,
    )


@router.post(
    "/register/student",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a student account",
)
@limiter.limit(RATE_LIMIT_AUTH, key_func=get_ip_only)
async def register_student(
    request: Request,
    data: RegisterStudentRequest,
    auth_service: AuthServiceDep,
) -> RegisterResponse:
    """Create a student account.

    Raises:
        ConflictError: If the email or student ID is already registered.
    """
    student = await auth_service.register_student(
        email=str(data.email),
        password=data.password,
        first_name=data.first_name,
        last_name=data.last_name,
        student_id=data.student_id,
    )
    return RegisterResponse(student=RegisteredStudent.model_validate(student))


@router.post("/login", response_model=LoginResponse, summary="Log in with email and password")
@limiter.limit(RATE_LIMIT_AUTH, key_func=get_ip_only)
async def login(
    request: Request,
    data: LoginRequest,
    auth_service: AuthServiceDep,
) -> LoginResponse:
    """Authenticate a student or teacher and issue a token pair.

    Raises:
        AuthenticationError: If the credentials are not accepted.
    """
    result = await auth_service.login(str(data.email), data.password)
    return LoginResponse(
        user=_summary(result.principal),
        tokens=TokenResponse.model_validate(result.tokens),
    )


@router.post("/refresh", response_model=RefreshResponse, summary="Refresh the token pair")
@limiter.limit(RATE_LIMIT_AUTH, key_func=get_ip_only)
async def refresh(
    request: Request,
    data: RefreshTokenRequest,
    auth_service: AuthServiceDep,
) -> RefreshResponse:
    """Exchange the current refresh token for a new pair.

    The presented refresh token stops working once this succeeds.

    Raises:
        AuthenticationError: If the refresh token is invalid or not current.
    """
    tokens = await auth_service.refresh(data.refresh_token)
    return RefreshResponse(tokens=TokenResponse.model_validate(tokens))


@router.post("/logout", response_model=MessageResponse, summary="Log out")
async def logout(token: BearerToken, auth_service: AuthServiceDep) -> MessageResponse:
    """End the current session. Always succeeds."""
    await auth_service.logout(token)
    return MessageResponse(message="Logged out successfully")


@router.post("/logout-all", response_model=MessageResponse, summary="Log out from all devices")
async def logout_all(token: BearerToken, auth_service: AuthServiceDep) -> MessageResponse:
    """Revoke the refresh token so no session can be refreshed. Always succeeds."""
    await auth_service.logout_all(token)
    return MessageResponse(message="Logged out from all devices successfully")


@router.get("/me", response_model=MeResponse, summary="Get the current principal")
async def me(token: BearerToken, auth_service: AuthServiceDep) -> MeResponse:
    """Return the live record of the token's principal.

    Raises:
        AuthenticationError: If the token is missing or invalid, or the
            principal is missing or inactive.
    """
    if not token:
        raise AuthenticationError("Access token required")

    principal = await auth_service.who_am_i(token)
    summary = _summary(principal)
    return MeResponse(
        user=PrincipalProfile(
            **summary.model_dump(),
            is_active=principal.is_active,
            last_login_at=getattr(principal, "last_login_at", None),
        )
    )
