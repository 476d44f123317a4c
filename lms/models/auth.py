# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication request and response models."""

import re
from datetime import datetime
from typing import Annotated, Literal

from pydantic import EmailStr, Field, field_validator

from lms.models.common import CamelModel

NAME_PATTERN = r"^[a-zA-Z\s\-']+$"
STUDENT_ID_PATTERN = r"^[a-zA-Z0-9]+$"

PersonName = Annotated[str, Field(min_length=1, max_length=50, pattern=NAME_PATTERN)]
StudentNumber = Annotated[str, Field(min_length=6, max_length=20, pattern=STUDENT_ID_PATTERN)]

_PASSWORD_RULES = (
    (re.compile(r"[a-z]"), "one lowercase letter"),
    (re.compile(r"[A-Z]"), "one uppercase letter"),
    (re.compile(r"\d"), "one number"),
    (re.compile(r"[@$!%*?&]"), "one special character"),
)


class RegisterStudentRequest(CamelModel):
    """Student self-registration payload."""

    email: EmailStr
    # bcrypt only reads the first 72 bytes
    password: str = Field(min_length=8, max_length=72)
    first_name: PersonName
    last_name: PersonName
    student_id: StudentNumber

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        return value.strip()

    @field_validator("password")
    @classmethod
    def check_password_strength(cls, value: str) -> str:
        missing = [label for pattern, label in _PASSWORD_RULES if not pattern.search(value)]
        if missing:
            raise ValueError(f"Password must contain at least {', '.join(missing)}")
        if len(value.encode("utf-8")) > 72:
            raise ValueError("Password must not exceed 72 bytes")
        return value


class LoginRequest(CamelModel):
    """Email and password login payload."""

    email: EmailStr
    password: str = Field(min_length=1)


class RefreshTokenRequest(CamelModel):
    """Refresh token exchange payload."""

    refresh_token: str = Field(min_length=1)


class TokenResponse(CamelModel):
    """Issued token pair."""

    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int
    refresh_expires_in: int


class PrincipalSummary(CamelModel):
    """Identity of an authenticated student or teacher."""

    id: str
    email: str
    first_name: str
    last_name: str
    student_id: str | None = None
    teacher_id: str | None = None
    type: Literal["student", "teacher"]


class PrincipalProfile(PrincipalSummary):
    """Identity plus account state, returned by /auth/me."""

    is_active: bool
    last_login_at: datetime | None = None


class RegisteredStudent(CamelModel):
    """Newly created student account."""

    id: str
    email: str
    first_name: str
    last_name: str
    student_id: str
    created_at: datetime


class RegisterResponse(CamelModel):
    message: str = "Student registered successfully"
    student: RegisteredStudent


class LoginResponse(CamelModel):
    message: str = "Login successful"
    user: PrincipalSummary
    tokens: TokenResponse


class RefreshResponse(CamelModel):
    message: str = "Token refreshed successfully"
    tokens: TokenResponse


class MeResponse(CamelModel):
    user: PrincipalProfile
