# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student profile models."""

from datetime import datetime

from pydantic import EmailStr, field_validator, model_validator

from lms.models.auth import PersonName, StudentNumber
from lms.models.common import CamelModel


class StudentProfile(CamelModel):
    """A student's own profile."""

    id: str
    email: str
    first_name: str
    last_name: str
    student_id: str
    is_active: bool
    created_at: datetime
    updated_at: datetime
    last_login_at: datetime | None = None


class UpdateProfileRequest(CamelModel):
    """Partial profile update; omitted fields are left unchanged."""

    first_name: PersonName | None = None
    last_name: PersonName | None = None
    email: EmailStr | None = None
    student_id: StudentNumber | None = None

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_name(cls, value: str | None) -> str | None:
        return value.strip() if value is not None else None

    @model_validator(mode="after")
    def require_any_field(self) -> "UpdateProfileRequest":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided")
        return self
