# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student profile service."""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from lms.core.exceptions import ConflictError, NotFoundError
from lms.infrastructure.database.connection import translate_integrity_error
from lms.infrastructure.database.models import Student
from lms.models.student import StudentProfile, UpdateProfileRequest

logger = logging.getLogger(__name__)

EMAIL_EXISTS = "Email already exists"
STUDENT_ID_EXISTS = "Student ID already exists"


class StudentService:
    """Service for reading and updating student profiles.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_student(self, student_id: str) -> StudentProfile:
        """Get a student's profile.

        Args:
            student_id: Student principal ID.

        Raises:
            NotFoundError: If the student does not exist.
        """
        student = await self._get_student(student_id)
        return StudentProfile.model_validate(student)

    async def update_student(self, student_id: str, changes: UpdateProfileRequest) -> StudentProfile:
        """Apply a partial profile update.

        Only fields present in the request are changed. A new email or
        student ID must not belong to another student.

        Args:
            student_id: Student principal ID.
            changes: Fields to update.

        Returns:
            The updated profile.

        Raises:
            NotFoundError: If the student does not exist.
            ConflictError: If the email or student ID is taken.
        """
        student = await self._get_student(student_id)
        updates = changes.model_dump(exclude_unset=True, exclude_none=True)

        if "email" in updates:
            updates["email"] = updates["email"].strip().lower()
            if updates["email"] != student.email:
                await self._ensure_unique(Student.email, updates["email"], student_id, EMAIL_EXISTS)

        if "student_id" in updates and updates["student_id"] != student.student_id:
            await self._ensure_unique(
                Student.student_id, updates["student_id"], student_id, STUDENT_ID_EXISTS
            )

        for field, value in updates.items():
            setattr(student, field, value)

        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            translated = translate_integrity_error(e)
            field = translated.details.get("field")
            if field == "email":
                raise ConflictError(EMAIL_EXISTS) from e
            if field == "student_id":
                raise ConflictError(STUDENT_ID_EXISTS) from e
            raise translated from e

        logger.info("Student profile updated: %s, fields=%s", student_id, sorted(updates))
        return StudentProfile.model_validate(student)

    async def _get_student(self, student_id: str) -> Student:
        result = await self.db.execute(select(Student).where(Student.id == student_id))
        student = result.scalar_one_or_none()
        if student is None:
            raise NotFoundError("Student not found")
        return student

    async def _ensure_unique(self, column, value: str, student_id: str, message: str) -> None:
        """Raise ConflictError if another student already has this value."""
        result = await self.db.execute(
            select(Student.id).where(column == value, Student.id != student_id)
        )
        if result.scalar_one_or_none() is not None:
            raise ConflictError(message)
