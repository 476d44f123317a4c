# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment service for managing student course enrollments.

This module provides the EnrollmentService class for:
- Enrolling a student in a course (creating or reactivating the enrollment)
- Unenrolling (soft deactivation)
- Listing a student's active enrollments with course-level progress
"""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from lms.core.exceptions import ConflictError, NotFoundError
from lms.infrastructure.database.connection import translate_integrity_error
from lms.infrastructure.database.models import Course, Enrollment, Progress
from lms.models.common import PaginationInfo
from lms.models.course import CourseSummary, EnrolledCourse, EnrollmentInfo, ProgressRecord
from lms.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class EnrollmentService:
    """Service for managing student enrollments.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize enrollment service.

        Args:
            db: Async database session.
        """
        self.db = db

    async def enroll(self, student_id: str, course_id: str) -> None:
        """Enroll a student in a course.

        Reactivates a previous enrollment if one exists and creates the
        course-level progress row at 0% (or touches it if already there),
        all in one transaction.

        Args:
            student_id: Student principal ID.
            course_id: Course identifier.

        Raises:
            NotFoundError: If the course is missing or inactive.
            ConflictError: If the student is already actively enrolled.
        """
        await self._get_active_course(course_id)

        now = utc_now()
        enrollment = await self._get_enrollment(student_id, course_id)
        if enrollment is not None:
            if enrollment.is_active:
                raise ConflictError("Already enrolled in this course")
            enrollment.is_active = True
            enrollment.enrolled_at = now
        else:
            self.db.add(
                Enrollment(
                    student_id=student_id,
                    course_id=course_id,
                    is_active=True,
                    enrolled_at=now,
                )
            )

        aggregate = await self._get_course_aggregate(student_id, course_id)
        if aggregate is not None:
            aggregate.last_accessed = now
        else:
            self.db.add(
                Progress(
                    student_id=student_id,
                    course_id=course_id,
                    lesson_id=None,
                    completion_percentage=0.0,
                    last_accessed=now,
                )
            )

        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            translated = translate_integrity_error(e)
            if isinstance(translated, ConflictError):
                raise ConflictError("Already enrolled in this course") from e
            raise translated from e

        logger.info("Enrolled student: student=%s, course=%s", student_id, course_id)

    async def unenroll(self, student_id: str, course_id: str) -> None:
        """Deactivate a student's enrollment.

        Progress rows are kept so a later re-enrollment resumes where the
        student left off.

        Args:
            student_id: Student principal ID.
            course_id: Course identifier.

        Raises:
            NotFoundError: If there is no active enrollment.
        """
        enrollment = await self._get_enrollment(student_id, course_id)
        if enrollment is None or not enrollment.is_active:
            raise NotFoundError("Enrollment not found")

        enrollment.is_active = False
        await self.db.commit()

        logger.info("Unenrolled student: student=%s, course=%s", student_id, course_id)

    async def list_enrolled_courses(
        self,
        student_id: str,
        page: int = 1,
        limit: int = 20,
    ) -> tuple[list[EnrolledCourse], PaginationInfo]:
        """List a student's active enrollments, newest first.

        Args:
            student_id: Student principal ID.
            page: 1-based page number.
            limit: Page size.

        Returns:
            Tuple of (enrolled courses with course-level progress, pagination).
        """
        active = (Enrollment.student_id == student_id, Enrollment.is_active.is_(True))

        count_result = await self.db.execute(
            select(func.count()).select_from(Enrollment).where(*active)
        )
        total = count_result.scalar_one()

        query = (
            select(Enrollment)
            .options(selectinload(Enrollment.course).selectinload(Course.teacher))
            .where(*active)
            .order_by(Enrollment.enrolled_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        result = await self.db.execute(query)
        enrollments = result.scalars().all()

        progress_by_course: dict[str, Progress] = {}
        if enrollments:
            progress_result = await self.db.execute(
                select(Progress).where(
                    Progress.student_id == student_id,
                    Progress.course_id.in_([e.course_id for e in enrollments]),
                    Progress.lesson_id.is_(None),
                )
            )
            progress_by_course = {p.course_id: p for p in progress_result.scalars().all()}

        items = [
            self._to_enrolled_course(e, progress_by_course.get(e.course_id))
            for e in enrollments
        ]
        return items, PaginationInfo.build(page=page, limit=limit, total=total)

    async def _get_active_course(self, course_id: str) -> Course:
        """Get an active course by ID.

        Raises:
            NotFoundError: If not found or inactive.
        """
        result = await self.db.execute(select(Course).where(Course.id == course_id))
        course = result.scalar_one_or_none()

        if course is None or not course.is_active:
            raise NotFoundError("Course not found or inactive")

        return course

    async def _get_enrollment(self, student_id: str, course_id: str) -> Enrollment | None:
        """Get the enrollment record, active or not."""
        query = select(Enrollment).where(
            Enrollment.student_id == student_id,
            Enrollment.course_id == course_id,
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def _get_course_aggregate(self, student_id: str, course_id: str) -> Progress | None:
        """Get the course-level progress row."""
        query = select(Progress).where(
            Progress.student_id == student_id,
            Progress.course_id == course_id,
            Progress.lesson_id.is_(None),
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    def _to_enrolled_course(
        self,
        enrollment: Enrollment,
        progress: Progress | None,
    ) -> EnrolledCourse:
        """Convert an enrollment and its aggregate progress to the response model."""
        course = CourseSummary.model_validate(enrollment.course)
        return EnrolledCourse(
            **course.model_dump(),
            progress=ProgressRecord.model_validate(progress) if progress else None,
            enrollment=EnrollmentInfo.model_validate(enrollment),
        )
