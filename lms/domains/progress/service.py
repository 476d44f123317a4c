# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Lesson and course progress tracking.

Each (student, course, lesson) has at most one progress row. The row with
a null lesson is the course-level aggregate, and after every lesson update
it equals the share of the course's active lessons the student has
completed:

    100 * |active lessons with a per-lesson record >= 100| / |active lessons|

Example:
    >>> service = ProgressService(db)
    >>> record = await service.update_lesson_progress(lesson_id, student_id, 100)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from lms.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from lms.infrastructure.database.models import Enrollment, Lesson, Module, Progress
from lms.models.course import ProgressRecord
from lms.utils.datetime import utc_now

logger = logging.getLogger(__name__)

COMPLETE = 100.0


def compute_course_completion(
    active_lesson_ids: Iterable[str],
    lesson_percentages: Mapping[str, float],
) -> float:
    """Compute course completion from per-lesson percentages.

    Only active lessons count, in both numerator and denominator. A lesson
    is complete when its percentage is at least 100.

    Args:
        active_lesson_ids: IDs of the course's active lessons.
        lesson_percentages: Per-lesson completion keyed by lesson ID.

    Returns:
        Completion in [0, 100]; 0.0 when there are no active lessons.
    """
    active = set(active_lesson_ids)
    if not active:
        return 0.0

    completed = sum(1 for lesson_id in active if lesson_percentages.get(lesson_id, 0.0) >= COMPLETE)
    return completed / len(active) * 100


def apply_completion(progress: Progress, percentage: float, now: datetime) -> None:
    """Set a row's percentage, last access and completion time.

    completed_at records the first time the row reached 100 and is cleared
    if the percentage drops below it.
    """
    progress.completion_percentage = percentage
    progress.last_accessed = now
    if percentage >= COMPLETE:
        progress.completed_at = progress.completed_at or now
    else:
        progress.completed_at = None


class ProgressService:
    """Service for recording lesson progress and reading course progress.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize progress service.

        Args:
            db: Async database session.
        """
        self.db = db

    async def update_lesson_progress(
        self,
        lesson_id: str,
        student_id: str,
        completion_percentage: float,
    ) -> ProgressRecord:
        """Record a student's progress on a lesson and refresh the course aggregate.

        The student's enrollment row is locked for the duration of the
        transaction, so concurrent updates for the same (student, course)
        recompute the aggregate one after another.

        Args:
            lesson_id: Lesson identifier.
            student_id: Student principal ID.
            completion_percentage: Value in [0, 100].

        Returns:
            The per-lesson progress record.

        Raises:
            ValidationError: If the percentage is outside [0, 100].
            NotFoundError: If the lesson does not exist.
            AuthorizationError: If the student is not actively enrolled in
                the lesson's course. Nothing is written in that case.
        """
        if not 0 <= completion_percentage <= COMPLETE:
            raise ValidationError("Completion percentage must be between 0 and 100")

        result = await self.db.execute(
            select(Lesson).options(selectinload(Lesson.module)).where(Lesson.id == lesson_id)
        )
        lesson = result.scalar_one_or_none()
        if lesson is None:
            raise NotFoundError("Lesson not found")

        course_id = lesson.module.course_id
        await self._lock_active_enrollment(student_id, course_id)

        now = utc_now()
        lesson_progress = await self._get_progress(student_id, course_id, lesson_id)
        if lesson_progress is None:
            lesson_progress = Progress(
                student_id=student_id,
                course_id=course_id,
                lesson_id=lesson_id,
            )
            self.db.add(lesson_progress)
        apply_completion(lesson_progress, completion_percentage, now)

        await self._recompute_course_progress(
            student_id,
            course_id,
            updated={lesson_id: completion_percentage},
            now=now,
        )

        await self.db.commit()

        logger.info(
            "Lesson progress updated: student=%s, lesson=%s, percentage=%s",
            student_id,
            lesson_id,
            completion_percentage,
        )

        record = ProgressRecord.model_validate(lesson_progress)
        record.lesson_title = lesson.title
        return record

    async def get_course_progress(self, course_id: str, student_id: str) -> list[ProgressRecord]:
        """List all progress rows for a student in a course.

        Includes the course-level aggregate (lesson_id null). Most recently
        accessed first.

        Args:
            course_id: Course identifier.
            student_id: Student principal ID.

        Returns:
            Progress records with lesson titles.

        Raises:
            AuthorizationError: If the student is not actively enrolled.
        """
        enrollment = await self._get_active_enrollment(student_id, course_id)
        if enrollment is None:
            raise AuthorizationError("Not enrolled in this course")

        query = (
            select(Progress)
            .options(selectinload(Progress.lesson))
            .where(Progress.student_id == student_id, Progress.course_id == course_id)
            .order_by(Progress.last_accessed.desc())
        )
        result = await self.db.execute(query)

        records = []
        for progress in result.scalars().all():
            record = ProgressRecord.model_validate(progress)
            record.lesson_title = progress.lesson.title if progress.lesson else None
            records.append(record)
        return records

    async def _recompute_course_progress(
        self,
        student_id: str,
        course_id: str,
        updated: Mapping[str, float],
        now: datetime,
    ) -> None:
        """Rewrite the course aggregate from the current per-lesson rows.

        `updated` holds percentages written in this transaction that a
        query may not see yet. No active lessons means no aggregate write.
        """
        result = await self.db.execute(
            select(Lesson.id)
            .join(Module, Lesson.module_id == Module.id)
            .where(Module.course_id == course_id, Lesson.is_active.is_(True))
        )
        active_lesson_ids = result.scalars().all()
        if not active_lesson_ids:
            return

        result = await self.db.execute(
            select(Progress.lesson_id, Progress.completion_percentage).where(
                Progress.student_id == student_id,
                Progress.course_id == course_id,
                Progress.lesson_id.is_not(None),
            )
        )
        percentages = {lesson_id: pct for lesson_id, pct in result.all()}
        percentages.update(updated)

        overall = compute_course_completion(active_lesson_ids, percentages)

        aggregate = await self._get_progress(student_id, course_id, None)
        if aggregate is None:
            aggregate = Progress(student_id=student_id, course_id=course_id, lesson_id=None)
            self.db.add(aggregate)
        apply_completion(aggregate, overall, now)

    async def _lock_active_enrollment(self, student_id: str, course_id: str) -> Enrollment:
        """Lock the active enrollment row for this transaction.

        Raises:
            AuthorizationError: If there is no active enrollment.
        """
        query = (
            select(Enrollment)
            .where(
                Enrollment.student_id == student_id,
                Enrollment.course_id == course_id,
                Enrollment.is_active.is_(True),
            )
            .with_for_update()
        )
        result = await self.db.execute(query)
        enrollment = result.scalar_one_or_none()
        if enrollment is None:
            raise AuthorizationError("Not enrolled in this course")
        return enrollment

    async def _get_active_enrollment(self, student_id: str, course_id: str) -> Enrollment | None:
        query = select(Enrollment).where(
            Enrollment.student_id == student_id,
            Enrollment.course_id == course_id,
            Enrollment.is_active.is_(True),
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def _get_progress(
        self,
        student_id: str,
        course_id: str,
        lesson_id: str | None,
    ) -> Progress | None:
        lesson_clause = Progress.lesson_id.is_(None) if lesson_id is None else Progress.lesson_id == lesson_id
        query = select(Progress).where(
            Progress.student_id == student_id,
            Progress.course_id == course_id,
            lesson_clause,
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()
