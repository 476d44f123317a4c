# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course catalog service: course detail, materials and search."""

import logging

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from lms.core.exceptions import AuthorizationError, NotFoundError
from lms.infrastructure.database.models import Course, Enrollment, Lesson, Material, Module
from lms.models.common import PaginationInfo
from lms.models.course import (
    CourseDetail,
    CourseMaterial,
    CourseSearchItem,
    LessonSummary,
    ModuleDetail,
    TeacherName,
)

logger = logging.getLogger(__name__)


class CourseService:
    """Service for reading the course catalog.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize course service.

        Args:
            db: Async database session.
        """
        self.db = db

    async def get_course(self, course_id: str, student_id: str | None = None) -> CourseDetail:
        """Get an active course with its active modules and lessons.

        Args:
            course_id: Course identifier.
            student_id: When given, the student must be actively enrolled.

        Returns:
            Course detail with modules and lessons in order.

        Raises:
            NotFoundError: If the course is missing or inactive.
            AuthorizationError: If student_id is given and not enrolled.
        """
        query = (
            select(Course)
            .options(
                selectinload(Course.teacher),
                selectinload(Course.modules).selectinload(Module.lessons),
            )
            .where(Course.id == course_id)
        )
        result = await self.db.execute(query)
        course = result.scalar_one_or_none()

        if course is None or not course.is_active:
            raise NotFoundError("Course not found")

        if student_id is not None:
            await self._require_enrollment(student_id, course_id)

        modules = [
            ModuleDetail(
                id=module.id,
                title=module.title,
                description=module.description,
                order=module.order,
                lessons=[
                    LessonSummary.model_validate(lesson)
                    for lesson in sorted(module.lessons, key=lambda lesson: lesson.order)
                    if lesson.is_active
                ],
            )
            for module in sorted(course.modules, key=lambda module: module.order)
            if module.is_active
        ]

        return CourseDetail(
            id=course.id,
            title=course.title,
            description=course.description,
            course_code=course.course_code,
            start_date=course.start_date,
            end_date=course.end_date,
            teacher=self._teacher_name(course),
            modules=modules,
        )

    async def get_course_materials(self, course_id: str, student_id: str) -> list[CourseMaterial]:
        """List the active materials of a course the student is enrolled in.

        Materials of inactive lessons or modules are left out. Ordered by
        module, then lesson, then material order.

        Args:
            course_id: Course identifier.
            student_id: Student principal ID.

        Returns:
            Materials with their lesson and module titles.

        Raises:
            AuthorizationError: If the student is not actively enrolled.
        """
        await self._require_enrollment(student_id, course_id)

        result = await self.db.execute(
            select(Material, Lesson.title, Module.title)
            .join(Lesson, Material.lesson_id == Lesson.id)
            .join(Module, Lesson.module_id == Module.id)
            .where(
                Module.course_id == course_id,
                Module.is_active.is_(True),
                Lesson.is_active.is_(True),
                Material.is_active.is_(True),
            )
            .order_by(Module.order.asc(), Lesson.order.asc(), Material.order.asc())
        )

        return [
            CourseMaterial(
                id=material.id,
                lesson_id=material.lesson_id,
                title=material.title,
                description=material.description,
                material_type=material.material_type,
                url=material.url,
                content=material.content,
                order=material.order,
                lesson_title=lesson_title,
                module_title=module_title,
            )
            for material, lesson_title, module_title in result.all()
        ]

    async def search_courses(
        self,
        query: str,
        page: int = 1,
        limit: int = 20,
    ) -> tuple[list[CourseSearchItem], PaginationInfo]:
        """Search active courses by title, description or course code.

        Matching is a case-insensitive substring match. Results are ordered
        by title and carry the number of active enrollments.

        Args:
            query: Search text.
            page: 1-based page number.
            limit: Page size.

        Returns:
            Tuple of (matching courses, pagination).
        """
        pattern = f"%{query}%"
        conditions = (
            Course.is_active.is_(True),
            or_(
                Course.title.ilike(pattern),
                Course.description.ilike(pattern),
                Course.course_code.ilike(pattern),
            ),
        )

        count_result = await self.db.execute(
            select(func.count()).select_from(Course).where(*conditions)
        )
        total = count_result.scalar_one()

        result = await self.db.execute(
            select(Course)
            .options(selectinload(Course.teacher))
            .where(*conditions)
            .order_by(Course.title.asc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        courses = result.scalars().all()

        counts: dict[str, int] = {}
        if courses:
            count_rows = await self.db.execute(
                select(Enrollment.course_id, func.count())
                .where(
                    Enrollment.course_id.in_([course.id for course in courses]),
                    Enrollment.is_active.is_(True),
                )
                .group_by(Enrollment.course_id)
            )
            counts = {course_id: count for course_id, count in count_rows.all()}

        items = [
            CourseSearchItem(
                id=course.id,
                title=course.title,
                description=course.description,
                course_code=course.course_code,
                start_date=course.start_date,
                end_date=course.end_date,
                teacher=self._teacher_name(course),
                enrollment_count=counts.get(course.id, 0),
            )
            for course in courses
        ]

        logger.debug("Course search: query=%r, total=%d", query, total)
        return items, PaginationInfo.build(page=page, limit=limit, total=total)

    async def _require_enrollment(self, student_id: str, course_id: str) -> None:
        result = await self.db.execute(
            select(Enrollment).where(
                Enrollment.student_id == student_id,
                Enrollment.course_id == course_id,
            )
        )
        enrollment = result.scalar_one_or_none()
        if enrollment is None or not enrollment.is_active:
            raise AuthorizationError("Not enrolled in this course")

    @staticmethod
    def _teacher_name(course: Course) -> TeacherName | None:
        if course.teacher is None:
            return None
        return TeacherName.model_validate(course.teacher)
