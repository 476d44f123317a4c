# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course, enrollment and progress models."""

from datetime import date, datetime

from pydantic import Field

from lms.models.common import CamelModel


class TeacherName(CamelModel):
    first_name: str
    last_name: str


class CourseSummary(CamelModel):
    """Catalog view of a course."""

    id: str
    title: str
    description: str | None = None
    course_code: str
    start_date: date | None = None
    end_date: date | None = None
    teacher: TeacherName | None = None


class CourseSearchItem(CourseSummary):
    enrollment_count: int = 0


class LessonSummary(CamelModel):
    id: str
    title: str
    order: int
    estimated_duration: int | None = None


class ModuleDetail(CamelModel):
    id: str
    title: str
    description: str | None = None
    order: int
    lessons: list[LessonSummary] = []


class CourseDetail(CourseSummary):
    """A course with its active modules and lessons, in order."""

    modules: list[ModuleDetail] = []


class ProgressRecord(CamelModel):
    """Completion of one lesson, or of the course when lesson_id is null."""

    id: str
    student_id: str
    course_id: str
    lesson_id: str | None = None
    lesson_title: str | None = None
    completion_percentage: float
    last_accessed: datetime
    completed_at: datetime | None = None


class EnrollmentInfo(CamelModel):
    enrolled_at: datetime
    is_active: bool


class EnrolledCourse(CourseSummary):
    """A course the student is enrolled in, with course-level progress."""

    progress: ProgressRecord | None = None
    enrollment: EnrollmentInfo


class UpdateProgressRequest(CamelModel):
    completion_percentage: float = Field(ge=0, le=100)


class CourseMaterial(CamelModel):
    """An active material with the titles of its lesson and module."""

    id: str
    lesson_id: str
    title: str
    description: str | None = None
    material_type: str
    url: str | None = None
    content: str | None = None
    order: int
    lesson_title: str
    module_title: str
