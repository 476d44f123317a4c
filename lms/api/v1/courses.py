# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course API endpoints.

- GET /search - Search the active catalog
- GET /{course_id} - Course detail with modules and lessons
- GET /{course_id}/materials - Active materials of the course's lessons
- GET /{course_id}/progress - The student's progress rows in a course
- PUT /lessons/{lesson_id}/progress - Record lesson progress

All endpoints require a student principal.
"""

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query

from lms.api.dependencies import CourseServiceDep, ProgressServiceDep, StudentPrincipal
from lms.models.common import DataMessageResponse, DataResponse, PaginatedResponse
from lms.models.course import (
    CourseDetail,
    CourseMaterial,
    CourseSearchItem,
    ProgressRecord,
    UpdateProgressRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/search", response_model=PaginatedResponse[CourseSearchItem])
async def search_courses(
    student: StudentPrincipal,
    course_service: CourseServiceDep,
    q: Annotated[str, Query(min_length=1, max_length=100)],
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
) -> PaginatedResponse[CourseSearchItem]:
    """Search active courses by title, description or course code."""
    items, pagination = await course_service.search_courses(q, page=page, limit=limit)
    return PaginatedResponse[CourseSearchItem](data=items, pagination=pagination)


@router.put(
    "/lessons/{lesson_id}/progress",
    response_model=DataMessageResponse[ProgressRecord],
)
async def update_lesson_progress(
    lesson_id: UUID,
    data: UpdateProgressRequest,
    student: StudentPrincipal,
    progress_service: ProgressServiceDep,
) -> DataMessageResponse[ProgressRecord]:
    """Record lesson completion and refresh the course aggregate.

    Raises:
        NotFoundError: If the lesson does not exist.
        AuthorizationError: If the student is not enrolled in its course.
    """
    record = await progress_service.update_lesson_progress(
        lesson_id=str(lesson_id),
        student_id=student.id,
        completion_percentage=data.completion_percentage,
    )
    return DataMessageResponse[ProgressRecord](
        data=record,
        message="Progress updated successfully",
    )


@router.get("/{course_id}", response_model=DataResponse[CourseDetail])
async def get_course(
    course_id: UUID,
    student: StudentPrincipal,
    course_service: CourseServiceDep,
) -> DataResponse[CourseDetail]:
    """Get a course the student is enrolled in."""
    course = await course_service.get_course(str(course_id), student_id=student.id)
    return DataResponse[CourseDetail](data=course)


@router.get("/{course_id}/materials", response_model=DataResponse[list[CourseMaterial]])
async def get_course_materials(
    course_id: UUID,
    student: StudentPrincipal,
    course_service: CourseServiceDep,
) -> DataResponse[list[CourseMaterial]]:
    """List active materials of an enrolled course in syllabus order."""
    materials = await course_service.get_course_materials(str(course_id), student.id)
    return DataResponse[list[CourseMaterial]](data=materials)


@router.get("/{course_id}/progress", response_model=DataResponse[list[ProgressRecord]])
async def get_course_progress(
    course_id: UUID,
    student: StudentPrincipal,
    progress_service: ProgressServiceDep,
) -> DataResponse[list[ProgressRecord]]:
    """List the student's progress rows in a course, including the aggregate."""
    records = await progress_service.get_course_progress(str(course_id), student.id)
    return DataResponse[list[ProgressRecord]](data=records)
