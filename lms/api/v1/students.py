# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student API endpoints.

- GET /profile, PUT /profile - Own profile
- GET /courses - Enrolled courses with course-level progress
- POST /courses/{course_id}/enroll, DELETE /courses/{course_id}/enroll
- GET /gpa - Grade point average on the 4.0 scale

All endpoints require a student principal and act on that student.
"""

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query

from lms.api.dependencies import (
    EnrollmentServiceDep,
    GradingServiceDep,
    StudentPrincipal,
    StudentServiceDep,
)
from lms.domains.grading.gpa import GPA_SCALE, round_gpa
from lms.models.common import (
    DataMessageResponse,
    DataResponse,
    PaginatedResponse,
    SuccessMessageResponse,
)
from lms.models.course import EnrolledCourse
from lms.models.grading import GPAResult
from lms.models.student import StudentProfile, UpdateProfileRequest

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/profile", response_model=DataResponse[StudentProfile])
async def get_profile(
    student: StudentPrincipal,
    student_service: StudentServiceDep,
) -> DataResponse[StudentProfile]:
    """Get the student's own profile."""
    profile = await student_service.get_student(student.id)
    return DataResponse[StudentProfile](data=profile)


@router.put("/profile", response_model=DataMessageResponse[StudentProfile])
async def update_profile(
    data: UpdateProfileRequest,
    student: StudentPrincipal,
    student_service: StudentServiceDep,
) -> DataMessageResponse[StudentProfile]:
    """Update the student's own profile.

    Raises:
        ConflictError: If the new email or student ID is taken.
    """
    profile = await student_service.update_student(student.id, data)
    return DataMessageResponse[StudentProfile](
        data=profile,
        message="Profile updated successfully",
    )


@router.get("/courses", response_model=PaginatedResponse[EnrolledCourse])
async def list_courses(
    student: StudentPrincipal,
    enrollment_service: EnrollmentServiceDep,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
) -> PaginatedResponse[EnrolledCourse]:
    """List active enrollments, newest first."""
    items, pagination = await enrollment_service.list_enrolled_courses(
        student.id,
        page=page,
        limit=limit,
    )
    return PaginatedResponse[EnrolledCourse](data=items, pagination=pagination)


@router.post("/courses/{course_id}/enroll", response_model=SuccessMessageResponse)
async def enroll(
    course_id: UUID,
    student: StudentPrincipal,
    enrollment_service: EnrollmentServiceDep,
) -> SuccessMessageResponse:
    """Enroll in a course.

    Raises:
        NotFoundError: If the course is missing or inactive.
        ConflictError: If already enrolled.
    """
    await enrollment_service.enroll(student.id, str(course_id))
    return SuccessMessageResponse(message="Successfully enrolled in course")


@router.delete("/courses/{course_id}/enroll", response_model=SuccessMessageResponse)
async def unenroll(
    course_id: UUID,
    student: StudentPrincipal,
    enrollment_service: EnrollmentServiceDep,
) -> SuccessMessageResponse:
    """Leave a course. Progress is kept."""
    await enrollment_service.unenroll(student.id, str(course_id))
    return SuccessMessageResponse(message="Successfully unenrolled from course")


@router.get("/gpa", response_model=DataResponse[GPAResult])
async def get_gpa(
    student: StudentPrincipal,
    grading_service: GradingServiceDep,
) -> DataResponse[GPAResult]:
    """Get the student's GPA, rounded to two decimals."""
    gpa = await grading_service.calculate_gpa(student.id)
    return DataResponse[GPAResult](data=GPAResult(gpa=round_gpa(gpa), scale=GPA_SCALE))
