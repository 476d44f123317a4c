# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

Modules:
    auth: Registration, login, refresh, logout and identity.
    courses: Course catalog, detail and progress.
    students: Profile, enrollments and GPA.
"""

from fastapi import APIRouter

from lms.api.v1 import auth, courses, students

# Create the main v1 router
router = APIRouter(prefix="/api/v1")

router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
router.include_router(courses.router, prefix="/courses", tags=["Courses"])
router.include_router(students.router, prefix="/students", tags=["Students"])

__all__ = ["router"]
