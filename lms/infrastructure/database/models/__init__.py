# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy ORM models.

Importing this package registers every table on Base.metadata, which
Alembic autogenerate relies on.
"""

from lms.infrastructure.database.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from lms.infrastructure.database.models.course import (
    MATERIAL_TYPES,
    Course,
    Enrollment,
    Lesson,
    Material,
    Module,
    Progress,
)
from lms.infrastructure.database.models.grading import Assignment, Grade
from lms.infrastructure.database.models.user import Student, Teacher

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    "Student",
    "Teacher",
    "Course",
    "Module",
    "Lesson",
    "Enrollment",
    "Progress",
    "Material",
    "MATERIAL_TYPES",
    "Assignment",
    "Grade",
]
