# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Assignment and grade models."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lms.infrastructure.database.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from lms.utils.datetime import utc_now


class Assignment(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Graded work within a course.

    Attributes:
        max_points: Current maximum score; used as the GPA weight.
    """

    __tablename__ = "assignments"

    course_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("courses.id"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    due_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    max_points: Mapped[float] = mapped_column(Float, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class Grade(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A student's score on an assignment.

    Attributes:
        max_points: Maximum at grading time; used for the percentage.
    """

    __tablename__ = "grades"
    __table_args__ = (
        UniqueConstraint("student_id", "assignment_id", name="uq_grade_student_assignment"),
    )

    student_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("students.id"),
        nullable=False,
        index=True,
    )
    assignment_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("assignments.id"),
        nullable=False,
        index=True,
    )
    points: Mapped[float] = mapped_column(Float, nullable=False)
    max_points: Mapped[float] = mapped_column(Float, nullable=False)
    feedback: Mapped[str | None] = mapped_column(Text, nullable=True)
    graded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
    graded_by: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("teachers.id"),
        nullable=True,
    )

    assignment: Mapped[Assignment] = relationship()
