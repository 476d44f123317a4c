# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course structure, enrollment and progress models.

A course is divided into ordered modules, each holding ordered lessons.
Progress rows exist per (student, course, lesson); the row with a null
lesson is the course-level aggregate.
"""

from datetime import date, datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lms.infrastructure.database.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from lms.infrastructure.database.models.user import Teacher
from lms.utils.datetime import utc_now

MATERIAL_TYPES = ("VIDEO", "DOCUMENT", "LINK", "INTERACTIVE", "QUIZ")


class Course(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A course taught by one teacher."""

    __tablename__ = "courses"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    course_code: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    teacher_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("teachers.id"),
        nullable=False,
        index=True,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    teacher: Mapped[Teacher] = relationship()
    modules: Mapped[list["Module"]] = relationship(
        back_populates="course",
        order_by="Module.order",
    )

    def __repr__(self) -> str:
        return f"<Course(id={self.id}, course_code={self.course_code})>"


class Module(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """An ordered section of a course."""

    __tablename__ = "modules"

    course_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    course: Mapped[Course] = relationship(back_populates="modules")
    lessons: Mapped[list["Lesson"]] = relationship(
        back_populates="module",
        order_by="Lesson.order",
    )


class Lesson(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A single lesson. It belongs to the course of its module."""

    __tablename__ = "lessons"

    module_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("modules.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    estimated_duration: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    module: Mapped[Module] = relationship(back_populates="lessons")


class Enrollment(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A student's membership in a course.

    Unenrolling deactivates the row; enrolling again reactivates it.
    """

    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("student_id", "course_id", name="uq_enrollment_student_course"),
    )

    student_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("students.id"),
        nullable=False,
        index=True,
    )
    course_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("courses.id"),
        nullable=False,
        index=True,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    enrolled_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    course: Mapped[Course] = relationship()


class Progress(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Completion of a lesson, or of the whole course when lesson_id is null.

    Attributes:
        completion_percentage: Value in [0, 100].
        completed_at: Set when the percentage reaches 100, cleared below it.
    """

    __tablename__ = "progress"
    __table_args__ = (
        UniqueConstraint(
            "student_id",
            "course_id",
            "lesson_id",
            name="uq_progress_student_course_lesson",
        ),
        # Unique constraints treat NULLs as distinct; one aggregate row per course
        Index(
            "uq_progress_course_aggregate",
            "student_id",
            "course_id",
            unique=True,
            postgresql_where=text("lesson_id IS NULL"),
        ),
        CheckConstraint(
            "completion_percentage >= 0 AND completion_percentage <= 100",
            name="valid_completion_percentage",
        ),
    )

    student_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("students.id"),
        nullable=False,
        index=True,
    )
    course_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("courses.id"),
        nullable=False,
        index=True,
    )
    lesson_id: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("lessons.id"),
        nullable=True,
    )
    completion_percentage: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    last_accessed: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    lesson: Mapped[Lesson | None] = relationship()


class Material(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A learning resource attached to a lesson.

    Attributes:
        material_type: One of MATERIAL_TYPES.
        url: Location of hosted content; content holds inline text.
    """

    __tablename__ = "materials"
    __table_args__ = (
        CheckConstraint(
            "material_type IN ('VIDEO', 'DOCUMENT', 'LINK', 'INTERACTIVE', 'QUIZ')",
            name="valid_material_type",
        ),
    )

    lesson_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("lessons.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    material_type: Mapped[str] = mapped_column(String(20), nullable=False)
    url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    lesson: Mapped[Lesson] = relationship()
