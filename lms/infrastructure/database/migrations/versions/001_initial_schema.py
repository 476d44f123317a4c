# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Initial LMS schema.

Revision ID: 001_initial
Revises: None
Create Date: 2025-01-15

Creates principals, course structure, enrollment, progress and grading
tables matching lms/infrastructure/database/models/.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id_column() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=False),
        server_default=sa.text("gen_random_uuid()"),
        primary_key=True,
    )


def _timestamp_columns() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    ]


def _fk(name: str, target: str, nullable: bool = False, ondelete: str | None = None) -> sa.Column:
    return sa.Column(
        name,
        postgresql.UUID(as_uuid=False),
        sa.ForeignKey(target, ondelete=ondelete),
        nullable=nullable,
    )


def upgrade() -> None:
    """Create LMS tables."""
    # ==========================================================================
    # Principals
    # ==========================================================================
    op.create_table(
        "students",
        _id_column(),
        sa.Column("email", sa.String(255), unique=True, nullable=False),
        sa.Column("first_name", sa.String(50), nullable=False),
        sa.Column("last_name", sa.String(50), nullable=False),
        sa.Column("student_id", sa.String(20), unique=True, nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamp_columns(),
    )
    op.create_index("ix_students_email", "students", ["email"])
    op.create_index("ix_students_student_id", "students", ["student_id"])

    op.create_table(
        "teachers",
        _id_column(),
        sa.Column("email", sa.String(255), unique=True, nullable=False),
        sa.Column("first_name", sa.String(50), nullable=False),
        sa.Column("last_name", sa.String(50), nullable=False),
        sa.Column("teacher_id", sa.String(20), unique=True, nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        *_timestamp_columns(),
    )
    op.create_index("ix_teachers_email", "teachers", ["email"])
    op.create_index("ix_teachers_teacher_id", "teachers", ["teacher_id"])

    # ==========================================================================
    # Course structure
    # ==========================================================================
    op.create_table(
        "courses",
        _id_column(),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("course_code", sa.String(20), unique=True, nullable=False),
        sa.Column("start_date", sa.Date, nullable=True),
        sa.Column("end_date", sa.Date, nullable=True),
        _fk("teacher_id", "teachers.id"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        *_timestamp_columns(),
    )
    op.create_index("ix_courses_teacher_id", "courses", ["teacher_id"])

    op.create_table(
        "modules",
        _id_column(),
        _fk("course_id", "courses.id", ondelete="CASCADE"),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("order", sa.Integer, nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        *_timestamp_columns(),
    )
    op.create_index("ix_modules_course_id", "modules", ["course_id"])

    op.create_table(
        "lessons",
        _id_column(),
        _fk("module_id", "modules.id", ondelete="CASCADE"),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("content", sa.Text, nullable=True),
        sa.Column("order", sa.Integer, nullable=False, server_default="0"),
        sa.Column("estimated_duration", sa.Integer, nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        *_timestamp_columns(),
    )
    op.create_index("ix_lessons_module_id", "lessons", ["module_id"])

    # ==========================================================================
    # Enrollment and progress
    # ==========================================================================
    op.create_table(
        "enrollments",
        _id_column(),
        _fk("student_id", "students.id"),
        _fk("course_id", "courses.id"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column(
            "enrolled_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        *_timestamp_columns(),
        sa.UniqueConstraint("student_id", "course_id", name="uq_enrollment_student_course"),
    )
    op.create_index("ix_enrollments_student_id", "enrollments", ["student_id"])
    op.create_index("ix_enrollments_course_id", "enrollments", ["course_id"])

    op.create_table(
        "progress",
        _id_column(),
        _fk("student_id", "students.id"),
        _fk("course_id", "courses.id"),
        _fk("lesson_id", "lessons.id", nullable=True),
        sa.Column("completion_percentage", sa.Float, nullable=False, server_default="0"),
        sa.Column(
            "last_accessed",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamp_columns(),
        sa.UniqueConstraint(
            "student_id",
            "course_id",
            "lesson_id",
            name="uq_progress_student_course_lesson",
        ),
        sa.CheckConstraint(
            "completion_percentage >= 0 AND completion_percentage <= 100",
            name="valid_completion_percentage",
        ),
    )
    op.create_index("ix_progress_student_id", "progress", ["student_id"])
    op.create_index("ix_progress_course_id", "progress", ["course_id"])
    op.create_index(
        "uq_progress_course_aggregate",
        "progress",
        ["student_id", "course_id"],
        unique=True,
        postgresql_where=sa.text("lesson_id IS NULL"),
    )

    # ==========================================================================
    # Grading
    # ==========================================================================
    op.create_table(
        "assignments",
        _id_column(),
        _fk("course_id", "courses.id"),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("max_points", sa.Float, nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        *_timestamp_columns(),
    )
    op.create_index("ix_assignments_course_id", "assignments", ["course_id"])

    op.create_table(
        "grades",
        _id_column(),
        _fk("student_id", "students.id"),
        _fk("assignment_id", "assignments.id"),
        sa.Column("points", sa.Float, nullable=False),
        sa.Column("max_points", sa.Float, nullable=False),
        sa.Column("feedback", sa.Text, nullable=True),
        sa.Column(
            "graded_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        _fk("graded_by", "teachers.id", nullable=True),
        *_timestamp_columns(),
        sa.UniqueConstraint("student_id", "assignment_id", name="uq_grade_student_assignment"),
    )
    op.create_index("ix_grades_student_id", "grades", ["student_id"])
    op.create_index("ix_grades_assignment_id", "grades", ["assignment_id"])


def downgrade() -> None:
    """Drop LMS tables."""
    op.drop_table("grades")
    op.drop_table("assignments")
    op.drop_table("progress")
    op.drop_table("enrollments")
    op.drop_table("lessons")
    op.drop_table("modules")
    op.drop_table("courses")
    op.drop_table("teachers")
    op.drop_table("students")
