# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for ORM model metadata and construction defaults."""

from lms.infrastructure.database.models import Base, Progress, Student


class TestMetadata:
    def test_all_tables_registered(self) -> None:
        assert set(Base.metadata.tables) == {
            "students",
            "teachers",
            "courses",
            "modules",
            "lessons",
            "enrollments",
            "progress",
            "materials",
            "assignments",
            "grades",
        }

    def test_one_course_aggregate_per_student(self) -> None:
        indexes = {index.name: index for index in Base.metadata.tables["progress"].indexes}

        aggregate = indexes["uq_progress_course_aggregate"]
        assert aggregate.unique
        assert [column.name for column in aggregate.columns] == ["student_id", "course_id"]

    def test_enrollment_unique_per_student_and_course(self) -> None:
        constraints = {c.name for c in Base.metadata.tables["enrollments"].constraints}

        assert "uq_enrollment_student_course" in constraints


class TestConstructionDefaults:
    def test_id_and_timestamps_assigned_before_flush(self) -> None:
        student = Student(
            email="ada@school.edu",
            first_name="Ada",
            last_name="Lovelace",
            student_id="STU12345",
            password_hash="x",
        )

        assert len(student.id) == 36
        assert student.created_at == student.updated_at
        assert student.created_at.tzinfo is not None

    def test_explicit_id_kept(self) -> None:
        progress = Progress(id="fixed", student_id="s", course_id="c")

        assert progress.id == "fixed"
