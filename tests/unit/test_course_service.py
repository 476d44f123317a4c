# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the course catalog service."""

import pytest
from sqlalchemy.dialects import postgresql

from lms.core.exceptions import AuthorizationError, NotFoundError
from lms.domains.course import CourseService
from lms.infrastructure.database.models import Course, Enrollment, Lesson, Material, Module, Teacher


@pytest.fixture
def course() -> Course:
    """A course with an inactive module and an inactive lesson mixed in."""
    teacher = Teacher(
        email="grace@school.edu",
        first_name="Grace",
        last_name="Hopper",
        teacher_id="TCH001",
        password_hash="x",
        is_active=True,
    )
    course = Course(title="Algorithms", course_code="CS201", teacher=teacher, is_active=True)
    second = Module(title="Graphs", order=2, is_active=True)
    first = Module(title="Sorting", order=1, is_active=True)
    hidden = Module(title="Draft", order=3, is_active=False)
    first.lessons = [
        Lesson(title="Merge sort", order=2, is_active=True),
        Lesson(title="Bubble sort", order=1, is_active=True),
        Lesson(title="Old notes", order=3, is_active=False),
    ]
    second.lessons = [Lesson(title="BFS", order=1, is_active=True)]
    course.modules = [second, hidden, first]
    return course


class TestGetCourse:
    """Tests for CourseService.get_course."""

    async def test_active_structure_in_order(self, mock_db, make_result, course):
        mock_db.execute.side_effect = [make_result(course)]

        detail = await CourseService(mock_db).get_course(course.id)

        assert detail.teacher.last_name == "Hopper"
        assert [m.title for m in detail.modules] == ["Sorting", "Graphs"]
        assert [lesson.title for lesson in detail.modules[0].lessons] == ["Bubble sort", "Merge sort"]

    async def test_inactive_course_not_found(self, mock_db, make_result, course):
        course.is_active = False
        mock_db.execute.side_effect = [make_result(course)]

        with pytest.raises(NotFoundError, match="Course not found"):
            await CourseService(mock_db).get_course(course.id)

    async def test_missing_course(self, mock_db, make_result):
        mock_db.execute.side_effect = [make_result(None)]

        with pytest.raises(NotFoundError):
            await CourseService(mock_db).get_course("missing")

    async def test_student_must_be_enrolled(self, mock_db, make_result, course):
        mock_db.execute.side_effect = [make_result(course), make_result(None)]

        with pytest.raises(AuthorizationError, match="Not enrolled in this course"):
            await CourseService(mock_db).get_course(course.id, student_id="student-1")

    async def test_enrolled_student(self, mock_db, make_result, course):
        enrollment = Enrollment(student_id="student-1", course_id=course.id, is_active=True)
        mock_db.execute.side_effect = [make_result(course), make_result(enrollment)]

        detail = await CourseService(mock_db).get_course(course.id, student_id="student-1")

        assert detail.id == course.id


class TestSearchCourses:
    """Tests for CourseService.search_courses."""

    async def test_search_with_enrollment_counts(self, mock_db, make_result, course):
        other = Course(title="Databases", course_code="CS301", is_active=True)
        mock_db.execute.side_effect = [
            make_result(2),
            make_result(scalars=[course, other]),
            make_result(rows=[(course.id, 3)]),
        ]

        items, pagination = await CourseService(mock_db).search_courses("cs", page=1, limit=1)

        assert [item.enrollment_count for item in items] == [3, 0]
        assert items[1].teacher is None
        assert pagination.total == 2
        assert pagination.total_pages == 2

    async def test_no_matches_skips_count_query(self, mock_db, make_result):
        mock_db.execute.side_effect = [make_result(0), make_result(scalars=[])]

        items, pagination = await CourseService(mock_db).search_courses("nothing")

        assert items == []
        assert pagination.total == 0
        assert mock_db.execute.await_count == 2


class TestGetCourseMaterials:
    """Tests for CourseService.get_course_materials."""

    async def test_materials_with_titles(self, mock_db, make_result):
        enrollment = Enrollment(student_id="student-1", course_id="course-1", is_active=True)
        slides = Material(
            lesson_id="lesson-1",
            title="Slides",
            material_type="DOCUMENT",
            url="https://files.school.edu/slides.pdf",
            order=1,
            is_active=True,
        )
        video = Material(lesson_id="lesson-2", title="Lecture", material_type="VIDEO", order=1, is_active=True)
        mock_db.execute.side_effect = [
            make_result(enrollment),
            make_result(rows=[(slides, "Bubble sort", "Sorting"), (video, "BFS", "Graphs")]),
        ]

        materials = await CourseService(mock_db).get_course_materials("course-1", "student-1")

        assert [m.title for m in materials] == ["Slides", "Lecture"]
        assert materials[0].lesson_title == "Bubble sort"
        assert materials[0].module_title == "Sorting"
        assert materials[1].material_type == "VIDEO"

    async def test_query_filters_and_orders(self, mock_db, make_result):
        enrollment = Enrollment(student_id="student-1", course_id="course-1", is_active=True)
        mock_db.execute.side_effect = [make_result(enrollment), make_result(rows=[])]

        await CourseService(mock_db).get_course_materials("course-1", "student-1")

        statement = mock_db.execute.await_args_list[1].args[0]
        sql = str(statement.compile(dialect=postgresql.dialect()))
        assert "materials.is_active IS true" in sql
        assert "lessons.is_active IS true" in sql
        assert 'ORDER BY modules."order" ASC, lessons."order" ASC, materials."order" ASC' in sql

    async def test_inactive_enrollment_rejected(self, mock_db, make_result):
        enrollment = Enrollment(student_id="student-1", course_id="course-1", is_active=False)
        mock_db.execute.side_effect = [make_result(enrollment)]

        with pytest.raises(AuthorizationError, match="Not enrolled in this course"):
            await CourseService(mock_db).get_course_materials("course-1", "student-1")

        assert mock_db.execute.await_count == 1
