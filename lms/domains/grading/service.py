# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Grading service: loads a student's grades and computes their GPA."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from lms.domains.grading.gpa import GradedWork, calculate_gpa
from lms.infrastructure.database.models import Grade

logger = logging.getLogger(__name__)


class GradingService:
    """Service for grade-derived figures.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def calculate_gpa(self, student_id: str) -> float:
        """Compute a student's GPA over all their grades.

        Args:
            student_id: Student principal ID.

        Returns:
            Unrounded GPA on the 4.0 scale; 0.0 with no grades.
        """
        query = (
            select(Grade)
            .options(selectinload(Grade.assignment))
            .where(Grade.student_id == student_id)
        )
        result = await self.db.execute(query)
        grades = result.scalars().all()

        gpa = calculate_gpa(
            GradedWork(
                points=grade.points,
                max_points=grade.max_points,
                weight=grade.assignment.max_points,
            )
            for grade in grades
        )

        logger.debug("GPA computed: student=%s, grades=%d, gpa=%s", student_id, len(grades), gpa)
        return gpa
