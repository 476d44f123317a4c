# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""GPA calculation on the 4.0 scale.

Each grade is converted to a percentage of the maximum recorded when it was
graded, mapped to grade points with a floor table, and weighted by the
assignment's current maximum points.
"""

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal
from typing import NamedTuple

# (minimum percentage, grade points), highest first
GRADE_POINT_SCALE: tuple[tuple[float, float], ...] = (
    (97.0, 4.0),
    (93.0, 3.7),
    (90.0, 3.3),
    (87.0, 3.0),
    (83.0, 2.7),
    (80.0, 2.3),
    (77.0, 2.0),
    (73.0, 1.7),
    (70.0, 1.3),
    (67.0, 1.0),
    (65.0, 0.7),
)

GPA_SCALE = "4.0"


class GradedWork(NamedTuple):
    """Inputs needed to weigh one grade.

    Attributes:
        points: Points awarded.
        max_points: Maximum at grading time.
        weight: The assignment's max points.
    """

    points: float
    max_points: float
    weight: float


def percentage_to_grade_points(percentage: float) -> float:
    """Map a percentage to grade points using the floor table.

    Args:
        percentage: Score as a percentage.

    Returns:
        Grade points in [0.0, 4.0].
    """
    for threshold, points in GRADE_POINT_SCALE:
        if percentage >= threshold:
            return points
    return 0.0


def calculate_gpa(grades: Iterable[GradedWork]) -> float:
    """Compute the weighted GPA, unrounded.

    Args:
        grades: Graded work to include.

    Returns:
        sum(grade points * weight) / sum(weight), or 0.0 when there are no
        grades or the total weight is zero.
    """
    total_points = 0.0
    total_weight = 0.0

    for grade in grades:
        percentage = grade.points / grade.max_points * 100 if grade.max_points else 0.0
        total_points += percentage_to_grade_points(percentage) * grade.weight
        total_weight += grade.weight

    if total_weight == 0:
        return 0.0
    return total_points / total_weight


def round_gpa(gpa: float) -> float:
    """Round half-up to two decimals."""
    return float(Decimal(str(gpa)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
