# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Grading domain: GPA calculation."""

from lms.domains.grading.gpa import (
    GPA_SCALE,
    GradedWork,
    calculate_gpa,
    percentage_to_grade_points,
    round_gpa,
)
from lms.domains.grading.service import GradingService

__all__ = [
    "GPA_SCALE",
    "GradedWork",
    "GradingService",
    "calculate_gpa",
    "percentage_to_grade_points",
    "round_gpa",
]
