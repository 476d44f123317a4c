# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Grading models."""

from lms.models.common import CamelModel


class GPAResult(CamelModel):
    """Grade point average on the 4.0 scale, rounded to two decimals."""

    gpa: float
    scale: str = "4.0"
