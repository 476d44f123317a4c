# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Progress domain: lesson progress and course completion."""

from lms.domains.progress.service import ProgressService, compute_course_completion

__all__ = ["ProgressService", "compute_course_completion"]
