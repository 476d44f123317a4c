"""Student LMS Backend.

Learning-management backend providing student authentication with rotating
refresh tokens, lesson progress tracking and GPA computation.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
