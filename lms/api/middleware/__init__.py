# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API middleware components.

Exports:
    AuthMiddleware: Verifies bearer access tokens.
    RequestContextMiddleware: Binds request-scoped logging context.
    limiter: slowapi rate limiter.
"""

from lms.api.middleware.auth import AuthMiddleware, CurrentUser, extract_token, get_current_user
from lms.api.middleware.rate_limit import RATE_LIMIT_AUTH, get_ip_only, limiter
from lms.api.middleware.request_context import RequestContextMiddleware

__all__ = [
    "AuthMiddleware",
    "CurrentUser",
    "RATE_LIMIT_AUTH",
    "RequestContextMiddleware",
    "extract_token",
    "get_current_user",
    "get_ip_only",
    "limiter",
]
