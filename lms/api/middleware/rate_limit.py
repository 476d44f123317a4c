# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Rate limiting using slowapi.

Only the authentication endpoints are limited, per client IP, since the
principal is not known before the credentials are checked.

Example:
    @router.post("/login")
    @limiter.limit(RATE_LIMIT_AUTH, key_func=get_ip_only)
    async def login(request: Request, ...):
        ...
"""

import logging

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from lms.core.config import get_settings

logger = logging.getLogger(__name__)


def get_ip_only(request: Request) -> str:
    """Get client IP address only.

    Args:
        request: HTTP request.

    Returns:
        IP address string.
    """
    return get_remote_address(request)


settings = get_settings()
limiter = Limiter(
    key_func=get_ip_only,
    storage_uri=settings.rate_limit.storage_uri,
    enabled=settings.rate_limit.enabled,
)

# Login, registration and refresh attempts per IP
RATE_LIMIT_AUTH = settings.rate_limit.auth_limit
