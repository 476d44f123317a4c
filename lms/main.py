# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""ASGI entry point.

    uvicorn lms.main:app
"""

import uvicorn

from lms.api import create_app
from lms.core.config import get_settings

app = create_app()


def run() -> None:
    """Run the API server with uvicorn using API_* settings."""
    settings = get_settings()
    uvicorn.run(
        "lms.main:app",
        host=settings.api.host,
        port=settings.api.port,
        workers=1 if settings.api.reload else settings.api.workers,
        reload=settings.api.reload,
    )
