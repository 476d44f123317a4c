# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication domain services.

Exports:
    PasswordHasher: Password hashing using bcrypt.
    JWTManager: JWT token creation and validation.
    SessionRegistry: Single valid refresh token per principal, in Redis.
    AuthService: Registration, login, refresh rotation and logout.
"""

from lms.domains.auth.jwt import JWTManager
from lms.domains.auth.password import PasswordHasher
from lms.domains.auth.service import AuthService
from lms.domains.auth.session_registry import SessionRegistry

__all__ = [
    "PasswordHasher",
    "JWTManager",
    "SessionRegistry",
    "AuthService",
]
