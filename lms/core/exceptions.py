# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application exception hierarchy.

Every failure a service reports to a caller is one of these classes. The API
layer maps them to HTTP responses in a single place (lms.api.errors):

- LMSError: Base exception, 500
- ValidationError: Malformed input or invalid reference, 400
- AuthenticationError: Missing or bad credentials or tokens, 401
- AuthorizationError: Authenticated but not permitted, 403
- NotFoundError: Referenced record does not exist, 404
- ConflictError: Uniqueness violation, 409
- ConfigurationError: Server misconfiguration, 500
"""


class LMSError(Exception):
    """Base exception for all LMS errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional error context.
        status_code: HTTP status code the API layer responds with.
    """

    status_code: int = 500

    def __init__(self, message: str = "Internal server error", details: dict | None = None):
        """Initialize the error.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    @property
    def code(self) -> str:
        """Error code reported in the response envelope.

        Subclasses defined outside this module report the code of their
        nearest ancestor here, so e.g. token expiry surfaces as
        AuthenticationError.
        """
        for cls in type(self).__mro__:
            if cls.__module__ == __name__:
                return cls.__name__
        return LMSError.__name__

    def __str__(self) -> str:
        """Return string representation with details if available."""
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class ValidationError(LMSError):
    """Raised when input fails validation."""

    status_code = 400

    def __init__(self, message: str = "Validation failed", details: dict | None = None):
        super().__init__(message, details)


class AuthenticationError(LMSError):
    """Raised when credentials or tokens are missing, invalid or expired."""

    status_code = 401

    def __init__(self, message: str = "Authentication failed", details: dict | None = None):
        super().__init__(message, details)


class AuthorizationError(LMSError):
    """Raised when an authenticated principal may not perform an action."""

    status_code = 403

    def __init__(self, message: str = "Insufficient permissions", details: dict | None = None):
        super().__init__(message, details)


class NotFoundError(LMSError):
    """Raised when a referenced record does not exist."""

    status_code = 404

    def __init__(self, message: str = "Resource not found", details: dict | None = None):
        super().__init__(message, details)


class ConflictError(LMSError):
    """Raised on a uniqueness violation."""

    status_code = 409

    def __init__(self, message: str = "Resource already exists", details: dict | None = None):
        super().__init__(message, details)


class ConfigurationError(LMSError):
    """Raised when required configuration is missing or invalid."""

    status_code = 500

    def __init__(self, message: str = "Server misconfiguration", details: dict | None = None):
        super().__init__(message, details)
