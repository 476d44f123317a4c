# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for rate limit keying."""

from types import SimpleNamespace

from starlette.requests import Request

from lms.api.middleware.rate_limit import get_ip_only, limiter


def _request(host: str) -> Request:
    return Request({"type": "http", "method": "POST", "path": "/api/v1/auth/login", "headers": [], "client": (host, 5123)})


class TestRateLimitKey:
    def test_keyed_by_ip(self) -> None:
        assert get_ip_only(_request("10.0.0.5")) == "10.0.0.5"

    def test_principal_ignored(self) -> None:
        request = _request("10.0.0.5")
        request.state.user = SimpleNamespace(id="student-1")

        assert get_ip_only(request) == "10.0.0.5"

    def test_disabled_under_test_settings(self) -> None:
        assert limiter.enabled is False
