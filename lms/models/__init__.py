# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pydantic request and response models for the HTTP API.

Fields are snake_case in Python and camelCase on the wire.
"""
