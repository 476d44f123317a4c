# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Declarative base and shared column mixins for all ORM models."""

from datetime import datetime
from typing import Any
from uuid import uuid4

from sqlalchemy import DateTime
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from lms.utils.datetime import utc_now


def generate_uuid() -> str:
    """Generate a new UUID string for primary keys."""
    return str(uuid4())


class Base(DeclarativeBase):
    """Declarative base shared by every table."""


class UUIDPrimaryKeyMixin:
    """Adds a UUID string primary key.

    The key is assigned at construction, so new objects can be referenced
    and serialized before the session flushes them.
    """

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=generate_uuid,
    )

    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("id", generate_uuid())
        super().__init__(**kwargs)


class TimestampMixin:
    """Adds created_at and updated_at columns maintained on write."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
    )

    def __init__(self, **kwargs: Any) -> None:
        now = utc_now()
        kwargs.setdefault("created_at", now)
        kwargs.setdefault("updated_at", now)
        super().__init__(**kwargs)
