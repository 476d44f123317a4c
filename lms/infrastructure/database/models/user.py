# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Principal models: students and teachers.

Both carry a bcrypt password hash and an is_active flag. Principals are
never hard-deleted; deactivation is how access is withdrawn.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from lms.infrastructure.database.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Student(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A student account.

    Attributes:
        email: Unique login email, stored lower-cased.
        student_id: Unique institutional identifier.
        last_login_at: Set on every successful login.
    """

    __tablename__ = "students"

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    student_id: Mapped[str] = mapped_column(String(20), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    @property
    def role(self) -> str:
        return "student"

    def __repr__(self) -> str:
        return f"<Student(id={self.id}, student_id={self.student_id})>"


class Teacher(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A teacher account. Teachers own courses."""

    __tablename__ = "teachers"

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    teacher_id: Mapped[str] = mapped_column(String(20), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    @property
    def role(self) -> str:
        return "teacher"

    def __repr__(self) -> str:
        return f"<Teacher(id={self.id}, teacher_id={self.teacher_id})>"
