# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shared API model building blocks."""

from math import ceil
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys.

    Accepts either camelCase or snake_case on input and can be built
    directly from ORM objects.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(CamelModel):
    """Response carrying only a human-readable message."""

    message: str


class SuccessMessageResponse(CamelModel):
    """Success flag with a message and no data."""

    success: bool = True
    message: str


class DataResponse(CamelModel, Generic[T]):
    """Success envelope with a data payload."""

    success: bool = True
    data: T


class DataMessageResponse(CamelModel, Generic[T]):
    """Success envelope with a data payload and a message."""

    success: bool = True
    data: T
    message: str


class PaginationInfo(CamelModel):
    """Page position within a result set."""

    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "PaginationInfo":
        return cls(page=page, limit=limit, total=total, total_pages=ceil(total / limit) if limit else 0)


class PaginatedResponse(CamelModel, Generic[T]):
    """Success envelope for a page of items."""

    success: bool = True
    data: list[T]
    pagination: PaginationInfo
