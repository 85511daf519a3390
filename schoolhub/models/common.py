# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Response envelopes shared by every endpoint.

Every operation answers with ``ApiResponse``. List endpoints that paginate
answer with ``PagedResponse``.
"""

import math
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


class ApiResponse(BaseModel, Generic[T]):
    """Uniform result envelope."""

    success: bool = True
    message: str = ""
    data: T | None = None
    errors: list[str] = Field(default_factory=list)

    @classmethod
    def ok(cls, data: T | None = None, message: str = "") -> "ApiResponse[T]":
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(cls, message: str, errors: list[str] | None = None) -> "ApiResponse[T]":
        return cls(success=False, message=message, errors=errors or [message])


class Page(BaseModel, Generic[T]):
    """One page of results as returned by a service."""

    items: list[T]
    page_number: int
    page_size: int
    total_records: int


class PagedResponse(BaseModel, Generic[T]):
    """Envelope for a paginated listing."""

    success: bool = True
    message: str = ""
    data: list[T] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    page_number: int
    page_size: int
    total_records: int
    total_pages: int
    has_previous_page: bool
    has_next_page: bool

    @classmethod
    def from_page(cls, page: Page[T], message: str = "") -> "PagedResponse[T]":
        """Build the envelope, deriving the page counters."""
        total_pages = math.ceil(page.total_records / page.page_size) if page.page_size else 0
        return cls(
            message=message,
            data=page.items,
            page_number=page.page_number,
            page_size=page.page_size,
            total_records=page.total_records,
            total_pages=total_pages,
            has_previous_page=page.page_number > 1,
            has_next_page=page.page_number < total_pages,
        )


def normalize_paging(page_number: int, page_size: int) -> tuple[int, int]:
    """Clamp paging input to a valid window.

    Page numbers below 1 become 1. Sizes below 1 fall back to the default
    and sizes above the maximum are capped.
    """
    if page_number < 1:
        page_number = 1
    if page_size < 1:
        page_size = DEFAULT_PAGE_SIZE
    return page_number, min(page_size, MAX_PAGE_SIZE)
