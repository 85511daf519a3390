# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for response envelopes and paging."""

import pytest

from schoolhub.models.common import ApiResponse, Page, PagedResponse, normalize_paging


class TestApiResponse:
    def test_ok(self) -> None:
        response = ApiResponse[int].ok(5, "done")

        assert response.model_dump() == {"success": True, "message": "done", "data": 5, "errors": []}

    def test_fail_defaults_errors_to_message(self) -> None:
        response = ApiResponse[None].fail("Class CLS01 not found")

        assert response.success is False
        assert response.data is None
        assert response.errors == ["Class CLS01 not found"]

    def test_fail_with_explicit_errors(self) -> None:
        response = ApiResponse[None].fail("Invalid data", ["name: too short", "cpf: bad format"])

        assert response.errors == ["name: too short", "cpf: bad format"]


class TestPagedResponse:
    @pytest.mark.parametrize(
        ("page_number", "page_size", "total", "pages", "has_previous", "has_next"),
        [
            (1, 10, 0, 0, False, False),
            (1, 10, 10, 1, False, False),
            (1, 10, 11, 2, False, True),
            (2, 10, 11, 2, True, False),
            (3, 5, 30, 6, True, True),
        ],
    )
    def test_counters(
        self,
        page_number: int,
        page_size: int,
        total: int,
        pages: int,
        has_previous: bool,
        has_next: bool,
    ) -> None:
        page = Page[int](items=[], page_number=page_number, page_size=page_size, total_records=total)

        response = PagedResponse[int].from_page(page)

        assert response.total_pages == pages
        assert response.has_previous_page is has_previous
        assert response.has_next_page is has_next


class TestNormalizePaging:
    @pytest.mark.parametrize(
        ("given", "expected"),
        [
            ((1, 10), (1, 10)),
            ((0, 10), (1, 10)),
            ((-4, 0), (1, 10)),
            ((2, 500), (2, 100)),
        ],
    )
    def test_normalize(self, given: tuple[int, int], expected: tuple[int, int]) -> None:
        assert normalize_paging(*given) == expected
