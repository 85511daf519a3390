# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pydantic request and response models for the API."""

from schoolhub.models.common import ApiResponse, Page, PagedResponse

__all__ = [
    "ApiResponse",
    "Page",
    "PagedResponse",
]
