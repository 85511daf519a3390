# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment domain package."""

from schoolhub.domains.enrollment.service import (
    AlreadyEnrolledError,
    ClassFullError,
    EnrollmentNotFoundError,
    EnrollmentService,
    MissingSearchFilterError,
)

__all__ = [
    "EnrollmentService",
    "EnrollmentNotFoundError",
    "AlreadyEnrolledError",
    "ClassFullError",
    "MissingSearchFilterError",
]
