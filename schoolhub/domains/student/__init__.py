# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student domain package."""

from schoolhub.domains.student.service import (
    DuplicateCpfError,
    DuplicateRegistrationNumberError,
    StudentHasActiveEnrollmentsError,
    StudentNotFoundError,
    StudentService,
)

__all__ = [
    "StudentService",
    "StudentNotFoundError",
    "DuplicateCpfError",
    "DuplicateRegistrationNumberError",
    "StudentHasActiveEnrollmentsError",
]
