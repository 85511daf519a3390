# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Class domain: code generation and class management."""

from schoolhub.domains.class_.code_generator import (
    ClassCodeGenerationError,
    ClassCodeGenerator,
    next_class_code,
)
from schoolhub.domains.class_.service import (
    ClassCodeConflictError,
    ClassHasEnrollmentsError,
    ClassNotFoundError,
    ClassService,
    compute_occupancy,
)

__all__ = [
    "ClassService",
    "ClassCodeGenerator",
    "next_class_code",
    "compute_occupancy",
    "ClassNotFoundError",
    "ClassHasEnrollmentsError",
    "ClassCodeConflictError",
    "ClassCodeGenerationError",
]
