# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy ORM models.

Importing this package registers every table on ``Base.metadata``, which the
Alembic environment relies on.
"""

from schoolhub.infrastructure.database.models.base import Base
from schoolhub.infrastructure.database.models.class_ import CLASS_STATUSES, Class
from schoolhub.infrastructure.database.models.enrollment import ENROLLMENT_ACTIVE, Enrollment
from schoolhub.infrastructure.database.models.student import Student
from schoolhub.infrastructure.database.models.user import User

__all__ = [
    "Base",
    "User",
    "Student",
    "Class",
    "Enrollment",
    "CLASS_STATUSES",
    "ENROLLMENT_ACTIVE",
]
