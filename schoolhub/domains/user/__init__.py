# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User domain package.

Example:
    >>> from schoolhub.domains.user import UserService
    >>> service = UserService(db)
    >>> user = await service.create_user(request)
"""

from schoolhub.domains.user.service import (
    UserAlreadyExistsError,
    UserNotFoundError,
    UserService,
)

__all__ = [
    "UserService",
    "UserNotFoundError",
    "UserAlreadyExistsError",
]
