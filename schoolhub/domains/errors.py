# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain error taxonomy shared by all services.

Every service exception derives from one of the categories below. The API
layer maps a category to an HTTP status and a failed envelope, so services
never deal with transport concerns.

Example:
    >>> class ClassNotFoundError(NotFoundError):
    ...     pass
    >>> raise ClassNotFoundError("Class CLS07 not found")
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Awaitable, Callable, TypeVar

from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

T = TypeVar("T")

STORAGE_ERROR_MESSAGE = "Could not access data store"


class DomainError(Exception):
    """Base class for errors raised by domain services.

    Attributes:
        message: Caller-facing description.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(DomainError):
    """Caller supplied data that the domain rejects."""

    pass


class NotFoundError(DomainError):
    """The referenced entity does not exist."""

    pass


class ConflictError(DomainError):
    """The operation would violate a uniqueness or capacity rule."""

    pass


class DomainInvariantError(DomainError):
    """Dependent records block the operation.

    Attributes:
        count: Number of dependent records found.
    """

    def __init__(self, message: str, count: int = 0) -> None:
        super().__init__(message)
        self.count = count


class AuthenticationError(DomainError):
    """Credentials were not accepted."""

    pass


class AuthorizationError(DomainError):
    """The caller is known but may not perform the operation."""

    pass


class StorageError(DomainError):
    """The data store failed. The message is generic and safe to show."""

    def __init__(self, message: str = STORAGE_ERROR_MESSAGE) -> None:
        super().__init__(message)


def storage_guard(
    operation: str,
    error_class: type[StorageError] = StorageError,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Translate SQLAlchemy failures raised by a service coroutine.

    The failure is logged with the operation name and call arguments and
    re-raised as ``error_class``. Domain errors pass through untouched.

    Args:
        operation: Name used in the log line.
        error_class: StorageError subclass to raise.

    Returns:
        Decorator for async service methods.
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            try:
                return await func(*args, **kwargs)
            except SQLAlchemyError as e:
                logger.exception(
                    "Storage failure in %s: args=%s, kwargs=%s",
                    operation,
                    args[1:],
                    kwargs,
                )
                raise error_class() from e

        return wrapper

    return decorator
