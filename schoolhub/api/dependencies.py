# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

This module provides dependency functions for FastAPI endpoints:
- Database sessions
- Authenticated users and role checks
- Shared credential helpers built from settings

Example:
    @router.get("/classes")
    async def list_classes(
        db: AsyncSession = Depends(get_db),
        current_user: CurrentUser = Depends(require_auth),
    ):
        ...
"""

import logging
from functools import lru_cache
from typing import AsyncGenerator

from fastapi import HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.api.middleware.auth import ADMIN_ROLE, CurrentUser, get_current_user
from schoolhub.core.config import get_settings
from schoolhub.domains.auth.jwt import JWTManager
from schoolhub.domains.auth.password import PasswordGenerator, PasswordHasher
from schoolhub.infrastructure.database.connection import (
    close_database,
    get_session,
    init_database,
)

logger = logging.getLogger(__name__)


async def init_db() -> None:
    """Initialize the database connection pool."""
    await init_database(get_settings())


async def close_db() -> None:
    """Close the database connection pool."""
    await close_database()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get a database session scoped to the request.

    Yields:
        AsyncSession for the request's unit of work.
    """
    async with get_session() as session:
        yield session


# =========================================================================
# Credential helpers
# =========================================================================


@lru_cache(maxsize=1)
def get_jwt_manager() -> JWTManager:
    return JWTManager(get_settings().jwt)


@lru_cache(maxsize=1)
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=get_settings().password.bcrypt_rounds)


@lru_cache(maxsize=1)
def get_password_generator() -> PasswordGenerator:
    """Shared generator, seeded only when PASSWORD_GENERATOR_SEED is set."""
    password_settings = get_settings().password
    return PasswordGenerator.seeded(
        password_settings.generator_seed,
        length=password_settings.generated_length,
    )


# =========================================================================
# Authentication Dependencies
# =========================================================================


def require_auth(request: Request) -> CurrentUser:
    """Require authenticated user.

    Raises:
        HTTPException: 401 if not authenticated.
    """
    user = get_current_user(request)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def require_admin(request: Request) -> CurrentUser:
    """Require a user with the Admin role.

    Raises:
        HTTPException: 401 if not authenticated, 403 if not an admin.
    """
    user = require_auth(request)
    if not user.is_admin:
        logger.warning("Admin access denied: user=%s, role=%s", user.id, user.role)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user


class RequireRole:
    """Dependency for requiring any of a set of roles.

    Example:
        @router.get("/me/enrollments")
        async def my_enrollments(
            user: CurrentUser = Depends(RequireRole("Student", "Admin")),
        ):
            ...
    """

    def __init__(self, *roles: str) -> None:
        self.roles = roles or (ADMIN_ROLE,)

    def __call__(self, request: Request) -> CurrentUser:
        user = require_auth(request)
        if not user.has_role(*self.roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires one of: {', '.join(self.roles)}",
            )
        return user
