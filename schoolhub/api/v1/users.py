# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User management API endpoints.

Users are addressed by id, email or document in the path.
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.api.dependencies import (
    get_db,
    get_password_generator,
    get_password_hasher,
    require_admin,
    require_auth,
)
from schoolhub.api.middleware.auth import CurrentUser
from schoolhub.domains.user.service import UserService
from schoolhub.models.common import ApiResponse
from schoolhub.models.user import UserCreateRequest, UserResponse, UserUpdateRequest

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(db: AsyncSession) -> UserService:
    return UserService(db, hasher=get_password_hasher(), generator=get_password_generator())


@router.post(
    "",
    response_model=ApiResponse[UserResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create user",
    description="Create a user account. Requires admin access.",
)
async def create_user(
    data: UserCreateRequest,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[UserResponse]:
    logger.info("Creating user: %s by %s", data.email, current_user.id)
    user = await _get_service(db).create_user(data)
    return ApiResponse.ok(user, "User created")


@router.get(
    "",
    response_model=ApiResponse[list[UserResponse]],
    summary="List users",
)
async def list_users(
    query: str | None = Query(None, description="Substring over name, email, document and role"),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[list[UserResponse]]:
    service = _get_service(db)
    if query and query.strip():
        users = await service.search_users(query.strip())
    else:
        users = await service.list_users()
    return ApiResponse.ok(users, f"{len(users)} user(s) found")


@router.get(
    "/{query}",
    response_model=ApiResponse[UserResponse],
    summary="Find user",
)
async def find_user(
    query: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[UserResponse]:
    user = await _get_service(db).find_user(query)
    return ApiResponse.ok(user)


@router.api_route(
    "/{query}",
    methods=["PUT", "PATCH"],
    response_model=ApiResponse[UserResponse],
    summary="Update user",
)
async def update_user(
    query: str,
    data: UserUpdateRequest,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[UserResponse]:
    user = await _get_service(db).update_user(query, data)
    return ApiResponse.ok(user, "User updated")


@router.delete(
    "/{query}",
    response_model=ApiResponse[None],
    summary="Delete user",
)
async def delete_user(
    query: str,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[None]:
    await _get_service(db).delete_user(query)
    return ApiResponse.ok(message="User deleted")
