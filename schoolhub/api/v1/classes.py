# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Class management API endpoints.

This module provides endpoints for class management:
- POST / - Create class (admin only)
- GET / - List classes
- GET /search - Search classes
- GET /code/{code} - Get class by code
- PUT / - Update class, code in body (admin only)
- DELETE /{code} - Delete class (admin only)

Classes are addressed by their generated code (CLS01, CLS02, ...).
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.api.dependencies import get_db, require_admin, require_auth
from schoolhub.api.middleware.auth import CurrentUser
from schoolhub.core.config import get_settings
from schoolhub.domains.class_.service import ClassService
from schoolhub.models.class_ import (
    ClassCreateRequest,
    ClassResponse,
    ClassUpdateByCodeRequest,
    ClassUpdateRequest,
)
from schoolhub.models.common import ApiResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(db: AsyncSession) -> ClassService:
    """Create class service instance."""
    return ClassService(db, settings=get_settings().enrollment)


@router.post(
    "",
    response_model=ApiResponse[ClassResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create class",
    description="Create a new class with the next free code. Requires admin access.",
)
async def create_class(
    data: ClassCreateRequest,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[ClassResponse]:
    """Create a new class.

    Args:
        data: Class creation request.
        current_user: Authenticated admin.
        db: Database session.

    Returns:
        The created class with its generated code.
    """
    logger.info("Creating class: %s by %s", data.name, current_user.id)
    created = await _get_service(db).create_class(data)
    return ApiResponse.ok(created, f"Class {created.class_code} created")


@router.get(
    "",
    response_model=ApiResponse[list[ClassResponse]],
    summary="List classes",
)
async def list_classes(
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[list[ClassResponse]]:
    classes = await _get_service(db).list_classes()
    return ApiResponse.ok(classes, f"{len(classes)} class(es) found")


@router.get(
    "/search",
    response_model=ApiResponse[list[ClassResponse]],
    summary="Search classes",
    description="Substring search over code, name, description and status.",
)
async def search_classes(
    query: str = Query(..., min_length=1),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[list[ClassResponse]]:
    classes = await _get_service(db).search_classes(query)
    return ApiResponse.ok(classes, f"{len(classes)} class(es) found")


@router.get(
    "/code/{code}",
    response_model=ApiResponse[ClassResponse],
    summary="Get class by code",
)
async def get_class_by_code(
    code: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[ClassResponse]:
    found = await _get_service(db).get_class_by_code(code)
    return ApiResponse.ok(found)


@router.put(
    "",
    response_model=ApiResponse[ClassResponse],
    summary="Update class",
    description="Update the room and status of the class named in the body. Requires admin access.",
)
async def update_class(
    data: ClassUpdateByCodeRequest,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[ClassResponse]:
    patch = ClassUpdateRequest(**data.model_dump(exclude={"class_code"}, exclude_unset=True))
    updated = await _get_service(db).update_class(data.class_code, patch)
    return ApiResponse.ok(updated, f"Class {updated.class_code} updated")


@router.delete(
    "/{code}",
    response_model=ApiResponse[None],
    summary="Delete class",
    description="Delete a class that has no enrollments. Requires admin access.",
)
async def delete_class(
    code: str,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[None]:
    await _get_service(db).delete_class(code)
    logger.info("Class %s deleted by %s", code, current_user.id)
    return ApiResponse.ok(message=f"Class {code} deleted")
