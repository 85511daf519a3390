# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment API endpoints.

This module provides endpoints for enrolling students into classes:
- POST / - Enroll a student (admin only)
- GET / - List enrollments
- GET /search - Filter by student, class or status
- GET /student/{term} - Enrollments of one student
- GET /class/{code} - Enrollments of one class
- GET /{id} - Get enrollment
- PUT, PATCH /{id} - Change status (admin only)
- DELETE /{id} - Delete enrollment (admin only)
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.api.dependencies import (
    get_db,
    get_password_generator,
    get_password_hasher,
    require_admin,
    require_auth,
)
from schoolhub.api.middleware.auth import CurrentUser
from schoolhub.core.config import get_settings
from schoolhub.domains.class_.service import ClassService
from schoolhub.domains.enrollment.service import EnrollmentService
from schoolhub.domains.student.service import StudentService
from schoolhub.domains.user.service import UserService
from schoolhub.models.common import ApiResponse
from schoolhub.models.enrollment import (
    EnrollmentCreateRequest,
    EnrollmentResponse,
    EnrollmentSearchParams,
    EnrollmentUpdateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(db: AsyncSession) -> EnrollmentService:
    settings = get_settings().enrollment
    users = UserService(db, hasher=get_password_hasher(), generator=get_password_generator())
    return EnrollmentService(
        db,
        settings=settings,
        students=StudentService(db, users=users),
        classes=ClassService(db, settings=settings),
    )


@router.post(
    "",
    response_model=ApiResponse[EnrollmentResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Enroll student",
    description="Enroll a student, found by document or RA, into a class. Requires admin access.",
)
async def create_enrollment(
    data: EnrollmentCreateRequest,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[EnrollmentResponse]:
    logger.info(
        "Enrolling student %s in class %s by %s",
        data.student_document_or_ra,
        data.class_code,
        current_user.id,
    )
    enrollment = await _get_service(db).create_enrollment(data)
    return ApiResponse.ok(enrollment, "Enrollment created")


@router.get(
    "",
    response_model=ApiResponse[list[EnrollmentResponse]],
    summary="List enrollments",
)
async def list_enrollments(
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[list[EnrollmentResponse]]:
    enrollments = await _get_service(db).list_enrollments()
    return ApiResponse.ok(enrollments, f"{len(enrollments)} enrollment(s) found")


@router.get(
    "/search",
    response_model=ApiResponse[list[EnrollmentResponse]],
    summary="Search enrollments",
    description="At least one of student_id, class_id or status is required.",
)
async def search_enrollments(
    params: EnrollmentSearchParams = Depends(),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[list[EnrollmentResponse]]:
    enrollments = await _get_service(db).search_enrollments(params)
    return ApiResponse.ok(enrollments, f"{len(enrollments)} enrollment(s) found")


@router.get(
    "/student/{term}",
    response_model=ApiResponse[list[EnrollmentResponse]],
    summary="List enrollments of a student",
)
async def list_student_enrollments(
    term: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[list[EnrollmentResponse]]:
    enrollments = await _get_service(db).list_student_enrollments(term)
    return ApiResponse.ok(enrollments, f"{len(enrollments)} enrollment(s) found")


@router.get(
    "/class/{code}",
    response_model=ApiResponse[list[EnrollmentResponse]],
    summary="List enrollments of a class",
)
async def list_class_enrollments(
    code: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[list[EnrollmentResponse]]:
    enrollments = await _get_service(db).list_class_enrollments(code)
    return ApiResponse.ok(enrollments, f"{len(enrollments)} enrollment(s) found")


@router.get(
    "/{enrollment_id}",
    response_model=ApiResponse[EnrollmentResponse],
    summary="Get enrollment",
)
async def get_enrollment(
    enrollment_id: UUID,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[EnrollmentResponse]:
    enrollment = await _get_service(db).get_enrollment(enrollment_id)
    return ApiResponse.ok(enrollment)


@router.api_route(
    "/{enrollment_id}",
    methods=["PUT", "PATCH"],
    response_model=ApiResponse[EnrollmentResponse],
    summary="Update enrollment",
)
async def update_enrollment(
    enrollment_id: UUID,
    data: EnrollmentUpdateRequest,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[EnrollmentResponse]:
    enrollment = await _get_service(db).update_enrollment(enrollment_id, data)
    return ApiResponse.ok(enrollment, "Enrollment updated")


@router.delete(
    "/{enrollment_id}",
    response_model=ApiResponse[None],
    summary="Delete enrollment",
)
async def delete_enrollment(
    enrollment_id: UUID,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[None]:
    await _get_service(db).delete_enrollment(enrollment_id)
    return ApiResponse.ok(message="Enrollment deleted")
