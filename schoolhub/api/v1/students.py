# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student registry API endpoints.

Students are addressed by a free-form term: registration number (RA), CPF,
account document, email or name. Registering a student provisions their
login account and answers with its generated password, once.
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
from schoolhub.domains.student.service import StudentService
from schoolhub.domains.user.service import UserService
from schoolhub.models.common import (
    DEFAULT_PAGE_SIZE,
    ApiResponse,
    PagedResponse,
    normalize_paging,
)
from schoolhub.models.student import (
    StudentCreateRequest,
    StudentCreatedResponse,
    StudentResponse,
    StudentStatistics,
    StudentUpdateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(db: AsyncSession) -> StudentService:
    users = UserService(db, hasher=get_password_hasher(), generator=get_password_generator())
    return StudentService(db, users=users)


@router.post(
    "",
    response_model=ApiResponse[StudentCreatedResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Register student",
    description="Register a student and provision a Student account. Requires admin access.",
)
async def create_student(
    data: StudentCreateRequest,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[StudentCreatedResponse]:
    """Register a student.

    The response message and ``generated_password`` carry the account's
    password. It is not stored in plaintext and cannot be retrieved later.
    """
    logger.info("Registering student: ra=%s by %s", data.registration_number, current_user.id)
    created = await _get_service(db).create_student(data)
    return ApiResponse.ok(
        created,
        f"Student registered. Generated password: {created.generated_password}",
    )


@router.get(
    "",
    response_model=PagedResponse[StudentResponse],
    summary="List students",
)
async def list_students(
    page_number: int = Query(1),
    page_size: int = Query(DEFAULT_PAGE_SIZE),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> PagedResponse[StudentResponse]:
    page_number, page_size = normalize_paging(page_number, page_size)
    page = await _get_service(db).list_students(page_number, page_size)
    return PagedResponse[StudentResponse].from_page(page, f"{page.total_records} student(s) found")


@router.get(
    "/search",
    response_model=PagedResponse[StudentResponse],
    summary="Search students",
)
async def search_students(
    query: str = Query(..., min_length=1),
    page_number: int = Query(1),
    page_size: int = Query(DEFAULT_PAGE_SIZE),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> PagedResponse[StudentResponse]:
    page_number, page_size = normalize_paging(page_number, page_size)
    page = await _get_service(db).search_students(query, page_number, page_size)
    return PagedResponse[StudentResponse].from_page(page, f"{page.total_records} student(s) found")


@router.get(
    "/statistics",
    response_model=ApiResponse[StudentStatistics],
    summary="Student statistics",
)
async def get_statistics(
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[StudentStatistics]:
    stats = await _get_service(db).get_statistics()
    return ApiResponse.ok(stats)


@router.get(
    "/ra/{registration_number}",
    response_model=ApiResponse[StudentResponse],
    summary="Get student by registration number",
)
async def get_by_registration_number(
    registration_number: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[StudentResponse]:
    student = await _get_service(db).get_by_registration_number(registration_number)
    return ApiResponse.ok(student)


@router.get(
    "/find/{term}",
    response_model=ApiResponse[StudentResponse],
    summary="Find student",
    description="Resolve a student by RA, CPF, document, email or name.",
)
async def find_student(
    term: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[StudentResponse]:
    student = await _get_service(db).find_student(term)
    return ApiResponse.ok(student)


@router.put(
    "/{query}",
    response_model=ApiResponse[StudentResponse],
    summary="Update student",
)
async def update_student(
    query: str,
    data: StudentUpdateRequest,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[StudentResponse]:
    service = _get_service(db)
    student = await service.find_model(query)
    updated = await service.update_student(student.id, data)
    return ApiResponse.ok(updated, "Student updated")


@router.delete(
    "/{query}",
    response_model=ApiResponse[None],
    summary="Delete student",
    description="Delete a student without active enrollments. The login account is kept.",
)
async def delete_student(
    query: str,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[None]:
    await _get_service(db).delete_student_by_query(query)
    return ApiResponse.ok(message="Student deleted")
