# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment service for managing student enrollments.

This module provides the EnrollmentService class for:
- Enrolling a student, optionally into a class
- Listing and searching enrollments
- Status changes and removal
"""

from __future__ import annotations

import logging
from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import contains_eager

from schoolhub.core.config.settings import EnrollmentSettings
from schoolhub.domains.class_.service import ClassService
from schoolhub.domains.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    storage_guard,
)
from schoolhub.domains.patch import apply_changes
from schoolhub.domains.student.service import StudentService
from schoolhub.infrastructure.database.models import (
    ENROLLMENT_ACTIVE,
    Class,
    Enrollment,
    Student,
    User,
)
from schoolhub.models.enrollment import (
    EnrollmentCreateRequest,
    EnrollmentResponse,
    EnrollmentSearchParams,
    EnrollmentUpdateRequest,
)
from schoolhub.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class EnrollmentNotFoundError(NotFoundError):
    """Raised when enrollment is not found."""

    pass


class AlreadyEnrolledError(ConflictError):
    """Raised when student is already enrolled in class."""

    pass


class ClassFullError(ConflictError):
    """Raised when the class has no seat left."""

    pass


class MissingSearchFilterError(ValidationError):
    """Raised when an enrollment search has no filter."""

    pass


class EnrollmentService:
    """Service for managing student enrollments.

    Attributes:
        db: Async database session.
        settings: Capacity enforcement switch.
        students: Resolves students from free-form terms.
        classes: Resolves classes from codes.
    """

    def __init__(
        self,
        db: AsyncSession,
        settings: EnrollmentSettings | None = None,
        students: StudentService | None = None,
        classes: ClassService | None = None,
    ) -> None:
        self.db = db
        self.settings = settings or EnrollmentSettings()
        self.students = students or StudentService(db)
        self.classes = classes or ClassService(db, settings=self.settings)

    @storage_guard("create_enrollment")
    async def create_enrollment(self, request: EnrollmentCreateRequest) -> EnrollmentResponse:
        """Enroll a student.

        Any existing enrollment of the student in the class blocks a new
        one, whatever its status. A cancelled enrollment is brought back
        through update_enrollment instead.

        Args:
            request: Student term and optional class code.

        Returns:
            The Active enrollment.

        Raises:
            StudentNotFoundError: If no student matches the term.
            ClassNotFoundError: If a class code was given and does not exist.
            AlreadyEnrolledError: If the student already has an enrollment in the class.
            ClassFullError: If capacity is enforced and the class is full.
        """
        student = await self.students.find_model(request.student_document_or_ra)

        class_: Class | None = None
        class_code = (request.class_code or "").strip()
        if class_code:
            class_ = await self.classes.get_model_by_code(class_code)
            await self._check_can_join(student, class_)

        enrollment = Enrollment(
            student_id=student.id,
            class_id=class_.id if class_ else None,
            enrollment_date=utc_now(),
            status=ENROLLMENT_ACTIVE,
        )
        self.db.add(enrollment)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise AlreadyEnrolledError("Student is already enrolled in this class") from e
        await self.db.refresh(enrollment)

        logger.info(
            "Enrolled student: student=%s, class=%s",
            student.registration_number,
            class_.class_code if class_ else None,
        )
        return self._to_response(enrollment, student, class_)

    @storage_guard("get_enrollment")
    async def get_enrollment(self, enrollment_id: UUID) -> EnrollmentResponse:
        """Get enrollment by ID.

        Raises:
            EnrollmentNotFoundError: If enrollment not found.
        """
        enrollment = await self._get_enrollment(enrollment_id)
        return self._to_response(enrollment, enrollment.student, enrollment.class_)

    @storage_guard("list_enrollments")
    async def list_enrollments(self) -> list[EnrollmentResponse]:
        query = self._base_query().order_by(Enrollment.enrollment_date)
        return await self._fetch(query)

    @storage_guard("list_student_enrollments")
    async def list_student_enrollments(self, term: str) -> list[EnrollmentResponse]:
        """List a student's enrollments, oldest first.

        Raises:
            StudentNotFoundError: If no student matches the term.
        """
        student = await self.students.find_model(term)
        query = (
            self._base_query()
            .where(Enrollment.student_id == student.id)
            .order_by(Enrollment.enrollment_date)
        )
        return await self._fetch(query)

    @storage_guard("list_class_enrollments")
    async def list_class_enrollments(self, class_code: str) -> list[EnrollmentResponse]:
        """List the enrollments of a class, oldest first.

        Raises:
            ClassNotFoundError: If class not found.
        """
        class_ = await self.classes.get_model_by_code(class_code)
        query = (
            self._base_query()
            .where(Enrollment.class_id == class_.id)
            .order_by(Enrollment.enrollment_date)
        )
        return await self._fetch(query)

    @storage_guard("search_enrollments")
    async def search_enrollments(self, params: EnrollmentSearchParams) -> list[EnrollmentResponse]:
        """Filter enrollments by student, class and status.

        Results are ordered by the student's account name. No match is an
        empty list.

        Raises:
            MissingSearchFilterError: If no filter was given.
        """
        if not params.has_filters():
            raise MissingSearchFilterError("At least one search filter is required")

        conditions = []
        if params.student_id is not None:
            conditions.append(Enrollment.student_id == params.student_id)
        if params.class_id is not None:
            conditions.append(Enrollment.class_id == params.class_id)
        if params.status is not None:
            conditions.append(Enrollment.status == params.status)

        query = (
            self._base_query()
            .join(Student.user)
            .where(*conditions)
            .order_by(User.full_name)
        )
        return await self._fetch(query)

    @storage_guard("update_enrollment")
    async def update_enrollment(
        self,
        enrollment_id: UUID,
        request: EnrollmentUpdateRequest,
    ) -> EnrollmentResponse:
        """Overwrite the status if one was supplied. Any transition is allowed.

        Raises:
            EnrollmentNotFoundError: If enrollment not found.
        """
        enrollment = await self._get_enrollment(enrollment_id)
        student, class_ = enrollment.student, enrollment.class_
        previous = enrollment.status
        apply_changes(enrollment, request)

        await self.db.commit()
        await self.db.refresh(enrollment, attribute_names=["status", "updated_at"])

        logger.info(
            "Updated enrollment: id=%s, status=%s -> %s",
            enrollment_id,
            previous,
            enrollment.status,
        )
        return self._to_response(enrollment, student, class_)

    @storage_guard("delete_enrollment")
    async def delete_enrollment(self, enrollment_id: UUID) -> None:
        """Permanently remove an enrollment record.

        Raises:
            EnrollmentNotFoundError: If enrollment not found.
        """
        enrollment = await self._get_enrollment(enrollment_id)

        await self.db.delete(enrollment)
        await self.db.commit()

        logger.info("Removed enrollment: id=%s", enrollment_id)

    async def _check_can_join(self, student: Student, class_: Class) -> None:
        query = select(Enrollment.student_id).where(Enrollment.class_id == class_.id)
        result = await self.db.execute(query)
        enrolled = result.scalars().all()

        if student.id in enrolled:
            raise AlreadyEnrolledError("Student is already enrolled in this class")

        if self.settings.enforce_capacity and len(enrolled) >= class_.capacity:
            raise ClassFullError(
                f"Class {class_.class_code} is full ({class_.capacity} seats)"
            )

    def _base_query(self) -> Select:
        return (
            select(Enrollment)
            .join(Enrollment.student)
            .outerjoin(Enrollment.class_)
            .options(contains_eager(Enrollment.student), contains_eager(Enrollment.class_))
        )

    async def _get_enrollment(self, enrollment_id: UUID) -> Enrollment:
        result = await self.db.execute(self._base_query().where(Enrollment.id == enrollment_id))
        enrollment = result.scalars().first()

        if not enrollment:
            raise EnrollmentNotFoundError(f"Enrollment {enrollment_id} not found")

        return enrollment

    async def _fetch(self, query: Select) -> list[EnrollmentResponse]:
        result = await self.db.execute(query)
        enrollments: Sequence[Enrollment] = result.scalars().all()
        return [self._to_response(e, e.student, e.class_) for e in enrollments]

    def _to_response(
        self,
        enrollment: Enrollment,
        student: Student,
        class_: Class | None,
    ) -> EnrollmentResponse:
        return EnrollmentResponse(
            id=enrollment.id,
            student_id=enrollment.student_id,
            class_id=enrollment.class_id,
            enrollment_date=enrollment.enrollment_date,
            status=enrollment.status,
            created_at=enrollment.created_at,
            updated_at=enrollment.updated_at,
            student_name=student.full_name,
            class_name=class_.class_code if class_ else None,
        )
