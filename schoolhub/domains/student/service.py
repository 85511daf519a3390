# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student service for registering and managing students.

This module provides the StudentService class for:
- Student registration with account provisioning
- Lookup by id, registration number or free-form term
- Paginated listing and search
- Personal data updates
- Deletion guarded by active enrollments
"""

from __future__ import annotations

import logging
from typing import Iterable
from uuid import UUID

from sqlalchemy import ColumnElement, Select, case, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import contains_eager

from schoolhub.domains.errors import (
    ConflictError,
    DomainInvariantError,
    NotFoundError,
    storage_guard,
)
from schoolhub.domains.patch import apply_changes
from schoolhub.domains.search import LIKE_ESCAPE, contains_pattern
from schoolhub.domains.user.service import UserService
from schoolhub.infrastructure.database.models import ENROLLMENT_ACTIVE, Enrollment, Student, User
from schoolhub.models.common import Page, normalize_paging
from schoolhub.models.student import (
    StudentCreateRequest,
    StudentCreatedResponse,
    StudentResponse,
    StudentStatistics,
    StudentUpdateRequest,
    looks_like_cpf,
    normalize_cpf,
)

logger = logging.getLogger(__name__)


class StudentNotFoundError(NotFoundError):
    """Raised when student is not found."""

    pass


class DuplicateCpfError(ConflictError):
    """Raised when the CPF is already registered."""

    pass


class DuplicateRegistrationNumberError(ConflictError):
    """Raised when the registration number is already registered."""

    pass


class StudentHasActiveEnrollmentsError(DomainInvariantError):
    """Raised when deleting a student that still has Active enrollments."""

    pass


class StudentService:
    """Service for managing students.

    Every student is backed by a User with role Student, created in the same
    transaction as the student row.

    Attributes:
        db: Async database session.
        users: Identity store used to provision accounts.
    """

    def __init__(self, db: AsyncSession, users: UserService | None = None) -> None:
        self.db = db
        self.users = users or UserService(db)

    @storage_guard("create_student")
    async def create_student(self, request: StudentCreateRequest) -> StudentCreatedResponse:
        """Register a student and provision their account.

        The CPF is checked before the registration number, and the first
        conflict found is reported. The generated password is returned once
        and only its hash is stored.

        Args:
            request: Student registration data.

        Returns:
            The created student with the generated password.

        Raises:
            DuplicateCpfError: If the CPF is taken.
            DuplicateRegistrationNumberError: If the registration number is taken.
            UserAlreadyExistsError: If the email or CPF is taken by another account.
        """
        if await self._exists(Student.cpf == request.cpf):
            raise DuplicateCpfError("CPF already registered")
        if await self._exists(Student.registration_number == request.registration_number):
            raise DuplicateRegistrationNumberError("Registration number already registered")

        user, password = await self.users.create_student_user(
            full_name=request.full_name,
            email=request.email,
            document=request.cpf,
        )

        student = Student(
            user_id=user.id,
            registration_number=request.registration_number,
            full_name=request.full_name,
            cpf=request.cpf,
            birth_date=request.birth_date,
            address=request.address,
            phone_number=request.phone_number,
        )
        self.db.add(student)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise ConflictError("Student already registered") from e
        await self.db.refresh(student)

        logger.info(
            "Created student: ra=%s, user=%s",
            student.registration_number,
            user.id,
        )

        response = self._to_response(student, user, 0, 0)
        return StudentCreatedResponse(**response.model_dump(), generated_password=password)

    @storage_guard("get_student_by_registration_number")
    async def get_by_registration_number(self, registration_number: str) -> StudentResponse:
        """Get student by registration number.

        Raises:
            StudentNotFoundError: If student not found.
        """
        query = self._base_query().where(Student.registration_number == registration_number)
        student = await self._first(query)
        if not student:
            raise StudentNotFoundError(f"Student {registration_number} not found")
        return (await self._with_counts([student]))[0]

    @storage_guard("find_student")
    async def find_student(self, term: str) -> StudentResponse:
        """Find the first student matching a free-form term.

        Raises:
            StudentNotFoundError: If nothing matches.
        """
        student = await self.find_model(term)
        return (await self._with_counts([student]))[0]

    async def find_model(self, term: str) -> Student:
        """Resolve a term to a student row, user loaded.

        Registration number, CPF, account document and account email match
        exactly, and a CPF matches with or without punctuation. Student and
        account names match by substring. An exact identifier match always
        beats a name match. Ties go to the first by account name.

        Raises:
            StudentNotFoundError: If nothing matches.
        """
        term = term.strip()
        cpf = normalize_cpf(term) if looks_like_cpf(term) else term
        pattern = contains_pattern(term)
        exact = or_(
            Student.registration_number == term,
            Student.cpf == cpf,
            User.document == term,
            User.document == cpf,
            User.email == term,
        )
        query = (
            self._base_query()
            .where(
                or_(
                    exact,
                    User.full_name.ilike(pattern, escape=LIKE_ESCAPE),
                    Student.full_name.ilike(pattern, escape=LIKE_ESCAPE),
                )
            )
            .order_by(case((exact, 0), else_=1), User.full_name)
            .limit(1)
        )
        student = await self._first(query)
        if not student:
            raise StudentNotFoundError(f"Student {term} not found")
        return student

    @storage_guard("list_students")
    async def list_students(self, page_number: int = 1, page_size: int = 10) -> Page[StudentResponse]:
        """List students ordered by account name.

        Args:
            page_number: 1-based page number.
            page_size: Students per page.

        Returns:
            One page of students with the overall total.
        """
        return await self._paginate(self._base_query(), page_number, page_size)

    @storage_guard("search_students")
    async def search_students(
        self,
        query: str,
        page_number: int = 1,
        page_size: int = 10,
    ) -> Page[StudentResponse]:
        """Substring search over registration number, CPF, names, document and email."""
        query = query.strip()
        pattern = contains_pattern(query)
        cpf_pattern = contains_pattern(normalize_cpf(query)) if looks_like_cpf(query) else pattern
        stmt = self._base_query().where(
            or_(
                Student.registration_number.ilike(pattern, escape=LIKE_ESCAPE),
                Student.cpf.ilike(cpf_pattern, escape=LIKE_ESCAPE),
                Student.full_name.ilike(pattern, escape=LIKE_ESCAPE),
                User.document.ilike(pattern, escape=LIKE_ESCAPE),
                User.email.ilike(pattern, escape=LIKE_ESCAPE),
                User.full_name.ilike(pattern, escape=LIKE_ESCAPE),
            )
        )
        return await self._paginate(stmt, page_number, page_size)

    @storage_guard("update_student")
    async def update_student(
        self,
        student_id: UUID,
        request: StudentUpdateRequest,
    ) -> StudentResponse:
        """Overwrite the personal fields the caller supplied.

        Raises:
            StudentNotFoundError: If student not found.
        """
        student = await self._first(self._base_query().where(Student.id == student_id))
        if not student:
            raise StudentNotFoundError(f"Student {student_id} not found")

        user = student.user
        changes = apply_changes(student, request)

        await self.db.commit()
        await self.db.refresh(student, attribute_names=list(changes) + ["updated_at"])

        logger.info("Updated student: ra=%s, fields=%s", student.registration_number, sorted(changes))
        total, active = (await self._enrollment_counts([student.id])).get(student.id, (0, 0))
        return self._to_response(student, user, total, active)

    @storage_guard("delete_student")
    async def delete_student_by_query(self, term: str) -> None:
        """Delete the student a term resolves to.

        The student's enrollments go with it. The backing account is kept.

        Raises:
            StudentNotFoundError: If nothing matches.
            StudentHasActiveEnrollmentsError: If any enrollment is Active.
        """
        student = await self.find_model(term)

        query = select(func.count()).select_from(Enrollment).where(
            Enrollment.student_id == student.id,
            Enrollment.status == ENROLLMENT_ACTIVE,
        )
        active = (await self.db.execute(query)).scalar() or 0
        if active > 0:
            raise StudentHasActiveEnrollmentsError(
                f"Student {student.registration_number} cannot be deleted: "
                f"there are {active} active enrollment(s)",
                count=active,
            )

        await self.db.delete(student)
        await self.db.commit()
        logger.info("Deleted student: ra=%s", student.registration_number)

    @storage_guard("student_statistics")
    async def get_statistics(self) -> StudentStatistics:
        students = (await self.db.execute(select(func.count()).select_from(Student))).scalar() or 0
        enrollments = (await self.db.execute(select(func.count()).select_from(Enrollment))).scalar() or 0
        return StudentStatistics(total_students=students, total_enrollments=enrollments)

    def _base_query(self) -> Select:
        return select(Student).join(Student.user).options(contains_eager(Student.user))

    async def _first(self, query: Select) -> Student | None:
        result = await self.db.execute(query)
        return result.scalars().first()

    async def _exists(self, condition: ColumnElement[bool]) -> bool:
        result = await self.db.execute(select(Student.id).where(condition).limit(1))
        return result.scalar_one_or_none() is not None

    async def _paginate(self, query: Select, page_number: int, page_size: int) -> Page[StudentResponse]:
        page_number, page_size = normalize_paging(page_number, page_size)

        count_query = select(func.count()).select_from(query.subquery())
        total = (await self.db.execute(count_query)).scalar() or 0

        query = query.order_by(User.full_name).limit(page_size).offset((page_number - 1) * page_size)
        result = await self.db.execute(query)
        items = await self._with_counts(result.scalars().all())

        return Page(items=items, page_number=page_number, page_size=page_size, total_records=total)

    async def _enrollment_counts(self, student_ids: list[UUID]) -> dict[UUID, tuple[int, int]]:
        query = (
            select(
                Enrollment.student_id,
                func.count(),
                func.count().filter(Enrollment.status == ENROLLMENT_ACTIVE),
            )
            .where(Enrollment.student_id.in_(student_ids))
            .group_by(Enrollment.student_id)
        )
        result = await self.db.execute(query)
        return {student_id: (total, active) for student_id, total, active in result.all()}

    async def _with_counts(self, students: Iterable[Student]) -> list[StudentResponse]:
        students = list(students)
        if not students:
            return []
        counts = await self._enrollment_counts([s.id for s in students])
        return [self._to_response(s, s.user, *counts.get(s.id, (0, 0))) for s in students]

    def _to_response(self, student: Student, user: User, total: int, active: int) -> StudentResponse:
        return StudentResponse(
            id=student.id,
            user_id=student.user_id,
            registration_number=student.registration_number,
            full_name=student.full_name,
            cpf=student.cpf,
            birth_date=student.birth_date,
            address=student.address,
            phone_number=student.phone_number,
            created_at=student.created_at,
            updated_at=student.updated_at,
            user_full_name=user.full_name,
            user_email=user.email,
            user_document=user.document,
            user_status=user.status_account,
            total_enrollments=total,
            active_enrollments=active,
        )
