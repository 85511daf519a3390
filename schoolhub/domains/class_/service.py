# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Class service for managing classes and their occupancy.

This module provides the ClassService class for:
- Class creation with generated codes
- Lookup, listing and search by code
- Room and status updates
- Guarded deletion
"""

from __future__ import annotations

import logging
from typing import Iterable
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.core.config.settings import EnrollmentSettings
from schoolhub.domains.class_.code_generator import ClassCodeGenerator
from schoolhub.domains.errors import (
    ConflictError,
    DomainInvariantError,
    NotFoundError,
    storage_guard,
)
from schoolhub.domains.patch import apply_changes, changed_fields
from schoolhub.domains.search import LIKE_ESCAPE, contains_pattern
from schoolhub.infrastructure.database.models import Class, Enrollment
from schoolhub.models.class_ import (
    ClassCreateRequest,
    ClassOccupancy,
    ClassResponse,
    ClassUpdateRequest,
)

logger = logging.getLogger(__name__)

OPEN_STATUS = "Open"
UPDATABLE_FIELDS = frozenset({"room", "status"})


class ClassNotFoundError(NotFoundError):
    """Raised when class is not found."""

    pass


class ClassCodeConflictError(ConflictError):
    """Raised when every generated code collided with a concurrent insert."""

    pass


class ClassHasEnrollmentsError(DomainInvariantError):
    """Raised when deleting a class that still has enrollments."""

    pass


def compute_occupancy(capacity: int, total_enrollments: int) -> ClassOccupancy:
    """Seats taken and left. ``available_seats`` may be negative."""
    return ClassOccupancy(
        total_enrollments=total_enrollments,
        available_seats=capacity - total_enrollments,
    )


class ClassService:
    """Service for managing classes.

    Attributes:
        db: Async database session.
        settings: Capacity default and code retry budget.
        codes: Class code generator.
    """

    def __init__(
        self,
        db: AsyncSession,
        settings: EnrollmentSettings | None = None,
        codes: ClassCodeGenerator | None = None,
    ) -> None:
        self.db = db
        self.settings = settings or EnrollmentSettings()
        self.codes = codes or ClassCodeGenerator(db)

    @storage_guard("create_class")
    async def create_class(self, request: ClassCreateRequest) -> ClassResponse:
        """Create a class with the next free code.

        A code taken by a concurrent insert is regenerated, up to
        ``settings.class_code_max_attempts`` times.

        Args:
            request: Class creation data.

        Returns:
            Created class response.

        Raises:
            ClassCodeConflictError: If every attempt collided.
            ClassCodeGenerationError: If existing codes cannot be read.
        """
        attempts = self.settings.class_code_max_attempts
        for attempt in range(1, attempts + 1):
            code = await self.codes.next_code()
            class_ = Class(
                class_code=code,
                name=request.name,
                description=request.description,
                capacity=self.settings.default_class_capacity,
                room=request.room,
                status=OPEN_STATUS,
            )
            self.db.add(class_)
            try:
                await self.db.commit()
            except IntegrityError:
                await self.db.rollback()
                logger.warning(
                    "Class code collision: code=%s, attempt=%s/%s",
                    code,
                    attempt,
                    attempts,
                )
                continue

            await self.db.refresh(class_)
            logger.info("Created class: code=%s, name=%s", class_.class_code, class_.name)
            return self._to_response(class_, 0)

        raise ClassCodeConflictError(
            f"Could not allocate a unique class code after {attempts} attempts"
        )

    @storage_guard("get_class_by_code")
    async def get_class_by_code(self, code: str) -> ClassResponse:
        """Get class by code.

        Raises:
            ClassNotFoundError: If class not found.
        """
        class_ = await self._get_by_code(code)
        total = await self._count_enrollments(class_.id)
        return self._to_response(class_, total)

    @storage_guard("list_classes")
    async def list_classes(self) -> list[ClassResponse]:
        """List every class ordered by code."""
        result = await self.db.execute(select(Class).order_by(Class.class_code))
        return await self._with_counts(result.scalars().all())

    @storage_guard("search_classes")
    async def search_classes(self, query: str) -> list[ClassResponse]:
        """Substring search on code, name, description and status."""
        pattern = contains_pattern(query)
        stmt = (
            select(Class)
            .where(
                or_(
                    Class.class_code.ilike(pattern, escape=LIKE_ESCAPE),
                    Class.name.ilike(pattern, escape=LIKE_ESCAPE),
                    Class.description.ilike(pattern, escape=LIKE_ESCAPE),
                    Class.status.ilike(pattern, escape=LIKE_ESCAPE),
                )
            )
            .order_by(Class.class_code)
        )
        result = await self.db.execute(stmt)
        return await self._with_counts(result.scalars().all())

    @storage_guard("update_class")
    async def update_class(self, code: str, request: ClassUpdateRequest) -> ClassResponse:
        """Overwrite room and status with the values the caller supplied.

        Raises:
            ClassNotFoundError: If class not found.
        """
        class_ = await self._get_by_code(code)
        changes = {k: v for k, v in changed_fields(request).items() if k in UPDATABLE_FIELDS}
        apply_changes(class_, changes)

        await self.db.commit()
        await self.db.refresh(class_)

        logger.info("Updated class: code=%s, fields=%s", code, sorted(changes))
        total = await self._count_enrollments(class_.id)
        return self._to_response(class_, total)

    @storage_guard("delete_class")
    async def delete_class(self, code: str) -> None:
        """Delete a class that has no enrollments.

        Raises:
            ClassNotFoundError: If class not found.
            ClassHasEnrollmentsError: If any enrollment, whatever its status,
                references the class.
        """
        class_ = await self._get_by_code(code)
        total = await self._count_enrollments(class_.id)
        if total > 0:
            raise ClassHasEnrollmentsError(
                f"Class {code} cannot be deleted: there are {total} enrollment(s) linked",
                count=total,
            )

        await self.db.delete(class_)
        await self.db.commit()
        logger.info("Deleted class: code=%s", code)

    async def get_model_by_code(self, code: str) -> Class:
        """Return the class row for a code.

        Raises:
            ClassNotFoundError: If class not found.
        """
        return await self._get_by_code(code)

    async def _get_by_code(self, code: str) -> Class:
        query = select(Class).where(Class.class_code == code)
        result = await self.db.execute(query)
        class_ = result.scalar_one_or_none()

        if not class_:
            raise ClassNotFoundError(f"Class {code} not found")

        return class_

    async def _count_enrollments(self, class_id: UUID) -> int:
        query = select(func.count()).select_from(Enrollment).where(Enrollment.class_id == class_id)
        result = await self.db.execute(query)
        return result.scalar() or 0

    async def _with_counts(self, classes: Iterable[Class]) -> list[ClassResponse]:
        classes = list(classes)
        if not classes:
            return []

        query = (
            select(Enrollment.class_id, func.count())
            .where(Enrollment.class_id.in_([c.id for c in classes]))
            .group_by(Enrollment.class_id)
        )
        result = await self.db.execute(query)
        counts = {class_id: total for class_id, total in result.all()}
        return [self._to_response(c, counts.get(c.id, 0)) for c in classes]

    def _to_response(self, class_: Class, total_enrollments: int) -> ClassResponse:
        occupancy = compute_occupancy(class_.capacity, total_enrollments)
        return ClassResponse(
            id=class_.id,
            class_code=class_.class_code,
            name=class_.name,
            description=class_.description,
            capacity=class_.capacity,
            room=class_.room,
            status=class_.status,
            created_at=class_.created_at,
            updated_at=class_.updated_at,
            total_enrollments=occupancy.total_enrollments,
            available_seats=occupancy.available_seats,
        )
