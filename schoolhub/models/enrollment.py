# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment request and response models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class EnrollmentCreateRequest(BaseModel):
    """Enroll a student, found by document, registration number, email or name.

    The class code is optional. Without it the enrollment is not tied to a class.
    """

    student_document_or_ra: str = Field(..., min_length=3, max_length=50)
    class_code: str | None = Field(None, max_length=20)


class EnrollmentUpdateRequest(BaseModel):
    """Patch for an enrollment. Any status string is accepted."""

    status: str | None = Field(None, min_length=1, max_length=20)


class EnrollmentSearchParams(BaseModel):
    student_id: UUID | None = None
    class_id: UUID | None = None
    status: str | None = None

    def has_filters(self) -> bool:
        return any(value is not None for value in (self.student_id, self.class_id, self.status))


class EnrollmentResponse(BaseModel):
    id: UUID
    student_id: UUID
    class_id: UUID | None = None
    enrollment_date: datetime
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
    student_name: str | None = None
    class_name: str | None = None
