# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student request and response models."""

import re
from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

CPF_PATTERN = r"^\d{3}\.?\d{3}\.?\d{3}-?\d{2}$"


def normalize_cpf(value: str) -> str:
    """Reduce a CPF typed with or without punctuation to its 11 digits."""
    return re.sub(r"\D", "", value)


def looks_like_cpf(value: str) -> bool:
    return re.match(CPF_PATTERN, value) is not None


class StudentCreateRequest(BaseModel):
    """Request to register a student and provision their account.

    The CPF is stored as digits only, so ``111.111.111-11`` and
    ``11111111111`` are the same registration.
    """

    registration_number: str = Field(..., min_length=5, max_length=20)
    full_name: str = Field(..., min_length=3, max_length=200)
    cpf: str = Field(..., min_length=11, max_length=14, pattern=CPF_PATTERN)
    email: EmailStr = Field(..., max_length=200)
    birth_date: date | None = None
    address: str | None = Field(None, max_length=200)
    phone_number: str | None = Field(None, min_length=10, max_length=15)

    @field_validator("cpf")
    @classmethod
    def strip_cpf_punctuation(cls, v: str) -> str:
        return normalize_cpf(v)


class StudentUpdateRequest(BaseModel):
    """Patch for a student's personal data."""

    full_name: str | None = Field(None, min_length=3, max_length=200)
    birth_date: date | None = None
    address: str | None = Field(None, max_length=200)
    phone_number: str | None = Field(None, min_length=10, max_length=15)


class StudentResponse(BaseModel):
    """A student enriched with its account data and enrollment counters."""

    id: UUID
    user_id: UUID
    registration_number: str
    full_name: str
    cpf: str
    birth_date: date | None = None
    address: str | None = None
    phone_number: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    user_full_name: str | None = None
    user_email: str | None = None
    user_document: str | None = None
    user_status: bool | None = None
    total_enrollments: int = 0
    active_enrollments: int = 0


class StudentCreatedResponse(StudentResponse):
    """Returned once on creation. The generated password is not stored in plaintext."""

    generated_password: str


class StudentStatistics(BaseModel):
    total_students: int
    total_enrollments: int
