# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Class request and response models."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

ClassStatus = Literal["Open", "Closed", "Cancelled"]


class ClassCreateRequest(BaseModel):
    """Request to create a class. The code, capacity and status are assigned."""

    name: str = Field(..., min_length=3, max_length=100)
    description: str | None = Field(None, max_length=500)
    room: str | None = Field(None, max_length=50)


class ClassUpdateRequest(BaseModel):
    """Patch for a class. Only room and status can change after creation."""

    room: str | None = Field(None, max_length=50)
    status: ClassStatus | None = None


class ClassUpdateByCodeRequest(ClassUpdateRequest):
    """Patch body that also names the class to update."""

    class_code: str = Field(..., min_length=1, max_length=20)


class ClassOccupancy(BaseModel):
    total_enrollments: int
    available_seats: int


class ClassResponse(BaseModel):
    """A class with its current occupancy.

    ``available_seats`` is ``capacity - total_enrollments`` and is not clamped,
    so it goes negative if capacity is lowered below current enrollment.
    """

    id: UUID
    class_code: str
    name: str
    description: str | None = None
    capacity: int
    room: str | None = None
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
    total_enrollments: int = 0
    available_seats: int = 0
