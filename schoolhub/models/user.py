# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User request and response models."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

UserRole = Literal["Admin", "Student", "User"]


class UserCreateRequest(BaseModel):
    """Request to create a user account."""

    full_name: str = Field(..., min_length=3, max_length=200)
    email: EmailStr = Field(..., max_length=200)
    password: str = Field(..., min_length=6, max_length=100)
    document: str = Field(..., min_length=3, max_length=20)
    role: UserRole = "User"
    status_account: bool = True


class UserUpdateRequest(BaseModel):
    """Partial update of a user. Only fields sent by the caller are applied."""

    full_name: str | None = Field(None, min_length=3, max_length=200)
    email: EmailStr | None = Field(None, max_length=200)
    password: str | None = Field(None, min_length=6, max_length=100)
    document: str | None = Field(None, min_length=3, max_length=20)
    role: UserRole | None = None
    status_account: bool | None = None


class UserResponse(BaseModel):
    """A user as exposed by the API. The password hash is never included."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    full_name: str
    email: str
    document: str
    role: str
    status_account: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None
