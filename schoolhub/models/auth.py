# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication request and response models."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, Field

from schoolhub.models.user import UserResponse


class RegisterRequest(BaseModel):
    """Self-service registration. Students are created through the student endpoints."""

    full_name: str = Field(..., min_length=3, max_length=200)
    email: EmailStr = Field(..., max_length=200)
    password: str = Field(..., min_length=6, max_length=100)
    document: str = Field(..., min_length=3, max_length=20)
    role: Literal["Admin", "User"] = "User"


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=100)


class TokenResponse(BaseModel):
    """Issued bearer token and the account it belongs to."""

    token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: UserResponse


class TokenClaims(BaseModel):
    sub: str
    email: str
    name: str
    role: str
    exp: datetime
