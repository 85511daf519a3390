# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication API endpoints.

This module provides endpoints for user authentication:
- POST /register - Create an account and receive a token
- POST /login - Exchange email and password for a token
- GET /me - Get current user info
- GET /validate - Echo the claims of the presented token

Example:
    POST /api/v1/auth/login
    Body:
        {"email": "admin@school.com", "password": "s3cret!"}
"""

import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.api.dependencies import get_db, get_jwt_manager, get_password_hasher, require_auth
from schoolhub.api.middleware.auth import CurrentUser
from schoolhub.api.middleware.rate_limit import RATE_LIMIT_LOGIN, limiter
from schoolhub.domains.auth.service import AuthService
from schoolhub.models.auth import LoginRequest, RegisterRequest, TokenClaims, TokenResponse
from schoolhub.models.common import ApiResponse
from schoolhub.models.user import UserResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(db: AsyncSession) -> AuthService:
    return AuthService(db, jwt_manager=get_jwt_manager(), hasher=get_password_hasher())


@router.post(
    "/register",
    response_model=ApiResponse[TokenResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Register account",
)
async def register(
    data: RegisterRequest,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[TokenResponse]:
    """Create an Admin or User account and sign a token for it.

    Student accounts are provisioned through student registration only.
    """
    token = await _get_service(db).register(data)
    return ApiResponse.ok(token, "User registered")


@router.post(
    "/login",
    response_model=ApiResponse[TokenResponse],
    summary="Login",
)
@limiter.limit(RATE_LIMIT_LOGIN)
async def login(
    request: Request,
    data: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[TokenResponse]:
    token = await _get_service(db).login(data)
    return ApiResponse.ok(token, "Login successful")


@router.get(
    "/me",
    response_model=ApiResponse[UserResponse],
    summary="Get current user",
)
async def get_me(
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[UserResponse]:
    """Return the account behind the bearer token."""
    user = await _get_service(db).get_current_user(current_user.email)
    return ApiResponse.ok(user)


@router.get(
    "/validate",
    response_model=ApiResponse[TokenClaims],
    summary="Validate token",
)
async def validate_token(
    current_user: CurrentUser = Depends(require_auth),
) -> ApiResponse[TokenClaims]:
    claims = TokenClaims(
        sub=current_user.id,
        email=current_user.email,
        name=current_user.name,
        role=current_user.role,
        exp=current_user.expires_at,
    )
    return ApiResponse.ok(claims, "Token is valid")
