# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication service: registration, login and current-user lookup.

Example:
    >>> auth_service = AuthService(db_session, jwt_manager)
    >>> issued = await auth_service.login("ana@school.com", "S3cret!pass")
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.domains.auth.jwt import JWTManager
from schoolhub.domains.auth.password import PasswordHasher
from schoolhub.domains.errors import (
    AuthenticationError,
    AuthorizationError,
    storage_guard,
)
from schoolhub.domains.user.service import UserNotFoundError, UserService
from schoolhub.infrastructure.database.models import User
from schoolhub.models.auth import LoginRequest, RegisterRequest, TokenResponse
from schoolhub.models.user import UserCreateRequest, UserResponse

logger = logging.getLogger(__name__)


class InvalidCredentialsError(AuthenticationError):
    """Raised when the email is unknown or the password does not match."""

    def __init__(self) -> None:
        super().__init__("Invalid email or password")


class AccountInactiveError(AuthorizationError):
    """Raised when the account has been deactivated."""

    pass


class AuthService:
    """Issues tokens for registered users.

    Attributes:
        _users: Identity store.
        _hasher: bcrypt hasher used to check login passwords.
        _jwt_manager: JWT token manager.
    """

    def __init__(
        self,
        db: AsyncSession,
        jwt_manager: JWTManager,
        hasher: PasswordHasher | None = None,
    ) -> None:
        self._hasher = hasher or PasswordHasher()
        self._users = UserService(db, hasher=self._hasher)
        self._jwt_manager = jwt_manager

    async def register(self, request: RegisterRequest) -> TokenResponse:
        """Create an account and sign a token for it.

        Raises:
            UserAlreadyExistsError: If the email or document is taken.
        """
        user = await self._users.create_user(
            UserCreateRequest(
                full_name=request.full_name,
                email=request.email,
                password=request.password,
                document=request.document,
                role=request.role,
            )
        )
        logger.info("Registered user: email=%s, role=%s", user.email, user.role)
        return self._issue(user)

    @storage_guard("login")
    async def login(self, request: LoginRequest) -> TokenResponse:
        """Check credentials and sign a token.

        Raises:
            InvalidCredentialsError: If the email or password is wrong.
            AccountInactiveError: If the account is deactivated.
        """
        user = await self._users.get_user_by_email(request.email)
        if user is None:
            logger.warning("Login attempt for unknown email: %s", request.email)
            raise InvalidCredentialsError()

        if not self._hasher.verify(request.password, user.password):
            logger.warning("Login attempt with wrong password: %s", request.email)
            raise InvalidCredentialsError()

        if not user.status_account:
            logger.warning("Login attempt on inactive account: %s", request.email)
            raise AccountInactiveError("Account is inactive")

        logger.info("User logged in: id=%s", user.id)
        return self._issue(UserService.to_response(user))

    @storage_guard("get_current_user")
    async def get_current_user(self, email: str) -> UserResponse:
        """Return the account behind a token's email claim.

        Raises:
            UserNotFoundError: If the account no longer exists.
        """
        user: User | None = await self._users.get_user_by_email(email)
        if user is None:
            raise UserNotFoundError("User not found")
        return UserService.to_response(user)

    def _issue(self, user: UserResponse) -> TokenResponse:
        issued = self._jwt_manager.create_access_token(
            user_id=user.id,
            email=user.email,
            name=user.full_name,
            role=user.role,
        )
        return TokenResponse(token=issued.token, expires_at=issued.expires_at, user=user)
