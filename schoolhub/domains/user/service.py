# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User service: the identity store behind authentication and students.

This module provides the UserService that handles:
- User CRUD operations with email and document uniqueness
- Provisioning of student accounts with generated passwords
- Lookup by id, email or document

Example:
    >>> user_service = UserService(db_session)
    >>> user = await user_service.create_user(request)
    >>> found = await user_service.find_user("ana@school.com")
"""

import logging
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.domains.auth.password import PasswordGenerator, PasswordHasher
from schoolhub.domains.errors import ConflictError, NotFoundError, storage_guard
from schoolhub.domains.patch import apply_changes, changed_fields
from schoolhub.domains.search import LIKE_ESCAPE, contains_pattern
from schoolhub.infrastructure.database.models import User
from schoolhub.models.user import UserCreateRequest, UserResponse, UserUpdateRequest

logger = logging.getLogger(__name__)

STUDENT_ROLE = "Student"


class UserNotFoundError(NotFoundError):
    """Raised when a user is not found."""

    pass


class UserAlreadyExistsError(ConflictError):
    """Raised when the email or document is already registered."""

    pass


class UserService:
    """Service for managing user accounts.

    Attributes:
        _db: Async database session.
        _hasher: bcrypt hasher for stored passwords.
        _generator: Password generator for provisioned accounts.
    """

    def __init__(
        self,
        db: AsyncSession,
        hasher: PasswordHasher | None = None,
        generator: PasswordGenerator | None = None,
    ) -> None:
        self._db = db
        self._hasher = hasher or PasswordHasher()
        self._generator = generator or PasswordGenerator()

    @storage_guard("create_user")
    async def create_user(self, request: UserCreateRequest) -> UserResponse:
        """Create a new user.

        Args:
            request: User creation request.

        Returns:
            Created user response.

        Raises:
            UserAlreadyExistsError: If the email, then the document, is taken.
        """
        await self._ensure_unique(email=request.email, document=request.document)

        user = User(
            full_name=request.full_name,
            email=request.email,
            password=self._hasher.hash(request.password),
            document=request.document,
            role=request.role,
            status_account=request.status_account,
        )
        self._db.add(user)
        await self._commit_unique()
        await self._db.refresh(user)

        logger.info("Created user: id=%s, email=%s, role=%s", user.id, user.email, user.role)
        return self.to_response(user)

    async def create_student_user(
        self,
        full_name: str,
        email: str,
        document: str,
    ) -> tuple[User, str]:
        """Stage an active Student account with a generated password.

        The row is flushed but not committed, so the caller decides whether
        the surrounding transaction goes through.

        Returns:
            The pending user and the plaintext password, which is not stored.

        Raises:
            UserAlreadyExistsError: If the email or document is taken.
        """
        await self._ensure_unique(email=email, document=document)

        password = self._generator.generate()
        user = User(
            full_name=full_name,
            email=email,
            password=self._hasher.hash(password),
            document=document,
            role=STUDENT_ROLE,
            status_account=True,
        )
        self._db.add(user)
        try:
            await self._db.flush()
        except IntegrityError as e:
            await self._db.rollback()
            raise UserAlreadyExistsError("Email or document already registered") from e
        return user, password

    @storage_guard("get_user")
    async def get_user(self, user_id: UUID) -> UserResponse:
        """Get a user by id.

        Raises:
            UserNotFoundError: If no user has this id.
        """
        user = await self._db.get(User, user_id)
        if not user:
            raise UserNotFoundError(f"User {user_id} not found")
        return self.to_response(user)

    async def get_user_by_email(self, email: str) -> User | None:
        """Return the user row for an email, or None."""
        result = await self._db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def get_user_by_document(self, document: str) -> User | None:
        result = await self._db.execute(select(User).where(User.document == document))
        return result.scalar_one_or_none()

    @storage_guard("user_exists")
    async def user_exists(self, email: str) -> bool:
        return await self.get_user_by_email(email) is not None

    @storage_guard("find_user")
    async def find_user(self, query: str) -> UserResponse:
        """Find a user by id, email or document, in that order.

        Raises:
            UserNotFoundError: If nothing matches.
        """
        return self.to_response(await self._find(query))

    @storage_guard("list_users")
    async def list_users(self) -> list[UserResponse]:
        result = await self._db.execute(select(User).order_by(User.full_name))
        return [self.to_response(u) for u in result.scalars().all()]

    @storage_guard("search_users")
    async def search_users(self, query: str) -> list[UserResponse]:
        """Substring search over name, email, document and role."""
        pattern = contains_pattern(query)
        stmt = (
            select(User)
            .where(
                or_(
                    User.full_name.ilike(pattern, escape=LIKE_ESCAPE),
                    User.email.ilike(pattern, escape=LIKE_ESCAPE),
                    User.document.ilike(pattern, escape=LIKE_ESCAPE),
                    User.role.ilike(pattern, escape=LIKE_ESCAPE),
                )
            )
            .order_by(User.full_name)
        )
        result = await self._db.execute(stmt)
        return [self.to_response(u) for u in result.scalars().all()]

    @storage_guard("update_user")
    async def update_user(self, query: str, request: UserUpdateRequest) -> UserResponse:
        """Apply a partial update to a user.

        Email and document are checked for uniqueness only when they change.
        A supplied password is re-hashed.

        Raises:
            UserNotFoundError: If the user does not exist.
            UserAlreadyExistsError: If the new email or document is taken.
        """
        user = await self._find(query)
        changes = changed_fields(request)

        new_email = changes.get("email")
        if new_email is not None and new_email != user.email:
            if await self.get_user_by_email(new_email):
                raise UserAlreadyExistsError("Email already registered")
        new_document = changes.get("document")
        if new_document is not None and new_document != user.document:
            if await self.get_user_by_document(new_document):
                raise UserAlreadyExistsError("Document already registered")

        if "password" in changes:
            changes["password"] = self._hasher.hash(changes["password"])

        apply_changes(user, changes)

        await self._commit_unique()
        await self._db.refresh(user)

        logger.info("Updated user: id=%s, fields=%s", user.id, sorted(changes))
        return self.to_response(user)

    @storage_guard("delete_user")
    async def delete_user(self, query: str) -> None:
        """Delete a user. Linked student records are removed by the FK cascade.

        Raises:
            UserNotFoundError: If the user does not exist.
        """
        user = await self._find(query)
        await self._db.delete(user)
        await self._db.commit()
        logger.info("Deleted user: id=%s", user.id)

    async def _find(self, query: str) -> User:
        query = query.strip()
        try:
            user_id = UUID(query)
        except ValueError:
            user_id = None

        if user_id is not None:
            user = await self._db.get(User, user_id)
            if user:
                return user

        user = await self.get_user_by_email(query)
        if user:
            return user
        user = await self.get_user_by_document(query)
        if user:
            return user
        raise UserNotFoundError(f"User {query} not found")

    async def _ensure_unique(self, email: str, document: str) -> None:
        if await self.user_exists(email):
            raise UserAlreadyExistsError("Email already registered")
        if await self.get_user_by_document(document):
            raise UserAlreadyExistsError("Document already registered")

    async def _commit_unique(self) -> None:
        try:
            await self._db.commit()
        except IntegrityError as e:
            await self._db.rollback()
            raise UserAlreadyExistsError("Email or document already registered") from e

    @staticmethod
    def to_response(user: User) -> UserResponse:
        return UserResponse(
            id=user.id,
            full_name=user.full_name,
            email=user.email,
            document=user.document,
            role=user.role,
            status_account=user.status_account,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )
