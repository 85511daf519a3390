# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for User service."""

import random
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError

from schoolhub.domains.auth.password import PasswordGenerator, PasswordHasher, is_password_strong
from schoolhub.domains.user.service import (
    UserAlreadyExistsError,
    UserNotFoundError,
    UserService,
)
from schoolhub.models.user import UserCreateRequest, UserUpdateRequest


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def user_service(mock_db: AsyncMock, hasher: PasswordHasher) -> UserService:
    """Create user service with mock database."""
    return UserService(
        db=mock_db,
        hasher=hasher,
        generator=PasswordGenerator(rng=random.Random(3)),
    )


@pytest.fixture
def create_request() -> UserCreateRequest:
    return UserCreateRequest(
        full_name="Carla Admin",
        email="carla@school.com",
        password="s3cret!pw",
        document="98765432100",
        role="Admin",
    )


def _found(value) -> MagicMock:
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


async def _fill_server_defaults(obj, *args, **kwargs) -> None:
    obj.id = uuid4()
    obj.created_at = datetime.now(timezone.utc)
    obj.updated_at = datetime.now(timezone.utc)


class TestCreateUser:
    @pytest.mark.asyncio
    async def test_create_user_hashes_password(
        self,
        user_service: UserService,
        mock_db: AsyncMock,
        hasher: PasswordHasher,
        create_request: UserCreateRequest,
    ) -> None:
        mock_db.execute.side_effect = [_found(None), _found(None)]
        mock_db.refresh.side_effect = _fill_server_defaults

        result = await user_service.create_user(create_request)

        stored = mock_db.add.call_args.args[0]
        assert stored.password != "s3cret!pw"
        assert hasher.verify("s3cret!pw", stored.password)
        assert result.email == "carla@school.com"
        assert result.role == "Admin"
        assert not hasattr(result, "password")

    @pytest.mark.asyncio
    async def test_duplicate_email_reported_first(
        self,
        user_service: UserService,
        mock_db: AsyncMock,
        sample_user: MagicMock,
        create_request: UserCreateRequest,
    ) -> None:
        mock_db.execute.side_effect = [_found(sample_user), _found(sample_user)]

        with pytest.raises(UserAlreadyExistsError, match="Email already registered"):
            await user_service.create_user(create_request)

        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_duplicate_document(
        self,
        user_service: UserService,
        mock_db: AsyncMock,
        sample_user: MagicMock,
        create_request: UserCreateRequest,
    ) -> None:
        mock_db.execute.side_effect = [_found(None), _found(sample_user)]

        with pytest.raises(UserAlreadyExistsError, match="Document already registered"):
            await user_service.create_user(create_request)

    @pytest.mark.asyncio
    async def test_unique_violation_on_commit(
        self,
        user_service: UserService,
        mock_db: AsyncMock,
        create_request: UserCreateRequest,
    ) -> None:
        mock_db.execute.side_effect = [_found(None), _found(None)]
        mock_db.commit.side_effect = IntegrityError("INSERT", {}, Exception("duplicate"))

        with pytest.raises(UserAlreadyExistsError):
            await user_service.create_user(create_request)

        mock_db.rollback.assert_awaited_once()


class TestCreateStudentUser:
    @pytest.mark.asyncio
    async def test_provisions_active_student_account(
        self,
        user_service: UserService,
        mock_db: AsyncMock,
        hasher: PasswordHasher,
    ) -> None:
        mock_db.execute.side_effect = [_found(None), _found(None)]

        user, password = await user_service.create_student_user(
            full_name="Ana Souza",
            email="ana@school.com",
            document="123.456.789-09",
        )

        assert user.role == "Student"
        assert user.status_account is True
        assert user.document == "123.456.789-09"
        assert is_password_strong(password)
        assert hasher.verify(password, user.password)
        mock_db.flush.assert_awaited_once()
        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_flush_conflict(self, user_service: UserService, mock_db: AsyncMock) -> None:
        mock_db.execute.side_effect = [_found(None), _found(None)]
        mock_db.flush.side_effect = IntegrityError("INSERT", {}, Exception("duplicate"))

        with pytest.raises(UserAlreadyExistsError):
            await user_service.create_student_user("Ana Souza", "ana@school.com", "12345678909")


class TestFindUser:
    @pytest.mark.asyncio
    async def test_find_by_id(self, user_service: UserService, mock_db: AsyncMock, sample_user: MagicMock) -> None:
        mock_db.get.return_value = sample_user

        result = await user_service.find_user(str(sample_user.id))

        assert result.id == sample_user.id
        mock_db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_find_by_email(self, user_service: UserService, mock_db: AsyncMock, sample_user: MagicMock) -> None:
        mock_db.execute.return_value = _found(sample_user)

        result = await user_service.find_user("ana@school.com")

        assert result.email == "ana@school.com"
        mock_db.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_find_by_document(
        self,
        user_service: UserService,
        mock_db: AsyncMock,
        sample_user: MagicMock,
    ) -> None:
        mock_db.execute.side_effect = [_found(None), _found(sample_user)]

        result = await user_service.find_user("123.456.789-09")

        assert result.document == "123.456.789-09"

    @pytest.mark.asyncio
    async def test_not_found(self, user_service: UserService, mock_db: AsyncMock) -> None:
        mock_db.execute.side_effect = [_found(None), _found(None)]

        with pytest.raises(UserNotFoundError):
            await user_service.find_user("nobody@school.com")

    @pytest.mark.asyncio
    async def test_get_user_by_id(self, user_service: UserService, mock_db: AsyncMock, sample_user: MagicMock) -> None:
        mock_db.get.return_value = sample_user

        result = await user_service.get_user(sample_user.id)

        assert result.id == sample_user.id
        assert result.email == "ana@school.com"

    @pytest.mark.asyncio
    async def test_get_user_missing(self, user_service: UserService, mock_db: AsyncMock) -> None:
        with pytest.raises(UserNotFoundError):
            await user_service.get_user(uuid4())

    @pytest.mark.asyncio
    async def test_user_exists(self, user_service: UserService, mock_db: AsyncMock, sample_user: MagicMock) -> None:
        mock_db.execute.side_effect = [_found(sample_user), _found(None)]

        assert await user_service.user_exists("ana@school.com") is True
        assert await user_service.user_exists("nobody@school.com") is False


class TestUpdateUser:
    @pytest.mark.asyncio
    async def test_update_rehashes_password(
        self,
        user_service: UserService,
        mock_db: AsyncMock,
        hasher: PasswordHasher,
        sample_user: MagicMock,
    ) -> None:
        mock_db.get.return_value = sample_user

        await user_service.update_user(str(sample_user.id), UserUpdateRequest(password="n3w-pass!"))

        assert hasher.verify("n3w-pass!", sample_user.password)
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_same_email_is_not_a_conflict(
        self,
        user_service: UserService,
        mock_db: AsyncMock,
        sample_user: MagicMock,
    ) -> None:
        mock_db.get.return_value = sample_user

        result = await user_service.update_user(
            str(sample_user.id),
            UserUpdateRequest(email="ana@school.com", full_name="Ana Maria Souza"),
        )

        assert result.full_name == "Ana Maria Souza"
        mock_db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_email_taken_by_other_user(
        self,
        user_service: UserService,
        mock_db: AsyncMock,
        sample_user: MagicMock,
    ) -> None:
        mock_db.get.return_value = sample_user
        mock_db.execute.return_value = _found(MagicMock())

        with pytest.raises(UserAlreadyExistsError):
            await user_service.update_user(str(sample_user.id), UserUpdateRequest(email="taken@school.com"))

        mock_db.commit.assert_not_awaited()


class TestDeleteUser:
    @pytest.mark.asyncio
    async def test_delete(self, user_service: UserService, mock_db: AsyncMock, sample_user: MagicMock) -> None:
        mock_db.get.return_value = sample_user

        await user_service.delete_user(str(sample_user.id))

        mock_db.delete.assert_awaited_once_with(sample_user)
        mock_db.commit.assert_awaited_once()
