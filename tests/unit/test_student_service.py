# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for Student service."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import IntegrityError

from schoolhub.domains.errors import ConflictError
from schoolhub.domains.student.service import (
    DuplicateCpfError,
    DuplicateRegistrationNumberError,
    StudentHasActiveEnrollmentsError,
    StudentNotFoundError,
    StudentService,
)
from schoolhub.domains.user.service import UserAlreadyExistsError
from schoolhub.models.student import StudentCreateRequest, StudentUpdateRequest

GENERATED_PASSWORD = "Xy7!abcdEFGH"


@pytest.fixture
def user_service(sample_user: MagicMock) -> MagicMock:
    """Create identity store stub that provisions ``sample_user``."""
    users = MagicMock()
    users.create_student_user = AsyncMock(return_value=(sample_user, GENERATED_PASSWORD))
    return users


@pytest.fixture
def student_service(mock_db: AsyncMock, user_service: MagicMock) -> StudentService:
    """Create student service with mock database."""
    return StudentService(db=mock_db, users=user_service)


@pytest.fixture
def create_request() -> StudentCreateRequest:
    return StudentCreateRequest(
        registration_number="RA2024001",
        full_name="Ana Souza",
        cpf="123.456.789-09",
        email="ana@school.com",
        phone_number="11987654321",
    )


def _exists(found: bool) -> MagicMock:
    result = MagicMock()
    result.scalar_one_or_none.return_value = uuid4() if found else None
    return result


def _first(value) -> MagicMock:
    result = MagicMock()
    result.scalars.return_value.first.return_value = value
    return result


def _listing(values: list) -> MagicMock:
    result = MagicMock()
    result.scalars.return_value.all.return_value = values
    return result


def _rows(rows: list[tuple]) -> MagicMock:
    result = MagicMock()
    result.all.return_value = rows
    return result


def _count(value: int) -> MagicMock:
    result = MagicMock()
    result.scalar.return_value = value
    return result


async def _fill_server_defaults(obj, *args, **kwargs) -> None:
    obj.id = uuid4()
    obj.created_at = datetime.now(timezone.utc)
    obj.updated_at = datetime.now(timezone.utc)


class TestStudentServiceCreate:
    """Tests for student registration."""

    @pytest.mark.asyncio
    async def test_create_student_success(
        self,
        student_service: StudentService,
        mock_db: AsyncMock,
        user_service: MagicMock,
        sample_user: MagicMock,
        create_request: StudentCreateRequest,
    ) -> None:
        mock_db.execute.side_effect = [_exists(False), _exists(False)]
        mock_db.refresh.side_effect = _fill_server_defaults

        result = await student_service.create_student(create_request)

        assert result.registration_number == "RA2024001"
        assert result.user_id == sample_user.id
        assert result.generated_password == GENERATED_PASSWORD
        assert result.total_enrollments == 0
        assert result.active_enrollments == 0
        user_service.create_student_user.assert_awaited_once_with(
            full_name="Ana Souza",
            email="ana@school.com",
            document="12345678909",
        )
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_duplicate_cpf_checked_first(
        self,
        student_service: StudentService,
        mock_db: AsyncMock,
        user_service: MagicMock,
        create_request: StudentCreateRequest,
    ) -> None:
        """CPF and RA both taken: the CPF conflict is the one reported."""
        mock_db.execute.side_effect = [_exists(True), _exists(True)]

        with pytest.raises(DuplicateCpfError, match="CPF already registered"):
            await student_service.create_student(create_request)

        user_service.create_student_user.assert_not_awaited()
        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_cpf_duplicate_check_ignores_punctuation(
        self,
        student_service: StudentService,
        mock_db: AsyncMock,
    ) -> None:
        """111.111.111-11 collides with an existing 11111111111."""
        mock_db.execute.side_effect = [_exists(True)]
        request = StudentCreateRequest(
            registration_number="RA2024002",
            full_name="Bruno Lima",
            cpf="111.111.111-11",
            email="bruno@school.com",
        )

        with pytest.raises(DuplicateCpfError):
            await student_service.create_student(request)

        stmt = mock_db.execute.await_args.args[0]
        assert "11111111111" in stmt.compile(dialect=postgresql.dialect()).params.values()

    @pytest.mark.asyncio
    async def test_duplicate_registration_number(
        self,
        student_service: StudentService,
        mock_db: AsyncMock,
        user_service: MagicMock,
        create_request: StudentCreateRequest,
    ) -> None:
        mock_db.execute.side_effect = [_exists(False), _exists(True)]

        with pytest.raises(DuplicateRegistrationNumberError):
            await student_service.create_student(create_request)

        user_service.create_student_user.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_account_conflict_propagates(
        self,
        student_service: StudentService,
        mock_db: AsyncMock,
        user_service: MagicMock,
        create_request: StudentCreateRequest,
    ) -> None:
        mock_db.execute.side_effect = [_exists(False), _exists(False)]
        user_service.create_student_user.side_effect = UserAlreadyExistsError("Email already registered")

        with pytest.raises(UserAlreadyExistsError):
            await student_service.create_student(create_request)

        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_race_on_commit_becomes_conflict(
        self,
        student_service: StudentService,
        mock_db: AsyncMock,
        create_request: StudentCreateRequest,
    ) -> None:
        mock_db.execute.side_effect = [_exists(False), _exists(False)]
        mock_db.commit.side_effect = IntegrityError("INSERT", {}, Exception("duplicate"))

        with pytest.raises(ConflictError):
            await student_service.create_student(create_request)

        mock_db.rollback.assert_awaited_once()


class TestStudentServiceLookup:
    """Tests for student retrieval."""

    @pytest.mark.asyncio
    async def test_get_by_registration_number(
        self,
        student_service: StudentService,
        mock_db: AsyncMock,
        sample_student: MagicMock,
    ) -> None:
        mock_db.execute.side_effect = [
            _first(sample_student),
            _rows([(sample_student.id, 3, 1)]),
        ]

        result = await student_service.get_by_registration_number("RA2024001")

        assert result.registration_number == "RA2024001"
        assert result.user_email == "ana@school.com"
        assert result.total_enrollments == 3
        assert result.active_enrollments == 1

    @pytest.mark.asyncio
    async def test_get_by_registration_number_not_found(
        self,
        student_service: StudentService,
        mock_db: AsyncMock,
    ) -> None:
        mock_db.execute.return_value = _first(None)

        with pytest.raises(StudentNotFoundError):
            await student_service.get_by_registration_number("RA0000")

    @pytest.mark.asyncio
    async def test_find_student_by_term(
        self,
        student_service: StudentService,
        mock_db: AsyncMock,
        sample_student: MagicMock,
    ) -> None:
        mock_db.execute.side_effect = [_first(sample_student), _rows([])]

        result = await student_service.find_student("  ana@school.com ")

        assert result.id == sample_student.id
        assert result.total_enrollments == 0

    @pytest.mark.asyncio
    async def test_find_student_no_match(self, student_service: StudentService, mock_db: AsyncMock) -> None:
        mock_db.execute.return_value = _first(None)

        with pytest.raises(StudentNotFoundError, match="nobody"):
            await student_service.find_student("nobody")

    @pytest.mark.asyncio
    async def test_exact_identifier_ranks_before_name_match(
        self,
        student_service: StudentService,
        mock_db: AsyncMock,
        sample_student: MagicMock,
    ) -> None:
        """A student named "Aaron RA12345" must not shadow the student whose RA is RA12345."""
        mock_db.execute.return_value = _first(sample_student)

        await student_service.find_model("RA12345")

        stmt = mock_db.execute.await_args.args[0]
        order_by = str(stmt.compile(dialect=postgresql.dialect())).split("ORDER BY", 1)[1]
        assert order_by.lstrip().startswith("CASE WHEN")
        assert order_by.index("CASE WHEN") < order_by.index("users.full_name")

    @pytest.mark.asyncio
    async def test_formatted_cpf_matches_stored_digits(
        self,
        student_service: StudentService,
        mock_db: AsyncMock,
        sample_student: MagicMock,
    ) -> None:
        mock_db.execute.return_value = _first(sample_student)

        await student_service.find_model("123.456.789-09")

        params = mock_db.execute.await_args.args[0].compile(dialect=postgresql.dialect()).params
        assert "12345678909" in params.values()
        assert "123.456.789-09" in params.values()


class TestStudentServicePaging:
    """Tests for paginated listing."""

    @pytest.mark.asyncio
    async def test_list_students_page(
        self,
        student_service: StudentService,
        mock_db: AsyncMock,
        sample_student: MagicMock,
    ) -> None:
        mock_db.execute.side_effect = [
            _count(11),
            _listing([sample_student]),
            _rows([(sample_student.id, 1, 1)]),
        ]

        page = await student_service.list_students(page_number=2, page_size=10)

        assert page.total_records == 11
        assert page.page_number == 2
        assert page.page_size == 10
        assert len(page.items) == 1
        assert page.items[0].active_enrollments == 1

    @pytest.mark.asyncio
    async def test_invalid_paging_is_normalized(
        self,
        student_service: StudentService,
        mock_db: AsyncMock,
    ) -> None:
        mock_db.execute.side_effect = [_count(0), _listing([])]

        page = await student_service.list_students(page_number=0, page_size=500)

        assert page.page_number == 1
        assert page.page_size == 100
        assert page.items == []

    @pytest.mark.asyncio
    async def test_search_students_empty(self, student_service: StudentService, mock_db: AsyncMock) -> None:
        mock_db.execute.side_effect = [_count(0), _listing([])]

        page = await student_service.search_students("zzz")

        assert page.total_records == 0
        assert page.items == []

    @pytest.mark.asyncio
    async def test_search_wildcards_are_literal(self, student_service: StudentService, mock_db: AsyncMock) -> None:
        mock_db.execute.side_effect = [_count(0), _listing([])]

        await student_service.search_students("50%_a")

        stmt = mock_db.execute.await_args_list[1].args[0]
        params = stmt.compile(dialect=postgresql.dialect()).params
        assert "%50\\%\\_a%" in params.values()


class TestStudentServiceUpdate:
    @pytest.mark.asyncio
    async def test_update_overwrites_supplied_fields(
        self,
        student_service: StudentService,
        mock_db: AsyncMock,
        sample_student: MagicMock,
    ) -> None:
        mock_db.execute.side_effect = [_first(sample_student), _rows([])]

        result = await student_service.update_student(
            sample_student.id,
            StudentUpdateRequest(address="Avenida Paulista, 1000"),
        )

        assert result.address == "Avenida Paulista, 1000"
        assert result.full_name == "Ana Souza"
        mock_db.commit.assert_awaited_once()
        mock_db.refresh.assert_awaited_once_with(
            sample_student,
            attribute_names=["address", "updated_at"],
        )

    @pytest.mark.asyncio
    async def test_update_missing_student(self, student_service: StudentService, mock_db: AsyncMock) -> None:
        mock_db.execute.return_value = _first(None)

        with pytest.raises(StudentNotFoundError):
            await student_service.update_student(uuid4(), StudentUpdateRequest(full_name="New Name"))


class TestStudentServiceDelete:
    @pytest.mark.asyncio
    async def test_delete_without_active_enrollments(
        self,
        student_service: StudentService,
        mock_db: AsyncMock,
        sample_student: MagicMock,
    ) -> None:
        mock_db.execute.side_effect = [_first(sample_student), _count(0)]

        await student_service.delete_student_by_query("RA2024001")

        mock_db.delete.assert_awaited_once_with(sample_student)
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_delete_blocked_by_active_enrollments(
        self,
        student_service: StudentService,
        mock_db: AsyncMock,
        sample_student: MagicMock,
    ) -> None:
        mock_db.execute.side_effect = [_first(sample_student), _count(2)]

        with pytest.raises(StudentHasActiveEnrollmentsError) as exc_info:
            await student_service.delete_student_by_query("RA2024001")

        assert exc_info.value.count == 2
        mock_db.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_unknown_student(self, student_service: StudentService, mock_db: AsyncMock) -> None:
        mock_db.execute.return_value = _first(None)

        with pytest.raises(StudentNotFoundError):
            await student_service.delete_student_by_query("ghost")


class TestStudentStatistics:
    @pytest.mark.asyncio
    async def test_statistics(self, student_service: StudentService, mock_db: AsyncMock) -> None:
        mock_db.execute.side_effect = [_count(12), _count(30)]

        stats = await student_service.get_statistics()

        assert stats.total_students == 12
        assert stats.total_enrollments == 30
