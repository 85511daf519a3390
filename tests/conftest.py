# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests (services against a mocked AsyncSession)
- Integration tests (the FastAPI app with overridden dependencies)
"""

import os
from datetime import date, datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

# Settings are read once per process, some of them at import time.
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-testing-only")
os.environ.setdefault("PASSWORD_BCRYPT_ROUNDS", "4")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an API test with overridden dependencies"
    )


# =============================================================================
# Database Session
# =============================================================================


@pytest.fixture
def mock_db() -> AsyncMock:
    """Create mock database session."""
    db = AsyncMock()
    db.add = MagicMock()
    db.delete = AsyncMock()
    db.flush = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.refresh = AsyncMock()
    db.execute = AsyncMock()
    db.get = AsyncMock(return_value=None)
    return db


# =============================================================================
# Model Fixtures
# =============================================================================


@pytest.fixture
def sample_user() -> MagicMock:
    """Create a sample Student account."""
    user = MagicMock()
    user.id = uuid4()
    user.full_name = "Ana Souza"
    user.email = "ana@school.com"
    user.password = "$2b$04$hash"
    user.document = "123.456.789-09"
    user.role = "Student"
    user.status_account = True
    user.created_at = datetime.now(timezone.utc)
    user.updated_at = datetime.now(timezone.utc)
    return user


@pytest.fixture
def sample_student(sample_user: MagicMock) -> MagicMock:
    """Create a sample student linked to ``sample_user``."""
    student = MagicMock()
    student.id = uuid4()
    student.user_id = sample_user.id
    student.user = sample_user
    student.registration_number = "RA2024001"
    student.full_name = "Ana Souza"
    student.cpf = "123.456.789-09"
    student.birth_date = date(2008, 5, 17)
    student.address = "Rua das Flores, 10"
    student.phone_number = "11987654321"
    student.created_at = datetime.now(timezone.utc)
    student.updated_at = datetime.now(timezone.utc)
    return student


@pytest.fixture
def sample_class() -> MagicMock:
    """Create a sample open class."""
    class_ = MagicMock()
    class_.id = uuid4()
    class_.class_code = "CLS01"
    class_.name = "Mathematics 1A"
    class_.description = "First year mathematics"
    class_.capacity = 30
    class_.room = "B-12"
    class_.status = "Open"
    class_.created_at = datetime.now(timezone.utc)
    class_.updated_at = datetime.now(timezone.utc)
    return class_


@pytest.fixture
def sample_enrollment(sample_student: MagicMock, sample_class: MagicMock) -> MagicMock:
    """Create a sample Active enrollment."""
    enrollment = MagicMock()
    enrollment.id = uuid4()
    enrollment.student_id = sample_student.id
    enrollment.class_id = sample_class.id
    enrollment.student = sample_student
    enrollment.class_ = sample_class
    enrollment.enrollment_date = datetime.now(timezone.utc)
    enrollment.status = "Active"
    enrollment.created_at = datetime.now(timezone.utc)
    enrollment.updated_at = datetime.now(timezone.utc)
    return enrollment
