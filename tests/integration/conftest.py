# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Fixtures for API tests.

The application is built by the real factory. The database session is
replaced by a mock and each route module's ``_get_service`` is patched per
test, so no PostgreSQL is needed.
"""

from collections.abc import AsyncGenerator, Iterator
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from schoolhub.api.app import create_app
from schoolhub.api.dependencies import get_db, get_jwt_manager


@pytest.fixture
def session() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def app(session: AsyncMock) -> Iterator[FastAPI]:
    """Create the application with the database dependency overridden."""
    application = create_app()

    async def override_get_db() -> AsyncGenerator[AsyncMock, None]:
        yield session

    application.dependency_overrides[get_db] = override_get_db
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Create test client. The lifespan is not run, so no engine is created."""
    return TestClient(app, raise_server_exceptions=False)


def _bearer(role: str, email: str) -> dict[str, str]:
    issued = get_jwt_manager().create_access_token(
        user_id="7c9e6679-7425-40de-944b-e07fc1f90ae7",
        email=email,
        name=f"{role} Tester",
        role=role,
    )
    return {"Authorization": f"Bearer {issued.token}"}


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return _bearer("Admin", "admin@school.com")


@pytest.fixture
def user_headers() -> dict[str, str]:
    return _bearer("User", "user@school.com")


@pytest.fixture
def student_headers() -> dict[str, str]:
    return _bearer("Student", "ana@school.com")
