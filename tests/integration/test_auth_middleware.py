# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for authentication and request context middleware.

Tests the middleware components in isolation from database.
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from fastapi import Depends, FastAPI, Request
from fastapi.testclient import TestClient
from jose import jwt
from pydantic import SecretStr

from schoolhub.api.dependencies import RequireRole, require_admin
from schoolhub.api.errors import register_exception_handlers
from schoolhub.api.middleware.auth import AuthMiddleware, CurrentUser, get_current_user
from schoolhub.api.middleware.request_context import REQUEST_ID_HEADER, RequestContextMiddleware
from schoolhub.core.config.settings import JWTSettings
from schoolhub.domains.auth.jwt import JWTManager

SECRET = "test-secret-key-for-jwt-testing"


@pytest.fixture
def jwt_settings() -> JWTSettings:
    return JWTSettings(secret_key=SecretStr(SECRET), access_token_expire_minutes=30)


@pytest.fixture
def jwt_manager(jwt_settings: JWTSettings) -> JWTManager:
    """Create JWT manager with test settings."""
    return JWTManager(jwt_settings)


@pytest.fixture
def app(jwt_manager: JWTManager) -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)
    app.add_middleware(AuthMiddleware, jwt_manager=jwt_manager)
    app.add_middleware(RequestContextMiddleware)

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    @app.get("/api/v1/whoami")
    async def whoami(request: Request) -> dict:
        user = get_current_user(request)
        return {"user_id": user.id if user else None, "role": user.role if user else None}

    @app.get("/api/v1/admin-only")
    async def admin_only(user: CurrentUser = Depends(require_admin)) -> dict:
        return {"ok": True}

    @app.get("/api/v1/staff")
    async def staff(user: CurrentUser = Depends(RequireRole("Admin", "User"))) -> dict:
        return {"ok": True}

    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


def _headers(manager: JWTManager, role: str = "Admin", user_id: str | None = None) -> dict[str, str]:
    issued = manager.create_access_token(
        user_id=user_id or str(uuid4()),
        email="someone@school.com",
        name="Someone",
        role=role,
    )
    return {"Authorization": f"Bearer {issued.token}"}


class TestAuthMiddleware:
    """Tests for AuthMiddleware."""

    def test_public_path_bypasses_auth(self, client: TestClient) -> None:
        response = client.get("/health", headers={"Authorization": "Bearer garbage"})

        assert response.status_code == 200

    def test_valid_token_sets_user(self, client: TestClient, jwt_manager: JWTManager) -> None:
        user_id = str(uuid4())

        response = client.get("/api/v1/whoami", headers=_headers(jwt_manager, "Student", user_id))

        assert response.json() == {"user_id": user_id, "role": "Student"}

    def test_no_token_sets_user_none(self, client: TestClient) -> None:
        assert client.get("/api/v1/whoami").json()["user_id"] is None

    def test_non_bearer_scheme_ignored(self, client: TestClient) -> None:
        response = client.get("/api/v1/whoami", headers={"Authorization": "Basic dXNlcjpwYXNz"})

        assert response.json()["user_id"] is None

    def test_invalid_token_sets_user_none(self, client: TestClient) -> None:
        response = client.get("/api/v1/whoami", headers={"Authorization": "Bearer invalid.token.here"})

        assert response.json()["user_id"] is None

    def test_expired_token_sets_user_none(self, client: TestClient, jwt_settings: JWTSettings) -> None:
        past = datetime.now(timezone.utc) - timedelta(hours=2)
        token = jwt.encode(
            {
                "sub": str(uuid4()),
                "email": "a@b.com",
                "name": "A",
                "role": "Admin",
                "iss": jwt_settings.issuer,
                "aud": jwt_settings.audience,
                "exp": int(past.timestamp()),
                "iat": int(past.timestamp()) - 60,
                "jti": "expired",
            },
            SECRET,
            algorithm="HS256",
        )

        response = client.get("/api/v1/whoami", headers={"Authorization": f"Bearer {token}"})

        assert response.json()["user_id"] is None


class TestRoleDependencies:
    def test_admin_allowed(self, client: TestClient, jwt_manager: JWTManager) -> None:
        assert client.get("/api/v1/admin-only", headers=_headers(jwt_manager, "Admin")).status_code == 200

    def test_non_admin_forbidden(self, client: TestClient, jwt_manager: JWTManager) -> None:
        response = client.get("/api/v1/admin-only", headers=_headers(jwt_manager, "User"))

        assert response.status_code == 403
        assert response.json()["success"] is False

    def test_anonymous_unauthorized(self, client: TestClient) -> None:
        assert client.get("/api/v1/admin-only").status_code == 401

    def test_require_role_any_of(self, client: TestClient, jwt_manager: JWTManager) -> None:
        assert client.get("/api/v1/staff", headers=_headers(jwt_manager, "User")).status_code == 200
        assert client.get("/api/v1/staff", headers=_headers(jwt_manager, "Student")).status_code == 403


class TestRequestContextMiddleware:
    def test_generates_request_id(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.headers[REQUEST_ID_HEADER]

    def test_echoes_incoming_request_id(self, client: TestClient) -> None:
        response = client.get("/health", headers={REQUEST_ID_HEADER: "req-123"})

        assert response.headers[REQUEST_ID_HEADER] == "req-123"
