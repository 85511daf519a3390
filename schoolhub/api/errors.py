# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Exception handlers that turn errors into failed envelopes.

Domain errors keep their message. Request validation failures list every
offending field. Anything unexpected is logged with its traceback and
answered with a generic message.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from schoolhub.domains.errors import (
    STORAGE_ERROR_MESSAGE,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    DomainInvariantError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from schoolhub.infrastructure.database.connection import DatabaseError
from schoolhub.models.common import ApiResponse

logger = logging.getLogger(__name__)

INVALID_DATA_MESSAGE = "Invalid data"

# First matching base class wins.
DOMAIN_STATUS_CODES: tuple[tuple[type[DomainError], int], ...] = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (AuthorizationError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (DomainInvariantError, status.HTTP_409_CONFLICT),
    (StorageError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def status_for(exc: DomainError) -> int:
    for error_class, status_code in DOMAIN_STATUS_CODES:
        if isinstance(exc, error_class):
            return status_code
    return status.HTTP_400_BAD_REQUEST


def failure(
    status_code: int,
    message: str,
    errors: list[str] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body = ApiResponse[None].fail(message, errors)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"), headers=headers)


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error("Request failed: %s %s: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("Request rejected: %s %s: %s", request.method, request.url.path, exc.message)
    return failure(status_code, exc.message)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        errors.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return failure(status.HTTP_400_BAD_REQUEST, INVALID_DATA_MESSAGE, errors)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return failure(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def database_error_handler(request: Request, exc: DatabaseError) -> JSONResponse:
    logger.error("Database unavailable: %s %s: %s", request.method, request.url.path, exc)
    return failure(status.HTTP_500_INTERNAL_SERVER_ERROR, STORAGE_ERROR_MESSAGE)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error: %s %s", request.method, request.url.path)
    return failure(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    """Install every envelope-producing handler on the app."""
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(DatabaseError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
