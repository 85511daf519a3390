# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API middleware components.

Exports:
    AuthMiddleware: JWT authentication middleware.
    RequestContextMiddleware: Request ID binding for structured logs.
    limiter: slowapi rate limiter.
"""

from schoolhub.api.middleware.auth import AuthMiddleware, CurrentUser
from schoolhub.api.middleware.rate_limit import limiter, rate_limit_exceeded_handler
from schoolhub.api.middleware.request_context import RequestContextMiddleware

__all__ = [
    "AuthMiddleware",
    "CurrentUser",
    "RequestContextMiddleware",
    "limiter",
    "rate_limit_exceeded_handler",
]
