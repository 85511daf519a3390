# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication domain services.

Exports:
    PasswordHasher: bcrypt password hashing.
    PasswordGenerator: Strong random passwords for provisioned accounts.
    JWTManager: JWT token creation and validation.
    AuthService: Registration and login.
"""

from schoolhub.domains.auth.jwt import JWTManager
from schoolhub.domains.auth.password import PasswordGenerator, PasswordHasher, is_password_strong
from schoolhub.domains.auth.service import AuthService

__all__ = [
    "PasswordHasher",
    "PasswordGenerator",
    "is_password_strong",
    "JWTManager",
    "AuthService",
]
