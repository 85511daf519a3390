# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""JWT access token management using python-jose.

Example:
    >>> from schoolhub.core.config import get_settings
    >>> jwt_manager = JWTManager(get_settings().jwt)
    >>> issued = jwt_manager.create_access_token(user_id=uid, email=..., name=..., role="Admin")
    >>> claims = jwt_manager.decode_token(issued.token)
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from uuid import UUID

from jose import ExpiredSignatureError, JWTError as JoseJWTError, jwt
from pydantic import BaseModel

from schoolhub.core.config.settings import JWTSettings

logger = logging.getLogger(__name__)


class TokenPayload(BaseModel):
    """Decoded access token claims.

    Attributes:
        sub: Subject (user ID).
        email: Account email.
        name: Account full name.
        role: Account role (Admin, Student or User).
        exp: Expiration timestamp.
        iat: Issued at timestamp.
        jti: JWT ID.
    """

    sub: str
    email: str
    name: str
    role: str
    exp: int
    iat: int
    jti: str


class IssuedToken(BaseModel):
    """A signed token and the moment it stops being valid."""

    token: str
    expires_at: datetime


class JWTError(Exception):
    """Base exception for JWT operations."""

    pass


class TokenExpiredError(JWTError):
    """Raised when a token has expired."""

    pass


class InvalidTokenError(JWTError):
    """Raised when a token is malformed, tampered with or has foreign claims."""

    pass


class JWTManager:
    """Issues and validates access tokens.

    Attributes:
        _settings: JWT configuration settings.
    """

    def __init__(self, settings: JWTSettings) -> None:
        self._settings = settings

    def create_access_token(
        self,
        user_id: str | UUID,
        email: str,
        name: str,
        role: str,
    ) -> IssuedToken:
        """Sign an access token for a user.

        Args:
            user_id: User identifier.
            email: User email.
            name: User full name.
            role: User role.

        Returns:
            IssuedToken with the encoded JWT and its expiry.
        """
        now = datetime.now(timezone.utc)
        exp = now + timedelta(minutes=self._settings.access_token_expire_minutes)

        payload = {
            "sub": str(user_id),
            "email": email,
            "name": name,
            "role": role,
            "iss": self._settings.issuer,
            "aud": self._settings.audience,
            "exp": int(exp.timestamp()),
            "iat": int(now.timestamp()),
            "jti": secrets.token_urlsafe(16),
        }

        token = jwt.encode(
            payload,
            self._settings.secret_key.get_secret_value(),
            algorithm=self._settings.algorithm,
        )
        return IssuedToken(token=token, expires_at=exp.replace(microsecond=0))

    def decode_token(self, token: str) -> TokenPayload:
        """Decode and validate a JWT token.

        Args:
            token: JWT token string.

        Returns:
            TokenPayload with decoded claims.

        Raises:
            TokenExpiredError: If the token has expired.
            InvalidTokenError: If the token is invalid.
        """
        try:
            payload = jwt.decode(
                token,
                self._settings.secret_key.get_secret_value(),
                algorithms=[self._settings.algorithm],
                audience=self._settings.audience,
                issuer=self._settings.issuer,
            )
            return TokenPayload(
                sub=payload["sub"],
                email=payload["email"],
                name=payload["name"],
                role=payload["role"],
                exp=payload["exp"],
                iat=payload["iat"],
                jti=payload["jti"],
            )
        except ExpiredSignatureError as e:
            raise TokenExpiredError("Token has expired") from e
        except (JoseJWTError, KeyError, ValueError) as e:
            logger.warning("Token decode failed: %s", str(e))
            raise InvalidTokenError(f"Invalid token: {str(e)}") from e

    def verify_token(self, token: str) -> bool:
        """Return True if the token decodes and has not expired."""
        try:
            self.decode_token(token)
            return True
        except (TokenExpiredError, InvalidTokenError):
            return False
