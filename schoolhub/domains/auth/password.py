# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Password hashing, generation and strength checks.

Hashing uses the bcrypt library directly. Generated passwords always contain
an uppercase letter, a lowercase letter, a digit and a symbol, and their
random source is injectable so tests can seed it.

Example:
    >>> hasher = PasswordHasher(rounds=4)
    >>> hashed = hasher.hash("S3cret!pass")
    >>> hasher.verify("S3cret!pass", hashed)
    True
    >>> generator = PasswordGenerator(rng=random.Random(7))
    >>> len(generator.generate())
    12
"""

import logging
import random
import re
import string

import bcrypt

logger = logging.getLogger(__name__)

UPPERCASE = string.ascii_uppercase
LOWERCASE = string.ascii_lowercase
DIGITS = string.digits
SYMBOLS = "!@#$%^&*()_+-=[]{}|;:,.<>?"
ALPHABET = UPPERCASE + LOWERCASE + DIGITS + SYMBOLS

_STRENGTH_CHECKS = (
    re.compile(r"[a-z]"),
    re.compile(r"[A-Z]"),
    re.compile(r"\d"),
    re.compile(r"[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>/?]"),
)

MIN_STRONG_LENGTH = 8


class PasswordHasher:
    """bcrypt password hashing.

    Attributes:
        _rounds: bcrypt cost factor.
    """

    def __init__(self, rounds: int = 12) -> None:
        self._rounds = rounds

    def hash(self, password: str) -> str:
        """Hash a password with a fresh salt.

        Args:
            password: Plain text password to hash.

        Returns:
            bcrypt hash string with salt embedded.

        Raises:
            ValueError: If password is empty.
        """
        if not password:
            raise ValueError("Password cannot be empty")

        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """Check a password against a stored hash.

        Malformed hashes count as a mismatch.
        """
        if not password or not password_hash:
            return False

        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError as e:
            logger.warning("Password verification failed: %s", str(e))
            return False


class PasswordGenerator:
    """Generates random passwords that satisfy the strength rules.

    One character from each class is placed first, the rest are drawn from
    the combined alphabet, then every position is shuffled.

    Attributes:
        _length: Password length, at least 4.
        _rng: Random source. Defaults to ``random.SystemRandom``.
    """

    def __init__(self, length: int = 12, rng: random.Random | None = None) -> None:
        if length < 4:
            raise ValueError("Generated passwords need at least 4 characters")
        self._length = length
        self._rng = rng if rng is not None else random.SystemRandom()

    @classmethod
    def seeded(cls, seed: int | None, length: int = 12) -> "PasswordGenerator":
        """Build a generator, deterministic when ``seed`` is given."""
        rng = random.Random(seed) if seed is not None else None
        return cls(length=length, rng=rng)

    def generate(self) -> str:
        chars = [
            self._rng.choice(UPPERCASE),
            self._rng.choice(LOWERCASE),
            self._rng.choice(DIGITS),
            self._rng.choice(SYMBOLS),
        ]
        chars.extend(self._rng.choice(ALPHABET) for _ in range(self._length - 4))
        self._rng.shuffle(chars)
        return "".join(chars)


def is_password_strong(password: str) -> bool:
    """Return True if the password has 8+ characters and every character class."""
    if not password or len(password) < MIN_STRONG_LENGTH:
        return False
    return all(check.search(password) for check in _STRENGTH_CHECKS)
