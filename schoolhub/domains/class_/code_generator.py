# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Sequential class code generation.

Codes look like ``CLS01``, ``CLS02``, ... The suffix is compared as a number,
so ``CLS100`` follows ``CLS99`` and sorts after it. Codes whose suffix does
not parse are ignored.
"""

from __future__ import annotations

import logging
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.domains.errors import StorageError, storage_guard
from schoolhub.infrastructure.database.models import Class

logger = logging.getLogger(__name__)

CODE_PREFIX = "CLS"
CODE_WIDTH = 2
SEED_CODE = f"{CODE_PREFIX}{1:0{CODE_WIDTH}d}"


class ClassCodeGenerationError(StorageError):
    """Raised when existing codes cannot be read."""

    pass


def parse_class_code(code: str) -> int | None:
    """Return the numeric suffix of a class code, or None if it has none."""
    if not code or not code.startswith(CODE_PREFIX):
        return None
    suffix = code[len(CODE_PREFIX):]
    if not suffix.isdigit():
        return None
    return int(suffix)


def next_class_code(existing_codes: Iterable[str]) -> str:
    """Compute the code that follows the highest existing one.

    Args:
        existing_codes: Every persisted class code.

    Returns:
        ``CLS`` plus the highest suffix + 1, zero-padded to two digits.
        ``CLS01`` when no code parses.
    """
    numbers = [n for n in (parse_class_code(c) for c in existing_codes) if n is not None]
    if not numbers:
        return SEED_CODE
    return f"{CODE_PREFIX}{max(numbers) + 1:0{CODE_WIDTH}d}"


class ClassCodeGenerator:
    """Reads persisted codes and proposes the next one.

    The proposal is not reserved. Concurrent writers can get the same code,
    and the unique constraint on ``classes.class_code`` decides which insert
    wins.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    @storage_guard("next_class_code", error_class=ClassCodeGenerationError)
    async def next_code(self) -> str:
        query = select(Class.class_code).where(Class.class_code.startswith(CODE_PREFIX))
        result = await self.db.execute(query)
        code = next_class_code(result.scalars().all())
        logger.debug("Proposed class code: %s", code)
        return code
