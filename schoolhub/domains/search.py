# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Substring search helpers shared by the domain services.

Example:
    >>> Class.name.ilike(contains_pattern("50%_off"), escape=LIKE_ESCAPE)
"""

LIKE_ESCAPE = "\\"


def contains_pattern(term: str) -> str:
    """Build a ``LIKE`` pattern matching ``term`` literally anywhere in a value.

    ``%`` and ``_`` typed by the caller are escaped with ``LIKE_ESCAPE``, so
    the pattern must be used with ``escape=LIKE_ESCAPE``.
    """
    escaped = (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"
