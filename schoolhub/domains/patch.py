# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Partial update helper.

Update requests are Pydantic models whose fields are all optional. Only the
fields a caller explicitly sent with a non-null value overwrite the entity.
"""

from typing import Any

from pydantic import BaseModel


def changed_fields(patch: BaseModel) -> dict[str, Any]:
    """Return the fields the caller set to a non-null value."""
    return patch.model_dump(exclude_unset=True, exclude_none=True)


def apply_changes(entity: Any, patch: BaseModel | dict[str, Any]) -> dict[str, Any]:
    """Copy set fields from ``patch`` onto ``entity``.

    Args:
        entity: ORM instance to update in place.
        patch: Update request, or a dict already filtered by changed_fields.

    Returns:
        The applied changes keyed by attribute name.
    """
    changes = changed_fields(patch) if isinstance(patch, BaseModel) else patch
    for field, value in changes.items():
        setattr(entity, field, value)
    return changes
