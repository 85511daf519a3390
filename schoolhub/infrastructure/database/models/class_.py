# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Class table.

Named ``class_`` to avoid clashing with the Python keyword.
"""

from sqlalchemy import CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from schoolhub.infrastructure.database.models.base import (
    Base,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
)

CLASS_STATUSES = ("Open", "Closed", "Cancelled")


class Class(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A class students can enroll in, identified by a generated code."""

    __tablename__ = "classes"

    class_code: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=50)
    room: Mapped[str | None] = mapped_column(String(50), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="Open")

    __table_args__ = (
        CheckConstraint("capacity > 0", name="positive_capacity"),
        CheckConstraint(
            "status IN ('Open', 'Closed', 'Cancelled')",
            name="valid_class_status",
        ),
    )

    def __repr__(self) -> str:
        return f"<Class {self.class_code}>"
