# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment table linking students to classes."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from schoolhub.infrastructure.database.models.base import (
    Base,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
)
from schoolhub.infrastructure.database.models.class_ import Class
from schoolhub.infrastructure.database.models.student import Student
from schoolhub.utils.datetime import utc_now

ENROLLMENT_ACTIVE = "Active"


class Enrollment(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A student's enrollment, optionally tied to a class.

    The class reference is nulled when the class row is removed. The
    ``(student_id, class_id)`` pair is unique.
    """

    __tablename__ = "enrollments"

    student_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    class_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("classes.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    enrollment_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=ENROLLMENT_ACTIVE)

    student: Mapped[Student] = relationship(Student, lazy="raise")
    class_: Mapped[Class | None] = relationship(Class, lazy="raise")

    __table_args__ = (
        UniqueConstraint("student_id", "class_id", name="uq_enrollments_student_class"),
    )

    def __repr__(self) -> str:
        return f"<Enrollment {self.student_id} -> {self.class_id} ({self.status})>"
