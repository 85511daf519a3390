# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Initial schema: users, students, classes and enrollments.

Revision ID: 001_initial
Revises: None
Create Date: 2025-06-02
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id_column() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        server_default=sa.text("gen_random_uuid()"),
        primary_key=True,
    )


def _timestamp_columns() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    ]


def upgrade() -> None:
    """Create all tables."""
    # ==========================================================================
    # 1. users
    # ==========================================================================
    op.create_table(
        "users",
        _id_column(),
        sa.Column("full_name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(200), nullable=False),
        sa.Column("password", sa.String(500), nullable=False),
        sa.Column("document", sa.String(20), nullable=False),
        sa.Column("role", sa.String(50), nullable=False, server_default="User"),
        sa.Column("status_account", sa.Boolean, nullable=False, server_default=sa.true()),
        *_timestamp_columns(),
        sa.UniqueConstraint("email", name="uq_users_email"),
        sa.UniqueConstraint("document", name="uq_users_document"),
    )

    # ==========================================================================
    # 2. students
    # ==========================================================================
    op.create_table(
        "students",
        _id_column(),
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE", name="fk_students_user_id_users"),
            nullable=False,
        ),
        sa.Column("registration_number", sa.String(20), nullable=False),
        sa.Column("full_name", sa.String(200), nullable=False),
        sa.Column("cpf", sa.String(14), nullable=False),
        sa.Column("birth_date", sa.Date, nullable=True),
        sa.Column("address", sa.String(200), nullable=True),
        sa.Column("phone_number", sa.String(15), nullable=True),
        *_timestamp_columns(),
        sa.UniqueConstraint("user_id", name="uq_students_user_id"),
        sa.UniqueConstraint("registration_number", name="uq_students_registration_number"),
        sa.UniqueConstraint("cpf", name="uq_students_cpf"),
    )

    # ==========================================================================
    # 3. classes
    # ==========================================================================
    op.create_table(
        "classes",
        _id_column(),
        sa.Column("class_code", sa.String(20), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column("capacity", sa.Integer, nullable=False, server_default="50"),
        sa.Column("room", sa.String(50), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="Open"),
        *_timestamp_columns(),
        sa.UniqueConstraint("class_code", name="uq_classes_class_code"),
        sa.CheckConstraint("capacity > 0", name="ck_classes_positive_capacity"),
        sa.CheckConstraint(
            "status IN ('Open', 'Closed', 'Cancelled')",
            name="ck_classes_valid_class_status",
        ),
    )

    # ==========================================================================
    # 4. enrollments
    # ==========================================================================
    op.create_table(
        "enrollments",
        _id_column(),
        sa.Column(
            "student_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("students.id", ondelete="CASCADE", name="fk_enrollments_student_id_students"),
            nullable=False,
        ),
        sa.Column(
            "class_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("classes.id", ondelete="SET NULL", name="fk_enrollments_class_id_classes"),
            nullable=True,
        ),
        sa.Column(
            "enrollment_date",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column("status", sa.String(20), nullable=False, server_default="Active"),
        *_timestamp_columns(),
        sa.UniqueConstraint("student_id", "class_id", name="uq_enrollments_student_class"),
    )
    op.create_index("ix_enrollments_student_id", "enrollments", ["student_id"])
    op.create_index("ix_enrollments_class_id", "enrollments", ["class_id"])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_index("ix_enrollments_class_id", table_name="enrollments")
    op.drop_index("ix_enrollments_student_id", table_name="enrollments")
    op.drop_table("enrollments")
    op.drop_table("classes")
    op.drop_table("students")
    op.drop_table("users")
