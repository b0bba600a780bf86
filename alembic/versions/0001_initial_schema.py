"""Initial schema: complaints, users, departments, notifications.

Revision ID: 0001
Revises:
Create Date: 2026-10-17

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_JSON = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    # -- Users --
    op.create_table(
        "users",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("role", sa.String(32), server_default="CITIZEN"),
        sa.Column("is_active", sa.Boolean, server_default=sa.true()),
        sa.Column("municipality", sa.String(128), nullable=True),
        sa.Column("governorate", sa.String(128), nullable=True),
        sa.Column("department", sa.String(64), nullable=True),
    )
    op.create_index("ix_users_role", "users", ["role"])

    # -- Departments --
    op.create_table(
        "departments",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False, unique=True),
        sa.Column("description", sa.Text, server_default=""),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("responsable", sa.String(64), nullable=True),
        sa.Column("municipality", sa.String(128), nullable=True),
    )
    op.create_index("ix_departments_responsable", "departments", ["responsable"])

    # -- Complaints --
    op.create_table(
        "complaints",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("category", sa.String(64), server_default="OTHER"),
        sa.Column("status", sa.String(32), server_default="SUBMITTED"),
        sa.Column("urgency", sa.String(16), server_default="MEDIUM"),
        sa.Column("priority_score", sa.Integer, server_default="5"),
        sa.Column("created_by", sa.String(64), nullable=False),
        sa.Column("governorate", sa.String(128), nullable=True),
        sa.Column("municipality", sa.String(128), nullable=True),
        sa.Column("latitude", sa.Float, nullable=True),
        sa.Column("longitude", sa.Float, nullable=True),
        sa.Column("address", sa.String(512), nullable=True),
        sa.Column("assigned_department", sa.String(64), nullable=True),
        sa.Column("assigned_to", sa.String(64), nullable=True),
        sa.Column("rejection_reason", sa.Text, nullable=True),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_anonymous", sa.Boolean, server_default=sa.false()),
        sa.Column("comments", _JSON, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_complaints_created_by", "complaints", ["created_by"])
    op.create_index("ix_complaints_status", "complaints", ["status"])
    op.create_index("ix_complaints_municipality", "complaints", ["municipality"])
    op.create_index("ix_complaints_assigned_department", "complaints", ["assigned_department"])
    op.create_index("ix_complaints_created_at", "complaints", ["created_at"])

    # -- Notifications --
    op.create_table(
        "notifications",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("recipient", sa.String(255), server_default=""),
        sa.Column("channel", sa.String(16), server_default="in_app"),
        sa.Column("subject", sa.String(512), server_default=""),
        sa.Column("body", sa.Text, server_default=""),
        sa.Column("complaint_id", sa.String(64), nullable=True),
        sa.Column("status", sa.String(16), server_default="pending"),
        sa.Column("template_id", sa.String(128), nullable=True),
        sa.Column("metadata", _JSON, nullable=True),
        sa.Column("is_read", sa.Boolean, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("delivered_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_notifications_recipient", "notifications", ["recipient"])
    op.create_index("ix_notifications_complaint_id", "notifications", ["complaint_id"])


def downgrade() -> None:
    op.drop_table("notifications")
    op.drop_table("complaints")
    op.drop_table("departments")
    op.drop_table("users")
