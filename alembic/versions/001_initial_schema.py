"""Initial schema: users, events, reservations with indexes and constraints.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default=sa.text("'USER'")),
        sa.Column("hashed_refresh_token", sa.String(255), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("role IN ('ADMIN', 'USER')", name="check_user_role"),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("date_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("location", sa.String(255), nullable=False),
        sa.Column("max_capacity", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'DRAFT'")),
        *_timestamps(),
        sa.CheckConstraint("max_capacity >= 1", name="check_event_capacity_positive"),
        sa.CheckConstraint("status IN ('DRAFT', 'PUBLISHED', 'CANCELLED')", name="check_event_status"),
    )
    op.create_index("ix_events_id", "events", ["id"])
    op.create_index("ix_events_date_time", "events", ["date_time"])
    # Public catalogue query: WHERE status = 'PUBLISHED' ORDER BY date_time
    op.create_index("ix_events_status_date_time", "events", ["status", "date_time"])

    op.create_table(
        "reservations",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column(
            "event_id",
            sa.Integer(),
            sa.ForeignKey("events.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'PENDING'")),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('PENDING', 'CONFIRMED', 'REFUSED', 'CANCELLED')",
            name="check_reservation_status",
        ),
    )
    op.create_index("ix_reservations_id", "reservations", ["id"])
    op.create_index("ix_reservations_user_id", "reservations", ["user_id"])
    op.create_index("ix_reservations_event_id", "reservations", ["event_id"])
    # Active-count aggregate: WHERE event_id IN (...) AND status IN ('PENDING', 'CONFIRMED')
    op.create_index("ix_reservations_event_status", "reservations", ["event_id", "status"])
    op.create_index("ix_reservations_user_event", "reservations", ["user_id", "event_id"])


def downgrade() -> None:
    op.drop_table("reservations")
    op.drop_table("events")
    op.drop_table("users")
