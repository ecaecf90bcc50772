"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18

Creates all tables for the Quick Reservations application:
events, reservations, reservation_tokens.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- events ---
    op.create_table(
        "events",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("capacity", sa.Integer, nullable=False),
        sa.Column("confirmed_seats", sa.Integer, nullable=False, server_default="0"),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("capacity > 0", name="ck_events_capacity_positive"),
        sa.CheckConstraint("end_time > start_time", name="ck_events_end_after_start"),
        sa.CheckConstraint(
            "confirmed_seats >= 0 AND confirmed_seats <= capacity",
            name="ck_events_confirmed_seats_within_capacity",
        ),
    )
    op.create_index("ix_events_end_time", "events", ["end_time"])

    # --- reservations ---
    op.create_table(
        "reservations",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("spot_count", sa.Integer, nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="pending"),
        sa.Column("verification_token", sa.String(64), nullable=False, unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("event_id", "email", name="uq_reservations_event_email"),
        sa.CheckConstraint("spot_count > 0", name="ck_reservations_spot_count_positive"),
        sa.CheckConstraint(
            "verified_at IS NULL OR verified_at >= created_at",
            name="ck_reservations_verified_after_created",
        ),
    )
    op.create_index("ix_reservations_event_status", "reservations", ["event_id", "status"])

    # --- reservation_tokens ---
    op.create_table(
        "reservation_tokens",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "reservation_id",
            sa.String(36),
            sa.ForeignKey("reservations.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("position", sa.Integer, nullable=False),
        sa.Column("token", sa.String(64), nullable=False, unique=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="active"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("used_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("reservation_id", "position", name="uq_reservation_tokens_position"),
        sa.CheckConstraint(
            "used_at IS NULL OR used_at >= created_at",
            name="ck_reservation_tokens_used_after_created",
        ),
    )
    op.create_index(
        "ix_reservation_tokens_reservation_status",
        "reservation_tokens",
        ["reservation_id", "status"],
    )


def downgrade() -> None:
    op.drop_index("ix_reservation_tokens_reservation_status", table_name="reservation_tokens")
    op.drop_table("reservation_tokens")
    op.drop_index("ix_reservations_event_status", table_name="reservations")
    op.drop_table("reservations")
    op.drop_index("ix_events_end_time", table_name="events")
    op.drop_table("events")
