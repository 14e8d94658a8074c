"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18
"""
from alembic import op
import sqlalchemy as sa


revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "venues",
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("city", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("opening_time", sa.Text(), nullable=False, server_default=sa.text("'06:00'")),
        sa.Column("closing_time", sa.Text(), nullable=False, server_default=sa.text("'23:00'")),
        sa.Column("days_available", sa.Text(), nullable=False, server_default=sa.text("'[0, 1, 2, 3, 4, 5, 6]'")),
        sa.Column("status", sa.Text(), nullable=False, server_default=sa.text("'open'")),
        sa.Column("approval_status", sa.Text(), nullable=False, server_default=sa.text("'pending'")),
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("description", sa.Text()),
        sa.Column("address", sa.Text()),
        sa.Column("created_at", sa.Text(), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.Text(), server_default=sa.text("CURRENT_TIMESTAMP")),
    )

    op.create_table(
        "venue_fields",
        sa.Column("venue_id", sa.Integer(), sa.ForeignKey("venues.id", ondelete="CASCADE"), nullable=False),
        sa.Column("field_name", sa.Text(), nullable=False),
        sa.Column("status", sa.Text(), nullable=False, server_default=sa.text("'open'")),
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("field_number", sa.Text()),
        sa.Column("field_type", sa.Text(), server_default=sa.text("'futsal'")),
        sa.Column("created_at", sa.Text(), server_default=sa.text("CURRENT_TIMESTAMP")),
    )

    op.create_table(
        "time_slots",
        sa.Column("venue_id", sa.Integer(), sa.ForeignKey("venues.id", ondelete="CASCADE"), nullable=False),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.Text(), nullable=False),
        sa.Column("end_time", sa.Text(), nullable=False),
        sa.Column("is_active", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("field_id", sa.Integer(), sa.ForeignKey("venue_fields.id", ondelete="CASCADE")),
    )
    op.create_index("ix_time_slots_lookup", "time_slots", ["venue_id", "day_of_week", "field_id"])

    op.create_table(
        "venue_special_occasions",
        sa.Column("venue_id", sa.Integer(), sa.ForeignKey("venues.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("start_date", sa.Text(), nullable=False),
        sa.Column("end_date", sa.Text(), nullable=False),
        sa.Column("override_type", sa.Text(), nullable=False),
        sa.Column("is_recurring", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("field_id", sa.Integer(), sa.ForeignKey("venue_fields.id", ondelete="CASCADE")),
        sa.Column("description", sa.Text()),
        sa.Column("custom_opening_time", sa.Text()),
        sa.Column("custom_closing_time", sa.Text()),
        sa.Column("custom_day_charges", sa.Float()),
        sa.Column("custom_night_charges", sa.Float()),
        sa.Column("recurrence_pattern", sa.Text()),
        sa.Column("created_at", sa.Text(), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.Text(), server_default=sa.text("CURRENT_TIMESTAMP")),
    )

    op.create_table(
        "bookings",
        sa.Column("venue_id", sa.Integer(), sa.ForeignKey("venues.id", ondelete="CASCADE"), nullable=False),
        sa.Column("booking_date", sa.Text(), nullable=False),
        sa.Column("start_time", sa.Text(), nullable=False),
        sa.Column("end_time", sa.Text(), nullable=False),
        sa.Column("status", sa.Text(), nullable=False, server_default=sa.text("'pending'")),
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("field_id", sa.Integer(), sa.ForeignKey("venue_fields.id")),
        sa.Column("player_id", sa.Integer()),
        sa.Column("duration_hours", sa.Integer()),
        sa.Column("total_amount", sa.Float()),
        sa.Column("created_at", sa.Text(), server_default=sa.text("CURRENT_TIMESTAMP")),
    )

    op.create_table(
        "booking_slots",
        sa.Column("booking_id", sa.Integer(), sa.ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False),
        sa.Column("slot_start_time", sa.Text(), nullable=False),
        sa.Column("slot_end_time", sa.Text(), nullable=False),
        sa.Column("id", sa.Integer(), primary_key=True),
    )


def downgrade():
    op.drop_table("booking_slots")
    op.drop_table("bookings")
    op.drop_table("venue_special_occasions")
    op.drop_index("ix_time_slots_lookup", table_name="time_slots")
    op.drop_table("time_slots")
    op.drop_table("venue_fields")
    op.drop_table("venues")
