"""Initial schema: admins, booking pages, appointments, scheduled messages.

Revision ID: 001_initial
Revises:
Create Date: 2025-06-01

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _appointment_columns() -> list[sa.Column]:
    return [
        sa.Column("admin_id", sa.Integer(), nullable=False),
        sa.Column("slug_id", sa.Integer(), nullable=True),
        sa.Column("client_name", sa.String(), nullable=False),
        sa.Column("client_email", sa.String(), nullable=False),
        sa.Column("appointment_date", sa.DateTime(), nullable=False),
        sa.Column("details", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["admin_id"], ["admins.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["slug_id"], ["slugs.id"], ondelete="SET NULL"),
    ]


def _scheduled_message_columns() -> list[sa.Column]:
    return [
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("message", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    ]


def upgrade() -> None:
    op.create_table(
        "admins",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("notification_email", sa.String(), nullable=False),
        sa.Column("unique_link_slug", sa.String(), nullable=False),
        sa.Column("hashed_password", sa.String(), nullable=False),
        sa.Column("password_reset_token", sa.String(), nullable=True),
        sa.Column("password_reset_expires", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_admins_email"), "admins", ["email"], unique=True)
    op.create_index(op.f("ix_admins_unique_link_slug"), "admins", ["unique_link_slug"], unique=True)
    op.create_index(op.f("ix_admins_password_reset_token"), "admins", ["password_reset_token"], unique=False)

    op.create_table(
        "slugs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("admin_id", sa.Integer(), nullable=False),
        sa.Column("slug", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["admin_id"], ["admins.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("admin_id", "slug", name="uq_slugs_admin_slug"),
    )
    op.create_index(op.f("ix_slugs_admin_id"), "slugs", ["admin_id"], unique=False)

    op.create_table(
        "slug_fields",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("slug_id", sa.Integer(), nullable=False),
        sa.Column("field_name", sa.String(), nullable=False),
        sa.Column("field_label", sa.String(), nullable=False),
        sa.Column("field_type", sa.String(), nullable=False, server_default="text"),
        sa.Column("is_required", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.ForeignKeyConstraint(["slug_id"], ["slugs.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_slug_fields_slug_id"), "slug_fields", ["slug_id"], unique=False)

    op.create_table(
        "appointments",
        sa.Column("id", sa.Integer(), nullable=False),
        *_appointment_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("admin_id", "appointment_date", name="uq_appointments_admin_slot"),
    )
    op.create_index(op.f("ix_appointments_admin_id"), "appointments", ["admin_id"], unique=False)
    op.create_index(op.f("ix_appointments_slug_id"), "appointments", ["slug_id"], unique=False)
    op.create_index(op.f("ix_appointments_appointment_date"), "appointments", ["appointment_date"], unique=False)

    op.create_table(
        "cancelled_appointments",
        sa.Column("id", sa.Integer(), autoincrement=False, nullable=False),
        *_appointment_columns(),
        sa.Column("cancelled_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_cancelled_appointments_admin_id"), "cancelled_appointments", ["admin_id"], unique=False
    )
    op.create_index(
        op.f("ix_cancelled_appointments_slug_id"), "cancelled_appointments", ["slug_id"], unique=False
    )
    op.create_index(
        op.f("ix_cancelled_appointments_appointment_date"),
        "cancelled_appointments",
        ["appointment_date"],
        unique=False,
    )
    op.create_index(
        op.f("ix_cancelled_appointments_cancelled_at"), "cancelled_appointments", ["cancelled_at"], unique=False
    )

    op.create_table(
        "appointment_custom_data",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("appointment_id", sa.Integer(), nullable=False),
        sa.Column("slug_field_id", sa.Integer(), nullable=True),
        sa.Column("field_name", sa.String(), nullable=False),
        sa.Column("field_value", sa.String(), nullable=False),
        sa.ForeignKeyConstraint(["slug_field_id"], ["slug_fields.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_appointment_custom_data_appointment_id"), "appointment_custom_data", ["appointment_id"], unique=False
    )

    op.create_table(
        "reminders",
        sa.Column("appointment_id", sa.Integer(), nullable=False),
        sa.Column("reminder_time", sa.DateTime(), nullable=False),
        *_scheduled_message_columns(),
    )
    op.create_index(op.f("ix_reminders_appointment_id"), "reminders", ["appointment_id"], unique=False)
    op.create_index(op.f("ix_reminders_reminder_time"), "reminders", ["reminder_time"], unique=False)
    op.create_index(op.f("ix_reminders_status"), "reminders", ["status"], unique=False)

    op.create_table(
        "thank_you_messages",
        sa.Column("appointment_id", sa.Integer(), nullable=False),
        sa.Column("send_time", sa.DateTime(), nullable=False),
        *_scheduled_message_columns(),
    )
    op.create_index(
        op.f("ix_thank_you_messages_appointment_id"), "thank_you_messages", ["appointment_id"], unique=True
    )
    op.create_index(op.f("ix_thank_you_messages_send_time"), "thank_you_messages", ["send_time"], unique=False)
    op.create_index(op.f("ix_thank_you_messages_status"), "thank_you_messages", ["status"], unique=False)


def downgrade() -> None:
    op.drop_table("thank_you_messages")
    op.drop_table("reminders")
    op.drop_table("appointment_custom_data")
    op.drop_table("cancelled_appointments")
    op.drop_table("appointments")
    op.drop_table("slug_fields")
    op.drop_table("slugs")
    op.drop_table("admins")
