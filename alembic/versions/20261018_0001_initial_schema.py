"""Initial schema

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 09:00:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "20261018_0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


appointment_status_enum = sa.Enum(
    "scheduled",
    "rescheduled",
    "cancelled",
    name="appointment_status_enum",
    native_enum=False,
)
LIVE_APPOINTMENT = sa.text("status <> 'cancelled'")


def _id_col() -> sa.Column:
    return sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False)


def _created_col() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), nullable=False)


def _updated_col() -> sa.Column:
    return sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False)


def upgrade() -> None:
    op.create_table(
        "units",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("address", sa.String(length=512), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False, server_default="60"),
    )
    op.create_index("ix_units_name", "units", ["name"])

    op.create_table(
        "time_slots",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("unit_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("time", sa.Time(timezone=False), nullable=False),
        sa.Column("available", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.ForeignKeyConstraint(
            ["unit_id"],
            ["units.id"],
            name="fk_time_slots_unit_id_units",
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint("unit_id", "date", "time", name="uq_time_slots_unit_date_time"),
    )
    op.create_index("ix_time_slots_unit_id", "time_slots", ["unit_id"])
    op.create_index("ix_time_slots_date", "time_slots", ["date"])
    op.create_index("ix_time_slots_available", "time_slots", ["available"])

    op.create_table(
        "appointments",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("unit_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("time_slot_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("job_ref", sa.String(length=255), nullable=False),
        sa.Column("application_ref", sa.String(length=255), nullable=False),
        sa.Column("first_name", sa.String(length=255), nullable=False),
        sa.Column("last_name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("phone", sa.String(length=64), nullable=False),
        sa.Column("national_id", sa.String(length=32), nullable=False),
        sa.Column("subject", sa.String(length=255), nullable=False),
        sa.Column("status", appointment_status_enum, nullable=False, server_default="scheduled"),
        sa.ForeignKeyConstraint(
            ["unit_id"],
            ["units.id"],
            name="fk_appointments_unit_id_units",
            ondelete="RESTRICT",
        ),
        sa.ForeignKeyConstraint(
            ["time_slot_id"],
            ["time_slots.id"],
            name="fk_appointments_time_slot_id_time_slots",
            ondelete="SET NULL",
        ),
    )
    op.create_index("ix_appointments_unit_id", "appointments", ["unit_id"])
    op.create_index("ix_appointments_status", "appointments", ["status"])
    op.create_index(
        "uq_appointments_live_time_slot",
        "appointments",
        ["time_slot_id"],
        unique=True,
        postgresql_where=LIVE_APPOINTMENT,
    )
    op.create_index(
        "uq_appointments_live_candidate_unit",
        "appointments",
        ["job_ref", "application_ref", "unit_id"],
        unique=True,
        postgresql_where=LIVE_APPOINTMENT,
    )


def downgrade() -> None:
    op.drop_index("uq_appointments_live_candidate_unit", table_name="appointments")
    op.drop_index("uq_appointments_live_time_slot", table_name="appointments")
    op.drop_index("ix_appointments_status", table_name="appointments")
    op.drop_index("ix_appointments_unit_id", table_name="appointments")
    op.drop_table("appointments")

    op.drop_index("ix_time_slots_available", table_name="time_slots")
    op.drop_index("ix_time_slots_date", table_name="time_slots")
    op.drop_index("ix_time_slots_unit_id", table_name="time_slots")
    op.drop_table("time_slots")

    op.drop_index("ix_units_name", table_name="units")
    op.drop_table("units")
