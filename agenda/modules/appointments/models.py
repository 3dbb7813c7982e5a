"""Appointment ORM models."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from agenda.core.database import Base, BaseModelMixin
from agenda.core.enums import AppointmentStatusEnum

if TYPE_CHECKING:
    from agenda.modules.scheduling.models import TimeSlot
    from agenda.modules.units.models import Unit

LIVE_SLOT_INDEX = "uq_appointments_live_time_slot"
LIVE_CANDIDATE_INDEX = "uq_appointments_live_candidate_unit"


class Appointment(BaseModelMixin, Base):
    """Candidate booking of a time slot."""

    __tablename__ = "appointments"
    __table_args__ = (
        Index(
            LIVE_SLOT_INDEX,
            "time_slot_id",
            unique=True,
            postgresql_where=text("status <> 'cancelled'"),
        ),
        Index(
            LIVE_CANDIDATE_INDEX,
            "job_ref",
            "application_ref",
            "unit_id",
            unique=True,
            postgresql_where=text("status <> 'cancelled'"),
        ),
    )

    unit_id: Mapped[UUID] = mapped_column(
        ForeignKey("units.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    # Only cancelled appointments lose their slot: occupied slots cannot be removed.
    time_slot_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("time_slots.id", ondelete="SET NULL"),
        nullable=True,
    )
    job_ref: Mapped[str] = mapped_column(String(255), nullable=False)
    application_ref: Mapped[str] = mapped_column(String(255), nullable=False)

    first_name: Mapped[str] = mapped_column(String(255), nullable=False)
    last_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    phone: Mapped[str] = mapped_column(String(64), nullable=False)
    national_id: Mapped[str] = mapped_column(String(32), nullable=False)
    subject: Mapped[str] = mapped_column(String(255), nullable=False)

    status: Mapped[AppointmentStatusEnum] = mapped_column(
        SAEnum(
            AppointmentStatusEnum,
            name="appointment_status_enum",
            native_enum=False,
            values_callable=lambda members: [member.value for member in members],
        ),
        default=AppointmentStatusEnum.SCHEDULED,
        nullable=False,
        index=True,
    )

    unit: Mapped["Unit"] = relationship()
    time_slot: Mapped["TimeSlot | None"] = relationship()

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
