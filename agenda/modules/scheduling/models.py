"""Scheduling ORM models."""

from __future__ import annotations

import datetime as dt
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Boolean, Date, ForeignKey, Time, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from agenda.core.database import Base, BaseModelMixin

if TYPE_CHECKING:
    from agenda.modules.units.models import Unit


class TimeSlot(BaseModelMixin, Base):
    """Bookable (unit, date, time) combination."""

    __tablename__ = "time_slots"
    __table_args__ = (UniqueConstraint("unit_id", "date", "time", name="uq_time_slots_unit_date_time"),)

    unit_id: Mapped[UUID] = mapped_column(
        ForeignKey("units.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    time: Mapped[dt.time] = mapped_column(Time(timezone=False), nullable=False)
    available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)

    unit: Mapped["Unit"] = relationship(back_populates="time_slots")
