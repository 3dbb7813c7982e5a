"""Unit ORM models."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from agenda.core.database import Base, BaseModelMixin

if TYPE_CHECKING:
    from agenda.modules.scheduling.models import TimeSlot


class Unit(BaseModelMixin, Base):
    """Physical location where candidates attend the test lesson."""

    __tablename__ = "units"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    address: Mapped[str] = mapped_column(String(512), nullable=False)
    duration: Mapped[int] = mapped_column(Integer, default=60, nullable=False)

    time_slots: Mapped[list["TimeSlot"]] = relationship(
        back_populates="unit",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
