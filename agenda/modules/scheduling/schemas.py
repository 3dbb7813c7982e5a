"""Scheduling schemas."""

from __future__ import annotations

import datetime as dt
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _whole_minute(value: dt.time) -> dt.time:
    """Slots start on whole minutes."""
    if value.second or value.microsecond:
        raise ValueError("Informe o horário no formato HH:MM, sem segundos")
    return value


class SlotCreate(BaseModel):
    """Create single time slot request."""

    unit_id: UUID
    date: dt.date
    time: dt.time

    @field_validator("time")
    @classmethod
    def validate_time(cls, value: dt.time) -> dt.time:
        return _whole_minute(value)


class BulkSlotCreate(BaseModel):
    """Bulk slot generation request.

    ``exceptions`` is the coordinator's free text, e.g. ``"12:00, 13:00-14:00"``.
    """

    unit_id: UUID
    start_date: dt.date
    end_date: dt.date
    start_time: dt.time
    end_time: dt.time
    interval_minutes: int = Field(default=60, gt=0, le=24 * 60)
    exceptions: str = Field(default="", max_length=1024)

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_clock(cls, value: dt.time) -> dt.time:
        return _whole_minute(value)

    @model_validator(mode="after")
    def validate_ranges(self) -> "BulkSlotCreate":
        if self.end_date < self.start_date:
            raise ValueError("A data final deve ser igual ou posterior à data inicial")
        if self.end_time <= self.start_time:
            raise ValueError("O horário final deve ser posterior ao horário inicial")
        return self


class SlotAvailabilityUpdate(BaseModel):
    """Toggle slot availability request."""

    available: bool


class SlotRead(BaseModel):
    """Time slot response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    unit_id: UUID
    date: dt.date
    time: dt.time
    available: bool
    created_at: dt.datetime
    updated_at: dt.datetime


class SlotDay(BaseModel):
    """Slots of one calendar day, ordered by time."""

    date: dt.date
    slots: list[SlotRead]


class FailedSlotRead(BaseModel):
    """Bulk item the store rejected."""

    date: dt.date
    time: dt.time
    reason: str


class BulkSlotResult(BaseModel):
    """Outcome of a best-effort bulk insert."""

    requested: int
    created: int
    failed: int
    failed_items: list[FailedSlotRead]
