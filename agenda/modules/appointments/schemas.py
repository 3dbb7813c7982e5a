"""Appointment schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from agenda.core.enums import AppointmentStatusEnum
from agenda.modules.scheduling.schemas import SlotRead
from agenda.modules.units.schemas import UnitRead


class CandidateFields(BaseModel):
    """Candidate data typed into the booking form; every field is required."""

    model_config = ConfigDict(str_strip_whitespace=True)

    first_name: str = Field(min_length=1, max_length=255)
    last_name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    phone: str = Field(min_length=1, max_length=64)
    national_id: str = Field(min_length=1, max_length=32)
    subject: str = Field(min_length=1, max_length=255)


class CandidateScope(BaseModel):
    """Opaque references identifying one candidate's bookings at one unit."""

    model_config = ConfigDict(str_strip_whitespace=True)

    job_ref: str = Field(min_length=1, max_length=255)
    application_ref: str = Field(min_length=1, max_length=255)
    unit_id: UUID


class AppointmentCreate(CandidateScope):
    """Book a time slot."""

    time_slot_id: UUID
    candidate: CandidateFields


class AppointmentRescheduleRequest(BaseModel):
    """Move appointment to another slot."""

    new_slot_id: UUID


class AppointmentRead(BaseModel):
    """Appointment response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    unit_id: UUID
    time_slot_id: UUID | None
    job_ref: str
    application_ref: str
    first_name: str
    last_name: str
    email: str
    phone: str
    national_id: str
    subject: str
    status: AppointmentStatusEnum
    created_at: datetime
    updated_at: datetime


class AppointmentDetail(AppointmentRead):
    """Appointment with its unit and slot, for the manage screen."""

    unit: UnitRead
    time_slot: SlotRead | None
