"""Appointment lifecycle: create, reschedule and cancel.

Every operation runs inside the request transaction. A slot is claimed with a
conditional update before the appointment row changes, so two sessions racing
for the same slot cannot both succeed; the loser gets SlotUnavailableException
and its transaction rolls back.
"""

from __future__ import annotations

import logging
from datetime import datetime
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from agenda.core.config import get_settings
from agenda.core.database import get_db_session
from agenda.core.enums import AppointmentStatusEnum, AppointmentTransitionEnum
from agenda.core.metrics import record_transition
from agenda.modules.appointments.models import Appointment
from agenda.modules.appointments.repository import (
    DUPLICATE_BOOKING_MESSAGE,
    SLOT_TAKEN_MESSAGE,
    AppointmentsRepository,
)
from agenda.modules.appointments.schemas import AppointmentCreate, CandidateScope
from agenda.modules.scheduling.repository import SchedulingRepository
from agenda.modules.scheduling.rules import is_bookable_by_candidate, is_past
from agenda.modules.units.repository import UnitsRepository
from agenda.shared.exceptions import (
    ConflictException,
    DuplicateBookingException,
    NotFoundException,
    SlotUnavailableException,
    ValidationException,
)
from agenda.shared.utils import local_now

settings = get_settings()
logger = logging.getLogger(__name__)


class AppointmentService:
    """Appointment lifecycle manager keeping slot availability in step with bookings."""

    def __init__(
        self,
        appointments_repository: AppointmentsRepository,
        scheduling_repository: SchedulingRepository,
        units_repository: UnitsRepository,
    ) -> None:
        self.appointments_repository = appointments_repository
        self.scheduling_repository = scheduling_repository
        self.units_repository = units_repository

    async def get_appointment(self, appointment_id: UUID) -> Appointment:
        appointment = await self.appointments_repository.get_appointment_by_id(appointment_id)
        if appointment is None:
            raise NotFoundException("Agendamento não encontrado")
        return appointment

    def _ensure_not_past(self, appointment: Appointment, now: datetime) -> None:
        slot = appointment.time_slot
        if slot is not None and is_past(slot.date, slot.time, now):
            raise ValidationException("Agendamentos que já aconteceram não podem ser alterados")

    async def create_appointment(self, payload: AppointmentCreate, now: datetime | None = None) -> Appointment:
        """Book a slot for the candidate identified by (job, application, unit)."""
        now = now or local_now()

        if await self.units_repository.get_unit_by_id(payload.unit_id) is None:
            raise NotFoundException("Unidade não encontrada")

        existing = await self.appointments_repository.find_live_appointment(
            payload.job_ref,
            payload.application_ref,
            payload.unit_id,
        )
        if existing is not None:
            raise DuplicateBookingException(DUPLICATE_BOOKING_MESSAGE)

        slot = await self.scheduling_repository.get_slot_by_id(payload.time_slot_id)
        if slot is None or slot.unit_id != payload.unit_id:
            raise SlotUnavailableException("Horário não encontrado para esta unidade")
        if not is_bookable_by_candidate(
            slot.date,
            slot.time,
            now,
            window_business_days=settings.booking_window_business_days,
            cutoff_hours=settings.booking_advance_cutoff_hours,
        ):
            raise SlotUnavailableException("Este horário não está disponível para agendamento")

        if not await self.scheduling_repository.claim_slot(slot.id):
            raise SlotUnavailableException(SLOT_TAKEN_MESSAGE)

        candidate = payload.candidate
        appointment = await self.appointments_repository.create_appointment(
            unit_id=payload.unit_id,
            time_slot_id=slot.id,
            job_ref=payload.job_ref,
            application_ref=payload.application_ref,
            first_name=candidate.first_name,
            last_name=candidate.last_name,
            email=str(candidate.email),
            phone=candidate.phone,
            national_id=candidate.national_id,
            subject=candidate.subject,
        )
        record_transition(AppointmentTransitionEnum.CREATE)
        logger.info(
            "Appointment %s created: unit=%s slot=%s job=%s application=%s",
            appointment.id,
            payload.unit_id,
            slot.id,
            payload.job_ref,
            payload.application_ref,
        )
        return await self.get_appointment(appointment.id)

    async def reschedule_appointment(
        self,
        appointment_id: UUID,
        new_slot_id: UUID,
        now: datetime | None = None,
    ) -> Appointment:
        """Move a live appointment to another available slot of the same unit."""
        now = now or local_now()
        appointment = await self.get_appointment(appointment_id)

        if appointment.status == AppointmentStatusEnum.CANCELLED:
            raise ConflictException("Agendamento cancelado não pode ser reagendado")
        if appointment.time_slot_id == new_slot_id:
            return appointment
        self._ensure_not_past(appointment, now)

        new_slot = await self.scheduling_repository.get_slot_by_id(new_slot_id)
        if new_slot is None or new_slot.unit_id != appointment.unit_id:
            raise SlotUnavailableException("Horário não encontrado para esta unidade")
        if is_past(new_slot.date, new_slot.time, now):
            raise SlotUnavailableException("Não é possível reagendar para um horário que já passou")

        if not await self.scheduling_repository.claim_slot(new_slot.id):
            raise SlotUnavailableException(SLOT_TAKEN_MESSAGE)

        old_slot_id = appointment.time_slot_id
        moved = await self.appointments_repository.move_to_slot(appointment.id, old_slot_id, new_slot.id)
        if not moved:
            raise ConflictException("O agendamento foi alterado em outra sessão. Atualize a página.")
        if old_slot_id is not None:
            await self.scheduling_repository.release_slot(old_slot_id)

        record_transition(AppointmentTransitionEnum.RESCHEDULE)
        logger.info("Appointment %s rescheduled: slot %s -> %s", appointment.id, old_slot_id, new_slot.id)
        return await self.get_appointment(appointment.id)

    async def cancel_appointment(self, appointment_id: UUID, now: datetime | None = None) -> Appointment:
        """Cancel and free the slot; cancelling twice changes nothing."""
        now = now or local_now()
        appointment = await self.get_appointment(appointment_id)

        if appointment.status == AppointmentStatusEnum.CANCELLED:
            return appointment
        self._ensure_not_past(appointment, now)

        cancelled, held_slot_id = await self.appointments_repository.mark_cancelled(appointment.id)
        if not cancelled:
            # another session cancelled it first and already freed the slot
            return await self.get_appointment(appointment.id)
        # release the slot the row held when cancelled, not the one read above
        if held_slot_id is not None:
            await self.scheduling_repository.release_slot(held_slot_id)

        record_transition(AppointmentTransitionEnum.CANCEL)
        logger.info("Appointment %s cancelled, slot %s released", appointment.id, held_slot_id)
        return await self.get_appointment(appointment.id)

    async def list_candidate_appointments(self, scope: CandidateScope) -> list[Appointment]:
        """All appointments of one candidate at one unit, newest first."""
        return await self.appointments_repository.list_candidate_appointments(
            scope.job_ref,
            scope.application_ref,
            scope.unit_id,
        )

    async def list_appointments(
        self,
        unit_id: UUID | None,
        status: AppointmentStatusEnum | None,
        limit: int,
        offset: int,
    ) -> tuple[list[Appointment], int]:
        return await self.appointments_repository.list_appointments(unit_id, status, limit, offset)


async def get_appointment_service(session: AsyncSession = Depends(get_db_session)) -> AppointmentService:
    """Dependency provider for appointment service."""
    return AppointmentService(
        appointments_repository=AppointmentsRepository(session),
        scheduling_repository=SchedulingRepository(session),
        units_repository=UnitsRepository(session),
    )
