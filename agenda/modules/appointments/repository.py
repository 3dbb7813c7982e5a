"""Appointment repository layer."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import ColumnElement, Select, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from agenda.core.database import store_errors
from agenda.core.enums import AppointmentStatusEnum
from agenda.modules.appointments.models import LIVE_CANDIDATE_INDEX, LIVE_SLOT_INDEX, Appointment
from agenda.shared.exceptions import DuplicateBookingException, SlotUnavailableException

DUPLICATE_BOOKING_MESSAGE = (
    "Você já possui um agendamento para esta unidade. Cancele o agendamento atual para criar um novo."
)
SLOT_TAKEN_MESSAGE = "Este horário não está mais disponível. Escolha outro horário."


def _live() -> ColumnElement[bool]:
    return Appointment.status != AppointmentStatusEnum.CANCELLED


class AppointmentsRepository:
    """DB operations for appointments."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_appointment(
        self,
        *,
        unit_id: UUID,
        time_slot_id: UUID,
        job_ref: str,
        application_ref: str,
        first_name: str,
        last_name: str,
        email: str,
        phone: str,
        national_id: str,
        subject: str,
    ) -> Appointment:
        appointment = Appointment(
            unit_id=unit_id,
            time_slot_id=time_slot_id,
            job_ref=job_ref,
            application_ref=application_ref,
            first_name=first_name,
            last_name=last_name,
            email=email,
            phone=phone,
            national_id=national_id,
            subject=subject,
            status=AppointmentStatusEnum.SCHEDULED,
        )
        with store_errors("criar agendamento"):
            try:
                async with self.session.begin_nested():
                    self.session.add(appointment)
            except IntegrityError as exc:
                # a concurrent session won the race past the pre-checks
                if LIVE_CANDIDATE_INDEX in str(exc.orig):
                    raise DuplicateBookingException(DUPLICATE_BOOKING_MESSAGE) from exc
                if LIVE_SLOT_INDEX in str(exc.orig):
                    raise SlotUnavailableException(SLOT_TAKEN_MESSAGE) from exc
                raise
        return appointment

    async def get_appointment_by_id(self, appointment_id: UUID) -> Appointment | None:
        stmt = (
            select(Appointment)
            .options(selectinload(Appointment.unit), selectinload(Appointment.time_slot))
            .where(Appointment.id == appointment_id)
            .execution_options(populate_existing=True)
        )
        with store_errors("carregar agendamento"):
            return await self.session.scalar(stmt)

    async def find_live_appointment(
        self,
        job_ref: str,
        application_ref: str,
        unit_id: UUID,
    ) -> Appointment | None:
        stmt = select(Appointment).where(
            Appointment.job_ref == job_ref,
            Appointment.application_ref == application_ref,
            Appointment.unit_id == unit_id,
            _live(),
        )
        with store_errors("verificar agendamentos existentes"):
            return await self.session.scalar(stmt)

    async def list_candidate_appointments(
        self,
        job_ref: str,
        application_ref: str,
        unit_id: UUID,
    ) -> list[Appointment]:
        stmt = (
            select(Appointment)
            .options(selectinload(Appointment.unit), selectinload(Appointment.time_slot))
            .where(
                Appointment.job_ref == job_ref,
                Appointment.application_ref == application_ref,
                Appointment.unit_id == unit_id,
            )
            .order_by(Appointment.created_at.desc())
        )
        with store_errors("carregar agendamentos"):
            return list((await self.session.scalars(stmt)).all())

    async def list_appointments(
        self,
        unit_id: UUID | None,
        status: AppointmentStatusEnum | None,
        limit: int,
        offset: int,
    ) -> tuple[list[Appointment], int]:
        base_stmt: Select[tuple[Appointment]] = select(Appointment).options(
            selectinload(Appointment.unit),
            selectinload(Appointment.time_slot),
        )
        if unit_id is not None:
            base_stmt = base_stmt.where(Appointment.unit_id == unit_id)
        if status is not None:
            base_stmt = base_stmt.where(Appointment.status == status)

        with store_errors("carregar agendamentos"):
            count_stmt = select(func.count()).select_from(base_stmt.subquery())
            total = int((await self.session.scalar(count_stmt)) or 0)

            stmt = base_stmt.order_by(Appointment.created_at.desc()).limit(limit).offset(offset)
            items = list((await self.session.scalars(stmt)).all())
        return items, total

    async def list_all_appointments(self) -> list[Appointment]:
        stmt = select(Appointment).order_by(Appointment.created_at.desc())
        with store_errors("carregar agendamentos"):
            return list((await self.session.scalars(stmt)).all())

    async def mark_cancelled(self, appointment_id: UUID) -> tuple[bool, UUID | None]:
        """Cancel a live appointment.

        Returns whether a row changed and the slot that row held at update time,
        which can differ from an earlier read if another session moved it.
        """
        stmt = (
            update(Appointment)
            .where(Appointment.id == appointment_id, _live())
            .values(status=AppointmentStatusEnum.CANCELLED)
            .returning(Appointment.time_slot_id)
            .execution_options(synchronize_session=False)
        )
        with store_errors("cancelar agendamento"):
            row = (await self.session.execute(stmt)).first()
        if row is None:
            return False, None
        return True, row.time_slot_id

    async def move_to_slot(self, appointment_id: UUID, old_slot_id: UUID | None, new_slot_id: UUID) -> bool:
        """Point a live appointment at a new slot, only if it still holds ``old_slot_id``."""
        stmt = (
            update(Appointment)
            .where(
                Appointment.id == appointment_id,
                Appointment.time_slot_id == old_slot_id,
                _live(),
            )
            .values(time_slot_id=new_slot_id, status=AppointmentStatusEnum.RESCHEDULED)
            .returning(Appointment.id)
            .execution_options(synchronize_session=False)
        )
        with store_errors("reagendar"):
            return (await self.session.scalar(stmt)) is not None
