"""Scheduling repository layer."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, time
from uuid import UUID

from sqlalchemy import delete, exists, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from agenda.core.database import store_errors
from agenda.core.enums import AppointmentStatusEnum
from agenda.modules.appointments.models import Appointment
from agenda.modules.scheduling.models import TimeSlot
from agenda.shared.exceptions import ConflictException


class SchedulingRepository:
    """DB access for time slots."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_slot(self, unit_id: UUID, slot_date: date, slot_time: time) -> TimeSlot:
        """Insert one available slot inside a savepoint so a failure leaves the session usable."""
        slot = TimeSlot(unit_id=unit_id, date=slot_date, time=slot_time, available=True)
        with store_errors("adicionar horário"):
            try:
                async with self.session.begin_nested():
                    self.session.add(slot)
            except IntegrityError as exc:
                raise ConflictException(
                    f"Horário {slot_date.isoformat()} {slot_time.strftime('%H:%M')} já cadastrado para esta unidade",
                ) from exc
        return slot

    async def get_slot_by_id(self, slot_id: UUID) -> TimeSlot | None:
        with store_errors("carregar horário"):
            stmt = select(TimeSlot).where(TimeSlot.id == slot_id).execution_options(populate_existing=True)
            return await self.session.scalar(stmt)

    async def get_slots_by_ids(self, slot_ids: Iterable[UUID]) -> dict[UUID, TimeSlot]:
        ids = {slot_id for slot_id in slot_ids if slot_id is not None}
        if not ids:
            return {}
        with store_errors("carregar horários"):
            stmt = select(TimeSlot).where(TimeSlot.id.in_(ids))
            return {slot.id: slot for slot in (await self.session.scalars(stmt)).all()}

    async def list_unit_slots(
        self,
        unit_id: UUID,
        from_date: date | None = None,
        available_only: bool = False,
    ) -> list[TimeSlot]:
        stmt = select(TimeSlot).where(TimeSlot.unit_id == unit_id)
        if from_date is not None:
            stmt = stmt.where(TimeSlot.date >= from_date)
        if available_only:
            stmt = stmt.where(TimeSlot.available.is_(True))
        stmt = stmt.order_by(TimeSlot.date.asc(), TimeSlot.time.asc()).execution_options(populate_existing=True)
        with store_errors("carregar horários"):
            return list((await self.session.scalars(stmt)).all())

    async def claim_slot(self, slot_id: UUID) -> bool:
        """Atomically flip an available slot to unavailable; False when it was not available."""
        stmt = (
            update(TimeSlot)
            .where(TimeSlot.id == slot_id, TimeSlot.available.is_(True))
            .values(available=False)
            .returning(TimeSlot.id)
            .execution_options(synchronize_session=False)
        )
        with store_errors("reservar horário"):
            claimed = await self.session.scalar(stmt)
        return claimed is not None

    async def release_slot(self, slot_id: UUID) -> None:
        stmt = (
            update(TimeSlot)
            .where(TimeSlot.id == slot_id)
            .values(available=True)
            .execution_options(synchronize_session=False)
        )
        with store_errors("liberar horário"):
            await self.session.execute(stmt)

    async def set_slot_availability(self, slot: TimeSlot, available: bool) -> TimeSlot:
        slot.available = available
        with store_errors("atualizar horário"):
            await self.session.flush()
        return slot

    async def has_live_appointment(self, slot_id: UUID) -> bool:
        stmt = select(
            exists().where(
                Appointment.time_slot_id == slot_id,
                Appointment.status != AppointmentStatusEnum.CANCELLED,
            ),
        )
        with store_errors("verificar agendamentos do horário"):
            return bool(await self.session.scalar(stmt))

    async def delete_slot(self, slot_id: UUID) -> bool:
        """Delete a slot only while it is available; False when it is occupied or gone."""
        stmt = (
            delete(TimeSlot)
            .where(TimeSlot.id == slot_id, TimeSlot.available.is_(True))
            .returning(TimeSlot.id)
            .execution_options(synchronize_session=False)
        )
        with store_errors("remover horário"):
            deleted = await self.session.scalar(stmt)
        return deleted is not None
