"""Scheduling business logic layer."""

from __future__ import annotations

import logging
from datetime import datetime
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from agenda.core.config import get_settings
from agenda.core.database import get_db_session
from agenda.core.metrics import record_bulk_outcome
from agenda.modules.scheduling.eligibility import filter_open_slots, filter_slots, group_slots_by_date
from agenda.modules.scheduling.generator import generate_slot_requests, parse_exceptions
from agenda.modules.scheduling.models import TimeSlot
from agenda.modules.scheduling.repository import SchedulingRepository
from agenda.modules.scheduling.schemas import (
    BulkSlotCreate,
    BulkSlotResult,
    FailedSlotRead,
    SlotCreate,
    SlotDay,
    SlotRead,
)
from agenda.modules.units.repository import UnitsRepository
from agenda.shared.exceptions import AppException, ConflictException, NotFoundException
from agenda.shared.utils import local_now

settings = get_settings()
logger = logging.getLogger(__name__)


def build_slot_days(slots: list[TimeSlot]) -> list[SlotDay]:
    """Serialize slots grouped per date."""
    return [
        SlotDay(date=day_slots[0].date, slots=[SlotRead.model_validate(slot) for slot in day_slots])
        for day_slots in group_slots_by_date(slots).values()
    ]


class SchedulingService:
    """Time slot management and slot visibility."""

    def __init__(self, repository: SchedulingRepository, units_repository: UnitsRepository) -> None:
        self.repository = repository
        self.units_repository = units_repository

    async def _ensure_unit(self, unit_id: UUID) -> None:
        if await self.units_repository.get_unit_by_id(unit_id) is None:
            raise NotFoundException("Unidade não encontrada")

    async def create_slot(self, payload: SlotCreate) -> TimeSlot:
        """Add one available slot."""
        await self._ensure_unit(payload.unit_id)
        slot = await self.repository.create_slot(payload.unit_id, payload.date, payload.time)
        logger.info("Slot created: unit=%s %s %s", payload.unit_id, payload.date, payload.time)
        return slot

    async def bulk_create_slots(self, payload: BulkSlotCreate) -> BulkSlotResult:
        """Generate slots over a range and insert them one by one.

        Each insert runs on its own; a rejected item is reported and the batch
        carries on.
        """
        await self._ensure_unit(payload.unit_id)
        requests = generate_slot_requests(
            unit_id=payload.unit_id,
            start_date=payload.start_date,
            end_date=payload.end_date,
            start_time=payload.start_time,
            end_time=payload.end_time,
            interval_minutes=payload.interval_minutes,
            exceptions=parse_exceptions(payload.exceptions),
        )

        failed_items: list[FailedSlotRead] = []
        for request in requests:
            try:
                await self.repository.create_slot(request.unit_id, request.date, request.time)
            except AppException as exc:
                logger.warning(
                    "Bulk slot insert failed: unit=%s %s %s: %s",
                    request.unit_id,
                    request.date,
                    request.time,
                    exc.message,
                )
                failed_items.append(FailedSlotRead(date=request.date, time=request.time, reason=exc.message))

        created = len(requests) - len(failed_items)
        record_bulk_outcome(created=created, failed=len(failed_items))
        logger.info(
            "Bulk slot generation for unit %s: requested=%d created=%d failed=%d",
            payload.unit_id,
            len(requests),
            created,
            len(failed_items),
        )
        return BulkSlotResult(
            requested=len(requests),
            created=created,
            failed=len(failed_items),
            failed_items=failed_items,
        )

    async def update_slot_availability(self, slot_id: UUID, available: bool) -> TimeSlot:
        """Toggle availability by hand; a slot held by a live appointment cannot be reopened."""
        slot = await self.repository.get_slot_by_id(slot_id)
        if slot is None:
            raise NotFoundException("Horário não encontrado")
        if available and not slot.available and await self.repository.has_live_appointment(slot_id):
            raise ConflictException("Este horário está reservado por um agendamento ativo")
        return await self.repository.set_slot_availability(slot, available)

    async def remove_slot(self, slot_id: UUID) -> None:
        """Delete an available slot."""
        slot = await self.repository.get_slot_by_id(slot_id)
        if slot is None:
            raise NotFoundException("Horário não encontrado")
        if not await self.repository.delete_slot(slot_id):
            raise ConflictException("Não é possível remover um horário com agendamento ativo")
        logger.info("Slot removed: %s (%s %s)", slot_id, slot.date, slot.time)

    async def list_bookable_slots(self, unit_id: UUID, now: datetime | None = None) -> list[TimeSlot]:
        """Slots a candidate may book right now."""
        now = now or local_now()
        await self._ensure_unit(unit_id)
        slots = await self.repository.list_unit_slots(unit_id, from_date=now.date(), available_only=True)
        return filter_slots(
            slots,
            now,
            for_candidate=True,
            window_business_days=settings.booking_window_business_days,
            cutoff_hours=settings.booking_advance_cutoff_hours,
        )

    async def list_reschedule_options(self, unit_id: UUID, now: datetime | None = None) -> list[TimeSlot]:
        """Slots a candidate may move an existing booking to."""
        now = now or local_now()
        await self._ensure_unit(unit_id)
        slots = await self.repository.list_unit_slots(unit_id, from_date=now.date(), available_only=True)
        return filter_open_slots(slots, now)

    async def list_management_slots(self, unit_id: UUID, now: datetime | None = None) -> list[TimeSlot]:
        """Upcoming slots of a unit including occupied ones."""
        now = now or local_now()
        await self._ensure_unit(unit_id)
        slots = await self.repository.list_unit_slots(unit_id, from_date=now.date())
        return filter_slots(slots, now, for_candidate=False)


async def get_scheduling_service(session: AsyncSession = Depends(get_db_session)) -> SchedulingService:
    """Dependency provider for scheduling service."""
    return SchedulingService(SchedulingRepository(session), UnitsRepository(session))
