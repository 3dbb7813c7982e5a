"""Scheduling API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from agenda.modules.identity.service import get_current_coordinator
from agenda.modules.scheduling.schemas import (
    BulkSlotCreate,
    BulkSlotResult,
    SlotAvailabilityUpdate,
    SlotCreate,
    SlotDay,
    SlotRead,
)
from agenda.modules.scheduling.service import SchedulingService, build_slot_days, get_scheduling_service

router = APIRouter(prefix="/scheduling", tags=["scheduling"])


@router.get("/units/{unit_id}/slots/bookable", response_model=list[SlotDay])
async def list_bookable_slots(
    unit_id: UUID,
    service: SchedulingService = Depends(get_scheduling_service),
) -> list[SlotDay]:
    """Slots a candidate can book now, grouped by date."""
    return build_slot_days(await service.list_bookable_slots(unit_id))


@router.get("/units/{unit_id}/slots/reschedulable", response_model=list[SlotDay])
async def list_reschedule_options(
    unit_id: UUID,
    service: SchedulingService = Depends(get_scheduling_service),
) -> list[SlotDay]:
    """Slots an existing booking can move to, grouped by date."""
    return build_slot_days(await service.list_reschedule_options(unit_id))


@router.get("/units/{unit_id}/slots", response_model=list[SlotDay])
async def list_management_slots(
    unit_id: UUID,
    service: SchedulingService = Depends(get_scheduling_service),
    _=Depends(get_current_coordinator),
) -> list[SlotDay]:
    """Upcoming slots including occupied ones, grouped by date."""
    return build_slot_days(await service.list_management_slots(unit_id))


@router.post("/slots", response_model=SlotRead, status_code=status.HTTP_201_CREATED)
async def create_slot(
    payload: SlotCreate,
    service: SchedulingService = Depends(get_scheduling_service),
    _=Depends(get_current_coordinator),
) -> SlotRead:
    """Add a single time slot."""
    return SlotRead.model_validate(await service.create_slot(payload))


@router.post("/slots/bulk", response_model=BulkSlotResult, status_code=status.HTTP_201_CREATED)
async def bulk_create_slots(
    payload: BulkSlotCreate,
    service: SchedulingService = Depends(get_scheduling_service),
    _=Depends(get_current_coordinator),
) -> BulkSlotResult:
    """Generate slots over a date and time range."""
    return await service.bulk_create_slots(payload)


@router.patch("/slots/{slot_id}", response_model=SlotRead)
async def update_slot_availability(
    slot_id: UUID,
    payload: SlotAvailabilityUpdate,
    service: SchedulingService = Depends(get_scheduling_service),
    _=Depends(get_current_coordinator),
) -> SlotRead:
    """Open or close a slot."""
    return SlotRead.model_validate(await service.update_slot_availability(slot_id, payload.available))


@router.delete("/slots/{slot_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_slot(
    slot_id: UUID,
    service: SchedulingService = Depends(get_scheduling_service),
    _=Depends(get_current_coordinator),
) -> Response:
    """Remove an available slot."""
    await service.remove_slot(slot_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
