"""Units API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status

from agenda.modules.identity.service import get_current_coordinator
from agenda.modules.units.schemas import UnitCreate, UnitRead, UnitUpdate
from agenda.modules.units.service import UnitsService, get_units_service

router = APIRouter(prefix="/units", tags=["units"])


@router.get("", response_model=list[UnitRead])
async def list_units(
    service: UnitsService = Depends(get_units_service),
    _=Depends(get_current_coordinator),
) -> list[UnitRead]:
    """List units ordered by name."""
    return [UnitRead.model_validate(unit) for unit in await service.list_units()]


@router.post("", response_model=UnitRead, status_code=status.HTTP_201_CREATED)
async def create_unit(
    payload: UnitCreate,
    service: UnitsService = Depends(get_units_service),
    _=Depends(get_current_coordinator),
) -> UnitRead:
    """Create unit."""
    return UnitRead.model_validate(await service.create_unit(payload))


@router.get("/{unit_id}", response_model=UnitRead)
async def get_unit(
    unit_id: UUID,
    service: UnitsService = Depends(get_units_service),
) -> UnitRead:
    """Unit details shown on the candidate booking page."""
    return UnitRead.model_validate(await service.get_unit(unit_id))


@router.patch("/{unit_id}", response_model=UnitRead)
async def update_unit(
    unit_id: UUID,
    payload: UnitUpdate,
    service: UnitsService = Depends(get_units_service),
    _=Depends(get_current_coordinator),
) -> UnitRead:
    """Edit unit name, address or lesson duration."""
    return UnitRead.model_validate(await service.update_unit(unit_id, payload))
