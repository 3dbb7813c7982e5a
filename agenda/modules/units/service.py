"""Unit business logic layer."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from agenda.core.database import get_db_session
from agenda.modules.units.models import Unit
from agenda.modules.units.repository import UnitsRepository
from agenda.modules.units.schemas import UnitCreate, UnitUpdate
from agenda.shared.exceptions import NotFoundException

logger = logging.getLogger(__name__)


class UnitsService:
    """Units are plain records edited by coordinators."""

    def __init__(self, repository: UnitsRepository) -> None:
        self.repository = repository

    async def list_units(self) -> list[Unit]:
        return await self.repository.list_units()

    async def get_unit(self, unit_id: UUID) -> Unit:
        unit = await self.repository.get_unit_by_id(unit_id)
        if unit is None:
            raise NotFoundException("Unidade não encontrada")
        return unit

    async def create_unit(self, payload: UnitCreate) -> Unit:
        unit = await self.repository.create_unit(payload.name, payload.address, payload.duration)
        logger.info("Unit created: %s (%s)", unit.id, unit.name)
        return unit

    async def update_unit(self, unit_id: UUID, payload: UnitUpdate) -> Unit:
        """Apply the fields present in the payload."""
        unit = await self.get_unit(unit_id)
        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        if not changes:
            return unit
        unit = await self.repository.update_unit(unit, **changes)
        logger.info("Unit %s updated: %s", unit.id, sorted(changes))
        return unit


async def get_units_service(session: AsyncSession = Depends(get_db_session)) -> UnitsService:
    """Dependency provider for units service."""
    return UnitsService(UnitsRepository(session))
