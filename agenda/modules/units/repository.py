"""Unit repository layer."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from agenda.core.database import store_errors
from agenda.modules.units.models import Unit


class UnitsRepository:
    """DB access for units."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_units(self) -> list[Unit]:
        with store_errors("carregar unidades"):
            stmt = select(Unit).order_by(Unit.name.asc())
            return list((await self.session.scalars(stmt)).all())

    async def get_unit_by_id(self, unit_id: UUID) -> Unit | None:
        with store_errors("carregar unidade"):
            return await self.session.get(Unit, unit_id)

    async def get_units_by_ids(self, unit_ids: set[UUID]) -> dict[UUID, Unit]:
        if not unit_ids:
            return {}
        with store_errors("carregar unidades"):
            stmt = select(Unit).where(Unit.id.in_(unit_ids))
            return {unit.id: unit for unit in (await self.session.scalars(stmt)).all()}

    async def create_unit(self, name: str, address: str, duration: int) -> Unit:
        unit = Unit(name=name, address=address, duration=duration)
        with store_errors("criar unidade"):
            self.session.add(unit)
            await self.session.flush()
        return unit

    async def update_unit(self, unit: Unit, **fields: object) -> Unit:
        for key, value in fields.items():
            setattr(unit, key, value)
        with store_errors("atualizar unidade"):
            await self.session.flush()
        return unit
