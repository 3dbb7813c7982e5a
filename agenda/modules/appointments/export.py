"""CSV export of appointments for coordinators."""

from __future__ import annotations

import csv
import io
import logging
from collections.abc import Iterable, Mapping
from datetime import date
from uuid import UUID

from fastapi import Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from agenda.core.config import get_settings
from agenda.core.database import get_db_session
from agenda.core.enums import AppointmentStatusEnum
from agenda.modules.appointments.models import Appointment
from agenda.modules.appointments.repository import AppointmentsRepository
from agenda.modules.scheduling.models import TimeSlot
from agenda.modules.scheduling.repository import SchedulingRepository
from agenda.modules.units.models import Unit
from agenda.modules.units.repository import UnitsRepository

settings = get_settings()
logger = logging.getLogger(__name__)

EXPORT_HEADERS = (
    "Unidade",
    "Data",
    "Horário",
    "Nome Completo",
    "E-mail",
    "Telefone",
    "CPF",
    "Disciplina",
    "Status",
    "Job ID",
    "Application ID",
)

STATUS_LABELS = {
    AppointmentStatusEnum.SCHEDULED: "Agendado",
    AppointmentStatusEnum.RESCHEDULED: "Reagendado",
    AppointmentStatusEnum.CANCELLED: "Cancelado",
}


def build_export_rows(
    appointments: Iterable[Appointment],
    units: Mapping[UUID, Unit],
    slots: Mapping[UUID, TimeSlot],
) -> list[list[str]]:
    """One row per appointment; a missing unit or slot leaves its cells empty."""
    rows: list[list[str]] = []
    for appointment in appointments:
        unit = units.get(appointment.unit_id)
        slot = slots.get(appointment.time_slot_id) if appointment.time_slot_id else None
        rows.append(
            [
                unit.name if unit else "",
                slot.date.isoformat() if slot else "",
                slot.time.strftime("%H:%M") if slot else "",
                appointment.full_name,
                appointment.email,
                appointment.phone,
                appointment.national_id,
                appointment.subject,
                STATUS_LABELS.get(appointment.status, str(appointment.status)),
                appointment.job_ref,
                appointment.application_ref,
            ],
        )
    return rows


def render_csv(rows: Iterable[list[str]], delimiter: str = ",") -> str:
    """Render header plus rows, every field quoted."""
    output = io.StringIO()
    writer = csv.writer(output, delimiter=delimiter, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(EXPORT_HEADERS)
    writer.writerows(rows)
    return output.getvalue()


def export_filename(today: date) -> str:
    return f"agendamentos_{today.isoformat()}.csv"


class AppointmentExportService:
    """Join appointments with their units and slots into a CSV document."""

    def __init__(
        self,
        appointments_repository: AppointmentsRepository,
        scheduling_repository: SchedulingRepository,
        units_repository: UnitsRepository,
    ) -> None:
        self.appointments_repository = appointments_repository
        self.scheduling_repository = scheduling_repository
        self.units_repository = units_repository

    async def export_csv(self) -> str:
        appointments = await self.appointments_repository.list_all_appointments()
        units = await self.units_repository.get_units_by_ids({appointment.unit_id for appointment in appointments})
        slots = await self.scheduling_repository.get_slots_by_ids(
            appointment.time_slot_id for appointment in appointments
        )
        content = render_csv(build_export_rows(appointments, units, slots), delimiter=settings.export_delimiter)
        logger.info("CSV export generated: %d appointments", len(appointments))
        return content

    async def export_response(self, today: date) -> StreamingResponse:
        content = await self.export_csv()
        return StreamingResponse(
            iter([content]),
            media_type="text/csv; charset=utf-8",
            headers={"Content-Disposition": f"attachment; filename={export_filename(today)}"},
        )


async def get_export_service(session: AsyncSession = Depends(get_db_session)) -> AppointmentExportService:
    """Dependency provider for the CSV export."""
    return AppointmentExportService(
        appointments_repository=AppointmentsRepository(session),
        scheduling_repository=SchedulingRepository(session),
        units_repository=UnitsRepository(session),
    )
