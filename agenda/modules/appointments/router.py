"""Appointments API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import StreamingResponse

from agenda.core.enums import AppointmentStatusEnum
from agenda.modules.appointments.export import AppointmentExportService, get_export_service
from agenda.modules.appointments.schemas import (
    AppointmentCreate,
    AppointmentDetail,
    AppointmentRead,
    AppointmentRescheduleRequest,
    CandidateScope,
)
from agenda.modules.appointments.service import AppointmentService, get_appointment_service
from agenda.modules.identity.service import get_current_coordinator
from agenda.shared.pagination import Page, build_page, get_pagination_params
from agenda.shared.utils import local_now

router = APIRouter(prefix="/appointments", tags=["appointments"])


@router.post("", response_model=AppointmentDetail, status_code=status.HTTP_201_CREATED)
async def create_appointment(
    payload: AppointmentCreate,
    service: AppointmentService = Depends(get_appointment_service),
) -> AppointmentDetail:
    """Book a time slot for a candidate."""
    appointment = await service.create_appointment(payload)
    return AppointmentDetail.model_validate(appointment)


@router.get("", response_model=Page[AppointmentRead])
async def list_appointments(
    unit_id: UUID | None = Query(default=None),
    status_filter: AppointmentStatusEnum | None = Query(default=None, alias="status"),
    pagination=Depends(get_pagination_params),
    service: AppointmentService = Depends(get_appointment_service),
    _=Depends(get_current_coordinator),
) -> Page[AppointmentRead]:
    """List appointments, newest first."""
    items, total = await service.list_appointments(unit_id, status_filter, pagination.limit, pagination.offset)
    serialized = [AppointmentRead.model_validate(item) for item in items]
    return build_page(serialized, total, pagination)


@router.get("/export.csv", response_class=StreamingResponse)
async def export_appointments(
    service: AppointmentExportService = Depends(get_export_service),
    _=Depends(get_current_coordinator),
) -> StreamingResponse:
    """Download all appointments as CSV."""
    return await service.export_response(local_now().date())


@router.get("/candidate", response_model=list[AppointmentDetail])
async def list_candidate_appointments(
    job_ref: str = Query(min_length=1, max_length=255),
    application_ref: str = Query(min_length=1, max_length=255),
    unit_id: UUID = Query(),
    service: AppointmentService = Depends(get_appointment_service),
) -> list[AppointmentDetail]:
    """Appointments of one candidate at one unit."""
    scope = CandidateScope(job_ref=job_ref, application_ref=application_ref, unit_id=unit_id)
    appointments = await service.list_candidate_appointments(scope)
    return [AppointmentDetail.model_validate(item) for item in appointments]


@router.get("/{appointment_id}", response_model=AppointmentDetail)
async def get_appointment(
    appointment_id: UUID,
    service: AppointmentService = Depends(get_appointment_service),
) -> AppointmentDetail:
    """Appointment with its unit and slot."""
    return AppointmentDetail.model_validate(await service.get_appointment(appointment_id))


@router.post("/{appointment_id}/reschedule", response_model=AppointmentDetail)
async def reschedule_appointment(
    appointment_id: UUID,
    payload: AppointmentRescheduleRequest,
    service: AppointmentService = Depends(get_appointment_service),
) -> AppointmentDetail:
    """Move the appointment to another slot."""
    appointment = await service.reschedule_appointment(appointment_id, payload.new_slot_id)
    return AppointmentDetail.model_validate(appointment)


@router.post("/{appointment_id}/cancel", response_model=AppointmentDetail)
async def cancel_appointment(
    appointment_id: UUID,
    service: AppointmentService = Depends(get_appointment_service),
) -> AppointmentDetail:
    """Cancel the appointment and free its slot."""
    appointment = await service.cancel_appointment(appointment_id)
    return AppointmentDetail.model_validate(appointment)
