from __future__ import annotations

import copy
from datetime import date, datetime, time
from uuid import uuid4

import pytest
from fakes import (
    FakeAppointment,
    FakeAppointmentsRepository,
    FakeSchedulingRepository,
    FakeSlot,
    FakeUnit,
    FakeUnitsRepository,
)

from agenda.core.enums import AppointmentStatusEnum
from agenda.modules.appointments.schemas import AppointmentCreate, CandidateScope
from agenda.modules.appointments.service import AppointmentService
from agenda.shared.exceptions import (
    ConflictException,
    DuplicateBookingException,
    NotFoundException,
    SlotUnavailableException,
    ValidationException,
)

# Monday morning; the candidate window runs Monday to Thursday.
NOW = datetime(2026, 10, 19, 9, 0)
MONDAY = date(2026, 10, 19)
TUESDAY = date(2026, 10, 20)
FRIDAY = date(2026, 10, 16)


class Store:
    def __init__(self) -> None:
        self.unit = FakeUnit(id=uuid4(), name="Unidade Centro")
        self.other_unit = FakeUnit(id=uuid4(), name="Unidade Jardim")
        self.units = {self.unit.id: self.unit, self.other_unit.id: self.other_unit}
        self.slots: dict = {}
        self.appointments: dict = {}

    def add_slot(self, slot_date: date, slot_time: time, *, unit: FakeUnit | None = None, available: bool = True):
        slot = FakeSlot(
            id=uuid4(),
            unit_id=(unit or self.unit).id,
            date=slot_date,
            time=slot_time,
            available=available,
        )
        self.slots[slot.id] = slot
        return slot

    def add_appointment(self, slot: FakeSlot, *, status=AppointmentStatusEnum.SCHEDULED, **fields):
        fields.setdefault("job_ref", "job-1")
        fields.setdefault("application_ref", "app-1")
        appointment = FakeAppointment(
            id=uuid4(),
            unit_id=slot.unit_id,
            time_slot_id=slot.id,
            status=status,
            **fields,
        )
        if status != AppointmentStatusEnum.CANCELLED:
            slot.available = False
        self.appointments[appointment.id] = appointment
        return appointment

    def service(self) -> AppointmentService:
        return AppointmentService(
            appointments_repository=FakeAppointmentsRepository(self.units, self.slots, self.appointments),
            scheduling_repository=FakeSchedulingRepository(self.slots, self.appointments),
            units_repository=FakeUnitsRepository(self.units),
        )


def _payload(store: Store, slot: FakeSlot, **overrides) -> AppointmentCreate:
    data = {
        "job_ref": "job-1",
        "application_ref": "app-1",
        "unit_id": store.unit.id,
        "time_slot_id": slot.id,
        "candidate": {
            "first_name": " Ana ",
            "last_name": "Souza",
            "email": "ana@example.com",
            "phone": "11999990000",
            "national_id": "12345678900",
            "subject": "Matemática",
        },
    }
    data.update(overrides)
    return AppointmentCreate.model_validate(data)


@pytest.mark.asyncio
async def test_create_appointment_claims_slot() -> None:
    store = Store()
    slot = store.add_slot(MONDAY, time(14, 0))

    appointment = await store.service().create_appointment(_payload(store, slot), now=NOW)

    assert appointment.status == AppointmentStatusEnum.SCHEDULED
    assert appointment.time_slot_id == slot.id
    assert appointment.time_slot is slot
    assert appointment.first_name == "Ana"
    assert slot.available is False
    assert len(store.appointments) == 1


@pytest.mark.asyncio
async def test_create_appointment_rejects_live_duplicate_without_touching_slots() -> None:
    store = Store()
    booked = store.add_slot(MONDAY, time(10, 0))
    store.add_appointment(booked)
    wanted = store.add_slot(MONDAY, time(14, 0))

    with pytest.raises(DuplicateBookingException):
        await store.service().create_appointment(_payload(store, wanted), now=NOW)

    assert wanted.available is True
    assert len(store.appointments) == 1


@pytest.mark.asyncio
async def test_create_appointment_allowed_after_previous_was_cancelled() -> None:
    store = Store()
    old = store.add_slot(MONDAY, time(10, 0))
    store.add_appointment(old, status=AppointmentStatusEnum.CANCELLED)
    wanted = store.add_slot(MONDAY, time(14, 0))

    appointment = await store.service().create_appointment(_payload(store, wanted), now=NOW)

    assert appointment.status == AppointmentStatusEnum.SCHEDULED
    assert len(store.appointments) == 2


@pytest.mark.asyncio
async def test_same_candidate_can_book_at_another_unit() -> None:
    store = Store()
    booked = store.add_slot(MONDAY, time(10, 0))
    store.add_appointment(booked)
    other = store.add_slot(MONDAY, time(14, 0), unit=store.other_unit)

    appointment = await store.service().create_appointment(
        _payload(store, other, unit_id=store.other_unit.id),
        now=NOW,
    )

    assert appointment.unit_id == store.other_unit.id


@pytest.mark.asyncio
async def test_create_appointment_rejects_taken_slot() -> None:
    store = Store()
    slot = store.add_slot(MONDAY, time(14, 0), available=False)

    with pytest.raises(SlotUnavailableException):
        await store.service().create_appointment(_payload(store, slot), now=NOW)

    assert store.appointments == {}


@pytest.mark.asyncio
async def test_create_appointment_rejects_slot_of_another_unit() -> None:
    store = Store()
    slot = store.add_slot(MONDAY, time(14, 0), unit=store.other_unit)

    with pytest.raises(SlotUnavailableException):
        await store.service().create_appointment(_payload(store, slot), now=NOW)

    assert slot.available is True


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("slot_date", "slot_time"),
    [
        (MONDAY, time(8, 0)),  # already started
        (TUESDAY, time(10, 0)),  # further than the advance cutoff
        (date(2026, 10, 24), time(10, 0)),  # Saturday
    ],
)
async def test_create_appointment_rejects_slot_candidates_cannot_book(slot_date: date, slot_time: time) -> None:
    store = Store()
    slot = store.add_slot(slot_date, slot_time)

    with pytest.raises(SlotUnavailableException):
        await store.service().create_appointment(_payload(store, slot), now=NOW)

    assert slot.available is True


@pytest.mark.asyncio
async def test_create_appointment_unknown_unit() -> None:
    store = Store()
    slot = store.add_slot(MONDAY, time(14, 0))

    with pytest.raises(NotFoundException):
        await store.service().create_appointment(_payload(store, slot, unit_id=uuid4()), now=NOW)


@pytest.mark.asyncio
async def test_reschedule_moves_appointment_and_swaps_availability() -> None:
    store = Store()
    first = store.add_slot(MONDAY, time(14, 0))
    second = store.add_slot(TUESDAY, time(10, 0))
    appointment = store.add_appointment(first)

    moved = await store.service().reschedule_appointment(appointment.id, second.id, now=NOW)

    assert moved.status == AppointmentStatusEnum.RESCHEDULED
    assert moved.time_slot_id == second.id
    assert first.available is True
    assert second.available is False


@pytest.mark.asyncio
async def test_reschedule_to_taken_slot_keeps_state() -> None:
    store = Store()
    first = store.add_slot(MONDAY, time(14, 0))
    second = store.add_slot(TUESDAY, time(10, 0))
    appointment = store.add_appointment(first)
    store.add_appointment(second, job_ref="job-2", application_ref="app-2")

    with pytest.raises(SlotUnavailableException):
        await store.service().reschedule_appointment(appointment.id, second.id, now=NOW)

    assert appointment.time_slot_id == first.id
    assert appointment.status == AppointmentStatusEnum.SCHEDULED
    assert first.available is False


@pytest.mark.asyncio
async def test_reschedule_to_past_slot_is_rejected() -> None:
    store = Store()
    first = store.add_slot(MONDAY, time(14, 0))
    past = store.add_slot(FRIDAY, time(10, 0))
    appointment = store.add_appointment(first)

    with pytest.raises(SlotUnavailableException):
        await store.service().reschedule_appointment(appointment.id, past.id, now=NOW)

    assert past.available is True


@pytest.mark.asyncio
async def test_reschedule_to_same_slot_changes_nothing() -> None:
    store = Store()
    slot = store.add_slot(MONDAY, time(14, 0))
    appointment = store.add_appointment(slot)

    result = await store.service().reschedule_appointment(appointment.id, slot.id, now=NOW)

    assert result.status == AppointmentStatusEnum.SCHEDULED
    assert slot.available is False


@pytest.mark.asyncio
async def test_reschedule_cancelled_appointment_is_conflict() -> None:
    store = Store()
    first = store.add_slot(MONDAY, time(14, 0))
    second = store.add_slot(TUESDAY, time(10, 0))
    appointment = store.add_appointment(first, status=AppointmentStatusEnum.CANCELLED)

    with pytest.raises(ConflictException):
        await store.service().reschedule_appointment(appointment.id, second.id, now=NOW)

    assert second.available is True


@pytest.mark.asyncio
async def test_cancel_releases_slot() -> None:
    store = Store()
    slot = store.add_slot(MONDAY, time(14, 0))
    appointment = store.add_appointment(slot)

    cancelled = await store.service().cancel_appointment(appointment.id, now=NOW)

    assert cancelled.status == AppointmentStatusEnum.CANCELLED
    assert slot.available is True


@pytest.mark.asyncio
async def test_cancel_twice_does_not_release_slot_booked_by_someone_else() -> None:
    store = Store()
    slot = store.add_slot(MONDAY, time(14, 0))
    appointment = store.add_appointment(slot)
    service = store.service()

    await service.cancel_appointment(appointment.id, now=NOW)
    store.add_appointment(slot, job_ref="job-2", application_ref="app-2")
    again = await service.cancel_appointment(appointment.id, now=NOW)

    assert again.status == AppointmentStatusEnum.CANCELLED
    assert slot.available is False


@pytest.mark.asyncio
async def test_past_appointment_cannot_be_cancelled() -> None:
    store = Store()
    slot = store.add_slot(FRIDAY, time(10, 0))
    appointment = store.add_appointment(slot)

    with pytest.raises(ValidationException):
        await store.service().cancel_appointment(appointment.id, now=NOW)

    assert appointment.status == AppointmentStatusEnum.SCHEDULED


@pytest.mark.asyncio
async def test_cancel_unknown_appointment() -> None:
    store = Store()

    with pytest.raises(NotFoundException):
        await store.service().cancel_appointment(uuid4(), now=NOW)


@pytest.mark.asyncio
async def test_list_candidate_appointments_includes_cancelled() -> None:
    store = Store()
    old = store.add_slot(MONDAY, time(10, 0))
    current = store.add_slot(MONDAY, time(14, 0))
    store.add_appointment(old, status=AppointmentStatusEnum.CANCELLED)
    store.add_appointment(current)
    store.add_appointment(store.add_slot(MONDAY, time(15, 0)), job_ref="job-2", application_ref="app-2")

    scope = CandidateScope(job_ref="job-1", application_ref="app-1", unit_id=store.unit.id)
    appointments = await store.service().list_candidate_appointments(scope)

    assert {item.time_slot_id for item in appointments} == {old.id, current.id}


class RacingAppointmentsRepository(FakeAppointmentsRepository):
    """Reads return detached snapshots; a concurrent move lands just before the cancel update."""

    def __init__(self, store: Store, concurrent_move) -> None:
        super().__init__(store.units, store.slots, store.appointments)
        self._concurrent_move = concurrent_move

    async def get_appointment_by_id(self, appointment_id):
        appointment = await super().get_appointment_by_id(appointment_id)
        return copy.copy(appointment) if appointment is not None else None

    async def mark_cancelled(self, appointment_id):
        if self._concurrent_move is not None:
            self._concurrent_move()
            self._concurrent_move = None
        return await super().mark_cancelled(appointment_id)


@pytest.mark.asyncio
async def test_cancel_releases_slot_held_at_update_time_after_concurrent_reschedule() -> None:
    store = Store()
    first = store.add_slot(MONDAY, time(14, 0))
    second = store.add_slot(TUESDAY, time(10, 0))
    appointment = store.add_appointment(first)

    def reschedule_and_rebook() -> None:
        # another session moves the booking to the second slot and a new candidate takes the first
        stored = store.appointments[appointment.id]
        stored.time_slot_id = second.id
        stored.status = AppointmentStatusEnum.RESCHEDULED
        second.available = False
        store.add_appointment(first, job_ref="job-3", application_ref="app-3")

    service = AppointmentService(
        appointments_repository=RacingAppointmentsRepository(store, reschedule_and_rebook),
        scheduling_repository=FakeSchedulingRepository(store.slots, store.appointments),
        units_repository=FakeUnitsRepository(store.units),
    )

    cancelled = await service.cancel_appointment(appointment.id, now=NOW)

    assert cancelled.status == AppointmentStatusEnum.CANCELLED
    assert first.available is False
    assert second.available is True
