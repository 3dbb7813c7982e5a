from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time

from agenda.modules.scheduling.eligibility import filter_open_slots, filter_slots, group_slots_by_date

NOW = datetime(2026, 10, 19, 9, 0)


@dataclass
class FakeSlot:
    date: date
    time: time
    available: bool = True


def test_coordinator_view_drops_only_past_slots() -> None:
    past = FakeSlot(date(2026, 10, 19), time(8, 0))
    occupied = FakeSlot(date(2026, 10, 19), time(10, 0), available=False)
    far = FakeSlot(date(2026, 11, 30), time(10, 0))

    kept = filter_slots([past, occupied, far], NOW, for_candidate=False)

    assert kept == [occupied, far]


def test_candidate_view_applies_window_cutoff_and_availability() -> None:
    soon = FakeSlot(date(2026, 10, 19), time(14, 0))
    occupied = FakeSlot(date(2026, 10, 19), time(15, 0), available=False)
    beyond_cutoff = FakeSlot(date(2026, 10, 20), time(9, 30))
    past = FakeSlot(date(2026, 10, 19), time(8, 30))

    kept = filter_slots([soon, occupied, beyond_cutoff, past], NOW, for_candidate=True)

    assert kept == [soon]


def test_candidate_view_uses_configured_limits() -> None:
    tomorrow = FakeSlot(date(2026, 10, 20), time(9, 30))
    outside_window = FakeSlot(date(2026, 10, 21), time(9, 30))

    kept = filter_slots(
        [tomorrow, outside_window],
        NOW,
        for_candidate=True,
        window_business_days=2,
        cutoff_hours=72,
    )

    assert kept == [tomorrow]


def test_open_slots_excludes_taken_and_past() -> None:
    free = FakeSlot(date(2026, 10, 22), time(10, 0))
    taken = FakeSlot(date(2026, 10, 22), time(11, 0), available=False)
    past = FakeSlot(date(2026, 10, 16), time(10, 0))

    assert filter_open_slots([free, taken, past], NOW) == [free]


def test_grouping_sorts_dates_and_times() -> None:
    slots = [
        FakeSlot(date(2026, 10, 21), time(14, 0)),
        FakeSlot(date(2026, 10, 20), time(16, 0)),
        FakeSlot(date(2026, 10, 21), time(9, 0)),
        FakeSlot(date(2026, 10, 20), time(8, 30)),
    ]

    grouped = group_slots_by_date(slots)

    assert list(grouped) == ["2026-10-20", "2026-10-21"]
    assert [slot.time for slot in grouped["2026-10-20"]] == [time(8, 30), time(16, 0)]
    assert [slot.time for slot in grouped["2026-10-21"]] == [time(9, 0), time(14, 0)]


def test_grouping_empty_input() -> None:
    assert group_slots_by_date([]) == {}
