"""Slot visibility for candidates and coordinators."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from datetime import date, datetime, time
from typing import Protocol, TypeVar

from agenda.modules.scheduling.rules import (
    DEFAULT_ADVANCE_CUTOFF_HOURS,
    DEFAULT_WINDOW_BUSINESS_DAYS,
    business_days_from,
    is_past,
    is_within_advance_cutoff,
)


class SlotLike(Protocol):
    date: date
    time: time
    available: bool


S = TypeVar("S", bound=SlotLike)


def filter_slots(
    slots: Iterable[S],
    now: datetime,
    *,
    for_candidate: bool,
    window_business_days: int = DEFAULT_WINDOW_BUSINESS_DAYS,
    cutoff_hours: int = DEFAULT_ADVANCE_CUTOFF_HOURS,
) -> list[S]:
    """Keep the slots a candidate may book, or a coordinator may see.

    Past slots are always dropped. Candidates additionally only get available
    slots inside the business-day window and the advance cutoff; coordinators
    keep occupied slots.
    """
    allowed_dates = set(business_days_from(now.date(), window_business_days)) if for_candidate else set()

    kept: list[S] = []
    for slot in slots:
        if is_past(slot.date, slot.time, now):
            continue
        if for_candidate and (
            not slot.available
            or slot.date not in allowed_dates
            or not is_within_advance_cutoff(slot.date, slot.time, now, cutoff_hours)
        ):
            continue
        kept.append(slot)
    return kept


def filter_open_slots(slots: Iterable[S], now: datetime) -> list[S]:
    """Available, not-yet-started slots; what a candidate may move a booking to."""
    return [slot for slot in slots if slot.available and not is_past(slot.date, slot.time, now)]


def group_slots_by_date(slots: Iterable[S]) -> dict[str, list[S]]:
    """Group slots under their ISO date, dates ascending and times ascending within a date."""
    grouped: dict[str, list[S]] = defaultdict(list)
    for slot in slots:
        grouped[slot.date.isoformat()].append(slot)
    return {key: sorted(grouped[key], key=lambda slot: slot.time) for key in sorted(grouped)}
