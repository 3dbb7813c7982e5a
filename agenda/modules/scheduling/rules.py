"""Temporal eligibility rules for time slots.

Slot dates and times are naive local values. Every predicate receives the
current instant as ``now`` (also naive, same zone) instead of reading the clock,
so the rules stay deterministic.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta

DEFAULT_WINDOW_BUSINESS_DAYS = 4
DEFAULT_ADVANCE_CUTOFF_HOURS = 12


def slot_datetime(slot_date: date, slot_time: time) -> datetime:
    """Combine a slot's date and time into a naive local datetime."""
    return datetime.combine(slot_date, slot_time)


def is_business_day(day: date) -> bool:
    """Monday to Friday."""
    return day.weekday() < 5


def is_past(slot_date: date, slot_time: time, now: datetime) -> bool:
    """True when the slot starts strictly before ``now``."""
    return slot_datetime(slot_date, slot_time) < now


def business_days_from(today: date, count: int = DEFAULT_WINDOW_BUSINESS_DAYS) -> list[date]:
    """Return the next ``count`` business days starting at ``today`` inclusive."""
    days: list[date] = []
    current = today
    while len(days) < count:
        if is_business_day(current):
            days.append(current)
        current += timedelta(days=1)
    return days


def is_within_allowed_window(
    slot_date: date,
    now: datetime,
    business_days: int = DEFAULT_WINDOW_BUSINESS_DAYS,
) -> bool:
    """True when ``slot_date`` is one of the next N business days counted from today.

    Today counts as the first day when it is itself a business day. Weekend
    dates and dates before today never qualify.
    """
    today = now.date()
    if slot_date < today or not is_business_day(slot_date):
        return False
    return slot_date in business_days_from(today, business_days)


def is_within_advance_cutoff(
    slot_date: date,
    slot_time: time,
    now: datetime,
    hours: int = DEFAULT_ADVANCE_CUTOFF_HOURS,
) -> bool:
    """True when the slot starts at most ``hours`` from now and has not started yet.

    This is a ceiling: only slots close to ``now`` pass, so it describes a
    last-minute booking window rather than a minimum notice period.
    """
    remaining = slot_datetime(slot_date, slot_time) - now
    return timedelta(0) <= remaining <= timedelta(hours=hours)


def is_bookable_by_candidate(
    slot_date: date,
    slot_time: time,
    now: datetime,
    *,
    window_business_days: int = DEFAULT_WINDOW_BUSINESS_DAYS,
    cutoff_hours: int = DEFAULT_ADVANCE_CUTOFF_HOURS,
) -> bool:
    """Temporal part of candidate eligibility (availability is checked separately)."""
    return (
        not is_past(slot_date, slot_time, now)
        and is_within_allowed_window(slot_date, now, window_business_days)
        and is_within_advance_cutoff(slot_date, slot_time, now, cutoff_hours)
    )
