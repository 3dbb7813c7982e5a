"""Bulk time slot generation.

Expands a date range, a daily time range and a step into concrete slot
creation requests, skipping weekends and coordinator-supplied exceptions.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import date, time, timedelta
from uuid import UUID

from agenda.modules.scheduling.rules import is_business_day
from agenda.shared.exceptions import ValidationException

_CLOCK_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True, slots=True)
class SlotRequest:
    """One slot the generator asks the store to create."""

    unit_id: UUID
    date: date
    time: time


@dataclass(frozen=True, slots=True)
class TimeException:
    """Excluded clock time or inclusive clock range, as zero-padded ``HH:MM``."""

    start: str
    end: str

    def covers(self, clock: str) -> bool:
        # zero-padded 24h strings sort in time order
        return self.start <= clock <= self.end


def _check_clock(value: str) -> str:
    if not _CLOCK_PATTERN.match(value):
        raise ValidationException(f"Horário de exceção inválido: '{value}' (use HH:MM ou HH:MM-HH:MM)")
    return value


def parse_exceptions(raw: str | Iterable[str] | None) -> list[TimeException]:
    """Parse exception entries such as ``"12:00, 13:00-14:00"``.

    Accepts either the raw comma-separated text or an already split list.
    Blank entries are ignored.
    """
    if raw is None:
        return []
    items = raw.split(",") if isinstance(raw, str) else raw

    exceptions: list[TimeException] = []
    for item in items:
        entry = item.strip()
        if not entry:
            continue
        if "-" in entry:
            start, _, end = entry.partition("-")
            exceptions.append(TimeException(_check_clock(start.strip()), _check_clock(end.strip())))
        else:
            clock = _check_clock(entry)
            exceptions.append(TimeException(clock, clock))
    return exceptions


def iter_dates(start_date: date, end_date: date) -> Iterator[date]:
    """Yield every calendar day from ``start_date`` to ``end_date`` inclusive."""
    current = start_date
    while current <= end_date:
        yield current
        current += timedelta(days=1)


def iter_clock_times(start_time: time, end_time: time, interval_minutes: int) -> Iterator[str]:
    """Yield ``HH:MM`` points from ``start_time`` stepping by the interval, before ``end_time``."""
    if interval_minutes <= 0:
        raise ValidationException("O intervalo deve ser maior que zero")

    current = start_time.hour * 60 + start_time.minute
    end = min(end_time.hour * 60 + end_time.minute, MINUTES_PER_DAY)
    while current < end:
        yield f"{current // 60:02d}:{current % 60:02d}"
        current += interval_minutes


def generate_slot_requests(
    unit_id: UUID,
    start_date: date,
    end_date: date,
    start_time: time,
    end_time: time,
    interval_minutes: int,
    exceptions: Iterable[TimeException] = (),
) -> list[SlotRequest]:
    """Build slot creation requests for every business day in the range.

    An empty list comes back when ``end_date`` precedes ``start_date`` or the
    time range is empty.
    """
    excluded = list(exceptions)
    clocks = [
        clock
        for clock in iter_clock_times(start_time, end_time, interval_minutes)
        if not any(exception.covers(clock) for exception in excluded)
    ]

    requests: list[SlotRequest] = []
    for day in iter_dates(start_date, end_date):
        if not is_business_day(day):
            continue
        requests.extend(SlotRequest(unit_id=unit_id, date=day, time=time.fromisoformat(clock)) for clock in clocks)
    return requests
