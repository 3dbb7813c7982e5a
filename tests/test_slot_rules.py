from __future__ import annotations

from datetime import date, datetime, time, timedelta

import pytest

from agenda.modules.scheduling.rules import (
    business_days_from,
    is_bookable_by_candidate,
    is_business_day,
    is_past,
    is_within_advance_cutoff,
    is_within_allowed_window,
)

FRIDAY = date(2026, 10, 16)
SATURDAY = date(2026, 10, 17)
SUNDAY = date(2026, 10, 18)
MONDAY = date(2026, 10, 19)


def test_weekends_are_not_business_days() -> None:
    assert is_business_day(FRIDAY)
    assert is_business_day(MONDAY)
    assert not is_business_day(SATURDAY)
    assert not is_business_day(SUNDAY)


def test_is_past_compares_full_instant() -> None:
    now = datetime(2026, 10, 19, 10, 0)

    assert is_past(MONDAY, time(9, 59), now)
    assert not is_past(MONDAY, time(10, 0), now)
    assert not is_past(MONDAY, time(10, 1), now)
    assert is_past(FRIDAY, time(23, 0), now)


def test_business_days_from_friday_skips_weekend() -> None:
    assert business_days_from(FRIDAY, 4) == [
        FRIDAY,
        MONDAY,
        date(2026, 10, 20),
        date(2026, 10, 21),
    ]


def test_business_days_from_sunday_starts_on_monday() -> None:
    days = business_days_from(SUNDAY, 4)

    assert days == [MONDAY, date(2026, 10, 20), date(2026, 10, 21), date(2026, 10, 22)]
    assert all(is_business_day(day) for day in days)


def test_allowed_window_counts_today_as_first_business_day() -> None:
    now = datetime(2026, 10, 16, 8, 0)

    assert is_within_allowed_window(FRIDAY, now)
    assert is_within_allowed_window(date(2026, 10, 21), now)
    assert not is_within_allowed_window(date(2026, 10, 22), now)


def test_allowed_window_never_includes_weekend_dates() -> None:
    now = datetime(2026, 10, 16, 8, 0)

    assert not is_within_allowed_window(SATURDAY, now)
    assert not is_within_allowed_window(SUNDAY, now)


@pytest.mark.parametrize("days_back", [1, 2, 3, 7, 30])
def test_allowed_window_rejects_dates_before_today(days_back: int) -> None:
    now = datetime(2026, 10, 21, 8, 0)

    assert not is_within_allowed_window(now.date() - timedelta(days=days_back), now)


@pytest.mark.parametrize(
    "now",
    [datetime(2026, 10, day, 9, 30) for day in range(12, 26)],
)
def test_allowed_window_size_matches_business_day_count(now: datetime) -> None:
    candidates = [now.date() + timedelta(days=offset) for offset in range(-3, 15)]
    allowed = [day for day in candidates if is_within_allowed_window(day, now)]

    assert len(allowed) == 4
    assert allowed == business_days_from(now.date(), 4)


def test_allowed_window_respects_configured_length() -> None:
    now = datetime(2026, 10, 19, 8, 0)

    assert is_within_allowed_window(date(2026, 10, 20), now, business_days=2)
    assert not is_within_allowed_window(date(2026, 10, 21), now, business_days=2)


def test_advance_cutoff_is_an_upper_bound() -> None:
    now = datetime(2026, 10, 19, 8, 0)

    assert is_within_advance_cutoff(MONDAY, time(8, 0), now)
    assert is_within_advance_cutoff(MONDAY, time(20, 0), now)
    assert not is_within_advance_cutoff(MONDAY, time(20, 1), now)
    assert not is_within_advance_cutoff(date(2026, 10, 20), time(9, 0), now)


def test_advance_cutoff_rejects_started_slots() -> None:
    now = datetime(2026, 10, 19, 8, 0)

    assert not is_within_advance_cutoff(MONDAY, time(7, 59), now)


def test_candidate_eligibility_combines_all_rules() -> None:
    now = datetime(2026, 10, 16, 14, 0)

    assert is_bookable_by_candidate(FRIDAY, time(15, 0), now)
    assert not is_bookable_by_candidate(FRIDAY, time(13, 0), now)
    # inside the business-day window but further than 12 hours away
    assert not is_bookable_by_candidate(MONDAY, time(9, 0), now)
    assert is_bookable_by_candidate(MONDAY, time(9, 0), now, cutoff_hours=72)
