"""Shared utility functions."""

from __future__ import annotations

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from agenda.core.config import get_settings


def utc_now() -> datetime:
    """Return aware UTC datetime."""
    return datetime.now(timezone.utc)


def local_now() -> datetime:
    """Return naive wall-clock datetime in the configured business timezone.

    Slot dates and times are stored without offset, so every comparison against
    them has to use a naive "now" taken in the same zone the units operate in.
    """
    return datetime.now(ZoneInfo(get_settings().timezone)).replace(tzinfo=None)
