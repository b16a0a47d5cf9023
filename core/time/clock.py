"""
DUKA Core Time — Clock and Business Dates
============================================
No datetime.now() inside engine logic: the engine receives a Clock.

A daily form is keyed by a calendar date, not by an instant.
Incoming values (ISO strings, datetimes, dates) are normalized to
a plain `date` so that "2025-01-01" and "2025-01-01T17:45:00Z"
address the same form.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Protocol


# ══════════════════════════════════════════════════════════════
# CLOCK PROTOCOL
# ══════════════════════════════════════════════════════════════

class Clock(Protocol):
    """Injectable time source."""

    def now_utc(self) -> datetime:
        ...  # pragma: no cover


class SystemClock:
    """Production clock — real system time."""

    def now_utc(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """
    Test clock — returns a fixed timestamp until advanced.

    Usage:
        clock = FixedClock(datetime(2025, 1, 1, tzinfo=timezone.utc))
        clock.advance(60)
    """

    def __init__(self, fixed_dt: datetime) -> None:
        if fixed_dt.tzinfo is None:
            raise ValueError("FixedClock requires timezone-aware datetime.")
        self._fixed_dt = fixed_dt

    def now_utc(self) -> datetime:
        return self._fixed_dt

    def advance(self, seconds: float) -> None:
        self._fixed_dt = self._fixed_dt + timedelta(seconds=seconds)


# ══════════════════════════════════════════════════════════════
# BUSINESS DATE NORMALIZATION
# ══════════════════════════════════════════════════════════════

def parse_business_date(value) -> date:
    """
    Normalize a form date to a calendar day.

    Accepts `date`, `datetime` (time part dropped) or an ISO 8601
    string with or without a time component.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError("date must be an ISO date string.")

    raw = value.strip()
    try:
        return date.fromisoformat(raw[:10])
    except ValueError as exc:
        raise ValueError(f"date '{raw}' is not a valid ISO date.") from exc


def format_business_date(value: date) -> str:
    return value.isoformat()
