"""Date, clock-time and minute rounding helpers shared by the engine."""

from __future__ import annotations

import math
from datetime import date, datetime, time, timedelta
from typing import Any


def to_date(value: Any) -> date | None:
    """Coerce ``date``/``datetime``/ISO string into a ``date``.

    Returns ``None`` for missing or unparseable values.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        try:
            return date.fromisoformat(raw[:10])
        except ValueError:
            return None
    return None


def parse_clock_time(value: Any) -> time | None:
    """Parse an ``HH:mm`` string; ``None`` when it is not a valid time."""
    if not isinstance(value, str):
        return None
    try:
        return datetime.strptime(value.strip(), "%H:%M").time()
    except ValueError:
        return None


def at_clock_time(day: date, clock: time) -> datetime:
    return datetime.combine(day, clock)


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


def start_of_week(day: date) -> date:
    """Monday of the week containing ``day``."""
    return day - timedelta(days=day.weekday())


def minutes_between(start: datetime, end: datetime) -> int:
    return int((end - start).total_seconds() // 60)


def round_half_up(value: float) -> int:
    # Halves always round up, so 262.5 -> 263 (``round`` would give 262).
    return int(math.floor(value + 0.5))


def snap_to_step(minutes: float, step: int) -> int:
    """Round ``minutes`` to the nearest multiple of ``step``."""
    if step <= 0:
        return round_half_up(minutes)
    return round_half_up(minutes / step) * step
