"""Hours derived from attendance timestamps.

Both the check-out transaction and the display layer round through
``round_hours`` so a stored ``totalHours`` and a recomputed value agree.
Nothing here raises on bad input: an unreadable timestamp yields ``None``.
"""

from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from ..core.constants import HOURS_DECIMAL_PLACES
from ..core.enums import DayState
from .model import AttendanceRecord

_QUANTUM = Decimal(1).scaleb(-HOURS_DECIMAL_PLACES)


def round_hours(value: float) -> float:
    return float(Decimal(repr(value)).quantize(_QUANTUM, rounding=ROUND_HALF_UP))


def elapsed_hours(start: Optional[datetime], end: Optional[datetime]) -> Optional[float]:
    """Hours from ``start`` to ``end``, clamped at 0 and rounded to 2 places."""
    if start is None or end is None:
        return None
    try:
        hours = (end - start).total_seconds() / 3600
    except TypeError:
        # naive vs aware mix
        return None
    return max(0.0, round_hours(hours))


def display_hours(record: Optional[AttendanceRecord], now: datetime) -> Optional[float]:
    """Value shown for a record: final hours, running hours, or None."""
    if record is None:
        return None
    state = record.state
    if state == DayState.CHECKED_OUT:
        if record.total_hours is not None:
            return record.total_hours
        if record.check_in is None:
            return None
        return elapsed_hours(record.check_in.timestamp, record.check_out.timestamp)
    if state == DayState.CHECKED_IN:
        return elapsed_hours(record.check_in.timestamp, now)
    return None


def format_hours(value: Optional[float]) -> str:
    return "-" if value is None else f"{value:.2f}"
