"""Calendar-day arithmetic shared by every cycle computation.

All math is done on calendar days.  Datetimes are reduced to their date
before subtracting so two timestamps on the same day are always 0 days apart.
"""

from __future__ import annotations

import re
from datetime import date, datetime

from src.cycle.errors import InvalidProfile, SnapshotError

# Date keys are zero-padded ISO calendar dates, nothing else
_DATE_KEY_RE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")


def to_calendar_day(value: date | datetime) -> date:
    """Strip the time-of-day from ``value``.

    Args:
        value: A date or datetime.

    Returns:
        The calendar date.
    """
    if isinstance(value, datetime):
        return value.date()
    return value


def day_offset(target: date | datetime, anchor: date | datetime) -> int:
    """Return the signed whole-day difference ``target - anchor``.

    Args:
        target: Date being located.
        anchor: Origin date.

    Returns:
        Negative for dates before the anchor.
    """
    return (to_calendar_day(target) - to_calendar_day(anchor)).days


def cycle_relative_day(
    target: date | datetime, anchor: date | datetime, cycle_length: int
) -> int:
    """Return the 0-indexed position of ``target`` within its cycle.

    Uses a true modulo, so dates before the anchor wrap backwards into the
    previous cycle (one day before the anchor is day ``cycle_length - 1``).

    Args:
        target:       Date being located.
        anchor:       Start of any known cycle.
        cycle_length: Cycle length in days.

    Returns:
        Integer in ``[0, cycle_length)``.

    Raises:
        InvalidProfile: If ``cycle_length`` is not positive.
    """
    if cycle_length <= 0:
        raise InvalidProfile(f"cycle_length must be positive, got {cycle_length}")
    # Python's % already returns a non-negative result for a positive divisor
    return day_offset(target, anchor) % cycle_length


def date_key(value: date | datetime) -> str:
    """Format a date as the ``yyyy-MM-dd`` store key."""
    return to_calendar_day(value).isoformat()


def parse_date_key(key: str) -> date:
    """Parse a ``yyyy-MM-dd`` store key.

    Args:
        key: Date key string.

    Returns:
        The calendar date.

    Raises:
        SnapshotError: If ``key`` is not exactly a zero-padded ISO date.
    """
    if not isinstance(key, str) or not _DATE_KEY_RE.match(key):
        raise SnapshotError(f"Invalid date key {key!r}; expected yyyy-MM-dd")
    try:
        return date.fromisoformat(key)
    except ValueError as exc:
        raise SnapshotError(f"Invalid date key {key!r}: {exc}") from exc
