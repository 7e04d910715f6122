"""Translate the current cycle position into a status card record.

Precedence:
1. No anchor date            → NO_DATA
2. Anchor older than 45 days → OVERDUE (phase math is not trusted)
3. Otherwise                 → the phase entry from ``PHASE_INFO``
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from src.cycle.arithmetic import cycle_relative_day, day_offset, to_calendar_day
from src.cycle.phases import (
    DEFAULT_LUTEAL_START,
    DEFAULT_OVULATION_START,
    PHASE_INFO,
    classify_phase,
)

DEFAULT_STALE_AFTER_DAYS = 45

NO_DATA = "NO DATA"
OVERDUE = "OVERDUE"

_OFFLINE_COLOR = "#8E8E93"


@dataclass(frozen=True)
class IntelRecord:
    """Status card contents.

    Attributes:
        phase:            Phase code, or "NO DATA" / "OVERDUE".
        headline:         Short weather-style headline.
        narrative:        Status message.
        action_item:      Recommended action.
        color_code:       Hex color for the card.
        icon:             Icon slug.
        cycle_day:        0-indexed cycle day, None for NO DATA / OVERDUE.
        days_since_start: Signed days since the anchor, None without one.
    """

    phase: str
    headline: str
    narrative: str
    action_item: str
    color_code: str
    icon: str
    cycle_day: int | None = None
    days_since_start: int | None = None


def build_intel(
    anchor_date: date | None,
    cycle_length: int,
    period_duration: int,
    today: date | datetime | None = None,
    stale_after_days: int = DEFAULT_STALE_AFTER_DAYS,
    ovulation_start: int = DEFAULT_OVULATION_START,
    luteal_start: int = DEFAULT_LUTEAL_START,
) -> IntelRecord:
    """Build the status record for ``today``.

    Args:
        anchor_date:      Most recent period start, or None.
        cycle_length:     Cycle length in days.
        period_duration:  Menstruation length in days.
        today:            Reference date (defaults to today).
        stale_after_days: Offsets above this report OVERDUE.
        ovulation_start:  First day of the ovulation band.
        luteal_start:     First day of the luteal band.

    Returns:
        IntelRecord for display.
    """
    if anchor_date is None:
        return IntelRecord(
            phase=NO_DATA,
            headline="Offline",
            narrative="System waiting for synchronization.",
            action_item="Tap a date on the calendar to log Start Date.",
            color_code=_OFFLINE_COLOR,
            icon="question",
        )

    today = to_calendar_day(today or date.today())
    days_passed = day_offset(today, anchor_date)

    if days_passed > stale_after_days:
        return IntelRecord(
            phase=OVERDUE,
            headline="Data Stale",
            narrative="Cycle input required. Predictions paused.",
            action_item="Update log manually below.",
            color_code=_OFFLINE_COLOR,
            icon="alert-circle",
            days_since_start=days_passed,
        )

    cycle_day = cycle_relative_day(today, anchor_date, cycle_length)
    phase = classify_phase(cycle_day, period_duration, ovulation_start, luteal_start)
    info = PHASE_INFO[phase]
    return IntelRecord(
        phase=phase.value,
        headline=info.headline,
        narrative=info.narrative,
        action_item=info.action_item,
        color_code=info.color_code,
        icon=info.icon,
        cycle_day=cycle_day,
        days_since_start=days_passed,
    )
