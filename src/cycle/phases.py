"""Cycle phase classification and the per-phase data table.

A phase is a fixed-threshold function of the cycle-relative day:

    day < period_duration               → MENSTRUATION
    period_duration <= day < 12         → FOLLICULAR
    12 <= day < 16                      → OVULATION
    day >= 16                           → LUTEAL

``PHASE_INFO`` is the one table of display copy, colors and default
checklists.  The log store, the intel translator and the HTTP layer all read
from it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from src.cycle.arithmetic import cycle_relative_day
from src.cycle.errors import InvalidProfile

DEFAULT_OVULATION_START = 12
DEFAULT_LUTEAL_START = 16


class Phase(str, Enum):
    MENSTRUATION = "MENSTRUATION"
    FOLLICULAR = "FOLLICULAR"
    OVULATION = "OVULATION"
    LUTEAL = "LUTEAL"
    UNKNOWN = "UNKNOWN"  # no anchor date yet; display only


# Cycle phases in calendar order (UNKNOWN excluded)
CYCLE_PHASES: tuple[Phase, ...] = (
    Phase.MENSTRUATION,
    Phase.FOLLICULAR,
    Phase.OVULATION,
    Phase.LUTEAL,
)


@dataclass(frozen=True)
class ChecklistItem:
    """One toggleable supply/behavior item.

    Identity is ``id``; ``label`` is display text and takes no part in
    equality or hashing.  ``checked`` does, so two lists compare equal only
    when the same items are ticked.
    """

    id: str
    label: str = field(compare=False)
    checked: bool = False

    def toggled(self) -> ChecklistItem:
        return ChecklistItem(id=self.id, label=self.label, checked=not self.checked)


@dataclass(frozen=True)
class PhaseInfo:
    """Display copy and defaults attached to a phase.

    Attributes:
        label:             Legend label shown next to the calendar color.
        headline:          One-line "weather report" for the phase.
        narrative:         Status message shown under the headline.
        action_item:       Recommended action for today.
        color_code:        Hex color used by calendar and status card.
        icon:              Icon slug for the status card.
        field_intel:       Longer description of what is happening.
        recommended_move:  Longer recommendation for the phase.
        default_checklist: Checklist offered for untouched dates in this phase.
    """

    label: str
    headline: str
    narrative: str
    action_item: str
    color_code: str
    icon: str
    field_intel: str
    recommended_move: str
    default_checklist: tuple[ChecklistItem, ...]


def _items(*pairs: tuple[str, str]) -> tuple[ChecklistItem, ...]:
    return tuple(ChecklistItem(id=item_id, label=label) for item_id, label in pairs)


PHASE_INFO: dict[Phase, PhaseInfo] = {
    Phase.MENSTRUATION: PhaseInfo(
        label="MAINTENANCE (PERIOD)",
        headline="Thunderstorms",
        narrative="Energy levels critical. Maintenance mode active.",
        action_item="Provide comfort items (Chocolate, Heat).",
        color_code="#FF453A",
        icon="cloud-rain",
        field_intel=(
            "Biological system flush. Oestrogen and Progesterone are at baseline. "
            "Physical energy is low, and inflammation may cause discomfort."
        ),
        recommended_move=(
            "Minimize external stress. Provide high-value comfort assets "
            "(heat, hydration, chocolate) without being asked. Be the silent support."
        ),
        default_checklist=_items(
            ("comfort-rations", "Comfort Rations (Chocolate)"),
            ("pain-management", "Pain Management (Meds)"),
            ("thermal-support", "Thermal Support (Heat Pad)"),
            ("sanitary-supplies", "Sanitary Supplies"),
            ("hydration", "Hydration Units"),
        ),
    ),
    Phase.FOLLICULAR: PhaseInfo(
        label="HIGH ENERGY (FOLLICULAR)",
        headline="Clear Skies",
        narrative="Energy rising. Mood optimal.",
        action_item="Great time for date nights or heavy lifting.",
        color_code="#32D74B",
        icon="sun",
        field_intel=(
            "The reboot phase. Oestrogen begins its climb, boosting brain function, "
            "mood, and physical stamina. Brain fog usually clears here."
        ),
        recommended_move=(
            "Optimal window for new experiences. Plan challenging dates, hiking, "
            "or social outings."
        ),
        default_checklist=_items(
            ("plan-outing", "Plan an Outdoor Outing"),
            ("new-experience", "Book a New Experience"),
            ("training-session", "Joint Training Session"),
            ("hydration", "Hydration Units"),
        ),
    ),
    Phase.OVULATION: PhaseInfo(
        label="PEAK PERFORMANCE (OVULATION)",
        headline="Heatwave",
        narrative="Peak estrogen. High energy & confidence.",
        action_item="Social events are highly recommended.",
        color_code="#BF5AF2",
        icon="zap",
        field_intel=(
            "The biological peak. Oestrogen and Testosterone surge. Social "
            "confidence, verbal fluency, and energy are at maximum levels."
        ),
        recommended_move=(
            "Social butterfly window. High-energy social events and ambitious "
            "dates are winning plays here."
        ),
        default_checklist=_items(
            ("social-event", "Schedule a Social Event"),
            ("date-night", "Reserve Date Night"),
            ("hydration", "Hydration Units"),
        ),
    ),
    Phase.LUTEAL: PhaseInfo(
        label="CAUTION (LUTEAL)",
        headline="Overcast / Storm Watch",
        narrative="Progesterone rising. Patience buffer required.",
        action_item="Avoid controversial topics. Stock inventory.",
        color_code="#FFD60A",
        icon="wind",
        field_intel=(
            "The Storm Watch. Progesterone takes over. Cravings, mood sensitivity, "
            "and fatigue often rise as the body prepares for the next reset."
        ),
        recommended_move=(
            "Maximum buffer required. Practice extreme active listening. Stock the "
            "pantry with favorites before the cravings hit."
        ),
        default_checklist=_items(
            ("stock-comfort-rations", "Stock Comfort Rations"),
            ("restock-sanitary", "Restock Sanitary Supplies"),
            ("pain-management", "Pain Management (Meds) On Hand"),
            ("active-listening", "Active Listening Session"),
        ),
    ),
    Phase.UNKNOWN: PhaseInfo(
        label="UNKNOWN",
        headline="Offline",
        narrative="System waiting for synchronization.",
        action_item="Tap a date on the calendar to log Start Date.",
        color_code="#8E8E93",
        icon="question",
        field_intel="No period start has been logged yet.",
        recommended_move="Log the most recent period start to begin tracking.",
        default_checklist=_items(
            ("log-start-date", "Log Period Start Date"),
            ("sanitary-supplies", "Sanitary Supplies"),
            ("hydration", "Hydration Units"),
        ),
    ),
}


def classify_phase(
    cycle_day: int,
    period_duration: int,
    ovulation_start: int = DEFAULT_OVULATION_START,
    luteal_start: int = DEFAULT_LUTEAL_START,
) -> Phase:
    """Map a cycle-relative day to its phase.

    Args:
        cycle_day:       0-indexed day within the cycle.
        period_duration: Menstruation length in days.
        ovulation_start: First day of the ovulation band.
        luteal_start:    First day of the luteal band.

    Returns:
        One of the four cycle phases.

    Raises:
        InvalidProfile: If ``cycle_day`` is negative.
    """
    if cycle_day < 0:
        raise InvalidProfile(f"cycle_day must be non-negative, got {cycle_day}")
    if cycle_day < period_duration:
        return Phase.MENSTRUATION
    if cycle_day < ovulation_start:
        return Phase.FOLLICULAR
    if cycle_day < luteal_start:
        return Phase.OVULATION
    return Phase.LUTEAL


def phase_for_date(
    target: date | datetime,
    anchor: date | None,
    cycle_length: int,
    period_duration: int,
    ovulation_start: int = DEFAULT_OVULATION_START,
    luteal_start: int = DEFAULT_LUTEAL_START,
) -> Phase:
    """Classify any calendar date, past or future, against the anchor.

    Returns ``Phase.UNKNOWN`` when no anchor has been logged.
    """
    if anchor is None:
        return Phase.UNKNOWN
    day = cycle_relative_day(target, anchor, cycle_length)
    return classify_phase(day, period_duration, ovulation_start, luteal_start)


def default_checklist(phase: Phase) -> list[ChecklistItem]:
    """Return a fresh list holding the default checklist for ``phase``."""
    return list(PHASE_INFO[phase].default_checklist)
