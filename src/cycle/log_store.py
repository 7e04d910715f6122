"""Cycle profile and the sparse per-date log store.

The store owns the only mutable state in the engine:

- one ``CycleProfile`` (anchor date, cycle length, period duration), and
- a mapping of ``yyyy-MM-dd`` → ``DailyLog`` for dates the user has touched.

Reads for untouched dates synthesize the phase default checklist without
writing it back, so rendering a calendar never grows the store.  Only a
mutation (checklist toggle or symptom toggle) creates an entry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields, replace
from datetime import date, datetime

from src.cycle.arithmetic import date_key, parse_date_key, to_calendar_day
from src.cycle.config_loader import CycleConfig, get_cycle_config
from src.cycle.errors import InvalidProfile
from src.cycle.phases import ChecklistItem, Phase, default_checklist, phase_for_date

logger = logging.getLogger("redprotocol.cycle.log_store")


@dataclass(frozen=True)
class CycleProfile:
    """User cycle settings.

    Attributes:
        anchor_date:     Most recent logged period start; None = uninitialized.
        cycle_length:    Cycle length in days.
        period_duration: Menstruation length in days.
        partner_name:    Display name shown by clients.
    """

    anchor_date: date | None = None
    cycle_length: int = 28
    period_duration: int = 5
    partner_name: str = "Partner"


@dataclass
class DailyLog:
    """Everything logged against one calendar date.

    ``checklist`` is None until the date's checklist is touched; None means
    "use the phase default".
    """

    checklist: list[ChecklistItem] | None = None
    symptom_tags: list[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return self.checklist is None and not self.symptom_tags


@dataclass(frozen=True)
class HistoryEntry:
    """Summary row for a date with recorded activity."""

    date: date
    symptom_count: int
    checked_count: int


@dataclass(frozen=True)
class DayDetail:
    """Everything recorded for a single date, plus its phase."""

    date: date
    phase: Phase
    symptom_tags: list[str]
    checked_items: list[ChecklistItem]


_PROFILE_FIELDS = frozenset(f.name for f in fields(CycleProfile))


def validate_profile(profile: CycleProfile, config: CycleConfig) -> None:
    """Check every profile invariant.

    Raises:
        InvalidProfile: On the first violated invariant.
    """
    if isinstance(profile.cycle_length, bool) or not isinstance(profile.cycle_length, int):
        raise InvalidProfile(f"cycle_length must be an integer, got {profile.cycle_length!r}")
    if isinstance(profile.period_duration, bool) or not isinstance(profile.period_duration, int):
        raise InvalidProfile(
            f"period_duration must be an integer, got {profile.period_duration!r}"
        )
    if profile.cycle_length <= 0:
        raise InvalidProfile(f"cycle_length must be positive, got {profile.cycle_length}")
    if profile.period_duration < 0:
        raise InvalidProfile(
            f"period_duration must not be negative, got {profile.period_duration}"
        )
    if profile.period_duration >= profile.cycle_length:
        raise InvalidProfile(
            f"period_duration ({profile.period_duration}) must be shorter than "
            f"cycle_length ({profile.cycle_length})"
        )
    ovulation_start = config.phases.ovulation_start
    if profile.period_duration >= ovulation_start:
        raise InvalidProfile(
            f"period_duration ({profile.period_duration}) must be shorter than "
            f"{ovulation_start} days so the follicular phase is not empty"
        )
    if profile.anchor_date is not None and (
        isinstance(profile.anchor_date, datetime) or not isinstance(profile.anchor_date, date)
    ):
        raise InvalidProfile(
            f"anchor_date must be a calendar date or None, got {profile.anchor_date!r}"
        )
    if not isinstance(profile.partner_name, str):
        raise InvalidProfile(f"partner_name must be a string, got {profile.partner_name!r}")


class LogStore:
    """Profile + sparse daily log mapping.

    Not thread-safe on its own; ``CycleEngine`` serialises access.

    Usage::

        store = LogStore()
        store.log_period_start(date(2024, 1, 1))
        store.toggle_checklist_item(date(2024, 1, 2), "hydration")
        store.toggle_symptom_tag(date(2024, 1, 2), "Cramps")
    """

    def __init__(
        self,
        config: CycleConfig | None = None,
        profile: CycleProfile | None = None,
    ) -> None:
        self._config = config or get_cycle_config()
        self._profile = profile or self.default_profile()
        validate_profile(self._profile, self._config)
        self._logs: dict[str, DailyLog] = {}

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------

    def default_profile(self) -> CycleProfile:
        defaults = self._config.profile
        return CycleProfile(
            anchor_date=None,
            cycle_length=defaults.default_cycle_length,
            period_duration=defaults.default_period_duration,
            partner_name=defaults.default_partner_name,
        )

    @property
    def profile(self) -> CycleProfile:
        return self._profile

    def set_profile(self, **changes) -> CycleProfile:
        """Apply a partial profile update.

        The update is validated as a whole; on failure nothing changes.

        Args:
            **changes: Any subset of CycleProfile fields.

        Returns:
            The new profile.

        Raises:
            InvalidProfile: Unknown field or violated invariant.
        """
        unknown = set(changes) - _PROFILE_FIELDS
        if unknown:
            raise InvalidProfile(f"Unknown profile field(s): {', '.join(sorted(unknown))}")
        if changes.get("anchor_date") is not None:
            changes["anchor_date"] = to_calendar_day(changes["anchor_date"])

        candidate = replace(self._profile, **changes)
        try:
            validate_profile(candidate, self._config)
        except InvalidProfile:
            logger.warning("Rejected profile update %r", changes)
            raise
        self._profile = candidate
        logger.info(
            "Profile updated: cycle_length=%d period_duration=%d anchor=%s",
            candidate.cycle_length,
            candidate.period_duration,
            candidate.anchor_date,
        )
        return candidate

    def log_period_start(self, start: date | datetime) -> CycleProfile:
        """Set the anchor date to a new period start."""
        return self.set_profile(anchor_date=to_calendar_day(start))

    def phase_for(self, target: date | datetime) -> Phase:
        """Phase of ``target`` under the current profile."""
        thresholds = self._config.phases
        return phase_for_date(
            target,
            self._profile.anchor_date,
            self._profile.cycle_length,
            self._profile.period_duration,
            thresholds.ovulation_start,
            thresholds.luteal_start,
        )

    # ------------------------------------------------------------------
    # Checklists
    # ------------------------------------------------------------------

    def get_log_for_date(self, target: date | datetime) -> list[ChecklistItem]:
        """Return the checklist for ``target``.

        A touched date returns its stored checklist.  Any other date returns
        the default checklist of its phase under the *current* profile.
        Nothing is written either way.
        """
        entry = self._logs.get(date_key(target))
        if entry is not None and entry.checklist is not None:
            return list(entry.checklist)
        return default_checklist(self.phase_for(target))

    def toggle_checklist_item(
        self, target: date | datetime, item_id: str
    ) -> list[ChecklistItem]:
        """Flip one item's ``checked`` flag and persist the date's checklist.

        Unknown ids are a silent no-op and persist nothing.

        Returns:
            The date's checklist after the toggle.
        """
        checklist = self.get_log_for_date(target)
        index = next((i for i, item in enumerate(checklist) if item.id == item_id), None)
        if index is None:
            logger.debug("Ignoring toggle of unknown checklist item %r on %s", item_id, target)
            return checklist

        checklist[index] = checklist[index].toggled()
        key = date_key(target)
        entry = self._logs.setdefault(key, DailyLog())
        entry.checklist = checklist
        logger.debug("Toggled %s on %s → %s", item_id, key, checklist[index].checked)
        return list(checklist)

    # ------------------------------------------------------------------
    # Symptoms
    # ------------------------------------------------------------------

    def get_symptom_tags(self, target: date | datetime) -> list[str]:
        entry = self._logs.get(date_key(target))
        return list(entry.symptom_tags) if entry else []

    def toggle_symptom_tag(self, target: date | datetime, tag: str) -> list[str]:
        """Add ``tag`` to the date if absent, remove it if present.

        Returns:
            The date's tags after the toggle.

        Raises:
            ValueError: If ``tag`` is blank.
        """
        tag = tag.strip() if isinstance(tag, str) else tag
        if not isinstance(tag, str) or not tag:
            raise ValueError("Symptom tag must be a non-empty string")

        key = date_key(target)
        entry = self._logs.setdefault(key, DailyLog())
        if tag in entry.symptom_tags:
            entry.symptom_tags.remove(tag)
        else:
            entry.symptom_tags.append(tag)
        tags = list(entry.symptom_tags)
        if entry.is_empty():
            del self._logs[key]
        return tags

    def symptom_history(self) -> dict[str, list[str]]:
        """Return every date key with at least one symptom tag."""
        return {
            key: list(entry.symptom_tags)
            for key, entry in self._logs.items()
            if entry.symptom_tags
        }

    # ------------------------------------------------------------------
    # History views
    # ------------------------------------------------------------------

    def touched_dates(self) -> list[date]:
        """Dates with at least one persisted entry, oldest first."""
        return sorted(parse_date_key(key) for key in self._logs)

    def history(self) -> list[HistoryEntry]:
        """Dates with a checked item or a symptom tag, newest first."""
        rows: list[HistoryEntry] = []
        for key, entry in self._logs.items():
            checked = sum(1 for item in entry.checklist or [] if item.checked)
            if checked or entry.symptom_tags:
                rows.append(
                    HistoryEntry(
                        date=parse_date_key(key),
                        symptom_count=len(entry.symptom_tags),
                        checked_count=checked,
                    )
                )
        rows.sort(key=lambda r: r.date, reverse=True)
        return rows

    def day_detail(self, target: date | datetime) -> DayDetail:
        entry = self._logs.get(date_key(target)) or DailyLog()
        return DayDetail(
            date=to_calendar_day(target),
            phase=self.phase_for(target),
            symptom_tags=list(entry.symptom_tags),
            checked_items=[item for item in entry.checklist or [] if item.checked],
        )

    # ------------------------------------------------------------------
    # Bulk state
    # ------------------------------------------------------------------

    def entries(self) -> dict[str, DailyLog]:
        """Deep-enough copy of the log mapping (items are immutable)."""
        return {
            key: DailyLog(
                checklist=list(entry.checklist) if entry.checklist is not None else None,
                symptom_tags=list(entry.symptom_tags),
            )
            for key, entry in self._logs.items()
        }

    def replace_state(self, profile: CycleProfile, logs: dict[str, DailyLog]) -> None:
        """Swap in a complete state.  ``profile`` is validated first."""
        validate_profile(profile, self._config)
        self._profile = profile
        self._logs = {key: entry for key, entry in logs.items() if not entry.is_empty()}

    def reset_all(self, reset_profile: bool = False) -> CycleProfile:
        """Clear the anchor date and every daily log.

        Cycle length, period duration and partner name survive unless
        ``reset_profile`` is True.
        """
        if reset_profile:
            self._profile = self.default_profile()
        else:
            self._profile = replace(self._profile, anchor_date=None)
        dropped = len(self._logs)
        self._logs = {}
        logger.info("Reset store: dropped %d daily log(s), reset_profile=%s", dropped, reset_profile)
        return self._profile
