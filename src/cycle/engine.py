"""Cycle engine: the single owner of cycle state.

``CycleEngine`` wraps a ``LogStore`` and exposes every query, mutation and
persistence operation clients need.  Mutations and snapshot import/export
are serialised behind one lock, so clients on several threads see each
mutation applied whole.  Queries are pure functions of a profile + log copy
taken under the same lock.

Usage::

    engine = CycleEngine()
    engine.log_period_start(date(2024, 1, 1))
    engine.get_phase(date(2024, 1, 3))          # Phase.MENSTRUATION
    engine.toggle_symptom_tag(date(2024, 1, 15), "Migraine")
    engine.get_radar_predictions(date(2024, 2, 9))
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any

from src.cycle.arithmetic import (
    cycle_relative_day,
    date_key,
    day_offset,
    to_calendar_day,
)
from src.cycle.config_loader import CycleConfig, get_cycle_config
from src.cycle.intel import IntelRecord, build_intel
from src.cycle.log_store import CycleProfile, DayDetail, HistoryEntry, LogStore
from src.cycle.phases import PHASE_INFO, ChecklistItem, Phase
from src.cycle.radar import RadarPrediction, get_radar_predictions
from src.cycle.snapshot import decode_snapshot, encode_snapshot

logger = logging.getLogger("redprotocol.cycle.engine")

# Longest range get_phase_calendar() will render in one call
MAX_CALENDAR_DAYS = 366


@dataclass(frozen=True)
class PhaseStatus:
    """Phase and cycle day for one date, read from a single profile."""

    date: date
    phase: Phase
    cycle_day: int | None
    color_code: str


@dataclass(frozen=True)
class CalendarDay:
    """One rendered calendar cell."""

    date: date
    phase: Phase
    color_code: str
    cycle_day: int | None
    has_symptoms: bool


class CycleEngine:
    """Query/command interface over the cycle state.

    Every ``now``/``target`` argument accepts a date or datetime; the
    time-of-day is ignored.  ``now`` defaults to today.
    """

    def __init__(
        self,
        config: CycleConfig | None = None,
        store: LogStore | None = None,
    ) -> None:
        self._config = config or get_cycle_config()
        self._store = store or LogStore(self._config)
        self._lock = threading.Lock()

    @property
    def config(self) -> CycleConfig:
        return self._config

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_profile(self) -> CycleProfile:
        with self._lock:
            return self._store.profile

    def get_phase(self, now: date | datetime | None = None) -> Phase:
        with self._lock:
            return self._store.phase_for(_today(now))

    def get_phase_status(self, now: date | datetime | None = None) -> PhaseStatus:
        """Phase, cycle day and color for ``now`` from one consistent read."""
        day = _today(now)
        with self._lock:
            profile = self._store.profile
            phase = self._store.phase_for(day)
        cycle_day = (
            cycle_relative_day(day, profile.anchor_date, profile.cycle_length)
            if profile.anchor_date is not None
            else None
        )
        return PhaseStatus(
            date=day,
            phase=phase,
            cycle_day=cycle_day,
            color_code=PHASE_INFO[phase].color_code,
        )

    def get_cycle_day(self, now: date | datetime | None = None) -> int | None:
        """0-indexed cycle day for ``now``, or None without an anchor."""
        profile = self.get_profile()
        if profile.anchor_date is None:
            return None
        return cycle_relative_day(_today(now), profile.anchor_date, profile.cycle_length)

    def get_days_until_next(self, now: date | datetime | None = None) -> int:
        """Signed days until the next period is due.

        ``cycle_length - day_offset(now, anchor)``; negative once late.
        Returns 0 when no anchor has been logged.
        """
        profile = self.get_profile()
        if profile.anchor_date is None:
            return 0
        return profile.cycle_length - day_offset(_today(now), profile.anchor_date)

    def get_intel(self, now: date | datetime | None = None) -> IntelRecord:
        profile = self.get_profile()
        return build_intel(
            profile.anchor_date,
            profile.cycle_length,
            profile.period_duration,
            today=_today(now),
            stale_after_days=self._config.intel.stale_after_days,
            ovulation_start=self._config.phases.ovulation_start,
            luteal_start=self._config.phases.luteal_start,
        )

    def get_radar_predictions(
        self, now: date | datetime | None = None
    ) -> list[RadarPrediction]:
        with self._lock:
            profile = self._store.profile
            history = self._store.symptom_history()
        return get_radar_predictions(
            profile.anchor_date,
            profile.cycle_length,
            history,
            today=_today(now),
            lookahead_days=self._config.radar.lookahead_days,
            lookback_cycles=self._config.radar.lookback_cycles,
        )

    def get_log_for_date(self, target: date | datetime) -> list[ChecklistItem]:
        with self._lock:
            return self._store.get_log_for_date(target)

    def get_symptom_tags(self, target: date | datetime) -> list[str]:
        with self._lock:
            return self._store.get_symptom_tags(target)

    def get_history(self) -> list[HistoryEntry]:
        with self._lock:
            return self._store.history()

    def get_day_detail(self, target: date | datetime) -> DayDetail:
        with self._lock:
            return self._store.day_detail(target)

    def get_phase_calendar(
        self, start: date | datetime, end: date | datetime
    ) -> list[CalendarDay]:
        """Phase and color for every date in ``[start, end]``.

        Raises:
            ValueError: If ``end`` precedes ``start`` or the range is too long.
        """
        start, end = to_calendar_day(start), to_calendar_day(end)
        span = day_offset(end, start) + 1
        if span < 1:
            raise ValueError(f"Calendar end {end} is before start {start}")
        if span > MAX_CALENDAR_DAYS:
            raise ValueError(f"Calendar range of {span} days exceeds {MAX_CALENDAR_DAYS}")

        with self._lock:
            profile = self._store.profile
            with_symptoms = set(self._store.symptom_history())
            days = []
            for i in range(span):
                d = start + timedelta(days=i)
                phase = self._store.phase_for(d)
                days.append(
                    CalendarDay(
                        date=d,
                        phase=phase,
                        color_code=PHASE_INFO[phase].color_code,
                        cycle_day=(
                            cycle_relative_day(d, profile.anchor_date, profile.cycle_length)
                            if profile.anchor_date is not None
                            else None
                        ),
                        has_symptoms=date_key(d) in with_symptoms,
                    )
                )
        return days

    def symptom_vocabulary(self) -> list[str]:
        return list(self._config.symptom_vocabulary)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def set_profile(self, **changes: Any) -> CycleProfile:
        with self._lock:
            return self._store.set_profile(**changes)

    def log_period_start(self, start: date | datetime) -> CycleProfile:
        with self._lock:
            return self._store.log_period_start(start)

    def toggle_checklist_item(
        self, target: date | datetime, item_id: str
    ) -> list[ChecklistItem]:
        with self._lock:
            return self._store.toggle_checklist_item(target, item_id)

    def toggle_symptom_tag(self, target: date | datetime, tag: str) -> list[str]:
        with self._lock:
            return self._store.toggle_symptom_tag(target, tag)

    def reset_all(self, reset_profile: bool = False) -> CycleProfile:
        with self._lock:
            return self._store.reset_all(reset_profile=reset_profile)

    # ------------------------------------------------------------------
    # Persistence boundary
    # ------------------------------------------------------------------

    def export_snapshot(self) -> dict[str, Any]:
        with self._lock:
            return encode_snapshot(self._store.profile, self._store.entries())

    def import_snapshot(self, snapshot: dict[str, Any]) -> CycleProfile:
        """Replace the whole state with ``snapshot``.

        The snapshot is fully decoded and validated before the lock is
        taken; on any error the current state is untouched.

        Raises:
            SnapshotError:  Malformed snapshot.
            InvalidProfile: Snapshot profile breaks an invariant.
        """
        profile, logs = decode_snapshot(snapshot, self._config)
        with self._lock:
            self._store.replace_state(profile, logs)
        logger.info("Imported snapshot: anchor=%s, %d daily log(s)", profile.anchor_date, len(logs))
        return profile


def _today(now: date | datetime | None) -> date:
    return to_calendar_day(now) if now is not None else date.today()
