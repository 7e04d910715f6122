"""Red Protocol cycle engine.

Estimates the current cycle phase from a single anchor date, keeps a sparse
per-date log of checklists and symptom tags, and projects recurring symptoms
onto the next few days.

Modules:
    arithmetic    — Calendar-day offsets and true-modulo cycle days
    phases        — Phase classifier and the per-phase data table
    log_store     — Profile + sparse daily logs (the only mutable state)
    intel         — Status card translator (NO DATA / OVERDUE / phase)
    radar         — Symptom recurrence forecast from prior cycles
    snapshot      — JSON snapshot encode/decode
    engine        — CycleEngine, the single owner of state
    config_loader — Load/validate/hot-reload cycle_config.yaml
"""

from src.cycle.engine import CalendarDay, CycleEngine
from src.cycle.errors import ConfigValidationError, InvalidProfile, SnapshotError
from src.cycle.intel import IntelRecord
from src.cycle.log_store import CycleProfile, LogStore
from src.cycle.phases import ChecklistItem, Phase
from src.cycle.radar import RadarPrediction

__all__ = [
    "CycleEngine",
    "CalendarDay",
    "LogStore",
    "CycleProfile",
    "ChecklistItem",
    "Phase",
    "IntelRecord",
    "RadarPrediction",
    "InvalidProfile",
    "SnapshotError",
    "ConfigValidationError",
]
