"""Encode and decode the engine's persistent state.

A snapshot is the complete ``{profile, daily_logs}`` state as plain JSON
types.  Date keys are ``yyyy-MM-dd`` strings and are written back exactly as
stored, since the radar rebuilds keys from date arithmetic.

Decoding validates everything before anything is returned, so a rejected
snapshot never leaves the caller with half a state.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any

from pydantic import ValidationError

from src.cycle.config_loader import CycleConfig
from src.cycle.errors import SnapshotError
from src.cycle.log_store import CycleProfile, DailyLog, validate_profile
from src.cycle.phases import ChecklistItem
from src.models.cycle import SnapshotSchema

logger = logging.getLogger("redprotocol.cycle.snapshot")

SNAPSHOT_VERSION = 1


def encode_snapshot(profile: CycleProfile, logs: dict[str, DailyLog]) -> dict[str, Any]:
    """Build a JSON-ready snapshot dict.

    Args:
        profile: Current profile.
        logs:    Date key → DailyLog.

    Returns:
        Dict containing only JSON-native types.
    """
    schema = SnapshotSchema(
        version=SNAPSHOT_VERSION,
        profile=asdict(profile),
        daily_logs={key: asdict(logs[key]) for key in sorted(logs)},
    )
    return schema.model_dump(mode="json")


def decode_snapshot(
    payload: dict[str, Any], config: CycleConfig
) -> tuple[CycleProfile, dict[str, DailyLog]]:
    """Validate a snapshot dict and rebuild engine state from it.

    Args:
        payload: Snapshot as produced by ``encode_snapshot`` (or parsed JSON).
        config:  Config used for profile validation.

    Returns:
        ``(profile, logs)`` ready for ``LogStore.replace_state``.

    Raises:
        SnapshotError:  Malformed payload or date key.
        InvalidProfile: Well-formed payload with an invalid profile.
    """
    if not isinstance(payload, dict):
        raise SnapshotError(f"Snapshot must be an object, got {type(payload).__name__}")
    try:
        schema = SnapshotSchema.model_validate(payload)
    except ValidationError as exc:
        logger.warning("Rejected snapshot: %d validation error(s)", exc.error_count())
        raise SnapshotError(f"Invalid snapshot: {exc}") from exc

    if schema.version > SNAPSHOT_VERSION:
        raise SnapshotError(
            f"Snapshot version {schema.version} is newer than supported ({SNAPSHOT_VERSION})"
        )

    p = schema.profile
    profile = CycleProfile(
        anchor_date=p.anchor_date,
        cycle_length=p.cycle_length,
        period_duration=p.period_duration,
        partner_name=p.partner_name,
    )
    validate_profile(profile, config)

    logs: dict[str, DailyLog] = {}
    for key, entry in schema.daily_logs.items():
        checklist = None
        if entry.checklist is not None:
            checklist = [
                ChecklistItem(id=item.id, label=item.label, checked=item.checked)
                for item in entry.checklist
            ]
        logs[key] = DailyLog(
            checklist=checklist,
            symptom_tags=list(dict.fromkeys(entry.symptom_tags)),
        )
    return profile, logs
