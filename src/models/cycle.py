"""Pydantic models for the cycle engine: snapshot payloads and API bodies."""

from __future__ import annotations

from datetime import date

from pydantic import Field, field_validator

from src.models.base import ProtocolBase


# ---------- Snapshot (persistence boundary) ----------

class ChecklistItemSchema(ProtocolBase):
    id: str = Field(min_length=1)
    label: str
    checked: bool = False


class ProfileSchema(ProtocolBase):
    anchor_date: date | None = None
    cycle_length: int
    period_duration: int
    partner_name: str = "Partner"


class DailyLogSchema(ProtocolBase):
    checklist: list[ChecklistItemSchema] | None = None
    symptom_tags: list[str] = Field(default_factory=list)


class SnapshotSchema(ProtocolBase):
    version: int = 1
    profile: ProfileSchema
    daily_logs: dict[str, DailyLogSchema] = Field(default_factory=dict)

    @field_validator("daily_logs")
    @classmethod
    def _check_date_keys(cls, value: dict[str, DailyLogSchema]) -> dict[str, DailyLogSchema]:
        for key in value:
            # Keys must round-trip exactly, so only the zero-padded form is accepted
            if len(key) != 10 or date.fromisoformat(key).isoformat() != key:
                raise ValueError(f"Invalid date key {key!r}; expected yyyy-MM-dd")
        return value


# ---------- Profile ----------

class ProfileRead(ProfileSchema):
    pass


class ProfileUpdate(ProtocolBase):
    anchor_date: date | None = None
    cycle_length: int | None = None
    period_duration: int | None = None
    partner_name: str | None = Field(default=None, min_length=1)


class PeriodStartCreate(ProtocolBase):
    start_date: date


class ResetRequest(ProtocolBase):
    reset_profile: bool = False


# ---------- Queries ----------

class PhaseRead(ProtocolBase):
    date: date
    phase: str
    cycle_day: int | None = None
    color_code: str


class CountdownRead(ProtocolBase):
    date: date
    days_until_next: int
    anchor_date: date | None = None


class IntelRead(ProtocolBase):
    phase: str
    headline: str
    narrative: str
    action_item: str
    color_code: str
    icon: str
    cycle_day: int | None = None
    days_since_start: int | None = None


class RadarPredictionRead(ProtocolBase):
    date: date
    days_from_now: int
    incidents: list[str]


class RadarRead(ProtocolBase):
    predictions: list[RadarPredictionRead]
    nearest: RadarPredictionRead | None = None


class CalendarDayRead(ProtocolBase):
    date: date
    phase: str
    color_code: str
    cycle_day: int | None = None
    has_symptoms: bool = False


# ---------- Logs ----------

class ChecklistItemRead(ChecklistItemSchema):
    pass


class DailyLogRead(ProtocolBase):
    date: date
    phase: str
    checklist: list[ChecklistItemRead]
    symptom_tags: list[str]


class SymptomToggle(ProtocolBase):
    tag: str = Field(min_length=1, max_length=100)


class SymptomTagsRead(ProtocolBase):
    date: date
    symptom_tags: list[str]


class HistoryEntryRead(ProtocolBase):
    date: date
    symptom_count: int
    checked_count: int


class DayDetailRead(ProtocolBase):
    date: date
    phase: str
    symptom_tags: list[str]
    checked_items: list[ChecklistItemRead]


class VocabularyRead(ProtocolBase):
    tags: list[str]
