"""Cycle endpoints: phase, intel, radar, daily logs, profile and snapshots."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from fastapi import APIRouter, Body, HTTPException, Query

from src.cycle.engine import CycleEngine
from src.cycle.radar import RadarPrediction, nearest_prediction
from src.dependencies import Engine
from src.models.cycle import (
    CalendarDayRead,
    ChecklistItemRead,
    CountdownRead,
    DailyLogRead,
    DayDetailRead,
    HistoryEntryRead,
    IntelRead,
    PeriodStartCreate,
    PhaseRead,
    ProfileRead,
    ProfileUpdate,
    RadarPredictionRead,
    RadarRead,
    ResetRequest,
    SymptomTagsRead,
    SymptomToggle,
    VocabularyRead,
)

router = APIRouter(prefix="/cycle", tags=["cycle"])
logger = logging.getLogger("redprotocol.routers.cycle")


def _profile_read(engine: CycleEngine) -> ProfileRead:
    return ProfileRead.model_validate(engine.get_profile())


def _prediction_read(prediction: RadarPrediction) -> RadarPredictionRead:
    return RadarPredictionRead(
        date=prediction.date,
        days_from_now=prediction.days_from_now,
        incidents=list(prediction.incidents),
    )


def _daily_log_read(engine: CycleEngine, day: date) -> DailyLogRead:
    return DailyLogRead(
        date=day,
        phase=engine.get_day_detail(day).phase.value,
        checklist=[ChecklistItemRead.model_validate(i) for i in engine.get_log_for_date(day)],
        symptom_tags=engine.get_symptom_tags(day),
    )


# ---------- Profile ----------

@router.get("/profile", response_model=ProfileRead)
async def get_profile(engine: Engine) -> Any:
    return _profile_read(engine)


@router.patch("/profile", response_model=ProfileRead)
async def update_profile(engine: Engine, body: ProfileUpdate) -> Any:
    updates = body.model_dump(exclude_unset=True)
    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")
    engine.set_profile(**updates)
    return _profile_read(engine)


@router.post("/period-start", response_model=ProfileRead)
async def log_period_start(engine: Engine, body: PeriodStartCreate) -> Any:
    engine.log_period_start(body.start_date)
    return _profile_read(engine)


@router.post("/reset", response_model=ProfileRead)
async def reset_all(engine: Engine, body: ResetRequest | None = None) -> Any:
    engine.reset_all(reset_profile=body.reset_profile if body else False)
    return _profile_read(engine)


# ---------- Status ----------

@router.get("/phase", response_model=PhaseRead)
async def get_phase(engine: Engine, as_of: date | None = Query(default=None)) -> Any:
    status = engine.get_phase_status(as_of)
    return PhaseRead(
        date=status.date,
        phase=status.phase.value,
        cycle_day=status.cycle_day,
        color_code=status.color_code,
    )


@router.get("/countdown", response_model=CountdownRead)
async def get_countdown(engine: Engine, as_of: date | None = Query(default=None)) -> Any:
    day = as_of or date.today()
    return CountdownRead(
        date=day,
        days_until_next=engine.get_days_until_next(day),
        anchor_date=engine.get_profile().anchor_date,
    )


@router.get("/intel", response_model=IntelRead)
async def get_intel(engine: Engine, as_of: date | None = Query(default=None)) -> Any:
    return IntelRead.model_validate(engine.get_intel(as_of))


@router.get("/radar", response_model=RadarRead)
async def get_radar(engine: Engine, as_of: date | None = Query(default=None)) -> Any:
    predictions = engine.get_radar_predictions(as_of)
    nearest = nearest_prediction(predictions)
    return RadarRead(
        predictions=[_prediction_read(p) for p in predictions],
        nearest=_prediction_read(nearest) if nearest else None,
    )


@router.get("/calendar", response_model=list[CalendarDayRead])
async def get_calendar(
    engine: Engine,
    start: date = Query(...),
    end: date = Query(...),
) -> Any:
    try:
        days = engine.get_phase_calendar(start, end)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return [
        CalendarDayRead(
            date=d.date,
            phase=d.phase.value,
            color_code=d.color_code,
            cycle_day=d.cycle_day,
            has_symptoms=d.has_symptoms,
        )
        for d in days
    ]


# ---------- Daily logs ----------

@router.get("/logs/{day}", response_model=DailyLogRead)
async def get_daily_log(day: date, engine: Engine) -> Any:
    return _daily_log_read(engine, day)


@router.post("/logs/{day}/checklist/{item_id}/toggle", response_model=DailyLogRead)
async def toggle_checklist_item(day: date, item_id: str, engine: Engine) -> Any:
    engine.toggle_checklist_item(day, item_id)
    return _daily_log_read(engine, day)


@router.post("/logs/{day}/symptoms/toggle", response_model=SymptomTagsRead)
async def toggle_symptom(day: date, engine: Engine, body: SymptomToggle) -> Any:
    tags = engine.toggle_symptom_tag(day, body.tag)
    return SymptomTagsRead(date=day, symptom_tags=tags)


@router.get("/symptoms/vocabulary", response_model=VocabularyRead)
async def get_vocabulary(engine: Engine) -> Any:
    return VocabularyRead(tags=engine.symptom_vocabulary())


# ---------- History ----------

@router.get("/history", response_model=list[HistoryEntryRead])
async def list_history(engine: Engine) -> Any:
    return [HistoryEntryRead.model_validate(row) for row in engine.get_history()]


@router.get("/history/{day}", response_model=DayDetailRead)
async def get_history_detail(day: date, engine: Engine) -> Any:
    detail = engine.get_day_detail(day)
    return DayDetailRead(
        date=detail.date,
        phase=detail.phase.value,
        symptom_tags=detail.symptom_tags,
        checked_items=[ChecklistItemRead.model_validate(i) for i in detail.checked_items],
    )


# ---------- Snapshot ----------

@router.get("/snapshot")
async def export_snapshot(engine: Engine) -> dict[str, Any]:
    return engine.export_snapshot()


@router.put("/snapshot", response_model=ProfileRead)
async def import_snapshot(engine: Engine, snapshot: dict[str, Any] = Body(...)) -> Any:
    engine.import_snapshot(snapshot)
    logger.info("Snapshot replaced via API")
    return _profile_read(engine)
