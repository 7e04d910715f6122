"""Pattern radar: forecast symptom recurrence from prior cycles.

For every day in the lookahead window the predictor finds that day's
cycle-relative position, then looks up the same position in each of the
previous few cycles (assuming the current cycle length held throughout).
Any symptom logged on one of those historical analogs is projected forward.

There is no frequency or confidence threshold: one occurrence on one
analog date is enough to surface a prediction.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Mapping, Sequence

from src.cycle.arithmetic import cycle_relative_day, date_key, to_calendar_day

logger = logging.getLogger("redprotocol.cycle.radar")

DEFAULT_LOOKAHEAD_DAYS = 5
DEFAULT_LOOKBACK_CYCLES = 3


@dataclass(frozen=True)
class RadarPrediction:
    """Projected symptoms for one upcoming date.

    Attributes:
        date:          The upcoming date.
        days_from_now: 1-based distance from the reference date.
        incidents:     Deduplicated tags, in first-seen order.
    """

    date: date
    days_from_now: int
    incidents: tuple[str, ...]


def analog_dates(
    target: date,
    anchor_date: date,
    cycle_length: int,
    lookback_cycles: int = DEFAULT_LOOKBACK_CYCLES,
) -> list[date]:
    """Return the dates that held ``target``'s cycle position in prior cycles.

    The most recent prior cycle comes first.
    """
    cycle_day = cycle_relative_day(target, anchor_date, cycle_length)
    analogs = []
    for c in range(1, lookback_cycles + 1):
        past_cycle_start = anchor_date - timedelta(days=c * cycle_length)
        analogs.append(past_cycle_start + timedelta(days=cycle_day))
    return analogs


def get_radar_predictions(
    anchor_date: date | None,
    cycle_length: int,
    symptom_history: Mapping[str, Sequence[str]],
    today: date | datetime | None = None,
    lookahead_days: int = DEFAULT_LOOKAHEAD_DAYS,
    lookback_cycles: int = DEFAULT_LOOKBACK_CYCLES,
) -> list[RadarPrediction]:
    """Project historical symptoms onto the next ``lookahead_days`` dates.

    Args:
        anchor_date:     Most recent period start, or None.
        cycle_length:    Cycle length in days.
        symptom_history: ``yyyy-MM-dd`` → tags logged on that date.
        today:           Reference date (defaults to today).
        lookahead_days:  How many upcoming days to scan.
        lookback_cycles: How many prior cycles to search per day.

    Returns:
        Predictions ordered by ``days_from_now``; empty without an anchor.
    """
    if anchor_date is None:
        return []

    today = to_calendar_day(today or date.today())
    predictions: list[RadarPrediction] = []

    for i in range(1, lookahead_days + 1):
        target = today + timedelta(days=i)

        incidents: dict[str, None] = {}  # ordered set
        for past in analog_dates(target, anchor_date, cycle_length, lookback_cycles):
            for tag in symptom_history.get(date_key(past), ()):
                incidents.setdefault(tag, None)

        if incidents:
            predictions.append(
                RadarPrediction(
                    date=target,
                    days_from_now=i,
                    incidents=tuple(incidents),
                )
            )

    logger.debug(
        "Radar scan from %s: %d prediction(s) over %d day(s)",
        today, len(predictions), lookahead_days,
    )
    return predictions


def nearest_prediction(
    predictions: Sequence[RadarPrediction],
) -> RadarPrediction | None:
    """Pick the prediction a client should headline.

    Tomorrow's prediction if there is one, otherwise the earliest emitted.
    """
    for prediction in predictions:
        if prediction.days_from_now == 1:
            return prediction
    return predictions[0] if predictions else None
