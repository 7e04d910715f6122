"""Tests for the pattern radar predictor."""

from __future__ import annotations

from datetime import date, timedelta

from src.cycle.radar import (
    RadarPrediction,
    analog_dates,
    get_radar_predictions,
    nearest_prediction,
)

CYCLE = 28

# 2024-03-25 is exactly three 28-day cycles after 2024-01-01
ANCHOR_MAR = date(2024, 3, 25)


class TestAnalogDates:
    def test_same_cycle_day_in_prior_cycles(self) -> None:
        target = date(2024, 4, 8)  # cycle day 14
        assert analog_dates(target, ANCHOR_MAR, CYCLE) == [
            date(2024, 3, 11),
            date(2024, 2, 12),
            date(2024, 1, 15),
        ]

    def test_lookback_count(self) -> None:
        assert len(analog_dates(date(2024, 4, 8), ANCHOR_MAR, CYCLE, lookback_cycles=6)) == 6

    def test_target_before_anchor(self) -> None:
        # 2024-03-24 is cycle day 27, the last day of the cycle before the anchor
        assert analog_dates(date(2024, 3, 24), ANCHOR_MAR, CYCLE)[0] == date(2024, 3, 24)


class TestRadarPredictions:
    def test_no_anchor_returns_empty(self) -> None:
        history = {"2024-01-15": ["Migraine"]}
        assert get_radar_predictions(None, CYCLE, history, today=date(2024, 2, 9)) == []

    def test_recurring_migraine_one_cycle_later(self) -> None:
        """Migraine on cycle day 14 of the previous cycle projects onto day 14 of this one.

        The next period was logged on 2024-01-29, so 2024-01-15 sits on day 14
        of the prior cycle and 2024-02-12 (three days after 2024-02-09) is day 14
        of the current one.
        """
        history = {"2024-01-15": ["Migraine"]}
        predictions = get_radar_predictions(
            date(2024, 1, 29), CYCLE, history, today=date(2024, 2, 9)
        )
        assert predictions == [
            RadarPrediction(date=date(2024, 2, 12), days_from_now=3, incidents=("Migraine",))
        ]

    def test_logs_after_the_anchor_are_not_analogs(self) -> None:
        """Only cycles before the anchor are scanned."""
        history = {"2024-01-15": ["Migraine"]}
        predictions = get_radar_predictions(
            date(2024, 1, 1), CYCLE, history, today=date(2024, 2, 11)
        )
        assert predictions == []

    def test_three_cycles_back_is_found(self) -> None:
        history = {"2024-01-15": ["Nausea"]}
        predictions = get_radar_predictions(ANCHOR_MAR, CYCLE, history, today=date(2024, 4, 7))
        assert [(p.date, p.days_from_now, p.incidents) for p in predictions] == [
            (date(2024, 4, 8), 1, ("Nausea",))
        ]

    def test_four_cycles_back_is_ignored(self) -> None:
        history = {"2024-01-15": ["Nausea"]}
        anchor = ANCHOR_MAR + timedelta(days=CYCLE)
        today = anchor + timedelta(days=13)
        assert get_radar_predictions(anchor, CYCLE, history, today=today) == []

    def test_lookback_is_configurable(self) -> None:
        history = {"2024-01-15": ["Nausea"]}
        predictions = get_radar_predictions(
            ANCHOR_MAR, CYCLE, history, today=date(2024, 4, 7), lookback_cycles=2
        )
        assert predictions == []

    def test_union_is_deduplicated_in_first_seen_order(self) -> None:
        history = {
            "2024-03-11": ["Bloating"],
            "2024-02-12": ["Cramps"],
            "2024-01-15": ["Cramps", "Migraine"],
        }
        predictions = get_radar_predictions(ANCHOR_MAR, CYCLE, history, today=date(2024, 4, 7))
        assert len(predictions) == 1
        assert predictions[0].incidents == ("Bloating", "Cramps", "Migraine")

    def test_predictions_ordered_and_within_window(self) -> None:
        history = {
            "2024-03-12": ["Fatigue"],  # day 15 → 2024-04-09
            "2024-03-10": ["Insomnia"],  # day 13 → 2024-04-07 (today, not forecast)
            "2024-03-14": ["Acne / Breakout"],  # day 17 → 2024-04-11
            "2024-03-16": ["Bloating"],  # day 19 → 2024-04-13, outside 5-day window
        }
        predictions = get_radar_predictions(ANCHOR_MAR, CYCLE, history, today=date(2024, 4, 7))
        assert [p.days_from_now for p in predictions] == [2, 4]
        assert [p.incidents for p in predictions] == [("Fatigue",), ("Acne / Breakout",)]

    def test_lookahead_is_configurable(self) -> None:
        history = {"2024-03-16": ["Bloating"]}
        predictions = get_radar_predictions(
            ANCHOR_MAR, CYCLE, history, today=date(2024, 4, 7), lookahead_days=7
        )
        assert [p.days_from_now for p in predictions] == [6]

    def test_empty_tag_lists_ignored(self) -> None:
        history = {"2024-03-11": []}
        assert get_radar_predictions(ANCHOR_MAR, CYCLE, history, today=date(2024, 4, 7)) == []

    def test_deterministic(self) -> None:
        history = {"2024-03-11": ["Bloating"], "2024-02-13": ["Cramps"]}
        first = get_radar_predictions(ANCHOR_MAR, CYCLE, history, today=date(2024, 4, 7))
        second = get_radar_predictions(ANCHOR_MAR, CYCLE, history, today=date(2024, 4, 7))
        assert first == second
        assert first


class TestNearestPrediction:
    def _p(self, days: int) -> RadarPrediction:
        return RadarPrediction(
            date=date(2024, 4, 7) + timedelta(days=days), days_from_now=days, incidents=("Cramps",)
        )

    def test_prefers_tomorrow(self) -> None:
        assert nearest_prediction([self._p(1), self._p(3)]).days_from_now == 1

    def test_falls_back_to_first(self) -> None:
        assert nearest_prediction([self._p(2), self._p(4)]).days_from_now == 2

    def test_empty(self) -> None:
        assert nearest_prediction([]) is None
