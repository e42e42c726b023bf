"""
Tests for equity_screener.models.snapshot / alert / score.

Covers:
  - IndicatorSnapshot: RSI range, non-negative ratios, camelCase dump,
    sma_spread_percent
  - Alert / CrossoverEvent serialisation keys
  - ScoreResult normalized range, RankedPick convenience accessors
  - BreakdownEntry serialises its points as ``pointsDelta``
"""

from __future__ import annotations

from datetime import date

import pytest
from pydantic import ValidationError

from conftest import make_alert, make_snapshot
from equity_screener.models.alert import CrossoverEvent
from equity_screener.models.score import BreakdownEntry, RankedPick, ScoreResult
from equity_screener.taxonomy.signal_taxonomy import (
    AlertCategory,
    AlertType,
    CrossoverType,
    StrategyName,
)


class TestIndicatorSnapshot:
    def test_rsi_out_of_range(self):
        with pytest.raises(ValidationError, match="rsi"):
            make_snapshot(rsi=101.0)

    def test_negative_relative_volume(self):
        with pytest.raises(ValidationError):
            make_snapshot(relative_volume=-0.1)

    def test_camel_case_dump(self):
        snap = make_snapshot("AAPL", percent_from_sma50=1.5, fifty_two_week_high=200.0)
        dumped = snap.model_dump(by_alias=True)
        assert dumped["percentFromSma50"] == 1.5
        assert dumped["fiftyTwoWeekHigh"] == 200.0
        assert dumped["rsi"] is None
        assert dumped["upStreak"] is None

    def test_sma_spread(self):
        assert make_snapshot(sma50=110.0, sma200=100.0).sma_spread_percent == pytest.approx(10.0)
        assert make_snapshot(sma50=110.0).sma_spread_percent is None


class TestAlertModels:
    def test_alert_keys(self):
        dumped = make_alert(AlertType.NEW_52W_HIGH, AlertCategory.FIFTY_TWO_WEEK_LEVELS).model_dump(
            by_alias=True, mode="json"
        )
        assert dumped["alertType"] == "new_52w_high"
        assert dumped["alertCategory"] == "52w_levels"
        assert dumped["severity"] == "bullish"

    def test_crossover_event_keys(self):
        event = CrossoverEvent(
            date=date(2024, 3, 1), type=CrossoverType.DEATH_CROSS,
            sma50=99.0, sma200=100.0, close=95.0, change_since_previous_pct=-4.5,
        )
        dumped = event.model_dump(by_alias=True, mode="json")
        assert dumped["date"] == "2024-03-01"
        assert dumped["changeSincePreviousPct"] == -4.5


class TestScoreModels:
    def _result(self, **overrides):
        fields = dict(symbol="X", strategy_name=StrategyName.DAY_TRADE, score=13, normalized_score=50)
        fields.update(overrides)
        return ScoreResult(**fields)

    def test_normalized_range(self):
        with pytest.raises(ValidationError):
            self._result(normalized_score=101)

    def test_ranked_pick_accessors(self):
        pick = RankedPick(
            rank=1,
            stock=make_snapshot("X"),
            result=self._result(signals=("Big Mover",)),
        )
        assert pick.symbol == "X"
        assert pick.score == 13
        assert pick.signals == ("Big Mover",)

    def test_rank_starts_at_one(self):
        with pytest.raises(ValidationError):
            RankedPick(rank=0, stock=make_snapshot("X"), result=self._result())

    def test_breakdown_entry_keys(self):
        entry = BreakdownEntry(label="Strong RSI", observed_value=68.0, points_delta=3)
        dumped = entry.model_dump(by_alias=True)
        assert dumped == {"label": "Strong RSI", "observedValue": 68.0, "pointsDelta": 3}
