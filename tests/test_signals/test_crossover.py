"""
Tests for equity_screener/signals/crossover.py.

What we test
------------
detect_crossovers():
  - Golden and death edges found at the bar where the relationship flips.
  - Touching the slow average and moving back above it is a second golden
    cross; an earlier golden cross before the cutoff does not hide it.
  - Cutoff hides earlier events; change since previous restarts at None.
  - Misaligned SMA sequences raise ValueError.
current_crossover_state(): golden / death / unknown.
build_crossover_report(): end-to-end with short SMA periods; default cutoff
  derived from ``as_of`` and ``lookback_years``.
latest_crossover(): fires only on the last bar and only with enough history.
"""

from __future__ import annotations

from datetime import date

import pytest

from conftest import make_series
from equity_screener.config import CrossoverConfig, IndicatorConfig
from equity_screener.signals.crossover import (
    build_crossover_report,
    current_crossover_state,
    detect_crossovers,
    latest_crossover,
)
from equity_screener.taxonomy.signal_taxonomy import CrossoverState, CrossoverType

_SHORT = IndicatorConfig(sma_fast=2, sma_slow=3)
_V_SHAPE = [5.0, 4.0, 3.0, 2.0, 1.0, 2.0, 3.0, 4.0, 5.0, 6.0]


class TestDetectCrossovers:
    def _series(self):
        return make_series([10.0, 11.0, 12.0, 13.0, 14.0, 15.0])

    def test_golden_then_death(self):
        fast = [None, 1.0, 1.0, 3.0, 3.0, 1.0]
        slow = [None, 2.0, 2.0, 2.0, 2.0, 2.0]
        events = detect_crossovers(self._series(), fast, slow)

        assert [e.type for e in events] == [CrossoverType.GOLDEN_CROSS, CrossoverType.DEATH_CROSS]
        assert events[0].date == date(2024, 1, 4)
        assert events[0].close == 13.0
        assert events[0].change_since_previous_pct is None
        assert events[1].date == date(2024, 1, 6)
        assert events[1].change_since_previous_pct == pytest.approx((15 - 13) / 13 * 100)

    def test_event_records_sma_values(self):
        fast = [None, 1.0, 1.0, 3.0, 3.0, 1.0]
        slow = [None, 2.0, 2.0, 2.0, 2.0, 2.0]
        golden = detect_crossovers(self._series(), fast, slow)[0]
        assert golden.sma50 == 3.0
        assert golden.sma200 == 2.0

    def test_touch_and_recross_reports_second_golden(self):
        series = make_series([10.0, 11.0, 12.0, 13.0])
        events = detect_crossovers(series, [1.0, 3.0, 2.0, 3.0], [2.0, 2.0, 2.0, 2.0])

        assert [e.type for e in events] == [CrossoverType.GOLDEN_CROSS, CrossoverType.GOLDEN_CROSS]
        assert [e.date for e in events] == [date(2024, 1, 2), date(2024, 1, 4)]
        assert events[1].change_since_previous_pct == pytest.approx((13 - 11) / 11 * 100)

    def test_golden_before_cutoff_does_not_hide_later_golden(self):
        series = make_series([10.0, 11.0, 12.0, 13.0])
        events = detect_crossovers(
            series, [1.0, 3.0, 2.0, 3.0], [2.0, 2.0, 2.0, 2.0], cutoff=date(2024, 1, 3)
        )

        assert len(events) == 1
        assert events[0].type == CrossoverType.GOLDEN_CROSS
        assert events[0].date == date(2024, 1, 4)
        assert events[0].change_since_previous_pct is None

    def test_cutoff_hides_earlier_events(self):
        fast = [None, 1.0, 1.0, 3.0, 3.0, 1.0]
        slow = [None, 2.0, 2.0, 2.0, 2.0, 2.0]
        events = detect_crossovers(self._series(), fast, slow, cutoff=date(2024, 1, 5))
        assert len(events) == 1
        assert events[0].type == CrossoverType.DEATH_CROSS
        assert events[0].change_since_previous_pct is None

    def test_no_events_without_slow_average(self):
        series = self._series()
        assert detect_crossovers(series, [1.0] * 6, [None] * 6) == []

    def test_misaligned_raises(self):
        with pytest.raises(ValueError, match="align"):
            detect_crossovers(self._series(), [1.0] * 5, [1.0] * 6)


class TestCurrentState:
    def test_golden(self):
        assert current_crossover_state(101.0, 100.0) == CrossoverState.GOLDEN

    def test_equal_is_death(self):
        assert current_crossover_state(100.0, 100.0) == CrossoverState.DEATH

    def test_unknown_without_values(self):
        assert current_crossover_state(None, 100.0) == CrossoverState.UNKNOWN


class TestBuildCrossoverReport:
    def test_v_shape_with_short_periods(self):
        series = make_series(_V_SHAPE, symbol="XYZ")
        report = build_crossover_report(series, cutoff=date(2000, 1, 1), indicators=_SHORT)

        assert report.symbol == "XYZ"
        assert len(report.crossovers) == 1
        event = report.crossovers[0]
        assert event.type == CrossoverType.GOLDEN_CROSS
        assert event.date == date(2024, 1, 7)
        assert event.close == 3.0
        assert report.current_state == CrossoverState.GOLDEN
        assert report.current_sma50 == 5.5
        assert report.current_sma200 == 5.0
        assert report.current_close == 6.0
        assert report.current_date == date(2024, 1, 10)
        assert report.total_trading_days == 10

    def test_default_cutoff_from_as_of(self):
        series = make_series(_V_SHAPE)
        recent = build_crossover_report(series, indicators=_SHORT, as_of=date(2024, 2, 1))
        later = build_crossover_report(series, indicators=_SHORT, as_of=date(2030, 1, 1))
        assert len(recent.crossovers) == 1
        assert later.crossovers == ()
        assert later.current_state == CrossoverState.GOLDEN

    def test_short_history_is_unknown(self):
        report = build_crossover_report(make_series([1.0, 2.0]), cutoff=date(2000, 1, 1))
        assert report.crossovers == ()
        assert report.current_state == CrossoverState.UNKNOWN
        assert report.current_sma200 is None

    def test_serialises_with_report_keys(self):
        report = build_crossover_report(
            make_series(_V_SHAPE), cutoff=date(2000, 1, 1), indicators=_SHORT
        )
        payload = report.model_dump(by_alias=True, mode="json")
        assert payload["currentSMA50"] == 5.5
        assert payload["currentState"] == "golden"
        assert payload["totalTradingDays"] == 10
        assert payload["crossovers"][0]["date"] == "2024-01-07"
        assert payload["crossovers"][0]["type"] == "golden_cross"


class TestLatestCrossover:
    def test_fires_on_last_bar(self):
        series = make_series(_V_SHAPE[:7])
        event = latest_crossover(series, _SHORT, CrossoverConfig(min_history_bars=7))
        assert event is not None
        assert event.type == CrossoverType.GOLDEN_CROSS
        assert event.date == date(2024, 1, 7)

    def test_none_when_last_bar_has_no_edge(self):
        series = make_series(_V_SHAPE)
        assert latest_crossover(series, _SHORT, CrossoverConfig(min_history_bars=7)) is None

    def test_requires_minimum_history(self):
        series = make_series(_V_SHAPE[:7])
        assert latest_crossover(series, _SHORT) is None
