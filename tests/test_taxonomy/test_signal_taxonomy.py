"""
Tests for equity_screener/taxonomy/signal_taxonomy.py.

What we test
------------
- Enum values are the stable wire identifiers.
- AlertCategory iteration order (used for grouped output).
- MacdSignalType direction helpers.
- parse_strategy_name(): canonical names, aliases, case and dash handling.
"""

from __future__ import annotations

import pytest

from equity_screener.taxonomy.signal_taxonomy import (
    AlertCategory,
    AlertType,
    MacdSignalType,
    Severity,
    StrategyName,
    parse_strategy_name,
)


def test_alert_category_order():
    assert [c.value for c in AlertCategory] == [
        "ma_crossover", "52w_levels", "rsi_signals", "macd_signals", "volume_breakout",
    ]


def test_alert_type_values():
    assert AlertType.NEW_52W_HIGH == "new_52w_high"
    assert AlertType.MACD_STRONG_BEARISH == "macd_strong_bearish"
    assert len(AlertType) == 19


def test_severity_values():
    assert {s.value for s in Severity} == {"bullish", "bearish", "neutral"}


class TestMacdSignalType:
    def test_bullish(self):
        assert MacdSignalType.BULLISH_CROSSOVER.is_bullish
        assert MacdSignalType.STRONG_BULLISH.is_bullish
        assert not MacdSignalType.STRONG_BULLISH.is_bearish

    def test_bearish(self):
        assert MacdSignalType.BEARISH_CROSSOVER.is_bearish
        assert MacdSignalType.STRONG_BEARISH.is_bearish
        assert not MacdSignalType.BEARISH_CROSSOVER.is_bullish


class TestParseStrategyName:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("medium_term", StrategyName.MEDIUM_TERM),
            ("top_picks", StrategyName.MEDIUM_TERM),
            ("top-picks", StrategyName.MEDIUM_TERM),
            ("Day-Trade", StrategyName.DAY_TRADE),
            (" momentum ", StrategyName.MOMENTUM),
        ],
    )
    def test_resolves(self, raw, expected):
        assert parse_strategy_name(raw) == expected

    def test_unknown(self):
        assert parse_strategy_name("swing") is None
