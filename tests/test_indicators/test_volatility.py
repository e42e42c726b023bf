"""Tests for equity_screener.indicators.volatility (ATR)."""

from __future__ import annotations

import pytest

from equity_screener.indicators.volatility import atr, true_ranges


class TestTrueRanges:
    def test_uses_gap_from_previous_close(self):
        # high-low = 2, |21-10| = 11, |19-10| = 9 → 11
        assert true_ranges([11.0, 21.0], [9.0, 19.0], [10.0, 20.0]) == [11.0]

    def test_length_mismatch_raises(self):
        with pytest.raises(ValueError, match="equal length"):
            true_ranges([1.0, 2.0], [1.0], [1.0, 2.0])


class TestAtr:
    def test_constant_band(self):
        closes = [10.0] * 15
        assert atr([11.0] * 15, [9.0] * 15, closes, 14) == 2.0

    def test_none_without_enough_bars(self):
        closes = [10.0] * 14
        assert atr([11.0] * 14, [9.0] * 14, closes, 14) is None

    def test_wilder_smoothing(self):
        # TRs: 2, 2, 8 with period 2 → seed 2.0, then (2*1 + 8)/2 = 5.0
        highs = [11.0, 11.0, 11.0, 15.0]
        lows = [9.0, 9.0, 9.0, 7.0]
        closes = [10.0, 10.0, 10.0, 10.0]
        assert atr(highs, lows, closes, 2) == 5.0

    def test_rounded_to_two_decimals(self):
        assert atr([10.0, 10.333], [10.0, 10.0], [10.0, 10.0], 1) == 0.33
