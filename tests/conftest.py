"""
Shared pytest fixtures and factories for the equity screener test suite.

Provides:
  - ``make_series()``: a ``PriceSeries`` from a list of closes on
    consecutive calendar days (optional highs / lows / volumes).
  - ``make_snapshot()``: an ``IndicatorSnapshot`` with only the given fields
    set; everything else stays ``None`` so rules under test fire in isolation.
  - ``make_alert()``: an ``Alert`` with a generic description.
  - ``sample_quote`` / ``rising_series`` fixtures.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Optional, Sequence

import pytest

from equity_screener.models.alert import Alert
from equity_screener.models.price import PriceBar, PriceSeries
from equity_screener.models.quote import Quote
from equity_screener.models.snapshot import IndicatorSnapshot
from equity_screener.taxonomy.signal_taxonomy import AlertCategory, AlertType, Severity

SERIES_START = date(2024, 1, 1)


# ── Factories ─────────────────────────────────────────────────────────────────

def make_series(
    closes: Sequence[float],
    symbol: str = "TEST",
    start: date = SERIES_START,
    highs: Optional[Sequence[float]] = None,
    lows: Optional[Sequence[float]] = None,
    volumes: Optional[Sequence[Optional[int]]] = None,
) -> PriceSeries:
    """Build a series with one bar per calendar day starting at ``start``."""
    bars = [
        PriceBar(
            date=start + timedelta(days=i),
            close=c,
            high=highs[i] if highs is not None else None,
            low=lows[i] if lows is not None else None,
            volume=volumes[i] if volumes is not None else None,
        )
        for i, c in enumerate(closes)
    ]
    return PriceSeries(symbol=symbol, bars=bars)


def make_snapshot(symbol: str = "TEST", **fields) -> IndicatorSnapshot:
    """Snapshot with only ``fields`` set (snake_case names)."""
    return IndicatorSnapshot(symbol=symbol, **fields)


def make_alert(
    alert_type: AlertType,
    category: AlertCategory,
    symbol: str = "TEST",
    severity: Severity = Severity.BULLISH,
) -> Alert:
    return Alert(
        symbol=symbol,
        alert_type=alert_type,
        alert_category=category,
        alert_description=f"{alert_type.value} test alert",
        severity=severity,
    )


# ── Fixtures ──────────────────────────────────────────────────────────────────

@pytest.fixture
def sample_quote() -> Quote:
    """A fully populated quote for ``AAPL`` parsed from camelCase keys."""
    return Quote.model_validate(
        {
            "symbol": "AAPL",
            "shortName": "Apple Inc.",
            "regularMarketPrice": 110.0,
            "regularMarketChangePercent": 2.5,
            "regularMarketVolume": 3_000_000,
            "averageDailyVolume3Month": 1_000_000,
            "averageDailyVolume10Day": 2_000_000,
            "fiftyDayAverage": 100.0,
            "twoHundredDayAverage": 88.0,
            "fiftyTwoWeekHigh": 115.0,
            "fiftyTwoWeekLow": 80.0,
            "marketCap": 2.5e12,
        }
    )


@pytest.fixture
def rising_series() -> PriceSeries:
    """60 closes rising 1.0 → 60.0 with a 1.0 high/low band and flat volume."""
    closes = [float(i) for i in range(1, 61)]
    return make_series(
        closes,
        symbol="AAPL",
        highs=[c + 0.5 for c in closes],
        lows=[c - 0.5 for c in closes],
        volumes=[1_000] * 60,
    )
