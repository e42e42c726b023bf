"""
Indicator snapshot: everything the classifier and the strategies read about
one stock at one evaluation instant.

Percent fields are ``(value - reference) / reference * 100`` and are ``None``
whenever either side is unknown (or the reference is zero); they are never
defaulted to ``0``.  Use ``percent_from()`` to compute them consistently.

Serialises with camelCase keys (``model_dump(by_alias=True)``) to match the
presentation-layer payloads (``changePercent``, ``percentFromSma50``, ...).
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from equity_screener.taxonomy.signal_taxonomy import MacdSignalType


def percent_from(value: Optional[float], reference: Optional[float]) -> Optional[float]:
    """Return the percent distance of ``value`` from ``reference``, or ``None``."""
    if value is None or reference is None or reference == 0:
        return None
    return (value - reference) / reference * 100.0


class IndicatorSnapshot(BaseModel):
    """Per-stock bundle of quote fields and computed indicators.

    Attributes:
        symbol:               Listing symbol.
        short_name:           Display name if the quote carried one.
        price:                Latest price.
        change_percent:       Percent change vs. the prior close.
        volume:               Session volume.
        average_volume:       Trailing average daily volume.
        relative_volume:      ``volume / average_volume``.
        rsi:                  RSI(14), 0-100.
        sma50 / sma200:       50- and 200-day simple moving averages.
        percent_from_sma50:   Percent of price above (+) / below (-) the 50-day MA.
        percent_from_sma200:  Same for the 200-day MA.
        fifty_two_week_high / fifty_two_week_low: 52-week extremes.
        percent_from_high:    Percent from the 52-week high (<= 0 normally).
        percent_from_low:     Percent from the 52-week low (>= 0 normally).
        macd / macd_signal / macd_histogram: Latest MACD(12, 26, 9) values.
        macd_signal_type:     Classified MACD relationship, or ``None``.
        atr:                  ATR(14) in price units.
        up_streak:            Consecutive higher closes ending at the latest bar.
        market_cap:           Market capitalisation.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    symbol: str
    short_name: Optional[str] = None
    price: Optional[float] = None
    change_percent: Optional[float] = None
    volume: Optional[int] = None
    average_volume: Optional[float] = None
    relative_volume: Optional[float] = None
    rsi: Optional[float] = None
    sma50: Optional[float] = None
    sma200: Optional[float] = None
    percent_from_sma50: Optional[float] = None
    percent_from_sma200: Optional[float] = None
    fifty_two_week_high: Optional[float] = None
    fifty_two_week_low: Optional[float] = None
    percent_from_high: Optional[float] = None
    percent_from_low: Optional[float] = None
    macd: Optional[float] = None
    macd_signal: Optional[float] = None
    macd_histogram: Optional[float] = None
    macd_signal_type: Optional[MacdSignalType] = None
    atr: Optional[float] = None
    up_streak: Optional[int] = None
    market_cap: Optional[float] = None

    @field_validator("rsi")
    @classmethod
    def validate_rsi_range(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and not 0.0 <= v <= 100.0:
            raise ValueError(f"rsi must be within [0, 100], got {v}.")
        return v

    @field_validator("relative_volume", "average_volume", "atr")
    @classmethod
    def validate_non_negative(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v < 0:
            raise ValueError(f"Volume ratios and ATR must be non-negative, got {v}.")
        return v

    @property
    def sma_spread_percent(self) -> Optional[float]:
        """Percent of the 50-day MA above (+) / below (-) the 200-day MA."""
        return percent_from(self.sma50, self.sma200)
