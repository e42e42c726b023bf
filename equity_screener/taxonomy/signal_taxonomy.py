"""
Signal taxonomy for technical alerts and strategies.

Five dimensions describe every technical signal:
  - ``AlertCategory``  - the *family*: which rule group raised the alert?
  - ``AlertType``      - the *what*: the stable identifier of the alert.
  - ``Severity``       - the *direction*: bullish, bearish, or neutral.
  - ``MacdSignalType`` - MACD line vs. signal line relationship.
  - ``CrossoverType`` / ``CrossoverState`` - 50/200-day MA relationship.

``StrategyName`` enumerates the registered scoring strategies.

Usage example::

    from equity_screener.taxonomy.signal_taxonomy import AlertType, Severity

    alert_type = AlertType.NEW_52W_HIGH
    severity   = Severity.BULLISH

This module has NO imports from any other ``equity_screener`` package.
"""

from enum import StrEnum
from typing import Optional


class AlertCategory(StrEnum):
    """Rule family that produced an alert.  Order is the display order."""

    MA_CROSSOVER = "ma_crossover"
    """Price near a moving average, or the 50/200-day averages converging."""

    FIFTY_TWO_WEEK_LEVELS = "52w_levels"
    """Price at or near its 52-week high or low."""

    RSI_SIGNALS = "rsi_signals"
    """RSI in or approaching overbought / oversold territory."""

    MACD_SIGNALS = "macd_signals"
    """MACD crossover or sustained MACD trend."""

    VOLUME_BREAKOUT = "volume_breakout"
    """Session volume well above the trailing average."""


class AlertType(StrEnum):
    """Stable alert identifiers."""

    # ── Moving averages ───────────────────────────────────────────────────────
    ABOVE_50MA = "above_50ma"
    BELOW_50MA = "below_50ma"
    ABOVE_200MA = "above_200ma"
    BELOW_200MA = "below_200ma"
    GOLDEN_CROSS = "golden_cross"
    """50-day MA within proximity of, and above, the 200-day MA."""

    DEATH_CROSS = "death_cross"
    """50-day MA within proximity of, and at or below, the 200-day MA."""

    # ── 52-week levels ────────────────────────────────────────────────────────
    NEW_52W_HIGH = "new_52w_high"
    NEAR_52W_HIGH = "near_52w_high"
    NEW_52W_LOW = "new_52w_low"
    NEAR_52W_LOW = "near_52w_low"

    # ── RSI ───────────────────────────────────────────────────────────────────
    RSI_OVERSOLD = "rsi_oversold"
    RSI_APPROACHING_OVERSOLD = "rsi_approaching_oversold"
    RSI_OVERBOUGHT = "rsi_overbought"
    RSI_APPROACHING_OVERBOUGHT = "rsi_approaching_overbought"

    # ── Volume ────────────────────────────────────────────────────────────────
    HIGH_VOLUME = "high_volume"

    # ── MACD ──────────────────────────────────────────────────────────────────
    MACD_BULLISH_CROSS = "macd_bullish_cross"
    MACD_BEARISH_CROSS = "macd_bearish_cross"
    MACD_STRONG_BULLISH = "macd_strong_bullish"
    MACD_STRONG_BEARISH = "macd_strong_bearish"


class Severity(StrEnum):
    """Directional bias of an alert."""

    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class MacdSignalType(StrEnum):
    """MACD line vs. signal line at the two most recent points."""

    BULLISH_CROSSOVER = "bullish_crossover"
    """MACD was below the signal line and is now above it."""

    BEARISH_CROSSOVER = "bearish_crossover"
    """MACD was at or above the signal line and is now at or below it."""

    STRONG_BULLISH = "strong_bullish"
    """Positive MACD holding above the signal line."""

    STRONG_BEARISH = "strong_bearish"
    """Negative MACD holding below the signal line."""

    @property
    def is_bullish(self) -> bool:
        return self in (MacdSignalType.BULLISH_CROSSOVER, MacdSignalType.STRONG_BULLISH)

    @property
    def is_bearish(self) -> bool:
        return self in (MacdSignalType.BEARISH_CROSSOVER, MacdSignalType.STRONG_BEARISH)


class CrossoverType(StrEnum):
    """A 50/200-day moving-average crossing event."""

    GOLDEN_CROSS = "golden_cross"
    DEATH_CROSS = "death_cross"


class CrossoverState(StrEnum):
    """Latest 50-day vs. 200-day relationship for a symbol."""

    GOLDEN = "golden"
    DEATH = "death"
    UNKNOWN = "unknown"


class StrategyName(StrEnum):
    """Registered scoring strategies."""

    MEDIUM_TERM = "medium_term"
    """Swing positions held for weeks: trend + momentum confirmation."""

    DAY_TRADE = "day_trade"
    """Intraday movers: size of today's move and volume."""

    MOMENTUM = "momentum"
    """Extended trend followers: distance above the moving averages."""


STRATEGY_ALIASES: dict[str, StrategyName] = {
    "top_picks": StrategyName.MEDIUM_TERM,
    "medium": StrategyName.MEDIUM_TERM,
    "day": StrategyName.DAY_TRADE,
}


def parse_strategy_name(name: str) -> Optional[StrategyName]:
    """Resolve a user-supplied strategy name, or return ``None`` if unknown.

    Matching is case-insensitive and treats ``-`` and ``_`` alike, so
    ``"Day-Trade"`` resolves to ``StrategyName.DAY_TRADE``.
    """
    key = name.strip().lower().replace("-", "_")
    if key in STRATEGY_ALIASES:
        return STRATEGY_ALIASES[key]
    try:
        return StrategyName(key)
    except ValueError:
        return None
