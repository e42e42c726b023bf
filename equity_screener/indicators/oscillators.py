"""
Momentum oscillators: RSI (Wilder), MACD and the up-close streak.

RSI
---
Seed: simple mean of the first ``period`` gains and losses.
Then Wilder smoothing ``avg = (avg * (period - 1) + x) / period``.

    RSI = 100 - 100 / (1 + avg_gain / avg_loss)

Edge cases:
  - ``avg_loss == 0`` with some gain  → exactly 100.
  - ``avg_gain == avg_loss == 0``     → ``None``.
  - fewer than ``period + 1`` closes  → ``None``.

MACD
----
MACD line = EMA(fast) - EMA(slow), defined from index ``slow`` onward.
Signal line = EMA(signal) of the MACD line, seeded with the mean of its
first ``signal`` values.  Histogram = MACD - signal.  Needs at least
``slow + signal`` closes.

The previous signal-line value used by ``classify_macd_signal()`` is the
real value from the recursion, kept alongside the latest one.

Streak
------
``up_streak()`` counts consecutive higher closes ending at the latest bar
within the last ``window`` closes.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence

from equity_screener.indicators.moving_average import ema_series
from equity_screener.taxonomy.signal_taxonomy import MacdSignalType

# ── RSI ───────────────────────────────────────────────────────────────────────


def _rsi_value(avg_gain: float, avg_loss: float) -> Optional[float]:
    if avg_loss == 0:
        return None if avg_gain == 0 else 100.0
    return 100.0 - 100.0 / (1.0 + avg_gain / avg_loss)


def rsi_series(closes: Sequence[float], period: int = 14) -> list[Optional[float]]:
    """Wilder RSI for every bar.

    Returns:
        List aligned with ``closes``; ``None`` for ``i < period`` and for any
        bar where both smoothed averages are zero.

    Raises:
        ValueError: If ``period < 1``.
    """
    if period < 1:
        raise ValueError(f"period must be >= 1, got {period}.")
    out: list[Optional[float]] = [None] * len(closes)
    if len(closes) < period + 1:
        return out

    deltas = [closes[i] - closes[i - 1] for i in range(1, len(closes))]
    avg_gain = math.fsum(d for d in deltas[:period] if d > 0) / period
    avg_loss = math.fsum(-d for d in deltas[:period] if d < 0) / period
    out[period] = _rsi_value(avg_gain, avg_loss)

    for i in range(period, len(deltas)):
        d = deltas[i]
        avg_gain = (avg_gain * (period - 1) + max(d, 0.0)) / period
        avg_loss = (avg_loss * (period - 1) + max(-d, 0.0)) / period
        out[i + 1] = _rsi_value(avg_gain, avg_loss)
    return out


def rsi(closes: Sequence[float], period: int = 14) -> Optional[float]:
    """Latest RSI reading, or ``None`` (see module docstring for edge cases)."""
    series = rsi_series(closes, period)
    return series[-1] if series else None


# ── MACD ──────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class MacdResult:
    """Latest MACD state.

    Attributes:
        macd:            MACD line at the last bar.
        signal:          Signal line at the last bar.
        histogram:       ``macd - signal``.
        previous_macd:   MACD line one bar earlier.
        previous_signal: Signal line one bar earlier; ``None`` when the signal
                         line has only one value so far.
    """

    macd: float
    signal: float
    histogram: float
    previous_macd: Optional[float]
    previous_signal: Optional[float]

    @property
    def signal_type(self) -> Optional[MacdSignalType]:
        return classify_macd_signal(
            self.macd, self.signal, self.previous_macd, self.previous_signal
        )


def macd_series(
    closes: Sequence[float],
    fast: int = 12,
    slow: int = 26,
    signal: int = 9,
) -> tuple[list[Optional[float]], list[Optional[float]]]:
    """Compute the MACD and signal lines for every bar.

    Returns:
        ``(macd_line, signal_line)``, both aligned with ``closes``.
        ``macd_line[i]`` is defined for ``i >= slow``;
        ``signal_line[i]`` for ``i >= slow + signal - 1``.

    Raises:
        ValueError: If any period is < 1 or ``fast >= slow``.
    """
    if min(fast, slow, signal) < 1:
        raise ValueError(f"MACD periods must be >= 1, got ({fast}, {slow}, {signal}).")
    if fast >= slow:
        raise ValueError(f"fast period ({fast}) must be < slow period ({slow}).")

    n = len(closes)
    macd_line: list[Optional[float]] = [None] * n
    signal_line: list[Optional[float]] = [None] * n

    ema_fast = ema_series(closes, fast)
    ema_slow = ema_series(closes, slow)
    for i in range(slow, n):
        macd_line[i] = ema_fast[i] - ema_slow[i]

    macd_values = [v for v in macd_line[slow:] if v is not None]
    signal_values = ema_series(macd_values, signal)
    for offset, value in enumerate(signal_values):
        signal_line[slow + offset] = value
    return macd_line, signal_line


def macd(
    closes: Sequence[float],
    fast: int = 12,
    slow: int = 26,
    signal: int = 9,
) -> Optional[MacdResult]:
    """Latest MACD reading, or ``None`` with fewer than ``slow + signal`` closes."""
    macd_line, signal_line = macd_series(closes, fast, slow, signal)
    if len(closes) < slow + signal or signal_line[-1] is None:
        return None

    current_macd = macd_line[-1]
    current_signal = signal_line[-1]
    return MacdResult(
        macd=current_macd,
        signal=current_signal,
        histogram=current_macd - current_signal,
        previous_macd=macd_line[-2],
        previous_signal=signal_line[-2],
    )


def classify_macd_signal(
    macd_value: float,
    signal_value: float,
    previous_macd: Optional[float] = None,
    previous_signal: Optional[float] = None,
) -> Optional[MacdSignalType]:
    """Classify the MACD / signal relationship at the two most recent bars.

    Rules in priority order:
      1. bullish_crossover: previously below the signal line, now above.
      2. bearish_crossover: previously at/above, now at/below.
      3. strong_bullish:    MACD > 0 and above the signal line.
      4. strong_bearish:    MACD < 0 and at/below the signal line.
      5. otherwise ``None``.

    Rules 1-2 need both previous values; without them only 3-4 apply.
    """
    is_above = macd_value > signal_value
    if previous_macd is not None and previous_signal is not None:
        was_below = previous_macd < previous_signal
        if is_above and was_below:
            return MacdSignalType.BULLISH_CROSSOVER
        if not is_above and not was_below:
            return MacdSignalType.BEARISH_CROSSOVER
    if macd_value > 0 and is_above:
        return MacdSignalType.STRONG_BULLISH
    if macd_value < 0 and not is_above:
        return MacdSignalType.STRONG_BEARISH
    return None


# ── Streak ────────────────────────────────────────────────────────────────────


def up_streak(closes: Sequence[float], window: int = 5) -> Optional[int]:
    """Consecutive higher closes ending at the latest bar.

    Only the last ``window`` closes are inspected, so the result is at most
    ``window - 1``.

    Returns:
        The streak length, or ``None`` with fewer than ``window - 1`` closes.
    """
    recent = list(closes[-window:])
    if len(recent) < window - 1:
        return None
    streak = 0
    for i in range(len(recent) - 1, 0, -1):
        if recent[i] <= recent[i - 1]:
            break
        streak += 1
    return streak
