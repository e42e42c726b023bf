"""
Simple and exponential moving averages.

Both functions return an index-aligned list the same length as the input:
position ``i`` is ``None`` until enough values exist, so callers can zip the
output with dates without offset arithmetic.

Rounding
--------
``sma()`` rounds each emitted value to 2 decimals; the crossover detector
compares these rounded values.

``ema_series()`` never rounds.  Its values feed the MACD and signal-line
recursions.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence


def _check_period(period: int) -> None:
    if period < 1:
        raise ValueError(f"period must be >= 1, got {period}.")


def sma(values: Sequence[float], period: int) -> list[Optional[float]]:
    """Trailing simple moving average, rounded to 2 decimals.

    Args:
        values: Closes in chronological order.
        period: Window length in bars.

    Returns:
        List aligned with ``values``; ``None`` for ``i < period - 1``.

    Raises:
        ValueError: If ``period < 1``.
    """
    _check_period(period)
    out: list[Optional[float]] = [None] * len(values)
    for i in range(period - 1, len(values)):
        window = values[i - period + 1 : i + 1]
        out[i] = round(math.fsum(window) / period, 2)
    return out


def latest_sma(values: Sequence[float], period: int) -> Optional[float]:
    """Return the most recent SMA value, or ``None`` if the series is too short."""
    _check_period(period)
    if len(values) < period:
        return None
    return round(math.fsum(values[-period:]) / period, 2)


def ema_series(values: Sequence[float], period: int) -> list[Optional[float]]:
    """Exponential moving average seeded with the simple mean of the first window.

    ``ema[period-1] = mean(values[:period])``, then
    ``ema[i] = (values[i] - ema[i-1]) * k + ema[i-1]`` with ``k = 2 / (period + 1)``.

    Returns:
        List aligned with ``values``; ``None`` for ``i < period - 1``.
        Empty input or ``len(values) < period`` gives all ``None``.

    Raises:
        ValueError: If ``period < 1``.
    """
    _check_period(period)
    out: list[Optional[float]] = [None] * len(values)
    if len(values) < period:
        return out

    k = 2.0 / (period + 1)
    ema = math.fsum(values[:period]) / period
    out[period - 1] = ema
    for i in range(period, len(values)):
        ema = (values[i] - ema) * k + ema
        out[i] = ema
    return out
