"""
Average True Range (Wilder).

    TR[i]  = max(high - low, |high - close[i-1]|, |low - close[i-1]|)
    ATR    = mean(TR[1..period]), then (ATR * (period - 1) + TR) / period

The first bar has no previous close and contributes no true range, so
``period + 1`` bars are required.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence


def true_ranges(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
) -> list[float]:
    """True range for bars ``1..n-1`` (one shorter than the input).

    Raises:
        ValueError: If the three sequences differ in length.
    """
    if not len(highs) == len(lows) == len(closes):
        raise ValueError(
            f"highs, lows and closes must have equal length, got "
            f"{len(highs)}, {len(lows)}, {len(closes)}."
        )
    return [
        max(
            highs[i] - lows[i],
            abs(highs[i] - closes[i - 1]),
            abs(lows[i] - closes[i - 1]),
        )
        for i in range(1, len(closes))
    ]


def atr(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 14,
) -> Optional[float]:
    """Latest ATR rounded to 2 decimals, or ``None`` with fewer than ``period + 1`` bars."""
    if period < 1:
        raise ValueError(f"period must be >= 1, got {period}.")
    ranges = true_ranges(highs, lows, closes)
    if len(ranges) < period:
        return None

    value = math.fsum(ranges[:period]) / period
    for tr in ranges[period:]:
        value = (value * (period - 1) + tr) / period
    return round(value, 2)
