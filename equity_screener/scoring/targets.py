"""
Day-trade price targets from the average true range.

    buy_target  = price - 0.3 * ATR
    sell_target = price + 1.0 * ATR
    stop_loss   = buy_target - 0.5 * ATR

When no ATR is available (no high/low history) 1% of price stands in for it
and ``atr_estimated`` is set.  All levels are rounded to 2 decimals.
"""

from __future__ import annotations

from typing import Optional

from equity_screener.models.score import TradeTargets

ENTRY_ATR_MULTIPLE = 0.3
EXIT_ATR_MULTIPLE = 1.0
STOP_ATR_MULTIPLE = 0.5
FALLBACK_ATR_PCT = 0.01


def compute_trade_targets(
    price: Optional[float],
    atr: Optional[float] = None,
) -> Optional[TradeTargets]:
    """Return entry / exit / stop levels, or ``None`` without a positive price."""
    if price is None or price <= 0:
        return None

    estimated = atr is None or atr <= 0
    atr_value = price * FALLBACK_ATR_PCT if estimated else atr

    buy = price - ENTRY_ATR_MULTIPLE * atr_value
    return TradeTargets(
        buy_target=round(buy, 2),
        sell_target=round(price + EXIT_ATR_MULTIPLE * atr_value, 2),
        stop_loss=round(buy - STOP_ATR_MULTIPLE * atr_value, 2),
        atr=round(atr_value, 2),
        atr_estimated=estimated,
    )
