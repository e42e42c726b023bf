"""
Breakout classifier: point-in-time alerts for one ``IndicatorSnapshot``.

Rules (independent; a snapshot can raise several alerts)
---------------------------------------------------------
  =================  ===============================  ===========================
  Rule               Condition (defaults)             Alert types
  =================  ===============================  ===========================
  MA proximity 50d   |pct from SMA50| <= 5            above_50ma / below_50ma
  MA proximity 200d  |pct from SMA200| <= 8           above_200ma / below_200ma
  MA convergence     |SMA50 vs SMA200 spread| <= 3    golden_cross / death_cross
  52-week high       pct from high >= -5              new_52w_high / near_52w_high
  52-week low        pct from low <= 10               new_52w_low / near_52w_low
  RSI                rsi <= 35  or  rsi >= 65         rsi_(approaching_)oversold /
                                                      rsi_(approaching_)overbought
  Volume             relative volume >= 1.5           high_volume
  MACD               signal type present              macd_*_cross / macd_strong_*
  =================  ===============================  ===========================

A distance of exactly 0% from a moving average (or an exactly flat SMA
spread) is classified on the bearish side.  A rule whose inputs are absent
never fires.

Thresholds come from ``AlertConfig``; see ``config/default.toml [alerts]``.
"""

from __future__ import annotations

from collections import Counter
from typing import Optional

from equity_screener.config import AlertConfig
from equity_screener.models.alert import Alert
from equity_screener.models.snapshot import IndicatorSnapshot
from equity_screener.taxonomy.signal_taxonomy import (
    AlertCategory,
    AlertType,
    MacdSignalType,
    Severity,
)

_MACD_ALERTS: dict[MacdSignalType, tuple[AlertType, str, Severity]] = {
    MacdSignalType.BULLISH_CROSSOVER: (
        AlertType.MACD_BULLISH_CROSS,
        "MACD bullish crossover - MACD line crossed above signal line",
        Severity.BULLISH,
    ),
    MacdSignalType.BEARISH_CROSSOVER: (
        AlertType.MACD_BEARISH_CROSS,
        "MACD bearish crossover - MACD line crossed below signal line",
        Severity.BEARISH,
    ),
    MacdSignalType.STRONG_BULLISH: (
        AlertType.MACD_STRONG_BULLISH,
        "Strong bullish MACD - positive MACD above signal line",
        Severity.BULLISH,
    ),
    MacdSignalType.STRONG_BEARISH: (
        AlertType.MACD_STRONG_BEARISH,
        "Strong bearish MACD - negative MACD below signal line",
        Severity.BEARISH,
    ),
}


def classify_breakouts(
    snapshot: IndicatorSnapshot,
    config: Optional[AlertConfig] = None,
) -> list[Alert]:
    """Evaluate every breakout rule against one snapshot.

    Args:
        snapshot: Indicator snapshot for one symbol.
        config:   Thresholds; defaults to ``AlertConfig()``.

    Returns:
        Alerts in rule order (MA, 52-week, RSI, volume, MACD).
    """
    cfg = config or AlertConfig()
    alerts: list[Alert] = []

    def _add(
        alert_type: AlertType,
        category: AlertCategory,
        description: str,
        severity: Severity,
    ) -> None:
        alerts.append(
            Alert(
                symbol=snapshot.symbol,
                alert_type=alert_type,
                alert_category=category,
                alert_description=description,
                severity=severity,
            )
        )

    # ── Moving averages ───────────────────────────────────────────────────────
    pct50 = snapshot.percent_from_sma50
    if pct50 is not None and abs(pct50) <= cfg.sma50_proximity_pct:
        if pct50 > 0:
            _add(AlertType.ABOVE_50MA, AlertCategory.MA_CROSSOVER,
                 f"Trading {abs(pct50):.1f}% above 50-day MA - potential support",
                 Severity.BULLISH)
        else:
            _add(AlertType.BELOW_50MA, AlertCategory.MA_CROSSOVER,
                 f"Trading {abs(pct50):.1f}% below 50-day MA - watch for breakdown",
                 Severity.BEARISH)

    pct200 = snapshot.percent_from_sma200
    if pct200 is not None and abs(pct200) <= cfg.sma200_proximity_pct:
        if pct200 > 0:
            _add(AlertType.ABOVE_200MA, AlertCategory.MA_CROSSOVER,
                 f"Trading {abs(pct200):.1f}% above 200-day MA - long-term uptrend",
                 Severity.BULLISH)
        else:
            _add(AlertType.BELOW_200MA, AlertCategory.MA_CROSSOVER,
                 f"Trading {abs(pct200):.1f}% below 200-day MA - long-term downtrend",
                 Severity.BEARISH)

    spread = snapshot.sma_spread_percent
    if spread is not None and abs(spread) <= cfg.cross_proximity_pct:
        if spread > 0:
            _add(AlertType.GOLDEN_CROSS, AlertCategory.MA_CROSSOVER,
                 f"Golden Cross forming - 50 MA {abs(spread):.1f}% above 200 MA (bullish)",
                 Severity.BULLISH)
        else:
            _add(AlertType.DEATH_CROSS, AlertCategory.MA_CROSSOVER,
                 f"Death Cross forming - 50 MA {abs(spread):.1f}% below 200 MA (bearish)",
                 Severity.BEARISH)

    # ── 52-week levels ────────────────────────────────────────────────────────
    pct_high = snapshot.percent_from_high
    if pct_high is not None and pct_high >= -cfg.near_high_pct:
        if pct_high >= 0:
            _add(AlertType.NEW_52W_HIGH, AlertCategory.FIFTY_TWO_WEEK_LEVELS,
                 "New 52-week high - momentum breakout", Severity.BULLISH)
        else:
            _add(AlertType.NEAR_52W_HIGH, AlertCategory.FIFTY_TWO_WEEK_LEVELS,
                 f"Within {abs(pct_high):.1f}% of 52-week high", Severity.BULLISH)

    pct_low = snapshot.percent_from_low
    if pct_low is not None and pct_low <= cfg.near_low_pct:
        if pct_low <= 0:
            _add(AlertType.NEW_52W_LOW, AlertCategory.FIFTY_TWO_WEEK_LEVELS,
                 "New 52-week low - potential capitulation", Severity.BEARISH)
        else:
            _add(AlertType.NEAR_52W_LOW, AlertCategory.FIFTY_TWO_WEEK_LEVELS,
                 f"Within {pct_low:.1f}% of 52-week low - potential bounce",
                 Severity.NEUTRAL)

    # ── RSI ───────────────────────────────────────────────────────────────────
    rsi = snapshot.rsi
    if rsi is not None:
        if rsi <= cfg.rsi_approaching_oversold:
            if rsi <= cfg.rsi_oversold:
                _add(AlertType.RSI_OVERSOLD, AlertCategory.RSI_SIGNALS,
                     f"RSI at {rsi:.0f} - oversold territory, potential bounce",
                     Severity.BULLISH)
            else:
                _add(AlertType.RSI_APPROACHING_OVERSOLD, AlertCategory.RSI_SIGNALS,
                     f"RSI at {rsi:.0f} - approaching oversold, watch for reversal",
                     Severity.BULLISH)
        elif rsi >= cfg.rsi_approaching_overbought:
            if rsi >= cfg.rsi_overbought:
                _add(AlertType.RSI_OVERBOUGHT, AlertCategory.RSI_SIGNALS,
                     f"RSI at {rsi:.0f} - overbought territory, potential pullback",
                     Severity.BEARISH)
            else:
                _add(AlertType.RSI_APPROACHING_OVERBOUGHT, AlertCategory.RSI_SIGNALS,
                     f"RSI at {rsi:.0f} - approaching overbought, monitor closely",
                     Severity.BEARISH)

    # ── Volume ────────────────────────────────────────────────────────────────
    rel_vol = snapshot.relative_volume
    if rel_vol is not None and rel_vol >= cfg.volume_surge_ratio:
        level = "significant" if rel_vol >= cfg.significant_volume_ratio else "elevated"
        change = snapshot.change_percent
        if change is None:
            severity = Severity.NEUTRAL
        elif change >= 0:
            severity = Severity.BULLISH
        else:
            severity = Severity.BEARISH
        _add(AlertType.HIGH_VOLUME, AlertCategory.VOLUME_BREAKOUT,
             f"{rel_vol:.1f}x average volume - {level} activity", severity)

    # ── MACD ──────────────────────────────────────────────────────────────────
    if snapshot.macd_signal_type is not None:
        alert_type, description, severity = _MACD_ALERTS[snapshot.macd_signal_type]
        _add(alert_type, AlertCategory.MACD_SIGNALS, description, severity)

    return alerts


def group_alerts_by_category(alerts: list[Alert]) -> dict[str, list[Alert]]:
    """Group alerts by category, in ``AlertCategory`` order.

    Every category key is present (empty list when nothing fired), so the
    output shape is stable for presentation code.
    """
    grouped: dict[str, list[Alert]] = {c.value: [] for c in AlertCategory}
    for alert in alerts:
        grouped[alert.alert_category.value].append(alert)
    return grouped


def count_by_severity(alerts: list[Alert]) -> dict[str, int]:
    """Return ``{"bullish": n, "bearish": n, "neutral": n}``."""
    counts = Counter(a.severity.value for a in alerts)
    return {s.value: counts.get(s.value, 0) for s in Severity}
