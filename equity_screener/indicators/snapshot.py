"""
Snapshot assembly: merge a quote and a price history into one
``IndicatorSnapshot``.

Precedence
----------
Quote fields win whenever they are present (they reflect the live session).
The price history supplies RSI, MACD, ATR and the up-close streak, and
fills these quote gaps:

  ============================  ===========================================
  Missing quote field           History fallback
  ============================  ===========================================
  regularMarketPrice            last close
  regularMarketChangePercent    last close vs. previous close
  fiftyDayAverage               SMA(sma_fast) of closes
  twoHundredDayAverage          SMA(sma_slow) of closes
  fiftyTwoWeekHigh / Low        max / min of the last ``week52_window`` closes
  regularMarketVolume           last bar volume
  averageDailyVolume3Month/10D  mean volume of the preceding
                                ``volume_average_window`` bars
  ============================  ===========================================

Anything neither side can supply stays ``None``.
"""

from __future__ import annotations

import math
from typing import Optional

from equity_screener.config import IndicatorConfig
from equity_screener.indicators.moving_average import latest_sma
from equity_screener.indicators.oscillators import macd, rsi, up_streak
from equity_screener.indicators.volatility import atr
from equity_screener.models.price import PriceSeries
from equity_screener.models.quote import Quote
from equity_screener.models.snapshot import IndicatorSnapshot, percent_from


def _first_present(*values: Optional[float]) -> Optional[float]:
    for v in values:
        if v is not None:
            return v
    return None


def _trailing_average_volume(series: PriceSeries, window: int) -> Optional[float]:
    """Mean volume over the ``window`` bars before the latest one."""
    prior = [v for v in series.volumes[-(window + 1):-1] if v is not None]
    if not prior:
        return None
    return math.fsum(prior) / len(prior)


def build_snapshot(
    quote: Optional[Quote] = None,
    series: Optional[PriceSeries] = None,
    config: Optional[IndicatorConfig] = None,
) -> IndicatorSnapshot:
    """Build the indicator snapshot for one symbol.

    Args:
        quote:  Latest quote, or ``None`` to derive everything from history.
        series: Daily history, or ``None`` to use quote fields only (RSI,
                MACD, ATR and the streak are then absent).
        config: Indicator periods; defaults to ``IndicatorConfig()``.

    Returns:
        A frozen ``IndicatorSnapshot``.

    Raises:
        ValueError: If neither ``quote`` nor ``series`` is given, or their
            symbols disagree.
    """
    if quote is None and series is None:
        raise ValueError("build_snapshot() needs a quote, a price series, or both.")
    if quote is not None and series is not None and quote.symbol != series.symbol:
        raise ValueError(
            f"Quote symbol '{quote.symbol}' does not match series symbol '{series.symbol}'."
        )

    cfg = config or IndicatorConfig()
    q = quote or Quote(symbol=series.symbol)
    closes = series.closes if series is not None else []

    # ── Quote fields with history fallbacks ───────────────────────────────────
    price = _first_present(q.regular_market_price, closes[-1] if closes else None)

    change_percent = q.regular_market_change_percent
    if change_percent is None and len(closes) >= 2:
        change_percent = percent_from(closes[-1], closes[-2])

    sma50 = _first_present(q.fifty_day_average, latest_sma(closes, cfg.sma_fast))
    sma200 = _first_present(q.two_hundred_day_average, latest_sma(closes, cfg.sma_slow))

    window = closes[-cfg.week52_window:]
    high_52w = _first_present(q.fifty_two_week_high, max(window) if window else None)
    low_52w = _first_present(q.fifty_two_week_low, min(window) if window else None)

    last_bar = series.last_bar if series is not None else None
    volume = q.regular_market_volume
    if volume is None and last_bar is not None:
        volume = last_bar.volume

    average_volume = q.average_volume
    if average_volume is None and series is not None:
        average_volume = _trailing_average_volume(series, cfg.volume_average_window)

    relative_volume = None
    if volume is not None and average_volume:
        relative_volume = volume / average_volume

    # ── History-only indicators ───────────────────────────────────────────────
    rsi_value = rsi(closes, cfg.rsi_period)
    macd_result = macd(closes, cfg.macd_fast, cfg.macd_slow, cfg.macd_signal)

    atr_value = None
    if series is not None and series.has_ranges:
        atr_value = atr(
            [b.high for b in series.bars],
            [b.low for b in series.bars],
            closes,
            cfg.atr_period,
        )

    return IndicatorSnapshot(
        symbol=q.symbol,
        short_name=q.short_name,
        price=price,
        change_percent=change_percent,
        volume=volume,
        average_volume=average_volume,
        relative_volume=relative_volume,
        rsi=round(rsi_value, 1) if rsi_value is not None else None,
        sma50=sma50,
        sma200=sma200,
        percent_from_sma50=percent_from(price, sma50),
        percent_from_sma200=percent_from(price, sma200),
        fifty_two_week_high=high_52w,
        fifty_two_week_low=low_52w,
        percent_from_high=percent_from(price, high_52w),
        percent_from_low=percent_from(price, low_52w),
        macd=macd_result.macd if macd_result else None,
        macd_signal=macd_result.signal if macd_result else None,
        macd_histogram=macd_result.histogram if macd_result else None,
        macd_signal_type=macd_result.signal_type if macd_result else None,
        atr=atr_value,
        up_streak=up_streak(closes, cfg.streak_window),
        market_cap=q.market_cap,
    )
