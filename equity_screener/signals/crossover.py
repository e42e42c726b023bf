"""
Golden / death cross detection over aligned 50- and 200-day SMA sequences.

Edge rule at bar ``i`` (both SMAs defined at ``i - 1`` and ``i``):

    golden_cross:  sma50[i-1] <= sma200[i-1]  and  sma50[i] > sma200[i]
    death_cross:   sma50[i-1] >= sma200[i-1]  and  sma50[i] < sma200[i]

Every edge is reported.  A session where the two averages are equal counts
as the death side, so touching the slow average and moving back above it
reports a second golden cross.  Edges dated before the cutoff are skipped.

Current state is ``golden`` when the latest sma50 > sma200, ``death``
otherwise, and ``unknown`` when either is undefined.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from equity_screener.config import CrossoverConfig, IndicatorConfig
from equity_screener.indicators.moving_average import sma
from equity_screener.models.alert import CrossoverEvent, CrossoverReport
from equity_screener.models.price import PriceSeries
from equity_screener.models.snapshot import percent_from
from equity_screener.taxonomy.signal_taxonomy import CrossoverState, CrossoverType
from equity_screener.utils.time_utils import utcnow, years_before

logger = logging.getLogger(__name__)


def _edge_at(
    sma_fast: Sequence[Optional[float]],
    sma_slow: Sequence[Optional[float]],
    i: int,
) -> Optional[CrossoverType]:
    prev_fast, prev_slow = sma_fast[i - 1], sma_slow[i - 1]
    cur_fast, cur_slow = sma_fast[i], sma_slow[i]
    if None in (prev_fast, prev_slow, cur_fast, cur_slow):
        return None
    if prev_fast <= prev_slow and cur_fast > cur_slow:
        return CrossoverType.GOLDEN_CROSS
    if prev_fast >= prev_slow and cur_fast < cur_slow:
        return CrossoverType.DEATH_CROSS
    return None


def detect_crossovers(
    series: PriceSeries,
    sma_fast: Sequence[Optional[float]],
    sma_slow: Sequence[Optional[float]],
    cutoff: Optional[date] = None,
) -> list[CrossoverEvent]:
    """Return the chronological crossover events on or after ``cutoff``.

    Args:
        series:   Price history the SMA sequences were computed from.
        sma_fast: 50-day SMA aligned with ``series.bars``.
        sma_slow: 200-day SMA aligned with ``series.bars``.
        cutoff:   Earliest event date to report; ``None`` reports all.

    Returns:
        Events in date order, each with the percent change in close since
        the previous reported event.

    Raises:
        ValueError: If the SMA sequences are not aligned with the series.
    """
    if not len(sma_fast) == len(sma_slow) == len(series):
        raise ValueError(
            f"{series.symbol}: SMA sequences must align with the series "
            f"({len(sma_fast)}, {len(sma_slow)} vs {len(series)} bars)."
        )

    events: list[CrossoverEvent] = []
    for i in range(1, len(series)):
        edge = _edge_at(sma_fast, sma_slow, i)
        if edge is None:
            continue

        bar = series.bars[i]
        if cutoff is not None and bar.date < cutoff:
            continue
        events.append(
            CrossoverEvent(
                date=bar.date,
                type=edge,
                sma50=sma_fast[i],
                sma200=sma_slow[i],
                close=bar.close,
                change_since_previous_pct=(
                    percent_from(bar.close, events[-1].close) if events else None
                ),
            )
        )
    return events


def current_crossover_state(
    sma_fast: Optional[float],
    sma_slow: Optional[float],
) -> CrossoverState:
    """Classify the latest 50/200-day relationship."""
    if sma_fast is None or sma_slow is None:
        return CrossoverState.UNKNOWN
    return CrossoverState.GOLDEN if sma_fast > sma_slow else CrossoverState.DEATH


def latest_crossover(
    series: PriceSeries,
    indicators: Optional[IndicatorConfig] = None,
    crossover: Optional[CrossoverConfig] = None,
) -> Optional[CrossoverEvent]:
    """Return the crossover completed on the most recent bar, if any.

    This is the daily alert check: only the last two SMA points are compared.
    Series shorter than ``crossover.min_history_bars`` return ``None``.
    """
    ind = indicators or IndicatorConfig()
    xcfg = crossover or CrossoverConfig()
    if len(series) < max(xcfg.min_history_bars, 2):
        return None

    closes = series.closes
    sma_fast = sma(closes, ind.sma_fast)
    sma_slow = sma(closes, ind.sma_slow)
    i = len(series) - 1
    edge = _edge_at(sma_fast, sma_slow, i)
    if edge is None:
        return None

    bar = series.bars[i]
    logger.info("%s: %s on %s", series.symbol, edge.value, bar.date)
    return CrossoverEvent(
        date=bar.date,
        type=edge,
        sma50=sma_fast[i],
        sma200=sma_slow[i],
        close=bar.close,
    )


def build_crossover_report(
    series: PriceSeries,
    cutoff: Optional[date] = None,
    indicators: Optional[IndicatorConfig] = None,
    crossover: Optional[CrossoverConfig] = None,
    as_of: Optional[date] = None,
) -> CrossoverReport:
    """Compute a symbol's crossover history and current state.

    Args:
        series:     Daily history (several years for a meaningful result).
        cutoff:     Earliest event date to report.  Defaults to
                    ``as_of - lookback_years``.
        indicators: SMA periods; defaults to 50 / 200.
        crossover:  Lookback settings.
        as_of:      Evaluation date for the default cutoff; defaults to today (UTC).

    Returns:
        ``CrossoverReport`` (serialise with ``model_dump(by_alias=True)``).
    """
    ind = indicators or IndicatorConfig()
    xcfg = crossover or CrossoverConfig()
    if cutoff is None:
        cutoff = years_before(as_of or utcnow().date(), xcfg.lookback_years)

    closes = series.closes
    sma_fast = sma(closes, ind.sma_fast)
    sma_slow = sma(closes, ind.sma_slow)
    events = detect_crossovers(series, sma_fast, sma_slow, cutoff)

    last_bar = series.last_bar
    current_fast = sma_fast[-1] if sma_fast else None
    current_slow = sma_slow[-1] if sma_slow else None

    logger.debug(
        "%s: %d crossovers since %s over %d bars",
        series.symbol, len(events), cutoff, len(series),
    )
    return CrossoverReport(
        symbol=series.symbol,
        crossovers=tuple(events),
        current_sma50=current_fast,
        current_sma200=current_slow,
        current_close=last_bar.close if last_bar else None,
        current_date=last_bar.date if last_bar else None,
        current_state=current_crossover_state(current_fast, current_slow),
        total_trading_days=len(series),
    )
