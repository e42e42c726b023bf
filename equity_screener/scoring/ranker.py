"""
Universe preparation and per-strategy ranking.

Usage flow
----------
1. deduplicate_listings(snapshots, suffixes)
   -> one snapshot per issuer (local + foreign listings collapsed)

2. apply_universe_filters(snapshots, exclude_symbols, min_market_cap)
   -> snapshots eligible for ranking

3. rank_strategy(scored, strategy, top_n)
   -> list[RankedPick]  (qualifying only, strategy tie-break order)

Listing de-duplication
----------------------
``RELIANCE.NS`` and ``RELIANCE.BO`` are the same issuer on two exchanges.
Listings whose symbols differ only by a configured suffix are collapsed to
the record with the higher session volume (absent volume counts as 0; a tie
keeps the record seen first).  Output keeps first-seen issuer order.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from equity_screener.models.score import RankedPick, ScoreResult
from equity_screener.models.snapshot import IndicatorSnapshot
from equity_screener.scoring.rules import Strategy
from equity_screener.scoring.targets import compute_trade_targets
from equity_screener.taxonomy.signal_taxonomy import StrategyName

logger = logging.getLogger(__name__)

DEFAULT_LISTING_SUFFIXES: tuple[str, ...] = (".NS", ".BO")


def base_symbol(symbol: str, suffixes: Sequence[str] = DEFAULT_LISTING_SUFFIXES) -> str:
    """Strip a foreign-listing suffix (case-insensitive) from ``symbol``."""
    upper = symbol.upper()
    for suffix in suffixes:
        if suffix and upper.endswith(suffix.upper()):
            return symbol[: -len(suffix)]
    return symbol


def deduplicate_listings(
    snapshots: Iterable[IndicatorSnapshot],
    suffixes: Sequence[str] = DEFAULT_LISTING_SUFFIXES,
) -> list[IndicatorSnapshot]:
    """Collapse multiple listings of one issuer to the higher-volume record."""
    best: dict[str, IndicatorSnapshot] = {}
    for snap in snapshots:
        key = base_symbol(snap.symbol, suffixes).upper()
        current = best.get(key)
        if current is None or (snap.volume or 0) > (current.volume or 0):
            best[key] = snap
    return list(best.values())


def apply_universe_filters(
    snapshots: Iterable[IndicatorSnapshot],
    exclude_symbols: Iterable[str] = (),
    min_market_cap: Optional[float] = None,
) -> list[IndicatorSnapshot]:
    """Drop excluded symbols and, when set, stocks below ``min_market_cap``.

    A snapshot without a market cap is dropped whenever a minimum is set.
    """
    excluded = {s.upper() for s in exclude_symbols}
    kept: list[IndicatorSnapshot] = []
    for snap in snapshots:
        if snap.symbol.upper() in excluded:
            continue
        if min_market_cap is not None and (
            snap.market_cap is None or snap.market_cap < min_market_cap
        ):
            continue
        kept.append(snap)
    return kept


def rank_strategy(
    scored: Iterable[tuple[IndicatorSnapshot, ScoreResult]],
    strategy: Strategy,
    top_n: int = 10,
) -> list[RankedPick]:
    """Return the top-N qualifying stocks for one strategy.

    Args:
        scored:   ``(snapshot, result)`` pairs; results for other strategies
                  are ignored.
        strategy: Strategy whose ``sort_key`` orders the list.
        top_n:    Maximum list length.

    Returns:
        ``RankedPick`` list, rank 1 first.  Day-trade picks carry ATR targets.

    Raises:
        ValueError: If ``top_n < 1``.
    """
    if top_n < 1:
        raise ValueError(f"top_n must be >= 1, got {top_n}.")

    qualifying = [
        (snap, result)
        for snap, result in scored
        if result.strategy_name == strategy.name and result.qualifies
    ]
    qualifying.sort(key=lambda pair: strategy.sort_key(pair[1], pair[0]))

    picks: list[RankedPick] = []
    for rank, (snap, result) in enumerate(qualifying[:top_n], start=1):
        targets = None
        if strategy.name == StrategyName.DAY_TRADE:
            targets = compute_trade_targets(snap.price, snap.atr)
        picks.append(RankedPick(rank=rank, stock=snap, result=result, targets=targets))

    logger.debug(
        "%s: %d qualifying, %d ranked", strategy.name.value, len(qualifying), len(picks)
    )
    return picks
