"""
Scan pipeline: run the whole engine over a universe of symbols.

Steps
-----
1. build_snapshots()        quote + history → IndicatorSnapshot per symbol
2. deduplicate_listings()   collapse foreign listings of one issuer
3. apply_universe_filters() exclusions / minimum market cap
4. analyze_symbol()         breakout alerts + every requested strategy score
5. rank_strategy()          top-N qualifying picks per strategy

``run_scan()`` does steps 2-5 on prepared snapshots; ``scan_chart_data()``
adds step 1 for loader output.  Each symbol is analysed independently, so
callers may parallelise ``analyze_symbol()`` themselves.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Iterable, Optional

from equity_screener.config import AppConfig
from equity_screener.indicators.snapshot import build_snapshot
from equity_screener.ingestion.chart_loader import ChartData
from equity_screener.models.alert import Alert, CrossoverEvent, CrossoverReport
from equity_screener.models.score import RankedPick, ScoreResult
from equity_screener.models.snapshot import IndicatorSnapshot
from equity_screener.scoring.ranker import (
    apply_universe_filters,
    deduplicate_listings,
    rank_strategy,
)
from equity_screener.scoring.rules import Strategy
from equity_screener.scoring.scorer import score_all_strategies
from equity_screener.scoring.strategies import get_strategy
from equity_screener.signals.breakout import (
    classify_breakouts,
    count_by_severity,
    group_alerts_by_category,
)
from equity_screener.signals.crossover import build_crossover_report, latest_crossover
from equity_screener.utils.time_utils import utcnow

logger = logging.getLogger(__name__)


@dataclass
class SymbolAnalysis:
    """Alerts and per-strategy scores for one symbol."""

    snapshot: IndicatorSnapshot
    alerts: list[Alert]
    scores: dict[str, ScoreResult]


@dataclass
class ScanReport:
    """Result of one scan over a universe.

    Attributes:
        generated_at:       UTC time the scan finished.
        symbols_loaded:     Snapshots passed in.
        duplicates_dropped: Listings collapsed by de-duplication.
        filtered_out:       Snapshots removed by universe filters.
        picks:              ``{strategy_name: [RankedPick, ...]}``.
        alerts_by_category: Every alert of every scanned symbol, grouped.
        severity_counts:    ``{"bullish": n, "bearish": n, "neutral": n}``.
        analyses:           Per-symbol detail, in scan order.
    """

    generated_at: datetime
    symbols_loaded: int
    duplicates_dropped: int
    filtered_out: int
    picks: dict[str, list[RankedPick]] = field(default_factory=dict)
    alerts_by_category: dict[str, list[Alert]] = field(default_factory=dict)
    severity_counts: dict[str, int] = field(default_factory=dict)
    analyses: list[SymbolAnalysis] = field(default_factory=list)

    @property
    def symbols_scanned(self) -> int:
        return len(self.analyses)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready payload: ranked ``{stock, score, signals}`` per strategy
        plus the grouped alert list, using camelCase keys."""
        return {
            "generatedAt": self.generated_at.isoformat(),
            "symbolsLoaded": self.symbols_loaded,
            "symbolsScanned": self.symbols_scanned,
            "duplicatesDropped": self.duplicates_dropped,
            "filteredOut": self.filtered_out,
            "severityCounts": dict(self.severity_counts),
            "strategies": {
                name: [
                    {
                        "rank": p.rank,
                        "stock": p.stock.model_dump(by_alias=True, mode="json"),
                        "score": p.result.score,
                        "normalizedScore": p.result.normalized_score,
                        "signals": list(p.result.signals),
                        "breakdown": [
                            b.model_dump(by_alias=True, mode="json")
                            for b in p.result.breakdown
                        ],
                        "targets": (
                            p.targets.model_dump(by_alias=True) if p.targets else None
                        ),
                    }
                    for p in picks
                ]
                for name, picks in self.picks.items()
            },
            "alerts": {
                category: [a.model_dump(by_alias=True, mode="json") for a in alerts]
                for category, alerts in self.alerts_by_category.items()
            },
        }


def _resolve_strategies(
    names: Optional[Iterable[str | Strategy]],
    config: AppConfig,
) -> list[Strategy]:
    chosen = names if names is not None else config.ranking.strategies
    resolved: list[Strategy] = []
    for name in chosen:
        strategy = name if isinstance(name, Strategy) else get_strategy(name)
        if strategy not in resolved:
            resolved.append(strategy)
    return resolved


def build_snapshots(
    data: Iterable[ChartData],
    config: Optional[AppConfig] = None,
) -> list[IndicatorSnapshot]:
    """Build one snapshot per loaded symbol."""
    cfg = config or AppConfig()
    return [build_snapshot(d.quote, d.series, cfg.indicators) for d in data]


def analyze_symbol(
    snapshot: IndicatorSnapshot,
    strategies: Iterable[Strategy],
    config: Optional[AppConfig] = None,
) -> SymbolAnalysis:
    """Classify alerts and score one snapshot against ``strategies``."""
    cfg = config or AppConfig()
    alerts = classify_breakouts(snapshot, cfg.alerts)
    scores = score_all_strategies(snapshot, alerts, strategies)
    return SymbolAnalysis(snapshot=snapshot, alerts=alerts, scores=scores)


def run_scan(
    snapshots: Iterable[IndicatorSnapshot],
    config: Optional[AppConfig] = None,
    strategies: Optional[Iterable[str | Strategy]] = None,
    top_n: Optional[int] = None,
) -> ScanReport:
    """Scan a universe of snapshots and rank it under each strategy.

    Args:
        snapshots:  One snapshot per listing.
        config:     Application config (alert thresholds, ranking settings).
        strategies: Strategy names or objects; defaults to ``ranking.strategies``.
        top_n:      List length per strategy; defaults to ``ranking.top_n``.

    Returns:
        ``ScanReport`` with ranked picks and grouped alerts.

    Raises:
        UnknownStrategyError: If a strategy name is not registered.
        ValueError: If ``top_n < 1``.
    """
    cfg = config or AppConfig()
    chosen = _resolve_strategies(strategies, cfg)
    limit = top_n if top_n is not None else cfg.ranking.top_n

    loaded = list(snapshots)
    unique = deduplicate_listings(loaded, cfg.ranking.listing_suffixes)
    eligible = apply_universe_filters(
        unique, cfg.ranking.exclude_symbols, cfg.ranking.min_market_cap
    )
    logger.info(
        "Scanning %d symbols (%d loaded, %d duplicate listings, %d filtered)",
        len(eligible), len(loaded), len(loaded) - len(unique), len(unique) - len(eligible),
    )

    analyses = [analyze_symbol(snap, chosen, cfg) for snap in eligible]
    all_alerts = [a for analysis in analyses for a in analysis.alerts]

    picks: dict[str, list[RankedPick]] = {}
    for strategy in chosen:
        key = strategy.name.value
        scored = [(a.snapshot, a.scores[key]) for a in analyses]
        picks[key] = rank_strategy(scored, strategy, limit)
        logger.info(
            "%s: %d of %d symbols qualify, %d ranked",
            key, sum(1 for _, r in scored if r.qualifies), len(scored), len(picks[key]),
        )

    return ScanReport(
        generated_at=utcnow(),
        symbols_loaded=len(loaded),
        duplicates_dropped=len(loaded) - len(unique),
        filtered_out=len(unique) - len(eligible),
        picks=picks,
        alerts_by_category=group_alerts_by_category(all_alerts),
        severity_counts=count_by_severity(all_alerts),
        analyses=analyses,
    )


def scan_chart_data(
    data: Iterable[ChartData],
    config: Optional[AppConfig] = None,
    strategies: Optional[Iterable[str | Strategy]] = None,
    top_n: Optional[int] = None,
) -> ScanReport:
    """``build_snapshots()`` followed by ``run_scan()``."""
    cfg = config or AppConfig()
    return run_scan(build_snapshots(data, cfg), cfg, strategies, top_n)


def analyze_crossovers(
    data: Iterable[ChartData],
    config: Optional[AppConfig] = None,
    cutoff: Optional[date] = None,
    as_of: Optional[date] = None,
) -> list[CrossoverReport]:
    """Crossover history report for each loaded symbol."""
    cfg = config or AppConfig()
    return [
        build_crossover_report(d.series, cutoff, cfg.indicators, cfg.crossover, as_of)
        for d in data
    ]


def scan_latest_crossovers(
    data: Iterable[ChartData],
    config: Optional[AppConfig] = None,
) -> list[tuple[str, CrossoverEvent]]:
    """Symbols whose 50/200-day crossover completed on their latest bar."""
    cfg = config or AppConfig()
    found: list[tuple[str, CrossoverEvent]] = []
    for d in data:
        event = latest_crossover(d.series, cfg.indicators, cfg.crossover)
        if event is not None:
            found.append((d.symbol, event))
    logger.info("%d symbols crossed on their latest bar", len(found))
    return found
