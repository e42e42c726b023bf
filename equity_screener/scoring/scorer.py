"""
Strategy scoring: apply one rule table to one symbol.

    score      = sum(points of every fired rule)
    signals    = fired labels, first-fired first, duplicates dropped
    valid      = signals not on the strategy deny-list
    qualifies  = score >= min_score
                 and len(valid) >= min_valid_signals
                 and strategy.structural(snapshot)

Normalized display score
------------------------
    normalized = clamp(round_half_up(score / strategy.max_score * 100), 0, 100)

Qualification always uses the raw score; the normalized value is for display.
"""

from __future__ import annotations

import math
from typing import Iterable, Optional

from equity_screener.models.alert import Alert
from equity_screener.models.score import BreakdownEntry, ScoreResult
from equity_screener.models.snapshot import IndicatorSnapshot
from equity_screener.scoring.rules import ScoringContext, Strategy
from equity_screener.scoring.strategies import all_strategies, get_strategy


def _clamp(v: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, v))


def normalized_score(score: int, max_score: int) -> int:
    """Scale a raw score to 0-100 against the strategy's attainable maximum."""
    if max_score <= 0:
        return 0
    return _clamp(math.floor(score / max_score * 100 + 0.5), 0, 100)


def score_stock(
    snapshot: IndicatorSnapshot,
    alerts: Iterable[Alert],
    strategy: Strategy | str,
) -> ScoreResult:
    """Score one symbol against one strategy.

    Args:
        snapshot: Indicator snapshot for the symbol.
        alerts:   Alerts raised for the symbol (others' alerts are ignored).
        strategy: A ``Strategy`` or a registered strategy name.

    Returns:
        ``ScoreResult`` with score, signals, breakdown and qualification.

    Raises:
        UnknownStrategyError: If ``strategy`` is an unregistered name.
    """
    if not isinstance(strategy, Strategy):
        strategy = get_strategy(strategy)

    ctx = ScoringContext.build(snapshot, alerts)
    score = 0
    signals: list[str] = []
    breakdown: list[BreakdownEntry] = []

    for group in strategy.groups:
        rule = group.first_match(ctx)
        if rule is None:
            continue
        score += rule.points
        breakdown.append(
            BreakdownEntry(
                label=rule.label,
                observed_value=rule.observed(ctx),
                points_delta=rule.points,
            )
        )
        if rule.emits_signal and rule.label not in signals:
            signals.append(rule.label)

    valid_count = sum(1 for s in signals if s not in strategy.deny_list)
    qualifies = (
        score >= strategy.min_score
        and valid_count >= strategy.min_valid_signals
        and strategy.structural(snapshot)
    )

    return ScoreResult(
        symbol=snapshot.symbol,
        strategy_name=strategy.name,
        score=score,
        normalized_score=normalized_score(score, strategy.max_score),
        signals=tuple(signals),
        valid_signal_count=valid_count,
        qualifies=qualifies,
        breakdown=tuple(breakdown),
    )


def score_all_strategies(
    snapshot: IndicatorSnapshot,
    alerts: Iterable[Alert],
    strategies: Optional[Iterable[Strategy | str]] = None,
) -> dict[str, ScoreResult]:
    """Score one symbol against several strategies (all registered by default).

    Returns:
        ``{strategy_name: ScoreResult}`` in the order the strategies were given.
    """
    alerts = list(alerts)
    chosen = [
        s if isinstance(s, Strategy) else get_strategy(s)
        for s in (strategies if strategies is not None else all_strategies())
    ]
    return {s.name.value: score_stock(snapshot, alerts, s) for s in chosen}
