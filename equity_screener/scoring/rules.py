"""
Rule-table building blocks shared by every scoring strategy.

A strategy is an ordered tuple of ``RuleGroup`` objects.  Each group is an
else-if chain: its rules are tried in order and the first one whose
predicate holds fires (a single-rule group is just a chain of one).  Fired
rules add their points, record a breakdown entry, and, unless marked
``emits_signal=False``, append their label to the signal list.

Predicates receive a ``ScoringContext`` (snapshot + the symbol's alert set)
and must treat absent inputs as "rule does not fire".  The comparison
helpers below (``at_least``, ``between``, ...) all return ``False`` for
``None``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

from equity_screener.models.alert import Alert
from equity_screener.models.score import ScoreResult
from equity_screener.models.snapshot import IndicatorSnapshot
from equity_screener.taxonomy.signal_taxonomy import (
    AlertCategory,
    AlertType,
    StrategyName,
)

_BULLISH_MACD_ALERTS = frozenset({AlertType.MACD_BULLISH_CROSS, AlertType.MACD_STRONG_BULLISH})
_BEARISH_MACD_ALERTS = frozenset({AlertType.MACD_BEARISH_CROSS, AlertType.MACD_STRONG_BEARISH})


# ── Comparison helpers ────────────────────────────────────────────────────────

def above(value: Optional[float], threshold: float) -> bool:
    return value is not None and value > threshold


def at_least(value: Optional[float], threshold: float) -> bool:
    return value is not None and value >= threshold


def below(value: Optional[float], threshold: float) -> bool:
    return value is not None and value < threshold


def between(value: Optional[float], low: float, high: float) -> bool:
    """Inclusive on both ends."""
    return value is not None and low <= value <= high


def in_range(value: Optional[float], low: float, high: float) -> bool:
    """Half-open ``[low, high)``."""
    return value is not None and low <= value < high


# ── Context ───────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ScoringContext:
    """Everything a rule predicate may look at for one symbol."""

    snapshot: IndicatorSnapshot
    alert_types: frozenset[AlertType] = frozenset()
    alert_categories: frozenset[AlertCategory] = frozenset()

    @classmethod
    def build(cls, snapshot: IndicatorSnapshot, alerts: Iterable[Alert] = ()) -> "ScoringContext":
        alerts = [a for a in alerts if a.symbol == snapshot.symbol]
        return cls(
            snapshot=snapshot,
            alert_types=frozenset(a.alert_type for a in alerts),
            alert_categories=frozenset(a.alert_category for a in alerts),
        )

    def has_alert(self, alert_type: AlertType) -> bool:
        return alert_type in self.alert_types

    def has_category(self, category: AlertCategory) -> bool:
        return category in self.alert_categories

    @property
    def macd_bullish(self) -> bool:
        """Bullish crossover or strong bullish, from the snapshot or an alert."""
        signal_type = self.snapshot.macd_signal_type
        if signal_type is not None and signal_type.is_bullish:
            return True
        return bool(self.alert_types & _BULLISH_MACD_ALERTS)

    @property
    def macd_bearish(self) -> bool:
        signal_type = self.snapshot.macd_signal_type
        if signal_type is not None and signal_type.is_bearish:
            return True
        return bool(self.alert_types & _BEARISH_MACD_ALERTS)


# ── Rules ─────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Rule:
    """One scoring rule.

    Attributes:
        label:        Signal / breakdown label, e.g. ``"Near 52W High"``.
        points:       Points added when the rule fires (negative = penalty).
        when:         Predicate over the scoring context.
        observe:      Returns the value the rule tested, for the breakdown.
        emits_signal: ``False`` for rules that score without adding a signal.
    """

    label: str
    points: int
    when: Callable[[ScoringContext], bool]
    observe: Optional[Callable[[ScoringContext], Any]] = None
    emits_signal: bool = True

    def observed(self, ctx: ScoringContext) -> Any:
        return self.observe(ctx) if self.observe is not None else None


@dataclass(frozen=True)
class RuleGroup:
    """An else-if chain of rules; at most one fires."""

    rules: tuple[Rule, ...]

    def first_match(self, ctx: ScoringContext) -> Optional[Rule]:
        for rule in self.rules:
            if rule.when(ctx):
                return rule
        return None

    @property
    def max_points(self) -> int:
        """Largest positive award in the chain (0 for penalty-only groups)."""
        return max(0, *(r.points for r in self.rules))


def single(rule: Rule) -> RuleGroup:
    return RuleGroup((rule,))


def chain(*rules: Rule) -> RuleGroup:
    return RuleGroup(tuple(rules))


# ── Strategy ──────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Strategy:
    """A named rule table plus its qualification gate and ranking order.

    Attributes:
        name:              Registry key.
        title:             Display name.
        description:       One-line summary for ``strategies`` listings.
        groups:            Rule groups in evaluation order.
        min_score:         Raw score needed to qualify.
        min_valid_signals: Signals (outside ``deny_list``) needed to qualify.
        structural:        Extra per-snapshot gate (e.g. above the 200-day MA).
        structural_label:  Human description of ``structural``.
        deny_list:         Negative labels excluded from the valid-signal count.
        sort_key:          Ascending sort key over ``(result, snapshot)``;
                           must end with the symbol so ordering is total.
    """

    name: StrategyName
    title: str
    description: str
    groups: tuple[RuleGroup, ...]
    min_score: int
    min_valid_signals: int
    structural: Callable[[IndicatorSnapshot], bool]
    structural_label: str
    deny_list: frozenset[str]
    sort_key: Callable[[ScoreResult, IndicatorSnapshot], tuple]

    @property
    def max_score(self) -> int:
        """Highest raw score any single stock can reach."""
        return sum(g.max_points for g in self.groups)

    @property
    def rules(self) -> list[Rule]:
        return [r for g in self.groups for r in g.rules]
