"""Tests for the rule-table building blocks in equity_screener.scoring.rules."""

from __future__ import annotations

from conftest import make_alert, make_snapshot
from equity_screener.scoring.rules import (
    Rule,
    ScoringContext,
    above,
    at_least,
    below,
    between,
    chain,
    in_range,
    single,
)
from equity_screener.taxonomy.signal_taxonomy import (
    AlertCategory,
    AlertType,
    MacdSignalType,
)


class TestComparisonHelpers:
    def test_none_never_matches(self):
        assert not above(None, 0)
        assert not at_least(None, 0)
        assert not below(None, 0)
        assert not between(None, 0, 1)
        assert not in_range(None, 0, 1)

    def test_between_is_inclusive(self):
        assert between(50, 50, 65)
        assert between(65, 50, 65)

    def test_in_range_is_half_open(self):
        assert in_range(40, 40, 50)
        assert not in_range(50, 40, 50)

    def test_strict_and_inclusive(self):
        assert not above(0, 0)
        assert at_least(0, 0)
        assert below(-0.1, 0)


class TestScoringContext:
    def test_alerts_of_other_symbols_ignored(self):
        ctx = ScoringContext.build(
            make_snapshot("AAA"),
            [make_alert(AlertType.GOLDEN_CROSS, AlertCategory.MA_CROSSOVER, symbol="BBB")],
        )
        assert not ctx.has_alert(AlertType.GOLDEN_CROSS)
        assert not ctx.has_category(AlertCategory.MA_CROSSOVER)

    def test_macd_from_snapshot(self):
        ctx = ScoringContext.build(make_snapshot(macd_signal_type=MacdSignalType.STRONG_BULLISH))
        assert ctx.macd_bullish
        assert not ctx.macd_bearish

    def test_macd_from_alert(self):
        ctx = ScoringContext.build(
            make_snapshot(),
            [make_alert(AlertType.MACD_BEARISH_CROSS, AlertCategory.MACD_SIGNALS)],
        )
        assert ctx.macd_bearish
        assert not ctx.macd_bullish


class TestRuleGroup:
    def test_first_match_wins(self):
        group = chain(
            Rule("Big", 5, lambda c: at_least(c.snapshot.change_percent, 5)),
            Rule("Small", 1, lambda c: above(c.snapshot.change_percent, 0)),
        )
        ctx = ScoringContext.build(make_snapshot(change_percent=6.0))
        assert group.first_match(ctx).label == "Big"

    def test_no_match(self):
        group = single(Rule("Big", 5, lambda c: at_least(c.snapshot.change_percent, 5)))
        assert group.first_match(ScoringContext.build(make_snapshot())) is None

    def test_max_points(self):
        assert chain(Rule("a", 2, bool), Rule("b", 7, bool)).max_points == 7
        assert single(Rule("penalty", -3, bool)).max_points == 0
