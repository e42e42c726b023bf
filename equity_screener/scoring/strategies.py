"""
Strategy rule tables and the strategy registry.

Medium-term ("top picks") - max 24
----------------------------------
    Above 50 MA        +3   0 < pct50 <= 8
    Above 200 MA       +3   0 < pct200 <= 20
    Golden Cross       +5   golden_cross alert
    Strong Momentum    +3   RSI in [50, 65]
      else Building Momentum +1   RSI in [40, 50)
      else Oversold Bounce   +2   RSI in [30, 40)
    MACD Bullish       +4
    Near 52W High      +2   pct from high >= -10
    Breakout Move      +2   change > 2 and relative volume > 1.2
      else (no signal)   +1   change > 0
    Volume Surge       +2   volume_breakout alert and change > 0
    Overbought         -4   RSI > 70
    Death Cross        -5   death_cross alert
    Bearish MACD       -3
    Too Extended       -2   pct50 > 15
    Below 200 MA       -2   pct200 < 0
  Qualifies: score >= 6, >= 3 valid signals, price above the 200-day MA.

Day-trade - max 29
------------------
    Big Mover +7 / Strong Move +5 / Good Move +3 / Positive Day +1
        change >= 5 / >= 3 / >= 1.5 / > 0
    Massive Volume +6 / High Volume +4 / Above Avg Volume +2
        relative volume >= 2.5 / >= 1.8 / >= 1.3
    New 52W High +5 / Near 52W High +3     pct from high >= 0 / >= -3
    MACD Bullish +3
    Strong RSI +3                          RSI in [60, 75]
      else (no signal) +1                  RSI in [50, 60)
    Extreme RSI -2                         RSI > 80
    Above 50 MA +1, Above 200 MA +1
    Multi-Day Uptrend +3                   >= 3 consecutive higher closes
    Negative Day -3, Low Volume -2 (rel. volume < 0.7), Bearish MACD -2
  Qualifies: score >= 8, positive day, >= 2 valid signals.

Momentum - max 24
-----------------
    Strong Momentum +5 / Good Momentum +3 / Mild Momentum +1
        pct50 >= 30 / >= 15 / >= 5
    Major Uptrend +4 / Uptrend +2          pct200 >= 50 / >= 20
    52W High Zone +4                       pct from high >= -5
    MACD Bullish +3
    Big Move Today +4 / Moving Today +2    change >= 5 / >= 2
    High Volume +2                         relative volume >= 1.5
    RSI Momentum +2                        RSI in [55, 75]
    Down Today -3, Overbought -2 (RSI > 80), Below 50 MA -3
  Qualifies: score >= 10, price above the 50-day MA, >= 3 valid signals.
"""

from __future__ import annotations

from equity_screener.models.score import ScoreResult
from equity_screener.models.snapshot import IndicatorSnapshot
from equity_screener.scoring.rules import (
    Rule,
    ScoringContext,
    Strategy,
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
    StrategyName,
    parse_strategy_name,
)


class UnknownStrategyError(LookupError):
    """Raised when a caller asks for a strategy that is not registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        known = ", ".join(s.value for s in StrategyName)
        super().__init__(f"Unknown strategy '{name}'. Known strategies: {known}.")


# ── Observers ─────────────────────────────────────────────────────────────────

def _pct50(c: ScoringContext):
    return c.snapshot.percent_from_sma50


def _pct200(c: ScoringContext):
    return c.snapshot.percent_from_sma200


def _pct_high(c: ScoringContext):
    return c.snapshot.percent_from_high


def _rsi(c: ScoringContext):
    return c.snapshot.rsi


def _change(c: ScoringContext):
    return c.snapshot.change_percent


def _rel_vol(c: ScoringContext):
    return c.snapshot.relative_volume


def _streak(c: ScoringContext):
    return c.snapshot.up_streak


def _macd_type(c: ScoringContext):
    t = c.snapshot.macd_signal_type
    return t.value if t is not None else None


def _macd_bullish_rule(points: int) -> Rule:
    return Rule("MACD Bullish", points, lambda c: c.macd_bullish, _macd_type)


def _bearish_macd_rule(points: int) -> Rule:
    return Rule("Bearish MACD", points, lambda c: c.macd_bearish, _macd_type)


# ── Medium-term ───────────────────────────────────────────────────────────────

def _medium_term_sort_key(result: ScoreResult, snapshot: IndicatorSnapshot) -> tuple:
    rsi_ideal = between(snapshot.rsi, 50, 65)
    rel_vol = snapshot.relative_volume if snapshot.relative_volume is not None else 1.0
    return (-result.score, -result.valid_signal_count, -int(rsi_ideal), -rel_vol, snapshot.symbol)


MEDIUM_TERM = Strategy(
    name=StrategyName.MEDIUM_TERM,
    title="Medium-Term Picks",
    description="Trend-confirmed swing candidates held for weeks.",
    groups=(
        single(Rule("Above 50 MA", 3, lambda c: above(_pct50(c), 0) and _pct50(c) <= 8, _pct50)),
        single(Rule("Above 200 MA", 3, lambda c: above(_pct200(c), 0) and _pct200(c) <= 20, _pct200)),
        single(Rule(
            "Golden Cross", 5,
            lambda c: c.has_alert(AlertType.GOLDEN_CROSS),
            lambda c: AlertType.GOLDEN_CROSS.value,
        )),
        chain(
            Rule("Strong Momentum", 3, lambda c: between(_rsi(c), 50, 65), _rsi),
            Rule("Building Momentum", 1, lambda c: in_range(_rsi(c), 40, 50), _rsi),
            Rule("Oversold Bounce", 2, lambda c: in_range(_rsi(c), 30, 40), _rsi),
        ),
        single(_macd_bullish_rule(4)),
        single(Rule("Near 52W High", 2, lambda c: at_least(_pct_high(c), -10), _pct_high)),
        chain(
            Rule(
                "Breakout Move", 2,
                lambda c: above(_change(c), 2) and above(_rel_vol(c), 1.2),
                _change,
            ),
            Rule("Positive Day", 1, lambda c: above(_change(c), 0), _change, emits_signal=False),
        ),
        single(Rule(
            "Volume Surge", 2,
            lambda c: c.has_category(AlertCategory.VOLUME_BREAKOUT) and above(_change(c), 0),
            _rel_vol,
        )),
        single(Rule("Overbought", -4, lambda c: above(_rsi(c), 70), _rsi)),
        single(Rule(
            "Death Cross", -5,
            lambda c: c.has_alert(AlertType.DEATH_CROSS),
            lambda c: AlertType.DEATH_CROSS.value,
        )),
        single(_bearish_macd_rule(-3)),
        single(Rule("Too Extended", -2, lambda c: above(_pct50(c), 15), _pct50)),
        single(Rule("Below 200 MA", -2, lambda c: below(_pct200(c), 0), _pct200)),
    ),
    min_score=6,
    min_valid_signals=3,
    structural=lambda s: above(s.percent_from_sma200, 0),
    structural_label="price above the 200-day MA",
    deny_list=frozenset({"Overbought", "Death Cross", "Bearish MACD", "Too Extended", "Below 200 MA"}),
    sort_key=_medium_term_sort_key,
)


# ── Day-trade ─────────────────────────────────────────────────────────────────

def _day_trade_sort_key(result: ScoreResult, snapshot: IndicatorSnapshot) -> tuple:
    change = snapshot.change_percent if snapshot.change_percent is not None else 0.0
    rel_vol = snapshot.relative_volume if snapshot.relative_volume is not None else 1.0
    return (-result.score, -change, -rel_vol, snapshot.symbol)


DAY_TRADE = Strategy(
    name=StrategyName.DAY_TRADE,
    title="Day-Trade Movers",
    description="Today's strongest movers on heavy volume.",
    groups=(
        chain(
            Rule("Big Mover", 7, lambda c: at_least(_change(c), 5), _change),
            Rule("Strong Move", 5, lambda c: at_least(_change(c), 3), _change),
            Rule("Good Move", 3, lambda c: at_least(_change(c), 1.5), _change),
            Rule("Positive Day", 1, lambda c: above(_change(c), 0), _change),
        ),
        chain(
            Rule("Massive Volume", 6, lambda c: at_least(_rel_vol(c), 2.5), _rel_vol),
            Rule("High Volume", 4, lambda c: at_least(_rel_vol(c), 1.8), _rel_vol),
            Rule("Above Avg Volume", 2, lambda c: at_least(_rel_vol(c), 1.3), _rel_vol),
        ),
        chain(
            Rule("New 52W High", 5, lambda c: at_least(_pct_high(c), 0), _pct_high),
            Rule("Near 52W High", 3, lambda c: at_least(_pct_high(c), -3), _pct_high),
        ),
        single(_macd_bullish_rule(3)),
        chain(
            Rule("Strong RSI", 3, lambda c: between(_rsi(c), 60, 75), _rsi),
            Rule("RSI 50-60", 1, lambda c: in_range(_rsi(c), 50, 60), _rsi, emits_signal=False),
        ),
        single(Rule("Extreme RSI", -2, lambda c: above(_rsi(c), 80), _rsi)),
        single(Rule("Above 50 MA", 1, lambda c: above(_pct50(c), 0), _pct50)),
        single(Rule("Above 200 MA", 1, lambda c: above(_pct200(c), 0), _pct200)),
        single(Rule("Multi-Day Uptrend", 3, lambda c: at_least(_streak(c), 3), _streak)),
        single(Rule("Negative Day", -3, lambda c: below(_change(c), 0), _change)),
        single(Rule("Low Volume", -2, lambda c: below(_rel_vol(c), 0.7), _rel_vol)),
        single(_bearish_macd_rule(-2)),
    ),
    min_score=8,
    min_valid_signals=2,
    structural=lambda s: above(s.change_percent, 0),
    structural_label="positive change today",
    deny_list=frozenset({"Extreme RSI", "Negative Day", "Low Volume", "Bearish MACD"}),
    sort_key=_day_trade_sort_key,
)


# ── Momentum ──────────────────────────────────────────────────────────────────

def _momentum_sort_key(result: ScoreResult, snapshot: IndicatorSnapshot) -> tuple:
    pct_high = snapshot.percent_from_high if snapshot.percent_from_high is not None else -100.0
    change = snapshot.change_percent if snapshot.change_percent is not None else 0.0
    return (-result.score, -pct_high, -change, snapshot.symbol)


MOMENTUM = Strategy(
    name=StrategyName.MOMENTUM,
    title="Momentum Leaders",
    description="Extended uptrends trading near their highs.",
    groups=(
        chain(
            Rule("Strong Momentum", 5, lambda c: at_least(_pct50(c), 30), _pct50),
            Rule("Good Momentum", 3, lambda c: at_least(_pct50(c), 15), _pct50),
            Rule("Mild Momentum", 1, lambda c: at_least(_pct50(c), 5), _pct50),
        ),
        chain(
            Rule("Major Uptrend", 4, lambda c: at_least(_pct200(c), 50), _pct200),
            Rule("Uptrend", 2, lambda c: at_least(_pct200(c), 20), _pct200),
        ),
        single(Rule("52W High Zone", 4, lambda c: at_least(_pct_high(c), -5), _pct_high)),
        single(_macd_bullish_rule(3)),
        chain(
            Rule("Big Move Today", 4, lambda c: at_least(_change(c), 5), _change),
            Rule("Moving Today", 2, lambda c: at_least(_change(c), 2), _change),
        ),
        single(Rule("High Volume", 2, lambda c: at_least(_rel_vol(c), 1.5), _rel_vol)),
        single(Rule("RSI Momentum", 2, lambda c: between(_rsi(c), 55, 75), _rsi)),
        single(Rule("Down Today", -3, lambda c: below(_change(c), 0), _change)),
        single(Rule("Overbought", -2, lambda c: above(_rsi(c), 80), _rsi)),
        single(Rule("Below 50 MA", -3, lambda c: below(_pct50(c), 0), _pct50)),
    ),
    min_score=10,
    min_valid_signals=3,
    structural=lambda s: above(s.percent_from_sma50, 0),
    structural_label="price above the 50-day MA",
    deny_list=frozenset({"Down Today", "Overbought", "Below 50 MA"}),
    sort_key=_momentum_sort_key,
)


# ── Registry ──────────────────────────────────────────────────────────────────

STRATEGIES: dict[StrategyName, Strategy] = {
    s.name: s for s in (MEDIUM_TERM, DAY_TRADE, MOMENTUM)
}


def get_strategy(name: str | StrategyName) -> Strategy:
    """Look up a strategy by name or alias.

    Raises:
        UnknownStrategyError: If ``name`` matches no registered strategy.
    """
    resolved = parse_strategy_name(str(name))
    if resolved is None:
        raise UnknownStrategyError(str(name))
    return STRATEGIES[resolved]


def all_strategies() -> list[Strategy]:
    return list(STRATEGIES.values())
