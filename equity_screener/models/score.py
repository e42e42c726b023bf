"""
Strategy scoring outputs.

``BreakdownEntry`` - one fired rule: label, the value it looked at, points delta.
``ScoreResult``    - a strategy's verdict for one symbol.
``TradeTargets``   - ATR-based entry / exit / stop levels for day trades.
``RankedPick``     - a qualifying symbol at a rank position in a strategy list.

Results are derived fresh on every call; recomputing from the same snapshot
and alerts yields an identical object.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from equity_screener.models.snapshot import IndicatorSnapshot
from equity_screener.taxonomy.signal_taxonomy import StrategyName

_CAMEL = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class BreakdownEntry(BaseModel):
    """One rule that fired while scoring.

    ``observed_value`` is the input the rule tested (e.g. the RSI reading),
    or ``None`` for rules driven by an alert's presence.
    """

    model_config = _CAMEL

    label: str
    observed_value: Optional[float | str] = None
    points_delta: int


class ScoreResult(BaseModel):
    """Score, signals, and qualification for one (symbol, strategy) pair.

    Attributes:
        symbol:             Listing symbol.
        strategy_name:      Strategy that produced the score.
        score:              Raw integer score (sum of fired rule points).
        normalized_score:   Display score 0-100 relative to the strategy max.
        signals:            Fired labels, first-fired first, no duplicates.
        valid_signal_count: Signals not on the strategy's deny-list.
        qualifies:          Whether the stock makes the strategy's watchlist.
        breakdown:          Every fired rule in evaluation order.
    """

    model_config = _CAMEL

    symbol: str
    strategy_name: StrategyName
    score: int
    normalized_score: int = Field(ge=0, le=100)
    signals: tuple[str, ...] = ()
    valid_signal_count: int = 0
    qualifies: bool = False
    breakdown: tuple[BreakdownEntry, ...] = ()


class TradeTargets(BaseModel):
    """Day-trade price levels derived from the average true range."""

    model_config = _CAMEL

    buy_target: float
    sell_target: float
    stop_loss: float
    atr: float
    atr_estimated: bool = False


class RankedPick(BaseModel):
    """A qualifying stock at its position in a strategy's ranked list."""

    model_config = _CAMEL

    rank: int = Field(ge=1)
    stock: IndicatorSnapshot
    result: ScoreResult
    targets: Optional[TradeTargets] = None

    @property
    def symbol(self) -> str:
        return self.stock.symbol

    @property
    def score(self) -> int:
        return self.result.score

    @property
    def signals(self) -> tuple[str, ...]:
        return self.result.signals
