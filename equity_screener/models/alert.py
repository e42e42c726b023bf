"""
Detected technical events.

``Alert``          - one breakout-classifier finding for a snapshot.
``CrossoverEvent`` - one golden / death cross in a symbol's history.
``CrossoverReport`` - a symbol's crossover history plus its current state.

All are frozen and serialise with camelCase keys (``alertType``,
``currentSMA50``, ...) via ``model_dump(by_alias=True, mode="json")``.
"""

from __future__ import annotations

import datetime as dt
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from equity_screener.taxonomy.signal_taxonomy import (
    AlertCategory,
    AlertType,
    CrossoverState,
    CrossoverType,
    Severity,
)


class Alert(BaseModel):
    """A single technical alert raised for one symbol."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    symbol: str
    alert_type: AlertType
    alert_category: AlertCategory
    alert_description: str
    severity: Severity


class CrossoverEvent(BaseModel):
    """A 50/200-day moving-average cross on a specific session.

    Attributes:
        date:           Session on which the cross completed.
        type:           ``golden_cross`` or ``death_cross``.
        sma50 / sma200: Moving-average values on that session.
        close:          Closing price on that session.
        change_since_previous_pct: Close-to-close percent change since the
            previous reported cross; ``None`` for the first one.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    date: dt.date
    type: CrossoverType
    sma50: float
    sma200: float
    close: float
    change_since_previous_pct: Optional[float] = None


class CrossoverReport(BaseModel):
    """Crossover query result for one symbol."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    symbol: str
    crossovers: tuple[CrossoverEvent, ...] = ()
    current_sma50: Optional[float] = Field(None, alias="currentSMA50")
    current_sma200: Optional[float] = Field(None, alias="currentSMA200")
    current_close: Optional[float] = Field(None, alias="currentClose")
    current_date: Optional[dt.date] = Field(None, alias="currentDate")
    current_state: CrossoverState = Field(CrossoverState.UNKNOWN, alias="currentState")
    total_trading_days: int = Field(0, alias="totalTradingDays")
