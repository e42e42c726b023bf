"""
Daily price history models.

``PriceBar``    - one trading session; only ``close`` is required.
``PriceSeries`` - a symbol's bars in strictly increasing date order.

Both models are frozen (immutable) after construction.  Malformed input
(non-positive prices, negative volume, duplicate or out-of-order dates) is
rejected here with ``pydantic.ValidationError``, so indicator code can assume
a clean series.  Minimum lengths are NOT enforced here: each indicator
returns ``None`` when the series is too short for it.
"""

from __future__ import annotations

import datetime as dt
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator


class PriceBar(BaseModel):
    """A single daily bar.

    Attributes:
        date:   Trading session date (UTC).
        close:  Closing price; must be > 0.
        high:   Session high, or ``None`` if the source omitted it.
        low:    Session low, or ``None``.
        volume: Shares traded, or ``None``.
    """

    model_config = ConfigDict(frozen=True)

    date: dt.date
    close: float
    high: Optional[float] = None
    low: Optional[float] = None
    volume: Optional[int] = None

    @field_validator("close")
    @classmethod
    def validate_close_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"close must be positive, got {v}.")
        return v

    @field_validator("high", "low")
    @classmethod
    def validate_range_positive(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v <= 0:
            raise ValueError(f"high/low must be positive, got {v}.")
        return v

    @field_validator("volume")
    @classmethod
    def validate_volume_non_negative(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError(f"volume must be non-negative, got {v}.")
        return v


class PriceSeries(BaseModel):
    """Ordered daily history for one symbol.

    Calendar gaps (weekends, holidays) are expected; only ordering is checked.
    """

    model_config = ConfigDict(frozen=True)

    symbol: str
    bars: tuple[PriceBar, ...] = ()

    @field_validator("symbol")
    @classmethod
    def validate_symbol(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("symbol must be a non-empty string.")
        return v

    @model_validator(mode="after")
    def validate_dates_increasing(self) -> "PriceSeries":
        for prev, cur in zip(self.bars, self.bars[1:]):
            if cur.date <= prev.date:
                raise ValueError(
                    f"{self.symbol}: bar dates must be strictly increasing; "
                    f"{prev.date} is followed by {cur.date}."
                )
        return self

    def __len__(self) -> int:
        return len(self.bars)

    @property
    def closes(self) -> list[float]:
        return [b.close for b in self.bars]

    @property
    def dates(self) -> list[dt.date]:
        return [b.date for b in self.bars]

    @property
    def volumes(self) -> list[Optional[int]]:
        return [b.volume for b in self.bars]

    @property
    def has_ranges(self) -> bool:
        """True when every bar carries both a high and a low."""
        return bool(self.bars) and all(
            b.high is not None and b.low is not None for b in self.bars
        )

    @property
    def last_bar(self) -> Optional[PriceBar]:
        return self.bars[-1] if self.bars else None
