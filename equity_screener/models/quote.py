"""
Point-in-time quote as supplied by the market-data collaborator.

Field names follow the upstream camelCase payload through aliases
(``regularMarketPrice``, ``fiftyDayAverage``, ...); Python code uses the
snake_case names.  Every field except ``symbol`` is optional: a missing value
stays ``None`` all the way through the engine and is never read as zero.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class Quote(BaseModel):
    """Latest market quote for one listing."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    symbol: str
    short_name: Optional[str] = None
    regular_market_price: Optional[float] = None
    regular_market_change_percent: Optional[float] = None
    regular_market_volume: Optional[int] = None
    average_daily_volume_3_month: Optional[float] = Field(
        None, alias="averageDailyVolume3Month"
    )
    average_daily_volume_10_day: Optional[float] = Field(
        None, alias="averageDailyVolume10Day"
    )
    fifty_day_average: Optional[float] = None
    two_hundred_day_average: Optional[float] = None
    fifty_two_week_high: Optional[float] = None
    fifty_two_week_low: Optional[float] = None
    market_cap: Optional[float] = None

    @field_validator("symbol")
    @classmethod
    def validate_symbol(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("symbol must be a non-empty string.")
        return v

    @field_validator(
        "regular_market_price",
        "fifty_day_average",
        "two_hundred_day_average",
        "fifty_two_week_high",
        "fifty_two_week_low",
    )
    @classmethod
    def validate_price_positive(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v <= 0:
            raise ValueError(f"Price fields must be positive, got {v}.")
        return v

    @field_validator(
        "regular_market_volume",
        "average_daily_volume_3_month",
        "average_daily_volume_10_day",
        "market_cap",
    )
    @classmethod
    def validate_non_negative(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v < 0:
            raise ValueError(f"Volume and market cap must be non-negative, got {v}.")
        return v

    @property
    def average_volume(self) -> Optional[float]:
        """3-month average volume, falling back to the 10-day average."""
        if self.average_daily_volume_3_month:
            return self.average_daily_volume_3_month
        if self.average_daily_volume_10_day:
            return self.average_daily_volume_10_day
        return None
