"""
Date and timestamp helpers.

Price history arrives as epoch seconds; the engine works on calendar dates.
All conversions are UTC so a bar never shifts a day depending on the host's
local timezone.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

# Average year length; multi-year lookbacks include leap days.
DAYS_PER_YEAR = 365.25


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone info."""
    return datetime.now(tz=timezone.utc)


def epoch_to_date(timestamp: int | float) -> date:
    """Convert epoch seconds to the UTC calendar date."""
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).date()


def years_before(reference: date, years: float) -> date:
    """Return the date ``years`` average years before ``reference``.

    Args:
        reference: Anchor date (usually today or the last bar's date).
        years:     Lookback length; fractional values are allowed.

    Raises:
        ValueError: If ``years`` is negative.
    """
    if years < 0:
        raise ValueError(f"years must be >= 0, got {years}.")
    return reference - timedelta(days=int(years * DAYS_PER_YEAR))


def parse_iso_date(value: str) -> date:
    """Parse ``YYYY-MM-DD``; raises ``ValueError`` with a readable message."""
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        raise ValueError(f"Expected a date in YYYY-MM-DD format, got '{value}'.") from None
