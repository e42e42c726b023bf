"""Tests for equity_screener.utils.time_utils."""

from __future__ import annotations

from datetime import date, timezone

import pytest

from equity_screener.utils.time_utils import (
    epoch_to_date,
    parse_iso_date,
    utcnow,
    years_before,
)


def test_utcnow_is_aware():
    assert utcnow().tzinfo == timezone.utc


def test_epoch_to_date_is_utc():
    # 2024-01-02 23:30 UTC stays on the 2nd regardless of host timezone
    assert epoch_to_date(1704238200) == date(2024, 1, 2)


def test_years_before_whole_years():
    assert years_before(date(2024, 1, 1), 3) == date(2021, 1, 1)


def test_years_before_fractional():
    assert years_before(date(2024, 1, 1), 0.5) == date(2023, 7, 3)


def test_years_before_negative():
    with pytest.raises(ValueError):
        years_before(date(2024, 1, 1), -1)


def test_parse_iso_date():
    assert parse_iso_date(" 2023-06-30 ") == date(2023, 6, 30)


def test_parse_iso_date_invalid():
    with pytest.raises(ValueError, match="YYYY-MM-DD"):
        parse_iso_date("30/06/2023")
