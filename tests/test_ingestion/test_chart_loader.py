"""
Tests for equity_screener.ingestion.chart_loader - chart file import.

Covers:
  - build_series(): null closes dropped, same-date bars collapsed,
    optional arrays, length mismatch
  - load_chart_file(): native layout, chart-response layout (quote from
    meta, change percent from previousClose), malformed files
  - iter_chart_paths() / load_chart_paths(): directory expansion
"""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pytest
from pydantic import ValidationError

from equity_screener.ingestion.chart_loader import (
    ChartFormatError,
    build_series,
    iter_chart_paths,
    load_chart_file,
    load_chart_paths,
)

# 2024-01-02 14:30 UTC
_T0 = 1704205800
_DAY = 86400


# ── Helpers ────────────────────────────────────────────────────────────────────

def _write_json(tmp_path: Path, name: str, payload) -> Path:
    p = tmp_path / name
    p.write_text(json.dumps(payload), encoding="utf-8")
    return p


def _native(symbol: str = "AAPL", quote: dict | None = None) -> dict:
    payload = {
        "symbol": symbol,
        "history": {
            "timestamp": [_T0, _T0 + _DAY, _T0 + 2 * _DAY],
            "close": [100.0, 101.0, 102.0],
            "high": [101.0, 102.0, 103.0],
            "low": [99.0, 100.0, 101.0],
            "volume": [1000, 2000, 3000],
        },
    }
    if quote is not None:
        payload["quote"] = quote
    return payload


def _chart_response(meta: dict) -> dict:
    return {
        "chart": {
            "result": [
                {
                    "meta": meta,
                    "timestamp": [_T0, _T0 + _DAY],
                    "indicators": {
                        "quote": [
                            {
                                "close": [50.0, 55.0],
                                "high": [51.0, 56.0],
                                "low": [49.0, 54.0],
                                "volume": [10, 20],
                            }
                        ]
                    },
                }
            ],
            "error": None,
        }
    }


# ── build_series ───────────────────────────────────────────────────────────────

class TestBuildSeries:
    def test_dates_from_epoch_seconds(self):
        series = build_series("X", [_T0, _T0 + _DAY], [1.0, 2.0])
        assert series.dates == [date(2024, 1, 2), date(2024, 1, 3)]
        assert series.has_ranges is False

    def test_null_closes_dropped(self):
        series = build_series("X", [_T0, _T0 + _DAY, _T0 + 2 * _DAY], [1.0, None, 3.0])
        assert series.closes == [1.0, 3.0]

    def test_same_date_keeps_later_bar(self):
        series = build_series("X", [_T0, _T0 + 60, _T0 + _DAY], [1.0, 1.5, 2.0])
        assert series.closes == [1.5, 2.0]

    def test_volumes_become_ints(self):
        series = build_series("X", [_T0], [1.0], volumes=[1234.0])
        assert series.bars[0].volume == 1234

    def test_non_positive_range_treated_as_missing(self):
        series = build_series("X", [_T0], [1.0], highs=[0.0], lows=[0.9])
        assert series.bars[0].high is None

    def test_length_mismatch(self):
        with pytest.raises(ValueError, match="timestamps"):
            build_series("X", [_T0, _T0 + _DAY], [1.0])

    def test_out_of_order_rejected(self):
        with pytest.raises(ValidationError):
            build_series("X", [_T0 + _DAY, _T0], [1.0, 2.0])


# ── load_chart_file ────────────────────────────────────────────────────────────

class TestNativeLayout:
    def test_history_only(self, tmp_path):
        data = load_chart_file(_write_json(tmp_path, "aapl.json", _native()))
        assert data.symbol == "AAPL"
        assert data.quote is None
        assert len(data.series) == 3
        assert data.series.has_ranges is True
        assert data.series.volumes == [1000, 2000, 3000]
        assert data.source.name == "aapl.json"

    def test_with_quote(self, tmp_path):
        quote = {"regularMarketPrice": 103.0, "fiftyDayAverage": 98.0}
        data = load_chart_file(_write_json(tmp_path, "aapl.json", _native(quote=quote)))
        assert data.quote.symbol == "AAPL"
        assert data.quote.regular_market_price == 103.0
        assert data.quote.fifty_day_average == 98.0

    def test_missing_symbol(self, tmp_path):
        payload = _native()
        del payload["symbol"]
        with pytest.raises(ChartFormatError, match="symbol"):
            load_chart_file(_write_json(tmp_path, "x.json", payload))


class TestChartResponseLayout:
    def test_quote_from_meta(self, tmp_path):
        meta = {
            "symbol": "TCS.NS",
            "regularMarketPrice": 55.0,
            "previousClose": 50.0,
            "fiftyTwoWeekHigh": 60.0,
        }
        data = load_chart_file(_write_json(tmp_path, "tcs.json", _chart_response(meta)))
        assert data.symbol == "TCS.NS"
        assert data.quote.regular_market_price == 55.0
        assert data.quote.regular_market_change_percent == pytest.approx(10.0)
        assert data.quote.fifty_two_week_high == 60.0
        assert data.series.closes == [50.0, 55.0]

    def test_no_previous_close_leaves_change_unset(self, tmp_path):
        meta = {"symbol": "TCS.NS", "regularMarketPrice": 55.0}
        data = load_chart_file(_write_json(tmp_path, "tcs.json", _chart_response(meta)))
        assert data.quote.regular_market_change_percent is None

    def test_empty_result(self, tmp_path):
        path = _write_json(tmp_path, "x.json", {"chart": {"result": [], "error": None}})
        with pytest.raises(ChartFormatError, match="no result"):
            load_chart_file(path)


class TestMalformedFiles:
    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_chart_file(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        p = tmp_path / "bad.json"
        p.write_text("{not json", encoding="utf-8")
        with pytest.raises(ChartFormatError) as exc_info:
            load_chart_file(p)
        assert exc_info.value.path == p

    def test_unknown_layout(self, tmp_path):
        with pytest.raises(ChartFormatError, match="expected"):
            load_chart_file(_write_json(tmp_path, "x.json", {"foo": 1}))

    def test_top_level_list(self, tmp_path):
        with pytest.raises(ChartFormatError):
            load_chart_file(_write_json(tmp_path, "x.json", [1, 2]))

    def test_format_error_is_value_error(self, tmp_path):
        with pytest.raises(ValueError):
            load_chart_file(_write_json(tmp_path, "x.json", {"foo": 1}))


# ── Paths ──────────────────────────────────────────────────────────────────────

class TestChartPaths:
    def test_directory_expanded_sorted(self, tmp_path):
        _write_json(tmp_path, "msft.json", _native("MSFT"))
        _write_json(tmp_path, "aapl.json", _native("AAPL"))
        (tmp_path / "notes.txt").write_text("ignore me", encoding="utf-8")
        assert [p.name for p in iter_chart_paths([tmp_path])] == ["aapl.json", "msft.json"]

    def test_load_chart_paths(self, tmp_path):
        _write_json(tmp_path, "msft.json", _native("MSFT"))
        _write_json(tmp_path, "aapl.json", _native("AAPL"))
        loaded = load_chart_paths([tmp_path])
        assert [d.symbol for d in loaded] == ["AAPL", "MSFT"]

    def test_empty_directory(self, tmp_path):
        assert load_chart_paths([tmp_path]) == []
