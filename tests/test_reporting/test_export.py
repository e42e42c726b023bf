"""Tests for equity_screener.reporting.export."""

from __future__ import annotations

import csv
import json
from datetime import date
from pathlib import Path

from conftest import make_snapshot
from equity_screener.models.alert import CrossoverEvent, CrossoverReport
from equity_screener.pipeline.scan import run_scan
from equity_screener.reporting.export import (
    export_to_csv,
    export_to_json,
    flatten_alerts_for_export,
    flatten_crossovers_for_export,
    flatten_picks_for_export,
)
from equity_screener.taxonomy.signal_taxonomy import CrossoverState, CrossoverType


def _scan_payload() -> dict:
    snaps = [
        make_snapshot(
            "AAA", short_name="Triple A", price=50.0, change_percent=6.0,
            relative_volume=3.0, atr=1.0,
        ),
        make_snapshot("BBB", price=20.0, change_percent=-2.0, rsi=25.0),
    ]
    return run_scan(snaps, strategies=["day_trade"]).to_dict()


# ── export_to_csv ─────────────────────────────────────────────────────────────


def test_export_to_csv_basic(tmp_path: Path) -> None:
    """Writes a valid CSV with correct headers and values."""
    records = [
        {"symbol": "AAPL", "score": 19, "strategy": "day_trade"},
        {"symbol": "MSFT", "score": 12, "strategy": "momentum"},
    ]
    out = tmp_path / "test.csv"
    result = export_to_csv(records, out)

    assert result == out
    with out.open(encoding="utf-8") as f:
        reader = list(csv.DictReader(f))
    assert len(reader) == 2
    assert reader[0]["symbol"] == "AAPL"
    assert reader[1]["strategy"] == "momentum"


def test_export_to_csv_custom_fieldnames(tmp_path: Path) -> None:
    """Custom fieldnames control column order; extra keys are ignored."""
    out = tmp_path / "cols.csv"
    export_to_csv([{"a": 1, "b": 2, "c": 3}], out, fieldnames=["c", "a"])

    with out.open(encoding="utf-8") as f:
        header = f.readline().strip()
    assert header == "c,a"


def test_export_to_csv_empty_records(tmp_path: Path) -> None:
    """Empty records list writes an empty file without raising."""
    out = tmp_path / "nested" / "empty.csv"
    export_to_csv([], out)
    assert out.read_text(encoding="utf-8") == ""


# ── export_to_json ────────────────────────────────────────────────────────────


def test_export_to_json_creates_parent_dirs(tmp_path: Path) -> None:
    out = tmp_path / "a" / "b" / "scan.json"
    export_to_json({"symbolsScanned": 2}, out)
    assert json.loads(out.read_text(encoding="utf-8")) == {"symbolsScanned": 2}


def test_export_to_json_non_serialisable_uses_default_str(tmp_path: Path) -> None:
    out = tmp_path / "date.json"
    export_to_json({"date": date(2025, 1, 15)}, out)
    assert json.loads(out.read_text(encoding="utf-8"))["date"] == "2025-01-15"


# ── flatten_picks_for_export ──────────────────────────────────────────────────


def test_flatten_picks_one_row_per_pick() -> None:
    rows = flatten_picks_for_export(_scan_payload())
    assert len(rows) == 1
    row = rows[0]
    assert row["strategy"] == "day_trade"
    assert row["rank"] == 1
    assert row["symbol"] == "AAA"
    assert row["name"] == "Triple A"
    assert row["score"] == 13
    assert row["signals"] == "Big Mover; Massive Volume"
    assert row["buy_target"] == 49.7
    assert row["stop_loss"] == 49.2


def test_flatten_picks_missing_values_blank() -> None:
    row = flatten_picks_for_export(_scan_payload())[0]
    assert row["rsi"] == ""
    assert row["pct_from_sma50"] == ""


def test_flatten_picks_empty_payload() -> None:
    assert flatten_picks_for_export({}) == []


# ── flatten_alerts_for_export ─────────────────────────────────────────────────


def test_flatten_alerts() -> None:
    rows = flatten_alerts_for_export(_scan_payload())
    by_type = {r["alert_type"]: r for r in rows}
    assert set(by_type) == {"high_volume", "rsi_oversold"}
    assert by_type["rsi_oversold"]["symbol"] == "BBB"
    assert by_type["rsi_oversold"]["category"] == "rsi_signals"
    assert by_type["high_volume"]["severity"] == "bullish"


# ── flatten_crossovers_for_export ─────────────────────────────────────────────


def test_flatten_crossovers() -> None:
    report = CrossoverReport(
        symbol="AAPL",
        crossovers=(
            CrossoverEvent(
                date=date(2023, 5, 1), type=CrossoverType.GOLDEN_CROSS,
                sma50=150.0, sma200=149.5, close=160.0,
            ),
            CrossoverEvent(
                date=date(2024, 2, 1), type=CrossoverType.DEATH_CROSS,
                sma50=170.0, sma200=170.5, close=168.0, change_since_previous_pct=5.0,
            ),
        ),
        current_state=CrossoverState.DEATH,
    )
    rows = flatten_crossovers_for_export([report])
    assert [r["type"] for r in rows] == ["golden_cross", "death_cross"]
    assert rows[0]["date"] == "2023-05-01"
    assert rows[0]["change_since_prev"] == ""
    assert rows[1]["change_since_prev"] == 5.0
    assert all(r["current_state"] == "death" for r in rows)
