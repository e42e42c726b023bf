"""
Export helpers for spreadsheets and downstream tools.

All functions write to disk and return the written ``Path``.
They accept generic ``list[dict]`` data to stay decoupled from specific
report shapes; the ``flatten_*`` adapters turn scan and crossover results
into one flat row per pick / alert / event so CSVs load directly in Excel
or pandas without unpivoting.
"""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path

from equity_screener.models.alert import CrossoverReport

logger = logging.getLogger(__name__)


def export_to_csv(
    records: list[dict],
    path: Path,
    fieldnames: list[str] | None = None,
) -> Path:
    """Write ``records`` to a UTF-8 CSV file.

    Args:
        records:    List of row dicts.
        path:       Destination file path (parent dirs created if missing).
        fieldnames: Column order.  If None, uses the keys of the first record.

    Returns:
        ``path`` as written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    if not records:
        path.write_text("", encoding="utf-8")
        return path
    cols = fieldnames or list(records[0].keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=cols, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(records)
    logger.info("Wrote %d rows to %s", len(records), path)
    return path


def export_to_json(
    data: dict | list,
    path: Path,
) -> Path:
    """Write ``data`` to a pretty-printed JSON file.

    Args:
        data: Dict or list to serialise.
        path: Destination file path (parent dirs created if missing).

    Returns:
        ``path`` as written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, default=str), encoding="utf-8")
    logger.info("Wrote %s", path)
    return path


def flatten_picks_for_export(scan_json: dict) -> list[dict]:
    """Flatten a ``ScanReport.to_dict()`` payload into one row per pick.

    Each row contains:
    - ``generated_at``, ``strategy``, ``rank``, ``symbol``, ``name``
    - ``price``, ``change_pct``, ``relative_volume``, ``rsi``
    - ``pct_from_sma50``, ``pct_from_sma200``, ``pct_from_high``
    - ``score``, ``normalized_score``, ``signals`` (``"; "``-joined)
    - ``buy_target``, ``sell_target``, ``stop_loss`` (day-trade only)
    """
    rows: list[dict] = []
    generated_at = scan_json.get("generatedAt", "")

    for strategy, picks in scan_json.get("strategies", {}).items():
        for pick in picks:
            stock   = pick.get("stock", {})
            targets = pick.get("targets") or {}
            rows.append(
                {
                    "generated_at":     generated_at,
                    "strategy":         strategy,
                    "rank":             pick.get("rank", ""),
                    "symbol":           stock.get("symbol", ""),
                    "name":             stock.get("shortName") or "",
                    "price":            _round(stock.get("price")),
                    "change_pct":       _round(stock.get("changePercent")),
                    "relative_volume":  _round(stock.get("relativeVolume")),
                    "rsi":              _round(stock.get("rsi"), 1),
                    "pct_from_sma50":   _round(stock.get("percentFromSma50")),
                    "pct_from_sma200":  _round(stock.get("percentFromSma200")),
                    "pct_from_high":    _round(stock.get("percentFromHigh")),
                    "score":            pick.get("score", ""),
                    "normalized_score": pick.get("normalizedScore", ""),
                    "signals":          "; ".join(pick.get("signals", [])),
                    "buy_target":       targets.get("buyTarget", ""),
                    "sell_target":      targets.get("sellTarget", ""),
                    "stop_loss":        targets.get("stopLoss", ""),
                }
            )
    return rows


def flatten_alerts_for_export(scan_json: dict) -> list[dict]:
    """One row per alert: ``category``, ``symbol``, ``alert_type``,
    ``severity``, ``description``."""
    rows: list[dict] = []
    for category, alerts in scan_json.get("alerts", {}).items():
        for alert in alerts:
            rows.append(
                {
                    "category":    category,
                    "symbol":      alert.get("symbol", ""),
                    "alert_type":  alert.get("alertType", ""),
                    "severity":    alert.get("severity", ""),
                    "description": alert.get("alertDescription", ""),
                }
            )
    return rows


def flatten_crossovers_for_export(reports: list[CrossoverReport]) -> list[dict]:
    """One row per crossover event, with the symbol's current state repeated."""
    rows: list[dict] = []
    for report in reports:
        for event in report.crossovers:
            rows.append(
                {
                    "symbol":            report.symbol,
                    "date":              event.date.isoformat(),
                    "type":              event.type.value,
                    "sma50":             event.sma50,
                    "sma200":            event.sma200,
                    "close":             event.close,
                    "change_since_prev": _round(event.change_since_previous_pct),
                    "current_state":     report.current_state.value,
                }
            )
    return rows


def _round(value: float | None, ndigits: int = 2) -> float | str:
    return round(value, ndigits) if value is not None else ""
