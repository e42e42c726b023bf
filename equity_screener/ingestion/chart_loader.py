"""
Load already-fetched chart JSON files into validated quotes and price series.

No network I/O happens here; files are produced by whatever market-data
collaborator the deployment uses.  Two layouts are accepted.

Native layout::

    {
      "symbol": "AAPL",
      "quote":   {"regularMarketPrice": 189.5, "fiftyDayAverage": 182.1, ...},
      "history": {
        "timestamp": [1704205800, ...],          # epoch seconds
        "close":     [185.6, null, ...],
        "high": [...], "low": [...], "volume": [...]   # optional
      }
    }

Chart-response layout (as returned by the public chart endpoint)::

    {"chart": {"result": [{
        "meta": {"symbol": "AAPL", "regularMarketPrice": 189.5, ...},
        "timestamp": [...],
        "indicators": {"quote": [{"close": [...], "high": [...], ...}]}
    }]}}

For the chart-response layout the quote is built from ``meta``; change
percent uses ``previousClose`` when present, otherwise it is derived from
the last two closes later on.

Bars whose close is ``null`` are dropped (holidays, halted sessions) and the
count is logged at DEBUG.  When two timestamps fall on the same UTC date the
later one wins.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Optional

from equity_screener.models.price import PriceBar, PriceSeries
from equity_screener.models.quote import Quote
from equity_screener.models.snapshot import percent_from
from equity_screener.utils.time_utils import epoch_to_date

logger = logging.getLogger(__name__)

_META_QUOTE_FIELDS = (
    "shortName",
    "regularMarketPrice",
    "regularMarketVolume",
    "fiftyTwoWeekHigh",
    "fiftyTwoWeekLow",
    "fiftyDayAverage",
    "twoHundredDayAverage",
    "averageDailyVolume3Month",
    "averageDailyVolume10Day",
    "marketCap",
)


class ChartFormatError(ValueError):
    """Raised when a file is not in a recognised chart layout."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"{path}: {reason}")


@dataclass(frozen=True)
class ChartData:
    """One symbol's loaded inputs.

    Attributes:
        symbol: Listing symbol.
        quote:  Latest quote, or ``None`` if the file carried none.
        series: Daily price history (may be empty).
        source: File the data came from.
    """

    symbol: str
    quote: Optional[Quote]
    series: PriceSeries
    source: Optional[Path] = None


# ── Parsing ───────────────────────────────────────────────────────────────────


def _positive_or_none(value: Any) -> Optional[float]:
    if value is None:
        return None
    value = float(value)
    return value if value > 0 else None


def _at(values: Optional[list], i: int) -> Any:
    if values is None or i >= len(values):
        return None
    return values[i]


def build_series(
    symbol: str,
    timestamps: list[int | float],
    closes: list[Optional[float]],
    highs: Optional[list[Optional[float]]] = None,
    lows: Optional[list[Optional[float]]] = None,
    volumes: Optional[list[Optional[float]]] = None,
) -> PriceSeries:
    """Build a ``PriceSeries`` from parallel chart arrays.

    Raises:
        ValueError: If ``timestamps`` and ``closes`` differ in length.
        pydantic.ValidationError: If the resulting bars are malformed
            (e.g. out-of-order timestamps, non-positive closes).
    """
    if len(timestamps) != len(closes):
        raise ValueError(
            f"{symbol}: {len(timestamps)} timestamps but {len(closes)} closes."
        )

    by_date: dict = {}
    dropped = 0
    for i, (ts, close) in enumerate(zip(timestamps, closes)):
        if ts is None or close is None:
            dropped += 1
            continue
        volume = _at(volumes, i)
        bar = PriceBar(
            date=epoch_to_date(ts),
            close=close,
            high=_positive_or_none(_at(highs, i)),
            low=_positive_or_none(_at(lows, i)),
            volume=int(volume) if volume is not None else None,
        )
        by_date.pop(bar.date, None)
        by_date[bar.date] = bar

    if dropped:
        logger.debug("%s: dropped %d bars with null close", symbol, dropped)
    return PriceSeries(symbol=symbol, bars=tuple(by_date.values()))


def _parse_native(path: Path, raw: dict[str, Any]) -> ChartData:
    quote_raw = dict(raw.get("quote") or {})
    symbol = raw.get("symbol") or quote_raw.get("symbol")
    if not symbol:
        raise ChartFormatError(path, "missing 'symbol'.")

    history = raw.get("history") or {}
    series = build_series(
        symbol,
        history.get("timestamp") or [],
        history.get("close") or [],
        history.get("high"),
        history.get("low"),
        history.get("volume"),
    )

    quote = None
    if quote_raw:
        quote_raw.setdefault("symbol", symbol)
        quote = Quote.model_validate(quote_raw)
    return ChartData(symbol=symbol, quote=quote, series=series, source=path)


def _parse_chart_response(path: Path, raw: dict[str, Any]) -> ChartData:
    results = (raw.get("chart") or {}).get("result") or []
    if not results:
        raise ChartFormatError(path, "chart response has no result.")
    result = results[0]
    meta = result.get("meta") or {}
    symbol = meta.get("symbol")
    if not symbol:
        raise ChartFormatError(path, "chart meta has no symbol.")

    quotes = (result.get("indicators") or {}).get("quote") or [{}]
    bars = quotes[0]
    series = build_series(
        symbol,
        result.get("timestamp") or [],
        bars.get("close") or [],
        bars.get("high"),
        bars.get("low"),
        bars.get("volume"),
    )

    quote_raw: dict[str, Any] = {"symbol": symbol}
    quote_raw.update({k: meta[k] for k in _META_QUOTE_FIELDS if meta.get(k) is not None})
    change = percent_from(meta.get("regularMarketPrice"), meta.get("previousClose"))
    if change is not None:
        quote_raw["regularMarketChangePercent"] = change
    return ChartData(
        symbol=symbol,
        quote=Quote.model_validate(quote_raw),
        series=series,
        source=path,
    )


# ── Public API ────────────────────────────────────────────────────────────────


def load_chart_file(path: Path) -> ChartData:
    """Load one chart JSON file.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ChartFormatError:  If the JSON is invalid or in neither layout.
        pydantic.ValidationError: If quote or bar values are malformed.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Chart file not found: {path}")

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ChartFormatError(path, f"invalid JSON ({exc.msg}, line {exc.lineno}).") from exc

    if not isinstance(raw, dict):
        raise ChartFormatError(path, "expected a JSON object at the top level.")
    if "chart" in raw:
        data = _parse_chart_response(path, raw)
    elif "history" in raw or "quote" in raw:
        data = _parse_native(path, raw)
    else:
        raise ChartFormatError(path, "expected a 'chart', 'history' or 'quote' key.")

    logger.debug("Loaded %s: %d bars from %s", data.symbol, len(data.series), path.name)
    return data


def iter_chart_paths(paths: Iterable[Path]) -> list[Path]:
    """Expand directories to their ``*.json`` files (sorted); keep files as-is."""
    expanded: list[Path] = []
    for p in paths:
        p = Path(p)
        if p.is_dir():
            expanded.extend(sorted(p.glob("*.json")))
        else:
            expanded.append(p)
    return expanded


def load_chart_paths(paths: Iterable[Path]) -> list[ChartData]:
    """Load every chart file under ``paths`` (files or directories)."""
    files = iter_chart_paths(paths)
    loaded = [load_chart_file(f) for f in files]
    logger.info("Loaded %d chart files", len(loaded))
    return loaded
