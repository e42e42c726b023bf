"""
Equity Screener - CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Load chart files (no network access; files are fetched elsewhere).
  4. Run the engine.
  5. Report result to stdout (or JSON / CSV files).

Install and run::

    pip install -e .
    equity-screener --help
    equity-screener validate-config
    equity-screener strategies
    equity-screener scan data/raw --strategy day-trade --top-n 5
    equity-screener score data/raw/AAPL.json --strategy medium_term
    equity-screener crossovers data/raw/AAPL.json --cutoff 2023-01-01
"""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="equity-screener",
    help="Daily-bar technical screener - indicators, breakout alerts, strategy rankings.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from equity_screener.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from equity_screener.utils.logging import configure_logging
    configure_logging(config.logging)


def _load_charts_or_exit(paths: Optional[list[Path]], config):
    """Load chart files from ``paths`` (or ``data.input_dir``), exiting on failure."""
    from equity_screener.ingestion.chart_loader import load_chart_paths

    targets = paths or [Path(config.data.input_dir)]
    try:
        data = load_chart_paths(targets)
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(f"[ERROR] Could not load chart data:\n{exc}", err=True)
        raise typer.Exit(code=1)

    if not data:
        typer.echo(
            f"[ERROR] No chart files found in: {', '.join(str(t) for t in targets)}",
            err=True,
        )
        raise typer.Exit(code=1)
    return data


def _parse_cutoff_or_exit(cutoff: Optional[str]) -> Optional[date]:
    from equity_screener.utils.time_utils import parse_iso_date

    if cutoff is None:
        return None
    try:
        return parse_iso_date(cutoff)
    except ValueError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Strategies:       {', '.join(config.ranking.strategies)}")
    typer.echo(f"  Top N:            {config.ranking.top_n}")
    typer.echo(f"  Listing suffixes: {', '.join(config.ranking.listing_suffixes) or '-'}")
    typer.echo(f"  Min market cap:   {config.ranking.min_market_cap or '-'}")
    typer.echo(f"  Input dir:        {config.data.input_dir}")
    typer.echo(f"  Crossover years:  {config.crossover.lookback_years}")
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config is valid.")


@app.command("strategies")
def strategies_cmd() -> None:
    """List the registered scoring strategies and their rule tables."""
    from equity_screener.reporting.formatters import format_strategy_table
    from equity_screener.scoring.strategies import all_strategies

    for i, strategy in enumerate(all_strategies()):
        if i:
            typer.echo("")
        typer.echo(format_strategy_table(strategy))


@app.command("scan")
def scan(
    paths: Optional[list[Path]] = typer.Argument(
        None,
        help="Chart JSON files or directories (default: data.input_dir).",
    ),
    strategy_names: Optional[list[str]] = typer.Option(
        None,
        "--strategy",
        "-s",
        help="Strategy to rank (repeatable). Default: ranking.strategies.",
    ),
    top_n: Optional[int] = typer.Option(
        None,
        "--top-n",
        "-n",
        help="Picks per strategy (default: ranking.top_n).",
    ),
    output_dir: Optional[str] = typer.Option(
        None,
        "--output-dir",
        help="Write scan JSON plus picks/alerts CSVs to this directory.",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the full scan result as JSON instead of tables.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Scan a universe of chart files and rank it under each strategy."""
    from equity_screener.pipeline.scan import scan_chart_data
    from equity_screener.reporting.export import (
        export_to_csv,
        export_to_json,
        flatten_alerts_for_export,
        flatten_picks_for_export,
    )
    from equity_screener.reporting.formatters import (
        format_alert_summary,
        format_picks_table,
    )
    from equity_screener.scoring.strategies import get_strategy

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    data = _load_charts_or_exit(paths, config)

    try:
        report = scan_chart_data(data, config, strategy_names or None, top_n)
    except (LookupError, ValueError) as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    payload = report.to_dict()

    if output_dir:
        out = Path(output_dir)
        stamp = report.generated_at.strftime("%Y%m%d")
        export_to_json(payload, out / f"scan_{stamp}.json")
        export_to_csv(flatten_picks_for_export(payload), out / f"picks_{stamp}.csv")
        export_to_csv(flatten_alerts_for_export(payload), out / f"alerts_{stamp}.csv")

    if as_json:
        typer.echo(json.dumps(payload, indent=2, default=str))
        return

    typer.echo(
        f"Scanned {report.symbols_scanned} symbols "
        f"({report.duplicates_dropped} duplicate listings, {report.filtered_out} filtered)."
    )
    for name, picks in report.picks.items():
        typer.echo("")
        typer.echo(format_picks_table(get_strategy(name), picks))
    typer.echo("")
    typer.echo(format_alert_summary(report.alerts_by_category, report.severity_counts))
    if output_dir:
        typer.echo("")
        typer.echo(f"[OK] Results written to {output_dir}")


@app.command("score")
def score(
    path: Path = typer.Argument(..., help="Chart JSON file for one symbol."),
    strategy_name: str = typer.Option(
        "medium_term",
        "--strategy",
        "-s",
        help="Strategy to score against.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Show the alerts and the full score breakdown for one symbol."""
    from equity_screener.pipeline.scan import analyze_symbol, build_snapshots
    from equity_screener.reporting.formatters import format_score_breakdown
    from equity_screener.scoring.strategies import get_strategy

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    try:
        strategy = get_strategy(strategy_name)
    except LookupError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    data = _load_charts_or_exit([path], config)
    snapshot = build_snapshots(data[:1], config)[0]
    analysis = analyze_symbol(snapshot, [strategy], config)

    typer.echo(f"{snapshot.symbol}: {len(analysis.alerts)} alert(s)")
    for alert in analysis.alerts:
        typer.echo(f"  [{alert.severity.value}] {alert.alert_type.value}: {alert.alert_description}")
    typer.echo("")
    typer.echo(format_score_breakdown(analysis.scores[strategy.name.value], strategy))


@app.command("crossovers")
def crossovers(
    paths: Optional[list[Path]] = typer.Argument(
        None,
        help="Chart JSON files or directories (default: data.input_dir).",
    ),
    cutoff: Optional[str] = typer.Option(
        None,
        "--cutoff",
        help="Earliest crossover date (YYYY-MM-DD). Default: crossover.lookback_years ago.",
    ),
    latest_only: bool = typer.Option(
        False,
        "--latest-only",
        help="Only report symbols whose crossover completed on the latest bar.",
    ),
    output_dir: Optional[str] = typer.Option(
        None,
        "--output-dir",
        help="Write the crossover history CSV to this directory.",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print results as JSON.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Report golden / death cross history for each symbol."""
    from equity_screener.pipeline.scan import analyze_crossovers, scan_latest_crossovers
    from equity_screener.reporting.export import export_to_csv, flatten_crossovers_for_export
    from equity_screener.reporting.formatters import format_crossover_report

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    cutoff_date = _parse_cutoff_or_exit(cutoff)
    data = _load_charts_or_exit(paths, config)

    if latest_only:
        found = scan_latest_crossovers(data, config)
        if as_json:
            typer.echo(json.dumps(
                [e.model_dump(by_alias=True, mode="json") | {"symbol": s} for s, e in found],
                indent=2,
            ))
            return
        if not found:
            typer.echo("No crossovers on the latest bar.")
        for symbol, event in found:
            typer.echo(
                f"  {symbol:<10} {event.type.value:<12} {event.date}  close {event.close:.2f}"
            )
        return

    reports = analyze_crossovers(data, config, cutoff_date)

    if output_dir:
        stamp = date.today().strftime("%Y%m%d")
        export_to_csv(
            flatten_crossovers_for_export(reports),
            Path(output_dir) / f"crossovers_{stamp}.csv",
        )

    if as_json:
        typer.echo(json.dumps(
            [r.model_dump(by_alias=True, mode="json") for r in reports], indent=2
        ))
        return

    for i, report in enumerate(reports):
        if i:
            typer.echo("")
        typer.echo(format_crossover_report(report))
