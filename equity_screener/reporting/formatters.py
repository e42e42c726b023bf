"""
ASCII terminal formatters for CLI commands.

All formatters accept result objects and return plain multi-line strings
suitable for ``typer.echo()``.  No third-party dependencies (no ``rich``).

Absent values print as ``-`` so a missing reading is never mistaken for zero.
"""

from __future__ import annotations

from typing import Optional

from equity_screener.models.alert import Alert, CrossoverReport
from equity_screener.models.score import RankedPick, ScoreResult
from equity_screener.scoring.rules import Strategy


def _num(value: Optional[float], fmt: str = ".2f", suffix: str = "") -> str:
    return f"{value:{fmt}}{suffix}" if value is not None else "-"


# ── Ranked picks ──────────────────────────────────────────────────────────────


def format_picks_table(strategy: Strategy, picks: list[RankedPick]) -> str:
    """Return a ranked table for one strategy."""
    lines = [f"{strategy.title} ({len(picks)} picks, max score {strategy.max_score})"]
    if not picks:
        lines.append("  (no qualifying stocks)")
        return "\n".join(lines)

    lines.append(
        f"  {'#':>3}  {'Symbol':<10} {'Price':>10} {'Chg%':>7} {'RelVol':>6} "
        f"{'RSI':>5} {'Score':>5} {'Norm':>4}  Signals"
    )
    for p in picks:
        s = p.stock
        lines.append(
            f"  {p.rank:>3}  {s.symbol:<10} {_num(s.price):>10} "
            f"{_num(s.change_percent, '+.2f'):>7} {_num(s.relative_volume, '.1f', 'x'):>6} "
            f"{_num(s.rsi, '.0f'):>5} {p.result.score:>5} {p.result.normalized_score:>4}  "
            f"{', '.join(p.result.signals)}"
        )
        if p.targets is not None:
            est = " (est. ATR)" if p.targets.atr_estimated else ""
            lines.append(
                f"       buy {p.targets.buy_target:.2f} / sell {p.targets.sell_target:.2f}"
                f" / stop {p.targets.stop_loss:.2f}{est}"
            )
    return "\n".join(lines)


def format_score_breakdown(result: ScoreResult, strategy: Strategy) -> str:
    """Return every fired rule with its observed value and points."""
    verdict = "QUALIFIES" if result.qualifies else "does not qualify"
    lines = [
        f"{result.symbol} - {strategy.title}: score {result.score} "
        f"({result.normalized_score}/100), {verdict}",
    ]
    for entry in result.breakdown:
        observed = entry.observed_value
        if isinstance(observed, float):
            observed = f"{observed:.2f}"
        lines.append(
            f"  {entry.points_delta:>+4}  {entry.label:<20} {observed if observed is not None else ''}"
        )
    lines.append(
        f"  Gate: score >= {strategy.min_score}, "
        f"valid signals {result.valid_signal_count} >= {strategy.min_valid_signals}, "
        f"{strategy.structural_label}"
    )
    return "\n".join(lines)


# ── Alerts ────────────────────────────────────────────────────────────────────


def format_alert_summary(
    alerts_by_category: dict[str, list[Alert]],
    severity_counts: dict[str, int],
    max_per_category: int = 5,
) -> str:
    """Return grouped alert counts with the first few alerts of each category."""
    counts = ", ".join(f"{k} {v}" for k, v in severity_counts.items())
    lines = [f"Alerts ({counts})"]
    for category, alerts in alerts_by_category.items():
        lines.append(f"  [{category}] {len(alerts)}")
        for alert in alerts[:max_per_category]:
            lines.append(f"    {alert.symbol:<10} {alert.severity.value:<8} {alert.alert_description}")
        if len(alerts) > max_per_category:
            lines.append(f"    ... {len(alerts) - max_per_category} more")
    return "\n".join(lines)


# ── Crossovers ────────────────────────────────────────────────────────────────


def format_crossover_report(report: CrossoverReport) -> str:
    """Return a symbol's crossover history and current MA state."""
    lines = [
        f"{report.symbol}: {report.current_state.value.upper()} "
        f"(SMA50 {_num(report.current_sma50)}, SMA200 {_num(report.current_sma200)}, "
        f"close {_num(report.current_close)} on {report.current_date or '-'}, "
        f"{report.total_trading_days} trading days)",
    ]
    if not report.crossovers:
        lines.append("  (no crossovers in range)")
    for event in report.crossovers:
        change = _num(event.change_since_previous_pct, "+.1f", "%")
        lines.append(
            f"  {event.date}  {event.type.value:<12} close {event.close:>10.2f}  "
            f"SMA50 {event.sma50:>10.2f}  SMA200 {event.sma200:>10.2f}  since prev {change}"
        )
    return "\n".join(lines)


# ── Strategies ────────────────────────────────────────────────────────────────


def format_strategy_table(strategy: Strategy) -> str:
    """Return a strategy's rule table and qualification gate."""
    lines = [
        f"{strategy.name.value}: {strategy.title} - {strategy.description}",
        f"  Qualifies: score >= {strategy.min_score}, "
        f">= {strategy.min_valid_signals} valid signals, {strategy.structural_label}",
        f"  Max score: {strategy.max_score}",
    ]
    for group in strategy.groups:
        for i, rule in enumerate(group.rules):
            prefix = "    else " if i else "  "
            note = "" if rule.emits_signal else " (no signal)"
            lines.append(f"{prefix}{rule.points:>+3}  {rule.label}{note}")
    lines.append(f"  Not counted as valid: {', '.join(sorted(strategy.deny_list))}")
    return "\n".join(lines)
