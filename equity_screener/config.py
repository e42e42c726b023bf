"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      - committed static defaults
  2. ``config/local.toml``        - optional local overrides (gitignored)
  3. ``.env``                     - local overrides (gitignored)
  4. Environment variables        - ``EQUITY_SCREENER_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

Every section has working defaults, so ``AppConfig()`` is usable on its own
(the engine functions accept the relevant section as an optional argument).
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from equity_screener.taxonomy.signal_taxonomy import parse_strategy_name

# ── Sub-config models ─────────────────────────────────────────────────────────


class IndicatorConfig(BaseModel):
    """Indicator periods and lookback windows (in trading days)."""

    model_config = ConfigDict(frozen=True)

    sma_fast: int = 50
    sma_slow: int = 200
    rsi_period: int = 14
    macd_fast: int = 12
    macd_slow: int = 26
    macd_signal: int = 9
    atr_period: int = 14
    week52_window: int = 252
    volume_average_window: int = 63   # ~3 months of sessions
    streak_window: int = 5

    @field_validator(
        "sma_fast", "sma_slow", "rsi_period", "macd_fast", "macd_slow",
        "macd_signal", "atr_period", "week52_window", "volume_average_window",
        "streak_window",
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"Indicator periods must be >= 1, got {v}.")
        return v

    @model_validator(mode="after")
    def validate_fast_below_slow(self) -> "IndicatorConfig":
        if self.macd_fast >= self.macd_slow:
            raise ValueError(
                f"macd_fast ({self.macd_fast}) must be < macd_slow ({self.macd_slow})."
            )
        if self.sma_fast >= self.sma_slow:
            raise ValueError(
                f"sma_fast ({self.sma_fast}) must be < sma_slow ({self.sma_slow})."
            )
        return self


class AlertConfig(BaseModel):
    """Breakout classifier thresholds.  Percentages are in percent units."""

    model_config = ConfigDict(frozen=True)

    sma50_proximity_pct: float = 5.0
    sma200_proximity_pct: float = 8.0
    cross_proximity_pct: float = 3.0
    near_high_pct: float = 5.0       # within 5% below the 52-week high
    near_low_pct: float = 10.0       # within 10% above the 52-week low
    rsi_oversold: float = 30.0
    rsi_approaching_oversold: float = 35.0
    rsi_overbought: float = 70.0
    rsi_approaching_overbought: float = 65.0
    volume_surge_ratio: float = 1.5
    significant_volume_ratio: float = 2.0

    @field_validator(
        "sma50_proximity_pct", "sma200_proximity_pct", "cross_proximity_pct",
        "near_high_pct", "near_low_pct", "volume_surge_ratio",
        "significant_volume_ratio",
    )
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"Alert thresholds must be non-negative, got {v}.")
        return v

    @model_validator(mode="after")
    def validate_rsi_bands(self) -> "AlertConfig":
        bands = (
            self.rsi_oversold,
            self.rsi_approaching_oversold,
            self.rsi_approaching_overbought,
            self.rsi_overbought,
        )
        if list(bands) != sorted(bands) or not 0.0 <= bands[0] <= bands[-1] <= 100.0:
            raise ValueError(
                "RSI bands must satisfy 0 <= oversold <= approaching_oversold "
                f"<= approaching_overbought <= overbought <= 100, got {bands}."
            )
        return self


class CrossoverConfig(BaseModel):
    """Golden / death cross history settings."""

    model_config = ConfigDict(frozen=True)

    lookback_years: float = 3.0
    min_history_bars: int = 201      # sma_slow + 1 for a last-bar crossover check

    @field_validator("lookback_years")
    @classmethod
    def validate_lookback(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"lookback_years must be > 0, got {v}.")
        return v


class RankingConfig(BaseModel):
    """Strategy selection, listing de-duplication, and universe filters."""

    model_config = ConfigDict(frozen=True)

    top_n: int = 10
    strategies: list[str] = ["medium_term", "day_trade", "momentum"]
    listing_suffixes: list[str] = [".NS", ".BO"]
    exclude_symbols: list[str] = []
    min_market_cap: Optional[float] = None

    @field_validator("top_n")
    @classmethod
    def validate_top_n(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"top_n must be >= 1, got {v}.")
        return v

    @field_validator("strategies")
    @classmethod
    def validate_strategies(cls, v: list[str]) -> list[str]:
        resolved: list[str] = []
        for name in v:
            strategy = parse_strategy_name(name)
            if strategy is None:
                raise ValueError(f"Unknown strategy '{name}' in ranking.strategies.")
            if strategy.value not in resolved:
                resolved.append(strategy.value)
        if not resolved:
            raise ValueError("ranking.strategies must name at least one strategy.")
        return resolved


class DataConfig(BaseModel):
    """Filesystem paths for input chart files and exported reports."""

    model_config = ConfigDict(frozen=True)

    input_dir: str = "data/raw"
    output_dir: str = "data/outputs"


class LoggingConfig(BaseModel):
    """Logging output settings.  An empty ``log_file`` disables file logging."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = ""
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration.

    Constructed by ``load_config()`` which merges TOML + .env + environment.
    """

    model_config = ConfigDict(frozen=True)

    indicators: IndicatorConfig = IndicatorConfig()
    alerts: AlertConfig = AlertConfig()
    crossover: CrossoverConfig = CrossoverConfig()
    ranking: RankingConfig = RankingConfig()
    data: DataConfig = DataConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the config file does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    load_dotenv(dotenv_path=root / ".env", override=False)

    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Create config/default.toml or pass --config PATH."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists() and local_config_path != config_path:
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    raw = _apply_env_overrides(raw)

    return _build_app_config(raw)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply EQUITY_SCREENER_* env vars to the raw config dict.

    Supported overrides:
      EQUITY_SCREENER_LOG_LEVEL  → raw["logging"]["level"]
      EQUITY_SCREENER_DEBUG      → raw["debug"]
      EQUITY_SCREENER_TOP_N      → raw["ranking"]["top_n"]
      EQUITY_SCREENER_INPUT_DIR  → raw["data"]["input_dir"]
    """
    if log_level := os.environ.get("EQUITY_SCREENER_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if debug := os.environ.get("EQUITY_SCREENER_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    if top_n := os.environ.get("EQUITY_SCREENER_TOP_N"):
        raw.setdefault("ranking", {})["top_n"] = top_n

    if input_dir := os.environ.get("EQUITY_SCREENER_INPUT_DIR"):
        raw.setdefault("data", {})["input_dir"] = input_dir

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    return AppConfig(
        indicators=IndicatorConfig(**raw.get("indicators", {})),
        alerts=AlertConfig(**raw.get("alerts", {})),
        crossover=CrossoverConfig(**raw.get("crossover", {})),
        ranking=RankingConfig(**raw.get("ranking", {})),
        data=DataConfig(**raw.get("data", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", False),
    )
