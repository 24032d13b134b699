"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local secrets and endpoint URLs (gitignored)
  4. Environment variables        — ``LUREIQ_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

The CLI and ``LureAdvisor`` receive an ``AppConfig`` instance; modules never
read environment variables on their own.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

# ── Sub-config models ─────────────────────────────────────────────────────────


class StoreConfig(BaseModel):
    """SQLite key-value store settings."""

    model_config = ConfigDict(frozen=True)

    db_path: str = "data/db/lureiq.db"
    wal_mode: bool = True
    busy_timeout_ms: int = 5000


class WeatherConfig(BaseModel):
    """Open-Meteo forecast endpoint."""

    model_config = ConfigDict(frozen=True)

    base_url: str = "https://api.open-meteo.com/v1/forecast"
    timeout_s: float = 15.0


class GeocodingConfig(BaseModel):
    """ZIP code geocoding endpoint."""

    model_config = ConfigDict(frozen=True)

    base_url: str = "https://api.zippopotam.us/us"
    timeout_s: float = 10.0


class WeightsConfig(BaseModel):
    """Remote base-weight override document.

    An empty ``override_url`` means the built-in catalog weights are used as-is.
    """

    model_config = ConfigDict(frozen=True)

    override_url: str = ""
    timeout_s: float = 10.0


class FeedbackConfig(BaseModel):
    """Catch-feedback prompt timing and collector endpoint."""

    model_config = ConfigDict(frozen=True)

    collector_url: str = ""
    timeout_s: float = 15.0
    prompt_delay_minutes: int = 0       # minutes after scheduling before the prompt is due
    auto_prompt_delay_s: float = 6.0    # wait after a result is shown before scheduling

    @field_validator("auto_prompt_delay_s")
    @classmethod
    def validate_auto_prompt_delay(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"auto_prompt_delay_s must be >= 0, got {v}.")
        return v


class SessionConfig(BaseModel):
    """Recommendation session pacing."""

    model_config = ConfigDict(frozen=True)

    scoring_delay_s: float = 3.0
    jitter: bool = True

    @field_validator("scoring_delay_s")
    @classmethod
    def validate_scoring_delay(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"scoring_delay_s must be >= 0, got {v}.")
        return v


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = "data/logs/lureiq.log"
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration — the single source of truth."""

    model_config = ConfigDict(frozen=True)

    store: StoreConfig = StoreConfig()
    weather: WeatherConfig = WeatherConfig()
    geocoding: GeocodingConfig = GeocodingConfig()
    weights: WeightsConfig = WeightsConfig()
    feedback: FeedbackConfig = FeedbackConfig()
    session: SessionConfig = SessionConfig()
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
        FileNotFoundError: If the specified ``config_path`` does not exist.
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
            "Create config/default.toml or pass --config."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
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
    """Apply LUREIQ_* env vars to the raw config dict.

    Supported overrides:
      LUREIQ_DB_PATH        → raw["store"]["db_path"]
      LUREIQ_LOG_LEVEL      → raw["logging"]["level"]
      LUREIQ_COLLECTOR_URL  → raw["feedback"]["collector_url"]
      LUREIQ_WEIGHTS_URL    → raw["weights"]["override_url"]
      LUREIQ_DEBUG          → raw["debug"]
    """
    if db_path := os.environ.get("LUREIQ_DB_PATH"):
        raw.setdefault("store", {})["db_path"] = db_path

    if log_level := os.environ.get("LUREIQ_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if collector_url := os.environ.get("LUREIQ_COLLECTOR_URL"):
        raw.setdefault("feedback", {})["collector_url"] = collector_url

    if weights_url := os.environ.get("LUREIQ_WEIGHTS_URL"):
        raw.setdefault("weights", {})["override_url"] = weights_url

    if debug := os.environ.get("LUREIQ_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    project = raw.pop("project", {})

    return AppConfig(
        store=StoreConfig(**raw.get("store", {})),
        weather=WeatherConfig(**raw.get("weather", {})),
        geocoding=GeocodingConfig(**raw.get("geocoding", {})),
        weights=WeightsConfig(**raw.get("weights", {})),
        feedback=FeedbackConfig(**raw.get("feedback", {})),
        session=SessionConfig(**raw.get("session", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", project.get("debug", False)),
    )
