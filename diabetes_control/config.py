"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local secrets and env overrides (gitignored)
  4. Environment variables        — ``DIABETES_CONTROL_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

The advisory credential itself is never stored in config: ``[advisory]
api_key_env`` names the environment variable (default ``OPENAI_API_KEY``)
that ``AdvisoryClient.from_config()`` reads.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

# ── Sub-config models ─────────────────────────────────────────────────────────


class HistoryConfig(BaseModel):
    """SQLite history store settings."""

    model_config = ConfigDict(frozen=True)

    db_path: str = "data/db/diabetes_control.db"
    wal_mode: bool = True
    busy_timeout_ms: int = 5000


class AdvisoryConfig(BaseModel):
    """Remote advisory (language-model) call settings."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    api_url: str = "https://api.openai.com/v1/chat/completions"
    model: str = "gpt-4o"
    temperature: float = 0.7
    timeout_seconds: float = 30.0
    api_key_env: str = "OPENAI_API_KEY"

    @field_validator("temperature")
    @classmethod
    def validate_temperature(cls, v: float) -> float:
        if not 0.0 <= v <= 2.0:
            raise ValueError(f"temperature must be in [0.0, 2.0], got {v}.")
        return v

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"timeout_seconds must be positive, got {v}.")
        return v


class ReportConfig(BaseModel):
    """Exported report settings."""

    model_config = ConfigDict(frozen=True)

    output_dir: str = "data/outputs/reports"


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = "data/logs/diabetes_control.log"
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

    Constructed by ``load_config()`` which merges TOML + .env + env vars.
    """

    model_config = ConfigDict(frozen=True)

    history: HistoryConfig = HistoryConfig()
    advisory: AdvisoryConfig = AdvisoryConfig()
    report: ReportConfig = ReportConfig()
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

    # 1. Load .env file (silently skip if missing)
    load_dotenv(dotenv_path=root / ".env", override=False)

    # 2. Load TOML config
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

    # 3. Apply DIABETES_CONTROL_* environment variable overrides
    raw = _apply_env_overrides(raw)

    # 4. Build and validate AppConfig
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


def _env_flag(value: str) -> bool:
    return value.lower() in ("1", "true", "yes")


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply DIABETES_CONTROL_* env vars to the raw config dict.

    Supported overrides:
      DIABETES_CONTROL_DB_PATH           → raw["history"]["db_path"]
      DIABETES_CONTROL_LOG_LEVEL         → raw["logging"]["level"]
      DIABETES_CONTROL_ADVISORY_ENABLED  → raw["advisory"]["enabled"]
      DIABETES_CONTROL_DEBUG             → raw["debug"]
    """
    if db_path := os.environ.get("DIABETES_CONTROL_DB_PATH"):
        raw.setdefault("history", {})["db_path"] = db_path

    if log_level := os.environ.get("DIABETES_CONTROL_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if advisory_enabled := os.environ.get("DIABETES_CONTROL_ADVISORY_ENABLED"):
        raw.setdefault("advisory", {})["enabled"] = _env_flag(advisory_enabled)

    if debug := os.environ.get("DIABETES_CONTROL_DEBUG"):
        raw["debug"] = _env_flag(debug)

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    project = raw.pop("project", {})

    return AppConfig(
        history=HistoryConfig(**raw.get("history", {})),
        advisory=AdvisoryConfig(**raw.get("advisory", {})),
        report=ReportConfig(**raw.get("report", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", project.get("debug", False)),
    )
