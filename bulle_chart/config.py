"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``     : committed static defaults
  2. ``config/local.toml``       : optional local overrides (gitignored)
  3. ``.env``                    : local overrides (gitignored)
  4. Environment variables       : ``BULLE_CHART_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

The store, the service layer and every CLI command receive an ``AppConfig``
(or one of its sections): never raw dicts or env var lookups scattered
through the codebase.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

# ── Sub-config models ─────────────────────────────────────────────────────────


class StorageConfig(BaseModel):
    """Where the key-value collections live."""

    model_config = ConfigDict(frozen=True)

    backend: str = "sqlite"
    db_path: str = "data/db/bulle_chart.db"
    busy_timeout_ms: int = 5000

    @field_validator("backend")
    @classmethod
    def validate_backend(cls, v: str) -> str:
        valid = {"sqlite", "memory"}
        if v.lower() not in valid:
            raise ValueError(f"Storage backend must be one of {sorted(valid)}, got '{v}'.")
        return v.lower()


class LimitsConfig(BaseModel):
    """Cardinality and range limits enforced by validation.

    ``max_categories`` must not exceed the palette size (10): colours are
    unique per category.
    """

    model_config = ConfigDict(frozen=True)

    max_professions: int = 5
    max_categories: int = 10
    max_criteria_per_category: int = 110
    min_weight: int = 1
    max_weight: int = 30
    default_weight: int = 15
    allow_delete_last_empty_profession: bool = True

    @model_validator(mode="after")
    def validate_weight_range(self) -> "LimitsConfig":
        if self.min_weight > self.max_weight:
            raise ValueError(
                f"min_weight ({self.min_weight}) must be <= max_weight ({self.max_weight})."
            )
        if not self.min_weight <= self.default_weight <= self.max_weight:
            raise ValueError(
                f"default_weight ({self.default_weight}) must lie in "
                f"[{self.min_weight}, {self.max_weight}]."
            )
        return self


class RecommendationConfig(BaseModel):
    """Default recommendation preferences.

    The advantage/disadvantage weights are carried through to results but the
    scoring formula does not read them yet.
    """

    model_config = ConfigDict(frozen=True)

    advantage_weight: float = 0.6
    disadvantage_weight: float = 0.4


class MigrationConfig(BaseModel):
    """Legacy single-profession data migration settings."""

    model_config = ConfigDict(frozen=True)

    default_profession_name: str = "Mon métier"


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = "data/logs/bulle_chart.log"
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration: the single source of truth."""

    model_config = ConfigDict(frozen=True)

    storage: StorageConfig = StorageConfig()
    limits: LimitsConfig = LimitsConfig()
    recommendation: RecommendationConfig = RecommendationConfig()
    migration: MigrationConfig = MigrationConfig()
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
    """Apply BULLE_CHART_* env vars to the raw config dict.

    Supported overrides:
      BULLE_CHART_DB_PATH    → raw["storage"]["db_path"]
      BULLE_CHART_BACKEND    → raw["storage"]["backend"]
      BULLE_CHART_LOG_LEVEL  → raw["logging"]["level"]
      BULLE_CHART_DEBUG      → raw["debug"]
    """
    if db_path := os.environ.get("BULLE_CHART_DB_PATH"):
        raw.setdefault("storage", {})["db_path"] = db_path

    if backend := os.environ.get("BULLE_CHART_BACKEND"):
        raw.setdefault("storage", {})["backend"] = backend

    if log_level := os.environ.get("BULLE_CHART_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if debug := os.environ.get("BULLE_CHART_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    project = raw.pop("project", {})

    return AppConfig(
        storage=StorageConfig(**raw.get("storage", {})),
        limits=LimitsConfig(**raw.get("limits", {})),
        recommendation=RecommendationConfig(**raw.get("recommendation", {})),
        migration=MigrationConfig(**raw.get("migration", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", project.get("debug", False)),
    )
