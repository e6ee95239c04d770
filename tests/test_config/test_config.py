"""
Tests for bulle_chart/config.py.

What we test
------------
- The committed default.toml loads and matches the documented defaults.
- local.toml beside the config file deep-merges over it.
- BULLE_CHART_* environment variables override file values.
- Validators reject bad backends, log levels and weight ranges.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from bulle_chart.config import (
    AppConfig,
    LimitsConfig,
    LoggingConfig,
    StorageConfig,
    _deep_merge,
    load_config,
)

_ENV_VARS = (
    "BULLE_CHART_DB_PATH",
    "BULLE_CHART_BACKEND",
    "BULLE_CHART_LOG_LEVEL",
    "BULLE_CHART_DEBUG",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


# ── load_config ───────────────────────────────────────────────────────────────

class TestLoadConfig:
    def test_default_toml(self):
        config = load_config()
        assert config.storage.backend == "sqlite"
        assert config.limits.max_professions == 5
        assert config.limits.max_categories == 10
        assert config.limits.max_criteria_per_category == 110
        assert (config.limits.min_weight, config.limits.max_weight) == (1, 30)
        assert config.recommendation.advantage_weight == 0.6
        assert config.migration.default_profession_name == "Mon métier"
        assert config.debug is False

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.toml")

    def test_explicit_file(self, tmp_path):
        path = _write(tmp_path / "cfg.toml", "[limits]\nmax_professions = 3\n")
        config = load_config(path)
        assert config.limits.max_professions == 3
        assert config.limits.max_categories == 10

    def test_local_toml_merged(self, tmp_path):
        path = _write(
            tmp_path / "cfg.toml",
            '[storage]\nbackend = "sqlite"\ndb_path = "a.db"\n',
        )
        _write(tmp_path / "local.toml", '[storage]\ndb_path = "b.db"\n')
        config = load_config(path)
        assert config.storage.db_path == "b.db"
        assert config.storage.backend == "sqlite"

    def test_project_debug(self, tmp_path):
        path = _write(tmp_path / "cfg.toml", "[project]\ndebug = true\n")
        assert load_config(path).debug is True


class TestEnvOverrides:
    def test_storage_overrides(self, tmp_path, monkeypatch):
        path = _write(tmp_path / "cfg.toml", "")
        monkeypatch.setenv("BULLE_CHART_DB_PATH", "/tmp/env.db")
        monkeypatch.setenv("BULLE_CHART_BACKEND", "MEMORY")
        config = load_config(path)
        assert config.storage.db_path == "/tmp/env.db"
        assert config.storage.backend == "memory"

    def test_log_level_and_debug(self, tmp_path, monkeypatch):
        path = _write(tmp_path / "cfg.toml", '[logging]\nlevel = "INFO"\n')
        monkeypatch.setenv("BULLE_CHART_LOG_LEVEL", "debug")
        monkeypatch.setenv("BULLE_CHART_DEBUG", "yes")
        config = load_config(path)
        assert config.logging.level == "DEBUG"
        assert config.debug is True

    def test_invalid_env_value_fails_validation(self, tmp_path, monkeypatch):
        path = _write(tmp_path / "cfg.toml", "")
        monkeypatch.setenv("BULLE_CHART_BACKEND", "postgres")
        with pytest.raises(ValidationError):
            load_config(path)


# ── Sub-config validators ─────────────────────────────────────────────────────

def test_storage_backend_validated():
    with pytest.raises(ValidationError):
        StorageConfig(backend="redis")


def test_log_level_validated():
    assert LoggingConfig(level="warning").level == "WARNING"
    with pytest.raises(ValidationError):
        LoggingConfig(level="LOUD")


@pytest.mark.parametrize("kwargs", [
    {"min_weight": 10, "max_weight": 5},
    {"default_weight": 40},
    {"min_weight": 20, "default_weight": 15},
])
def test_limits_weight_range(kwargs):
    with pytest.raises(ValidationError):
        LimitsConfig(**kwargs)


def test_app_config_frozen():
    config = AppConfig()
    with pytest.raises(ValidationError):
        config.debug = True


def test_deep_merge_nested():
    merged = _deep_merge({"a": {"x": 1, "y": 2}, "b": 1}, {"a": {"y": 3}, "c": 4})
    assert merged == {"a": {"x": 1, "y": 3}, "b": 1, "c": 4}
