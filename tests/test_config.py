"""Tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from paketwatch.core.config import AppConfig, ConfigError, load_app_config
from paketwatch.core.config.loader import CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH, resolve_config_path
from paketwatch.core.config.models import CsvFormat, LoggingConfig, NormalizerConfig


def test_missing_file_returns_defaults(tmp_path):
    config = load_app_config(tmp_path / "nope.yaml")
    assert isinstance(config, AppConfig)
    assert config.database.url == "sqlite:///data/paketwatch.db"
    assert config.normalizer.province == "Nusa Tenggara Barat"
    assert set(config.normalizer.formats) == {CsvFormat.TENDER, CsvFormat.SWAKELOLA}


def test_yaml_values_and_env_expansion(tmp_path, monkeypatch):
    monkeypatch.setenv("PAKET_DB", "sqlite:///custom.db")
    path = tmp_path / "app.yaml"
    path.write_text(
        "database:\n"
        "  url: ${PAKET_DB}\n"
        "logging:\n"
        "  level: debug\n"
        "  file: ${PAKET_LOG_FILE:-logs/other.log}\n"
        "normalizer:\n"
        "  province: Bali\n"
        "  bounding_box: {min_lat: -8.9, max_lat: -8.0, min_lon: 114.4, max_lon: 115.7}\n",
        encoding="utf-8",
    )

    config = load_app_config(path)

    assert config.database.url == "sqlite:///custom.db"
    assert config.logging.level == "DEBUG"
    assert config.logging.file == Path("logs/other.log")
    assert config.normalizer.province == "Bali"
    assert config.normalizer.bounding_box.max_lon == 115.7


def test_env_var_selects_config_file(tmp_path, monkeypatch):
    path = tmp_path / "from-env.yaml"
    path.write_text("data_dir: somewhere\n", encoding="utf-8")
    monkeypatch.setenv(CONFIG_ENV_VAR, str(path))

    assert resolve_config_path() == path
    assert load_app_config().data_dir == Path("somewhere")


def test_default_path_without_env(monkeypatch):
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    assert resolve_config_path() == DEFAULT_CONFIG_PATH


def test_invalid_values_raise_config_error(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("logging:\n  level: LOUD\n", encoding="utf-8")

    with pytest.raises(ConfigError) as exc_info:
        load_app_config(path)
    assert exc_info.value.path == path
    assert "level" in exc_info.value.details


def test_invalid_yaml_raises_config_error(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("database: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_app_config(path)


def test_non_mapping_raises_config_error(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_app_config(path)


def test_bounding_box_ordering_validated():
    with pytest.raises(ValueError):
        NormalizerConfig.model_validate({"bounding_box": {"min_lat": -8.0, "max_lat": -9.0}})


def test_unknown_format_table_rejected():
    with pytest.raises(ValueError):
        NormalizerConfig.model_validate({"formats": {"unknown": {"signature": ["A"]}}})


def test_logging_level_normalized():
    assert LoggingConfig(level="warning").level == "WARNING"


def test_ensure_directories(tmp_path):
    config = AppConfig(
        config_dir=tmp_path / "configs",
        data_dir=tmp_path / "data",
        logging=LoggingConfig(file=tmp_path / "logs" / "app.log"),
    )
    config.ensure_directories()

    assert (tmp_path / "configs").is_dir()
    assert (tmp_path / "data").is_dir()
    assert (tmp_path / "logs").is_dir()
