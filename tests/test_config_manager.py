"""Unit tests for configuration management."""

import logging
from pathlib import Path

import pytest
import yaml

from nameback.config import (
    ConfigError,
    ConfigManager,
    NamebackConfig,
    as_environment,
    resolve_with_precedence,
)
from nameback.log_config import resolve_level


def _fresh_manager(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, **kwargs) -> ConfigManager:
    monkeypatch.setenv("HOME", str(tmp_path))
    return ConfigManager(**kwargs)


def _write_config(manager: ConfigManager, data: dict) -> None:
    manager.config_path.parent.mkdir(parents=True, exist_ok=True)
    manager.config_path.write_text(yaml.safe_dump(data), encoding="utf-8")


def test_ensure_exists_creates_default_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)

    path = manager.ensure_exists()

    assert path == tmp_path / ".nameback" / "config.yaml"
    text = path.read_text(encoding="utf-8")
    assert "nameback configuration file" in text
    assert "# Created:" in text

    config = manager.load(include_env=False)
    assert isinstance(config, NamebackConfig)
    assert config.processing.multiframe_video is True
    assert config.enrichment.include_location is False


def test_load_respects_precedence(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    env = {
        "NAMEBACK__ENRICHMENT__INCLUDE_TIMESTAMP": "true",
        "NAMEBACK__HISTORY__MAX_ENTRIES": "50",
        "UNRELATED": "ignored",
    }
    manager = _fresh_manager(tmp_path, monkeypatch, env=env)
    _write_config(manager, {"history": {"max_entries": 10}, "processing": {"skip_hidden": True}})

    config = manager.load(cli_overrides={"history.max_entries": 5})

    assert config.processing.skip_hidden is True
    assert config.enrichment.include_timestamp is True
    # CLI overrides take precedence over environment
    assert config.history.max_entries == 5


def test_environment_overrides_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    manager = _fresh_manager(
        tmp_path, monkeypatch, env={"NAMEBACK__PROCESSING__OCR_LANGUAGES": "[eng]"}
    )
    _write_config(manager, {"processing": {"ocr_languages": ["chi_sim"]}})

    config = manager.load()

    assert config.processing.ocr_languages == ["eng"]


def test_invalid_yaml_raises_config_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.ensure_exists()

    manager.config_path.write_text("- not-a-mapping", encoding="utf-8")

    with pytest.raises(ConfigError):
        manager.load()


def test_unknown_keys_are_rejected() -> None:
    with pytest.raises(ConfigError):
        resolve_with_precedence(
            defaults=NamebackConfig(), file_overrides={"processing": {"recursive": True}}
        )


def test_as_environment_renders_every_setting() -> None:
    flat = as_environment(NamebackConfig())

    assert flat["NAMEBACK__ENRICHMENT__GEOCODE"] == "true"
    assert flat["NAMEBACK__GEOCODING__MIN_INTERVAL_SECONDS"] == "1.0"
    assert flat["NAMEBACK__HISTORY__MAX_ENTRIES"] == "1000"
    assert flat["NAMEBACK__PROCESSING__OCR_LANGUAGES"] == "[chi_tra, chi_sim, eng]"


def test_as_environment_round_trips_changed_settings(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    config = NamebackConfig.model_validate(
        {
            "processing": {"multiframe_video": False, "ocr_languages": ["eng"]},
            "cache": {"enabled": False},
        }
    )

    changed = as_environment(config, baseline=NamebackConfig())

    assert changed == {
        "NAMEBACK__PROCESSING__MULTIFRAME_VIDEO": "false",
        "NAMEBACK__PROCESSING__OCR_LANGUAGES": "[eng]",
        "NAMEBACK__CACHE__ENABLED": "false",
    }
    manager = _fresh_manager(tmp_path, monkeypatch, env=changed)
    assert manager.load() == config


def test_relative_state_paths_follow_the_config_file(tmp_path: Path) -> None:
    manager = ConfigManager(tmp_path / "conf" / "nameback.yaml", env={})
    _write_config(
        manager,
        {"cache": {"path": "state/metadata.json"}, "history": {"path": "~/renames.json"}},
    )

    config = manager.load()

    assert config.cache.path == str(tmp_path / "conf" / "state" / "metadata.json")
    assert config.history.path == "~/renames.json"


def test_environment_variable_without_key_is_rejected(tmp_path: Path) -> None:
    manager = ConfigManager(tmp_path / "config.yaml", env={"NAMEBACK__CACHE": "false"})

    with pytest.raises(ConfigError, match="NAMEBACK__CACHE"):
        manager.load()


def test_resolve_with_precedence_invalid_value_raises() -> None:
    with pytest.raises(ConfigError):
        resolve_with_precedence(
            defaults=NamebackConfig(),
            file_overrides={"history": {"max_entries": "not-an-int"}},
        )


def test_resolve_level_prefers_verbose_then_environment() -> None:
    assert resolve_level(verbose=True, configured="ERROR", env={}) == logging.DEBUG
    assert resolve_level(verbose=False, configured="ERROR", env={"NAMEBACK_LOG": "warning"}) == (
        logging.WARNING
    )
    assert resolve_level(verbose=False, configured="ERROR", env={"NAMEBACK_LOG": "bogus"}) == (
        logging.ERROR
    )
    assert resolve_level(verbose=False, configured="INFO", env={}) == logging.INFO
