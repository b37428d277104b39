"""Configuration management for nameback."""

from __future__ import annotations

import os
import textwrap
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError
from .models import NamebackConfig
from .resolver import ENV_PREFIX, as_environment, resolve_with_precedence

DEFAULT_CONFIG_PATH = Path("~/.nameback/config.yaml")
# Settings holding file locations; relative values are anchored at the config directory.
STATE_PATHS = (("cache", "path"), ("history", "path"))
_CONFIG_HEADER = textwrap.dedent(
    """\
    # nameback configuration file
    # Created on first run. Override any key for a single run with a
    # NAMEBACK__SECTION__KEY environment variable, for example
    # NAMEBACK__ENRICHMENT__INCLUDE_LOCATION=true, or with the matching flag.
    # Relative cache and history paths are resolved against this file's folder.
    """
)


def parse_env_value(raw: str) -> Any:
    """Interpret an environment value as a YAML scalar or flow sequence."""
    try:
        return yaml.safe_load(raw)
    except yaml.YAMLError:
        return raw


class ConfigManager:
    """Resolve nameback settings from defaults, the YAML file, environment, and flags."""

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._config_path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = env if env is not None else os.environ

    @property
    def config_path(self) -> Path:
        """Return the resolved configuration path."""
        return self._config_path

    def load(
        self,
        *,
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
        ensure_file: bool = True,
    ) -> NamebackConfig:
        """Load configuration data from disk, applying precedence rules.

        Args:
            cli_overrides: Dotted-key overrides collected from command-line flags.
            include_env: Whether `NAMEBACK__*` environment variables are applied.
            ensure_file: Create the configuration file with defaults when missing.

        Returns:
            NamebackConfig: Validated configuration.

        Raises:
            ConfigError: If the file cannot be parsed, an environment variable is
                malformed, or a value is invalid.
        """
        if ensure_file:
            self.ensure_exists()

        return resolve_with_precedence(
            defaults=NamebackConfig(),
            file_overrides=self._read_file(),
            env_overrides=self.environment_overrides() if include_env else None,
            cli_overrides=cli_overrides,
        )

    def ensure_exists(self) -> Path:
        """Write a commented file holding the defaults if none exists yet."""
        path = self._config_path
        if path.exists():
            return path

        serialized = yaml.safe_dump(NamebackConfig().model_dump(mode="python"), sort_keys=False)
        stamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(f"{_CONFIG_HEADER}# Created: {stamp}\n{serialized}", encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Unable to create configuration file {path}: {exc}") from exc
        return path

    def environment_overrides(self) -> dict[str, Any]:
        """Collect `NAMEBACK__SECTION__KEY` variables as dotted overrides.

        Raises:
            ConfigError: If a variable does not name both a section and a key.
        """
        overrides: dict[str, Any] = {}
        for name, raw_value in self._env.items():
            if not name.startswith(ENV_PREFIX):
                continue
            section, _, key = name[len(ENV_PREFIX) :].lower().partition("__")
            if not section or not key:
                raise ConfigError(
                    f"{name} must name a section and a key, e.g. {ENV_PREFIX}CACHE__ENABLED."
                )
            overrides[f"{section}.{key.replace('__', '.')}"] = parse_env_value(raw_value)
        return overrides

    # Internal helpers -------------------------------------------------

    def _read_file(self) -> dict[str, Any]:
        if not self._config_path.exists():
            return {}

        try:
            raw = yaml.safe_load(self._config_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse configuration file: {exc}") from exc

        if not isinstance(raw, dict):
            raise ConfigError("Configuration file must contain a mapping at the top level.")

        for section, key in STATE_PATHS:
            values = raw.get(section)
            if not isinstance(values, dict) or not isinstance(values.get(key), str):
                continue
            location = Path(values[key])
            if not values[key].startswith("~") and not location.is_absolute():
                values[key] = str(self._config_path.parent / location)
        return raw


__all__ = [
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "NamebackConfig",
    "as_environment",
    "parse_env_value",
    "resolve_with_precedence",
    "ConfigError",
]
