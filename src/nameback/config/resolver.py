"""Configuration resolution helpers."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from copy import deepcopy
from typing import Any, Dict, Mapping, Optional

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import NamebackConfig

ENV_PREFIX = "NAMEBACK__"


def resolve_with_precedence(
    *,
    defaults: NamebackConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> NamebackConfig:
    """Merge configuration sources, later sources winning.

    The order is defaults < file < environment < CLI. Keys in any source may be
    nested mappings or dotted paths such as ``enrichment.include_location``.

    Args:
        defaults: Baseline configuration.
        file_overrides: Values read from the YAML configuration file.
        env_overrides: Values parsed from `NAMEBACK__*` environment variables.
        cli_overrides: Values collected from command-line flags.

    Returns:
        NamebackConfig: The validated, merged configuration.

    Raises:
        ConfigError: If a source is malformed or the merged values fail validation.
    """
    merged = defaults.model_dump(mode="python")
    for name, source in (
        ("file", file_overrides),
        ("environment", env_overrides),
        ("cli", cli_overrides),
    ):
        if source:
            merged = _deep_merge(merged, _normalize_mapping(source, source_name=name))

    try:
        return NamebackConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def as_environment(
    config: NamebackConfig, *, baseline: Optional[NamebackConfig] = None
) -> Dict[str, str]:
    """Express settings as the environment variables that would reproduce them.

    Args:
        config: Settings to render.
        baseline: When given, only values differing from it are included.

    Returns:
        Dict[str, str]: `NAMEBACK__SECTION__KEY` names mapped to YAML literals.
    """
    reference = baseline.model_dump(mode="json") if baseline is not None else {}
    assignments: Dict[str, str] = {}
    for section, values in config.model_dump(mode="json").items():
        for key, value in values.items():
            if baseline is not None and reference[section].get(key) == value:
                continue
            assignments[f"{ENV_PREFIX}{section.upper()}__{key.upper()}"] = _env_literal(value)
    return assignments


def _env_literal(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, dict)):
        return yaml.safe_dump(value, default_flow_style=True).strip()
    return str(value)


def _normalize_mapping(source: Mapping[str, Any], *, source_name: str) -> dict[str, Any]:
    label = source_name.capitalize()
    if not isinstance(source, MappingABC):
        raise ConfigError(f"{label} overrides must be a mapping.")

    result: dict[str, Any] = {}
    for key, value in source.items():
        if not isinstance(key, str):
            raise ConfigError(f"{label} override keys must be strings.")
        *parents, leaf = key.split(".")
        node = result
        for segment in parents:
            child = node.setdefault(segment, {})
            if not isinstance(child, dict):
                raise ConfigError(f"{label} override for {key} conflicts with existing value.")
            node = child
        if isinstance(value, MappingABC):
            nested = _normalize_mapping(value, source_name=source_name)
            existing = node.get(leaf)
            node[leaf] = _deep_merge(existing if isinstance(existing, dict) else {}, nested)
        else:
            node[leaf] = value
    return result


def _deep_merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged = {key: deepcopy(value) for key, value in base.items()}
    for key, value in overrides.items():
        if isinstance(value, MappingABC) and isinstance(merged.get(key), MappingABC):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = deepcopy(value)
    return merged


__all__ = ["ENV_PREFIX", "as_environment", "resolve_with_precedence"]
