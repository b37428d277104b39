"""Logging setup for the nameback command line."""

from __future__ import annotations

import logging
import os
from typing import Mapping

from rich.console import Console
from rich.logging import RichHandler

LOG_ENV_VAR = "NAMEBACK_LOG"
_ROOT_LOGGER = "nameback"


def resolve_level(
    *,
    verbose: bool,
    configured: str,
    env: Mapping[str, str] | None = None,
) -> int:
    """Return the effective log level.

    `--verbose` wins, then the `NAMEBACK_LOG` variable, then the configured level.
    Unrecognized names in the environment variable are ignored.

    Args:
        verbose: Whether `--verbose` was passed.
        configured: Level name from the configuration file.
        env: Environment mapping; defaults to `os.environ`.

    Returns:
        int: A `logging` level constant.
    """
    if verbose:
        return logging.DEBUG
    source = env if env is not None else os.environ
    requested = source.get(LOG_ENV_VAR, "").strip().upper()
    if requested:
        level = logging.getLevelName(requested)
        if isinstance(level, int):
            return level
    level = logging.getLevelName(configured.upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level: int, *, console: Console | None = None) -> logging.Logger:
    """Attach a single rich handler to the package logger."""
    logger = logging.getLogger(_ROOT_LOGGER)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=level <= logging.DEBUG,
        rich_tracebacks=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger


__all__ = ["LOG_ENV_VAR", "configure_logging", "resolve_level"]
