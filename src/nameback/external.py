"""Thin wrappers around external command-line tools."""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Sequence

LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class ToolError(Exception):
    """Raised when an external tool is missing, times out, or exits non-zero."""

    def __init__(self, tool: str, message: str) -> None:
        super().__init__(f"{tool}: {message}")
        self.tool = tool


def which(tool: str) -> Path | None:
    """Return the resolved executable path for `tool`, if it is on PATH."""
    found = shutil.which(tool)
    return Path(found) if found else None


def run(
    args: Sequence[str | Path],
    *,
    timeout: float | None = DEFAULT_TIMEOUT,
    text: bool = True,
    check: bool = True,
) -> subprocess.CompletedProcess:
    """Run an external command and capture its output.

    Args:
        args: Executable followed by its arguments.
        timeout: Seconds before the process is killed.
        text: Decode stdout/stderr as UTF-8 text.
        check: Raise when the process exits non-zero.

    Returns:
        subprocess.CompletedProcess: The finished process.

    Raises:
        ToolError: If the executable is missing, times out, or fails with `check` set.
    """
    command = [str(arg) for arg in args]
    tool = command[0]
    LOGGER.debug("Running %s", " ".join(command))
    try:
        result = subprocess.run(
            command,
            capture_output=True,
            text=text,
            encoding="utf-8" if text else None,
            errors="replace" if text else None,
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError as exc:
        raise ToolError(tool, "executable not found") from exc
    except subprocess.TimeoutExpired as exc:
        raise ToolError(tool, f"timed out after {timeout}s") from exc
    except OSError as exc:
        raise ToolError(tool, str(exc)) from exc

    if check and result.returncode != 0:
        stderr = result.stderr if isinstance(result.stderr, str) else ""
        raise ToolError(tool, f"exited with {result.returncode}: {stderr.strip()[:200]}")
    return result


__all__ = ["DEFAULT_TIMEOUT", "ToolError", "run", "which"]
