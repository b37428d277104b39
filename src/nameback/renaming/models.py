"""Rename plan and result models."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from pydantic import BaseModel


class RenameOperation(BaseModel):
    """A planned in-place rename.

    Attributes:
        source: Current file path.
        destination: Target path in the same directory.
    """

    source: Path
    destination: Path


class RenameResult(BaseModel):
    """Outcome of one rename attempt.

    Attributes:
        original_path: File path before the attempt.
        new_name: Proposed file name.
        success: Whether the rename happened (or would happen, in a dry run).
        error: Failure description when `success` is false.
    """

    original_path: Path
    new_name: str
    success: bool
    error: Optional[str] = None


@dataclass(slots=True, frozen=True)
class ProgressEvent:
    """Progress notification emitted by the engine.

    Attributes:
        percent: Completion from 0 to 100.
        message: Human-readable status line.
    """

    percent: float
    message: str


__all__ = ["ProgressEvent", "RenameOperation", "RenameResult"]
