"""Executor for in-place renames."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from nameback.state.history import RenameHistory

from .models import RenameOperation, RenameResult

LOGGER = logging.getLogger(__name__)


class RenameError(Exception):
    """Raised when a single rename cannot be performed safely."""


class RenameExecutor:
    """Apply rename operations one at a time, recording each success in history."""

    def __init__(self, history: Optional[RenameHistory] = None) -> None:
        self.history = history

    def validate(self, operation: RenameOperation) -> None:
        """Check that `operation` can run without clobbering anything.

        Args:
            operation: Planned rename.

        Raises:
            RenameError: If the source is missing, the destination is taken by a
                different file, or the directory is not writable.
        """
        source = operation.source
        destination = operation.destination
        if not source.exists():
            raise RenameError(f"Source path is missing: {source}")
        if destination.parent != source.parent:
            raise RenameError(f"Destination {destination} is outside {source.parent}")
        if destination.exists() and not _same_file(source, destination):
            raise RenameError(f"Destination already exists: {destination}")
        if not os.access(source.parent, os.W_OK):
            raise RenameError(f"Directory is not writable: {source.parent}")

    def rename(self, operation: RenameOperation, *, dry_run: bool = False) -> RenameResult:
        """Perform one rename and report the outcome instead of raising."""
        new_name = operation.destination.name
        try:
            self.validate(operation)
            if not dry_run and operation.source != operation.destination:
                try:
                    os.rename(operation.source, operation.destination)
                except OSError as exc:
                    raise RenameError(f"Rename failed: {exc}") from exc
                if self.history is not None:
                    self.history.record(operation.source, operation.destination)
                LOGGER.info("Renamed %s -> %s", operation.source.name, new_name)
        except RenameError as exc:
            LOGGER.warning("Skipping %s: %s", operation.source, exc)
            return RenameResult(
                original_path=operation.source, new_name=new_name, success=False, error=str(exc)
            )
        return RenameResult(original_path=operation.source, new_name=new_name, success=True)


def _same_file(first: Path, second: Path) -> bool:
    try:
        return os.path.samefile(first, second)
    except OSError:
        return False


__all__ = ["RenameError", "RenameExecutor"]
