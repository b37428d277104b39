"""Rename history with undo support."""

from __future__ import annotations

import json
import logging
import os
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import Deque, List, Optional

from pydantic import ValidationError

from .errors import HistoryError, UndoError
from .models import HistoryFile, RenameOperation

LOGGER = logging.getLogger(__name__)

DEFAULT_HISTORY_PATH = Path("~/.nameback/history.json")
DEFAULT_MAX_ENTRIES = 1000


@dataclass(slots=True, frozen=True)
class HistoryStats:
    """Summary of the recorded operations."""

    total_operations: int
    undoable_operations: int
    max_entries: int


def undo_operation(operation: RenameOperation) -> None:
    """Rename `operation.new_path` back to `operation.original_path`.

    Args:
        operation: Operation to revert; marked undone on success.

    Raises:
        UndoError: If the operation was already undone, the renamed file is
            gone, the original path is occupied, or the rename fails.
    """
    if operation.undone:
        raise UndoError("Operation already undone")
    if not operation.new_path.exists():
        raise UndoError(f"Cannot undo: {operation.new_path} no longer exists")
    if operation.original_path.exists():
        raise UndoError(f"Cannot undo: original path {operation.original_path} is occupied")
    try:
        os.rename(operation.new_path, operation.original_path)
    except OSError as exc:
        raise UndoError(f"Cannot undo {operation.new_path}: {exc}") from exc
    operation.undone = True
    LOGGER.info("Undid rename: %s -> %s", operation.new_path, operation.original_path)


class RenameHistory:
    """Bounded, newest-first log of completed renames persisted as JSON."""

    def __init__(
        self, path: Path = DEFAULT_HISTORY_PATH, max_entries: int = DEFAULT_MAX_ENTRIES
    ) -> None:
        self.path = path.expanduser()
        self.max_entries = max_entries
        self._operations: Deque[RenameOperation] = deque(maxlen=max_entries)

    @classmethod
    def load(
        cls, path: Path = DEFAULT_HISTORY_PATH, max_entries: int = DEFAULT_MAX_ENTRIES
    ) -> "RenameHistory":
        """Read the history from disk; a missing file yields an empty history.

        Raises:
            HistoryError: If the file exists but cannot be read or parsed.
        """
        history = cls(path, max_entries)
        if not history.path.exists():
            return history
        try:
            payload = json.loads(history.path.read_text(encoding="utf-8"))
            stored = HistoryFile.model_validate(payload)
        except (OSError, json.JSONDecodeError, ValidationError) as exc:
            raise HistoryError(f"Invalid rename history at {history.path}: {exc}") from exc
        history._operations.extend(stored.operations[:max_entries])
        return history

    def save(self) -> None:
        """Persist the history.

        Raises:
            HistoryError: If the file cannot be written.
        """
        payload = HistoryFile(max_entries=self.max_entries, operations=list(self._operations))
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                json.dumps(payload.model_dump(mode="json"), indent=2), encoding="utf-8"
            )
        except OSError as exc:
            raise HistoryError(f"Unable to write rename history {self.path}: {exc}") from exc

    @property
    def operations(self) -> List[RenameOperation]:
        """Operations, newest first."""
        return list(self._operations)

    def add(self, operation: RenameOperation) -> None:
        """Record `operation` as the newest entry, evicting the oldest beyond capacity."""
        self._operations.appendleft(operation)

    def record(self, original_path: Path, new_path: Path) -> RenameOperation:
        operation = RenameOperation(original_path=original_path, new_path=new_path)
        self.add(operation)
        return operation

    def last_undoable(self) -> Optional[RenameOperation]:
        return next((operation for operation in self._operations if not operation.undone), None)

    def undo_last(self) -> RenameOperation:
        """Revert the most recent operation that has not been undone.

        Returns:
            RenameOperation: The reverted operation.

        Raises:
            UndoError: If there is nothing to undo or the revert fails.
        """
        operation = self.last_undoable()
        if operation is None:
            raise UndoError("No operations to undo")
        undo_operation(operation)
        return operation

    def undo_at(self, index: int) -> RenameOperation:
        """Revert the operation at `index` (0 is the newest)."""
        if index < 0 or index >= len(self._operations):
            raise UndoError(f"Invalid operation index {index}")
        operation = self._operations[index]
        undo_operation(operation)
        return operation

    def undoable_count(self) -> int:
        return sum(1 for operation in self._operations if not operation.undone)

    def stats(self) -> HistoryStats:
        return HistoryStats(
            total_operations=len(self._operations),
            undoable_operations=self.undoable_count(),
            max_entries=self.max_entries,
        )


__all__ = [
    "DEFAULT_HISTORY_PATH",
    "DEFAULT_MAX_ENTRIES",
    "HistoryStats",
    "RenameHistory",
    "undo_operation",
]
