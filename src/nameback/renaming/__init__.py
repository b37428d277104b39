"""Rename planning and execution."""

from .engine import DirectoryError, ProgressCallback, RenameEngine
from .executor import RenameError, RenameExecutor
from .models import ProgressEvent, RenameOperation, RenameResult

__all__ = [
    "DirectoryError",
    "ProgressCallback",
    "ProgressEvent",
    "RenameEngine",
    "RenameError",
    "RenameExecutor",
    "RenameOperation",
    "RenameResult",
]
