"""Persisted state: the metadata cache and the rename history."""

from .cache import DEFAULT_CACHE_PATH, CacheStats, MetadataCache
from .errors import CacheError, HistoryError, StateError, UndoError
from .history import DEFAULT_HISTORY_PATH, HistoryStats, RenameHistory, undo_operation
from .models import CacheEntry, CachedCandidate, RenameOperation

__all__ = [
    "CacheEntry",
    "CacheError",
    "CacheStats",
    "CachedCandidate",
    "DEFAULT_CACHE_PATH",
    "DEFAULT_HISTORY_PATH",
    "HistoryError",
    "HistoryStats",
    "MetadataCache",
    "RenameHistory",
    "RenameOperation",
    "StateError",
    "UndoError",
    "undo_operation",
]
