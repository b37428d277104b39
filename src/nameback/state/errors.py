"""Persisted state errors."""


class StateError(Exception):
    """Base exception for cache and history persistence."""


class CacheError(StateError):
    """Raised when the metadata cache cannot be written."""


class HistoryError(StateError):
    """Raised when the rename history cannot be read or written."""


class UndoError(StateError):
    """Raised when a recorded rename cannot be reverted."""
