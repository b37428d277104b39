"""Persistent cache of per-file analysis results."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from pydantic import ValidationError

from nameback.ingestion.detectors import HashComputer
from nameback.ingestion.models import PathEntry
from nameback.naming.models import FileAnalysis

from .errors import CacheError
from .models import CacheEntry, CacheFile, CachedCandidate

LOGGER = logging.getLogger(__name__)

DEFAULT_CACHE_PATH = Path("~/.nameback/cache/metadata.json")


@dataclass(slots=True, frozen=True)
class CacheStats:
    """Summary of the cache contents."""

    total_entries: int
    cache_size_bytes: int


class MetadataCache:
    """JSON-backed cache keyed by absolute file path.

    An entry stays valid while the file size is unchanged and either the
    modification time matches or the content hash still agrees. The cache is
    loaded once per batch and saved once at the end.
    """

    def __init__(self, path: Path = DEFAULT_CACHE_PATH, *, hasher: Optional[HashComputer] = None):
        self.path = path.expanduser()
        self.hasher = hasher or HashComputer()
        self._data = CacheFile()

    @classmethod
    def load(cls, path: Path = DEFAULT_CACHE_PATH, **kwargs) -> "MetadataCache":
        """Read the cache from disk; a missing or corrupt file yields an empty cache."""
        cache = cls(path, **kwargs)
        if not cache.path.exists():
            return cache
        try:
            payload = json.loads(cache.path.read_text(encoding="utf-8"))
            cache._data = CacheFile.model_validate(payload)
        except (OSError, json.JSONDecodeError, ValidationError) as exc:
            LOGGER.warning("Discarding unreadable metadata cache at %s: %s", cache.path, exc)
            cache._data = CacheFile()
        return cache

    def save(self) -> None:
        """Write the cache to disk.

        Raises:
            CacheError: If the file cannot be written.
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                json.dumps(self._data.model_dump(mode="json"), indent=2), encoding="utf-8"
            )
        except OSError as exc:
            raise CacheError(f"Unable to write metadata cache {self.path}: {exc}") from exc

    def __len__(self) -> int:
        return len(self._data.entries)

    def get(self, path: Path) -> Optional[CacheEntry]:
        return self._data.entries.get(str(path))

    def is_valid(self, entry: PathEntry) -> bool:
        """Return True when the cached entry for `entry` still describes the file on disk."""
        cached = self.get(entry.absolute_path)
        if cached is None or cached.size != entry.size:
            return False
        if cached.mtime == entry.mtime:
            return True
        try:
            current = self.hasher.compute(entry.absolute_path)
        except OSError as exc:
            LOGGER.debug("Unable to hash %s: %s", entry.absolute_path, exc)
            return False
        return current == cached.content_hash

    def lookup(self, entry: PathEntry) -> Optional[CacheEntry]:
        """Return the cached entry when it is still valid."""
        return self.get(entry.absolute_path) if self.is_valid(entry) else None

    def store(self, analysis: FileAnalysis) -> None:
        """Remember the outcome of `analysis`."""
        entry = analysis.path_entry
        try:
            content_hash = self.hasher.compute(entry.absolute_path)
        except OSError as exc:
            LOGGER.debug("Not caching %s: %s", entry.absolute_path, exc)
            return
        chosen = analysis.chosen_candidate
        self._data.entries[str(entry.absolute_path)] = CacheEntry(
            content_hash=content_hash,
            size=entry.size,
            mtime=entry.mtime,
            proposed_name=analysis.proposed_name,
            category=entry.category.value,
            chosen=CachedCandidate.from_candidate(chosen) if chosen else None,
            metadata=analysis.metadata,
        )

    def discard(self, path: Path) -> None:
        self._data.entries.pop(str(path), None)

    def cleanup_stale_entries(self, valid_paths: Optional[Iterable[Path]] = None) -> int:
        """Drop entries for files that no longer exist.

        Args:
            valid_paths: When given, entries outside this set are dropped instead.

        Returns:
            int: Number of entries removed.
        """
        if valid_paths is None:
            stale = [key for key in self._data.entries if not Path(key).exists()]
        else:
            keep = {str(path) for path in valid_paths}
            stale = [key for key in self._data.entries if key not in keep]
        for key in stale:
            del self._data.entries[key]
        return len(stale)

    def stats(self) -> CacheStats:
        serialized = json.dumps(self._data.model_dump(mode="json"))
        return CacheStats(total_entries=len(self), cache_size_bytes=len(serialized.encode("utf-8")))


__all__ = ["CacheStats", "DEFAULT_CACHE_PATH", "MetadataCache"]
