"""Data models persisted between runs."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from nameback.metadata.models import MetadataRecord
from nameback.naming.models import Candidate, NameSource


class CachedCandidate(BaseModel):
    """Serializable form of a chosen candidate."""

    text: str
    source: NameSource
    score: float

    @classmethod
    def from_candidate(cls, candidate: Candidate) -> "CachedCandidate":
        return cls(text=candidate.text, source=candidate.source, score=candidate.score)

    def to_candidate(self) -> Candidate:
        return Candidate(text=self.text, source=self.source, score=self.score)


class CacheEntry(BaseModel):
    """Analysis outcome remembered for one file.

    Attributes:
        content_hash: Content fingerprint at the time of analysis.
        size: File size in bytes.
        mtime: Modification time as a POSIX timestamp.
        proposed_name: Name proposed for the file, if any.
        category: Detected file category.
        cached_at: When the entry was written.
        chosen: Winning candidate, replayed on a cache hit.
        metadata: Probed metadata, replayed for enrichment on a cache hit.
    """

    content_hash: str
    size: int
    mtime: float
    proposed_name: Optional[str] = None
    category: str
    cached_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    chosen: Optional[CachedCandidate] = None
    metadata: Optional[MetadataRecord] = None


class CacheFile(BaseModel):
    """On-disk layout of the metadata cache."""

    entries: Dict[str, CacheEntry] = Field(default_factory=dict)


class RenameOperation(BaseModel):
    """One completed rename.

    Attributes:
        original_path: Path before the rename.
        new_path: Path after the rename.
        timestamp: When the rename happened.
        undone: Whether the rename has been reverted.
    """

    original_path: Path
    new_path: Path
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    undone: bool = False


class HistoryFile(BaseModel):
    """On-disk layout of the rename history, newest operation first."""

    max_entries: int
    operations: List[RenameOperation] = Field(default_factory=list)


__all__ = ["CacheEntry", "CacheFile", "CachedCandidate", "HistoryFile", "RenameOperation"]
