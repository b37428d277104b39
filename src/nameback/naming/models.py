"""Candidate names and per-file analysis results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from nameback.ingestion.models import PathEntry
from nameback.metadata.models import MetadataRecord

HIGH_QUALITY_SCORE = 5.0
ACCEPTABLE_SCORE = 2.0


class NameSource(str, Enum):
    """Provenance of a candidate name; biases its score."""

    METADATA = "Metadata"
    TEXT_EXTRACT = "TextExtract"
    PDF_TEXT = "PdfText"
    OCR_IMAGE = "OcrImage"
    OCR_VIDEO = "OcrVideo"
    DIRECTORY_CONTEXT = "DirectoryContext"
    FILENAME_ANALYSIS = "FilenameAnalysis"
    FALLBACK = "Fallback"


@dataclass(slots=True, frozen=True)
class Candidate:
    """A scored proposal for a file's new base name.

    Attributes:
        text: Unsanitized candidate text.
        source: Where the text came from.
        score: Quality score computed from `text` and `source`.
    """

    text: str
    source: NameSource
    score: float

    @property
    def is_high_quality(self) -> bool:
        return self.score >= HIGH_QUALITY_SCORE

    @property
    def is_acceptable(self) -> bool:
        return self.score >= ACCEPTABLE_SCORE


@dataclass(slots=True)
class FileAnalysis:
    """Outcome of running the naming pipeline over one file.

    Attributes:
        path_entry: The file being analyzed.
        candidates: Every scored candidate, in the order they were produced.
        chosen_candidate: Winning candidate, if any reached the acceptable threshold.
        proposed_name: Final sanitized, collision-free file name including extension.
        metadata: Metadata used for enrichment.
        from_cache: Whether the proposal was reused from the metadata cache.
    """

    path_entry: PathEntry
    candidates: List[Candidate] = field(default_factory=list)
    chosen_candidate: Optional[Candidate] = None
    proposed_name: Optional[str] = None
    metadata: MetadataRecord = field(default_factory=MetadataRecord)
    from_cache: bool = False

    @property
    def original_path(self):
        return self.path_entry.absolute_path

    @property
    def original_name(self) -> str:
        return self.path_entry.original_name

    @property
    def needs_rename(self) -> bool:
        """Return True when a proposal exists and differs from the current name."""
        return self.proposed_name is not None and self.proposed_name != self.original_name


__all__ = [
    "ACCEPTABLE_SCORE",
    "HIGH_QUALITY_SCORE",
    "Candidate",
    "FileAnalysis",
    "NameSource",
]
