"""Data models describing files discovered for renaming."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict


class FileCategory(str, Enum):
    """Coarse file categories that select which extractors run."""

    IMAGE = "Image"
    DOCUMENT = "Document"
    AUDIO = "Audio"
    VIDEO = "Video"
    EMAIL = "Email"
    WEB = "Web"
    ARCHIVE = "Archive"
    SOURCE_CODE = "SourceCode"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value: str | None) -> "FileCategory":
        """Return the category named `value`, or UNKNOWN for anything unrecognized."""
        for member in cls:
            if member.value == value:
                return member
        return cls.UNKNOWN


class PendingFile(BaseModel):
    """A file yielded by the directory scanner before classification.

    Attributes:
        path: Absolute path to the file.
        size_bytes: File size in bytes.
        modified_at: Last modification timestamp.
    """

    model_config = ConfigDict(frozen=True)

    path: Path
    size_bytes: int
    modified_at: datetime


class PathEntry(BaseModel):
    """Immutable record of a classified file for the duration of one batch.

    Attributes:
        absolute_path: Absolute path to the file.
        original_name: File name including extension.
        extension: Extension without the leading dot, as found on disk.
        size: File size in bytes.
        mtime: Modification time as a POSIX timestamp.
        category: Detected file category.
    """

    model_config = ConfigDict(frozen=True)

    absolute_path: Path
    original_name: str
    extension: str
    size: int
    mtime: float
    category: FileCategory

    @property
    def stem(self) -> str:
        """Return the file name without its extension."""
        return self.absolute_path.stem

    @property
    def directory(self) -> Path:
        """Return the directory containing the file."""
        return self.absolute_path.parent


__all__ = ["FileCategory", "PendingFile", "PathEntry"]
