"""Normalize EXIF-style timestamps to calendar dates."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from nameback.metadata.models import MetadataRecord

TIMESTAMP_FORMATS = (
    "%Y:%m:%d %H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
    "%Y%m%d_%H%M%S",
    "%Y:%m:%d",
    "%Y-%m-%d",
    "%Y%m%d",
)


def format_timestamp(value: str) -> Optional[str]:
    """Return `YYYY-MM-DD` for a recognized timestamp, else None."""
    text = value.strip()
    for fmt in TIMESTAMP_FORMATS:
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        return parsed.strftime("%Y-%m-%d")
    return None


def date_from_metadata(metadata: MetadataRecord) -> Optional[str]:
    """Capture date from DateTimeOriginal, falling back to the creation date."""
    raw = metadata.capture_date
    return format_timestamp(raw) if raw else None


__all__ = ["TIMESTAMP_FORMATS", "date_from_metadata", "format_timestamp"]
