"""Metadata probing and quality filtering."""

from .models import MetadataRecord
from .probe import MetadataProbe, record_from_exiftool
from .quality import is_useful, rejection_reason

__all__ = [
    "MetadataProbe",
    "MetadataRecord",
    "is_useful",
    "record_from_exiftool",
    "rejection_reason",
]
