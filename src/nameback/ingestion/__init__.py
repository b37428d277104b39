"""File discovery, classification, and hashing."""

from .detectors import HashComputer, TypeDetector
from .discovery import DirectoryScanner
from .models import FileCategory, PathEntry, PendingFile

__all__ = [
    "DirectoryScanner",
    "FileCategory",
    "HashComputer",
    "PathEntry",
    "PendingFile",
    "TypeDetector",
]
