"""Numeric scoring and selection of candidate names."""

from __future__ import annotations

import re
from typing import Iterable, Optional

from nameback.metadata.quality import is_date_only

from .models import ACCEPTABLE_SCORE, Candidate, NameSource

SOURCE_WEIGHTS: dict[NameSource, float] = {
    NameSource.METADATA: 3.0,
    NameSource.TEXT_EXTRACT: 2.5,
    NameSource.PDF_TEXT: 2.0,
    NameSource.DIRECTORY_CONTEXT: 1.8,
    NameSource.FILENAME_ANALYSIS: 1.5,
    NameSource.OCR_IMAGE: 1.5,
    NameSource.OCR_VIDEO: 1.2,
    NameSource.FALLBACK: 0.5,
}

SCORER_ERROR_WORDS = ("error", "exception", "warning", "failed", "cannot", "invalid", "traceback")

INSTALLER_PLATFORMS = (
    "windows",
    "win32",
    "win64",
    "macos",
    "osx",
    "darwin",
    "linux",
    "ubuntu",
    "debian",
    "x86",
    "x64",
    "amd64",
    "arm64",
)
INSTALLER_VENDORS = ("adobe", "microsoft", "google", "apple", "oracle")
INSTALLER_KEYWORDS = ("setup", "install", "installer", "package", "release")
INSTALLER_THRESHOLD = 3

_UUID_PART_LENGTHS = [8, 4, 4, 4, 12]
_HEX_RE = re.compile(r"^[0-9a-fA-F]{32,}$")
_VERSION_SPLIT_RE = re.compile(r"[ _-]")
_RECENT_YEARS = tuple(str(year) for year in range(2010, 2031))


def _length_component(length: int) -> float:
    if length <= 10:
        return 0.2
    if length <= 19:
        return 0.6
    if length <= 60:
        return 1.0
    if length <= 100:
        return 0.7
    return 0.4


def is_decimal_version(token: str) -> bool:
    """Return True for tokens like `17.4` or `1.2.3` (two to four numeric parts)."""
    parts = token.split(".")
    if not 2 <= len(parts) <= 4:
        return False
    return all(part.isdigit() for part in parts)


def looks_like_technical_id(text: str) -> bool:
    """Return True for UUID-shaped strings and long hexadecimal digests."""
    parts = text.split("-")
    if [len(part) for part in parts] == _UUID_PART_LENGTHS:
        return True
    return bool(_HEX_RE.match(text))


def installer_indicators(text: str) -> int:
    """Count how many installer-filename traits `text` shows."""
    lower = text.lower()
    count = 0
    if any(platform in lower for platform in INSTALLER_PLATFORMS):
        count += 1
    if "." in lower and any(is_decimal_version(part) for part in _VERSION_SPLIT_RE.split(lower)):
        count += 1
    if any(vendor in lower for vendor in INSTALLER_VENDORS):
        count += 1
    if any(year in lower for year in _RECENT_YEARS):
        count += 1
    if any(keyword in lower for keyword in INSTALLER_KEYWORDS):
        count += 1
    return count


def looks_like_installer(text: str) -> bool:
    return installer_indicators(text) >= INSTALLER_THRESHOLD


def _penalty_multiplier(text: str) -> float:
    lower = text.lower()
    multiplier = 1.0
    if is_date_only(lower):
        multiplier *= 0.3
    if any(word in lower for word in SCORER_ERROR_WORDS):
        multiplier *= 0.2
    if looks_like_technical_id(text):
        multiplier *= 0.3
    if looks_like_installer(text):
        multiplier *= 0.2
    alpha = sum(1 for ch in text if ch.isalpha())
    numeric_ratio = sum(1 for ch in text if ch.isdigit()) / len(text)
    if alpha < 3 or numeric_ratio > 0.7:
        multiplier *= 0.5
    return multiplier


def score(text: str, source: NameSource) -> float:
    """Return the quality score of `text` coming from `source`.

    The score sums a length component, the source weight, a word-count bonus, and a
    character-diversity bonus, then applies multiplicative penalties for dates,
    error text, technical identifiers, installer names, and numeric-heavy strings.
    The result depends only on its two arguments.

    Args:
        text: Candidate text, before sanitization.
        source: Candidate provenance.

    Returns:
        float: Non-negative score; 2.0 and above is acceptable.
    """
    if not text:
        return 0.0
    total = _length_component(len(text)) * 2.0
    total += SOURCE_WEIGHTS[source]
    total += 0.5 * min(len(text.split()), 5)
    total += 1.5 * len(set(text)) / len(text)
    return total * _penalty_multiplier(text)


def make_candidate(text: str, source: NameSource) -> Candidate:
    """Build a scored candidate."""
    return Candidate(text=text, source=source, score=score(text, source))


def select_best(candidates: Iterable[Candidate]) -> Optional[Candidate]:
    """Return the highest-scoring acceptable candidate; ties keep the earliest."""
    best: Optional[Candidate] = None
    for candidate in candidates:
        if best is None or candidate.score > best.score:
            best = candidate
    if best is None or best.score < ACCEPTABLE_SCORE:
        return None
    return best


__all__ = [
    "SOURCE_WEIGHTS",
    "installer_indicators",
    "is_decimal_version",
    "looks_like_installer",
    "looks_like_technical_id",
    "make_candidate",
    "score",
    "select_best",
]
