"""Recover meaningful words from an original file name."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional

from nameback.metadata.quality import is_date_only
from nameback.naming.scorer import is_decimal_version

COMMON_PREFIXES = (
    "IMG_",
    "DSC_",
    "SCAN_",
    "Screenshot_",
    "Capture_",
    "VID_",
    "Screen_Shot_",
    "Photo_",
    "Video_",
    "Document_",
    "Copy_of_",
    "Draft_",
    "New_",
    "Untitled_",
    "image_",
    "video_",
    "file_",
)

PLATFORM_TOKENS = frozenset(
    {
        "windows", "win", "win32", "win64", "x86", "x64", "x86_64", "amd64", "arm64",
        "aarch64", "macos", "mac", "osx", "darwin", "linux", "ubuntu", "debian", "fedora",
        "android", "ios", "universal",
    }
)
VENDOR_TOKENS = frozenset(
    {
        "adobe", "microsoft", "google", "apple", "oracle", "autodesk", "mozilla", "corel",
        "nvidia", "intel", "jetbrains",
    }
)
PRODUCT_ID_WORDS = frozenset(
    {
        "pro", "ultimate", "enterprise", "professional", "premium", "standard", "trial",
        "portable", "setup", "installer", "install", "lite", "retail", "edition", "cc",
    }
)
PRODUCT_NAME_TOKENS = frozenset(
    {
        "photoshop", "illustrator", "indesign", "acrobat", "lightroom", "premiere",
        "aftereffects", "dreamweaver", "excel", "powerpoint", "outlook", "onenote", "office",
        "visio", "chrome", "firefox", "safari", "thunderbird", "skype", "vscode", "intellij",
        "pycharm", "autocad", "vlc", "itunes",
    }
)

_PRODUCT_ID_RE = re.compile(r"^(?:cs\d+|cc\d{2,4}|office\d+|\d+bit)$")
_VERSION_RE = re.compile(r"^(?:v\d+|final.*|rev\d*|copy\d*)$")
_DATE_RE = re.compile(r"(?<!\d)((?:19|20)\d{2})([-/]?)(0[1-9]|1[0-2])\2(0[1-9]|[12]\d|3[01])(?!\d)")
_SEPARATORS_RE = re.compile(r"[_\- ]+")
_BRACKETS = "()[]{}"
MIN_SINGLE_TOKEN_LENGTH = 5


@dataclass(slots=True)
class StemAnalysis:
    """Result of analyzing a file stem.

    Attributes:
        text: Meaningful name recovered from the stem, if any.
        dates: Dates preserved from the stem, formatted `YYYY-MM-DD`.
        dates_only: True when `text` consists solely of the preserved dates.
    """

    text: Optional[str] = None
    dates: List[str] = field(default_factory=list)
    dates_only: bool = False


def strip_common_prefixes(stem: str) -> str:
    """Remove camera/scanner prefixes such as `IMG_` repeatedly, ignoring case."""
    result = stem
    changed = True
    while changed:
        changed = False
        lower = result.lower()
        for prefix in COMMON_PREFIXES:
            if lower.startswith(prefix.lower()):
                result = result[len(prefix) :]
                changed = True
                break
    return result


def _is_time(token: str) -> bool:
    return token.isdigit() and len(token) in (4, 6) and int(token) < 240000


def classify_token(token: str) -> Optional[str]:
    """Return the class of a token that carries no naming value, or None if it is meaningful."""
    lower = token.lower()
    if len(token) < 2:
        return "short"
    if is_decimal_version(lower):
        return "decimal-version"
    if token.isdigit():
        return "number"
    if is_date_only(lower):
        return "date"
    if _is_time(lower):
        return "time"
    if _VERSION_RE.match(lower):
        return "version"
    if lower in PLATFORM_TOKENS:
        return "platform"
    if lower in VENDOR_TOKENS:
        return "vendor"
    if lower in PRODUCT_ID_WORDS or _PRODUCT_ID_RE.match(lower):
        return "product-id"
    if lower in PRODUCT_NAME_TOKENS:
        return "product-name"
    if not any(ch.isalpha() for ch in token):
        return "symbols"
    return None


def _tokens(text: str) -> List[str]:
    tokens: List[str] = []
    for chunk in _SEPARATORS_RE.split(text):
        chunk = chunk.strip(_BRACKETS)
        if not chunk:
            continue
        if is_decimal_version(chunk):
            tokens.append(chunk)
            continue
        for piece in chunk.split("."):
            piece = piece.strip(_BRACKETS)
            if piece:
                tokens.append(piece)
    return tokens


def analyze_stem(stem: str) -> StemAnalysis:
    """Strip noise from a file stem and return what remains.

    Prefixes are removed, dates are set aside, and the rest is split on
    `_ - . space`. Dates, times, versions, platforms, vendors, product ids and names,
    and bare numbers are discarded. Two or more surviving tokens are joined with
    `_`; a single survivor needs at least five characters. When nothing survives
    the preserved dates are returned instead.

    Args:
        stem: File name without extension.

    Returns:
        StemAnalysis: The recovered name and preserved dates.
    """
    cleaned = strip_common_prefixes(stem)
    dates = [f"{m.group(1)}-{m.group(3)}-{m.group(4)}" for m in _DATE_RE.finditer(cleaned)]
    remainder = _DATE_RE.sub(" ", cleaned)

    meaningful = [token for token in _tokens(remainder) if classify_token(token) is None]
    if len(meaningful) >= 2:
        return StemAnalysis(text="_".join(meaningful), dates=dates)
    if len(meaningful) == 1 and len(meaningful[0]) >= MIN_SINGLE_TOKEN_LENGTH:
        return StemAnalysis(text=meaningful[0], dates=dates)
    if dates:
        return StemAnalysis(text="_".join(dates), dates=dates, dates_only=True)
    return StemAnalysis(dates=dates)


__all__ = [
    "COMMON_PREFIXES",
    "StemAnalysis",
    "analyze_stem",
    "classify_token",
    "strip_common_prefixes",
]
