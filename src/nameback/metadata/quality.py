"""Usefulness checks applied to metadata strings before they become candidates."""

from __future__ import annotations

import re
from typing import Iterable, Optional

ERROR_WORDS = (
    "error",
    "exception",
    "warning",
    "failed",
    "cannot",
    "invalid",
    "undefined",
    "null",
    "errno",
    "traceback",
    "fatal",
    "critical",
)

DEVICE_WORDS = (
    "canon",
    "printer",
    "scanner",
    "ipr",
    "epson",
    "hp",
    "brother",
    "xerox",
    "kyocera",
    "ricoh",
    "lexmark",
    "dell",
    "fujitsu",
)

PLACEHOLDER_WORDS = (
    "untitled",
    "new document",
    "document1",
    "image1",
    "noname",
    "unnamed",
    "temp",
    "test",
    "sample",
    "copy of",
    "draft",
)

MAX_REPEAT = 3


def _token_pattern(words: Iterable[str]) -> re.Pattern[str]:
    alternatives = "|".join(re.escape(word) for word in words)
    return re.compile(rf"(?<![a-z0-9])(?:{alternatives})(?![a-z0-9])")


_DEVICE_RE = _token_pattern(DEVICE_WORDS)
_PLACEHOLDER_RE = _token_pattern(PLACEHOLDER_WORDS)


def is_date_only(value: str) -> bool:
    """Return True when the alphanumeric content is 4, 6, or 8 digits and nothing else."""
    cleaned = "".join(ch for ch in value if ch.isalnum())
    return cleaned.isdigit() and len(cleaned) in (4, 6, 8)


def has_excessive_repetition(value: str, max_repeat: int = MAX_REPEAT) -> bool:
    """Return True when any character repeats more than `max_repeat` times in a row."""
    if len(value) < max_repeat + 1:
        return False
    previous = ""
    run = 0
    for ch in value:
        if ch == previous:
            run += 1
            if run > max_repeat:
                return True
        else:
            previous = ch
            run = 1
    return False


def rejection_reason(value: Optional[str]) -> Optional[str]:
    """Return why `value` is not a useful name, or None when it is.

    Checks run in a fixed order: length, error words, device words, placeholders,
    date-only, punctuation density, and character repetition.
    """
    if value is None:
        return "missing"
    text = value.strip()
    if len(text) < 3:
        return "too short"
    lower = text.lower()
    if any(word in lower for word in ERROR_WORDS):
        return "error text"
    if _DEVICE_RE.search(lower):
        return "device name"
    if _PLACEHOLDER_RE.search(lower):
        return "placeholder"
    if is_date_only(lower):
        return "date only"
    alnum = sum(1 for ch in text if ch.isalnum())
    if alnum * 3 < len(text):
        return "mostly punctuation"
    if has_excessive_repetition(lower):
        return "repetitive"
    return None


def is_useful(value: Optional[str]) -> bool:
    """Return True when `value` passes every quality check."""
    return rejection_reason(value) is None


def any_useful(*values: Optional[str]) -> bool:
    """Return True when at least one of `values` is useful."""
    return any(is_useful(value) for value in values)


__all__ = [
    "DEVICE_WORDS",
    "ERROR_WORDS",
    "PLACEHOLDER_WORDS",
    "any_useful",
    "has_excessive_repetition",
    "is_date_only",
    "is_useful",
    "rejection_reason",
]
