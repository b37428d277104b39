"""Shared helpers for content extractors."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from nameback.context.key_phrases import top_key_phrase
from nameback.naming.models import Candidate, NameSource
from nameback.naming.scorer import make_candidate

LOGGER = logging.getLogger(__name__)

TITLE_LIMIT = 80
KEY_PHRASE_THRESHOLD = 150


def clean_text(text: str) -> str:
    """Join non-empty lines with single spaces and collapse whitespace runs."""
    return " ".join(text.split())


def truncate_text(text: str, max_len: int = TITLE_LIMIT) -> str:
    """Cut `text` to `max_len`, preferring the last space past the halfway point."""
    if len(text) <= max_len:
        return text
    truncated = text[:max_len]
    last_space = truncated.rfind(" ")
    if last_space > max_len // 2:
        return truncated[:last_space]
    return truncated


def phrase_or_prefix(text: str, *, min_len: int = 10) -> Optional[str]:
    """Reduce a passage to a title: top key phrase when long, else its first 80 chars.

    Returns None when the cleaned text has `min_len` characters or fewer.
    """
    cleaned = clean_text(text)
    if len(cleaned) <= min_len:
        return None
    if len(cleaned) > KEY_PHRASE_THRESHOLD:
        phrase = top_key_phrase(cleaned)
        if phrase:
            return phrase
    return cleaned[:TITLE_LIMIT]


class ContentExtractor:
    """Base class: derive one candidate string from a file's contents.

    Subclasses implement `extract`; it must not modify the file and should return
    None instead of raising for unreadable or unsuitable content.
    """

    source: NameSource = NameSource.TEXT_EXTRACT

    def extract(self, path: Path) -> Optional[str]:
        raise NotImplementedError

    def candidates(self, path: Path) -> List[Candidate]:
        """Return the scored candidates this extractor contributes for `path`."""
        text = self.extract(path)
        if not text:
            return []
        return [make_candidate(text, self.source)]


__all__ = [
    "ContentExtractor",
    "KEY_PHRASE_THRESHOLD",
    "TITLE_LIMIT",
    "clean_text",
    "phrase_or_prefix",
    "truncate_text",
]
