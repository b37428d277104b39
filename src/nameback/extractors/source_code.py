"""Module-level documentation comments as names for source files."""

from __future__ import annotations

import logging
from itertools import islice
from pathlib import Path
from typing import Callable, Dict, List, Optional

from nameback.naming.models import NameSource

from .base import ContentExtractor

LOGGER = logging.getLogger(__name__)

SCAN_LINES = 100
DOC_LIMIT = 100

LANGUAGES = {
    "py": "python",
    "js": "javascript",
    "ts": "javascript",
    "rs": "rust",
    "java": "java",
    "c": "c",
    "h": "c",
    "cpp": "c",
    "cc": "c",
    "cxx": "c",
    "hpp": "c",
    "hxx": "c",
}


def clean_docstring(text: str) -> str:
    """Collapse whitespace and keep the first sentence, or about 100 characters."""
    cleaned = " ".join(text.split())
    period = cleaned.find(". ")
    if 0 <= period < DOC_LIMIT:
        return cleaned[:period]
    if len(cleaned) > DOC_LIMIT:
        space = cleaned[:DOC_LIMIT].rfind(" ")
        if space != -1:
            return cleaned[:space]
    return cleaned


def python_docstring(lines: List[str]) -> Optional[str]:
    collected: List[str] = []
    delimiter: Optional[str] = None
    for line in lines:
        stripped = line.strip()
        if delimiter is None:
            if not stripped or stripped.startswith("#"):
                continue
            if not stripped.startswith(('"""', "'''")):
                return None
            delimiter = stripped[:3]
            body = stripped[3:]
            if body.endswith(delimiter):
                content = body[: -len(delimiter)].strip()
                return clean_docstring(content) if content else None
            if body.strip():
                collected.append(body.strip())
            continue
        if stripped.endswith(delimiter):
            content = stripped[: -len(delimiter)].strip()
            if content:
                collected.append(content)
            break
        if stripped:
            collected.append(stripped)
    return clean_docstring(" ".join(collected)) if collected else None


def _block_comment(lines: List[str], openers: tuple) -> List[str]:
    """Return the cleaned lines of the first block comment starting with `openers`."""
    collected: List[str] = []
    inside = False
    for line in lines:
        stripped = line.strip()
        if not inside:
            if stripped.startswith(openers):
                inside = True
            continue
        if stripped.endswith("*/"):
            break
        cleaned = stripped.lstrip("*").strip()
        if cleaned:
            collected.append(cleaned)
    return collected


def javascript_doc(lines: List[str]) -> Optional[str]:
    comment = _block_comment(lines, ("/**",))
    for line in comment:
        for tag in ("@file ", "@module "):
            if line.startswith(tag):
                return clean_docstring(line[len(tag) :])
    if comment and not comment[0].startswith("@"):
        return clean_docstring(comment[0])
    return None


def rust_doc(lines: List[str]) -> Optional[str]:
    collected: List[str] = []
    for line in lines:
        stripped = line.strip()
        if stripped.startswith("//!"):
            content = stripped[3:].strip()
            if content:
                collected.append(content)
        elif collected:
            break
    return clean_docstring(" ".join(collected)) if collected else None


def javadoc(lines: List[str]) -> Optional[str]:
    comment = [line for line in _block_comment(lines, ("/**",)) if not line.startswith("@")]
    return clean_docstring(" ".join(comment)) if comment else None


def doxygen(lines: List[str]) -> Optional[str]:
    collected: List[str] = []
    inside = False
    for line in lines:
        stripped = line.strip()
        if stripped.startswith(("/**", "/*!")):
            inside = True
            continue
        if inside:
            if stripped.endswith("*/"):
                break
            cleaned = stripped.lstrip("*").strip()
            if cleaned and not cleaned.startswith(("@", "\\")):
                collected.append(cleaned)
            continue
        if stripped.startswith("///"):
            content = stripped[3:].strip()
            if content:
                collected.append(content)
        elif collected:
            break
    return clean_docstring(" ".join(collected)) if collected else None


HANDLERS: Dict[str, Callable[[List[str]], Optional[str]]] = {
    "python": python_docstring,
    "javascript": javascript_doc,
    "rust": rust_doc,
    "java": javadoc,
    "c": doxygen,
}


class SourceCodeExtractor(ContentExtractor):
    """Read the leading documentation comment of a source file."""

    source = NameSource.METADATA

    def extract(self, path: Path) -> Optional[str]:
        language = LANGUAGES.get(path.suffix.lower().lstrip("."))
        if language is None:
            return None
        try:
            with path.open("r", encoding="utf-8", errors="replace") as handle:
                lines = [line.rstrip("\r\n") for line in islice(handle, SCAN_LINES)]
        except OSError as exc:
            LOGGER.debug("Unable to read %s: %s", path, exc)
            return None
        result = HANDLERS[language](lines)
        return result or None


__all__ = ["LANGUAGES", "SourceCodeExtractor", "clean_docstring"]
