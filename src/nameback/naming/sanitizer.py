"""Filesystem-safe name canonicalization and per-directory collision resolution."""

from __future__ import annotations

import logging
import os
import re
import threading
import unicodedata
from pathlib import Path
from typing import Iterable, List

LOGGER = logging.getLogger(__name__)

MAX_GRAPHEMES = 200
EMPTY_NAME = "renamed_file"

_FORBIDDEN_RE = re.compile(r'[/\\:*?"<>|()\[\]\s]')
_UNDERSCORE_RUN_RE = re.compile(r"_{2,}")
_ALLOWED_PUNCTUATION = frozenset("_-.")


def _keep(ch: str) -> bool:
    return ch.isalnum() or ch in _ALLOWED_PUNCTUATION or unicodedata.category(ch).startswith("M")


def graphemes(text: str) -> List[str]:
    """Split `text` into user-perceived characters (base character plus combining marks)."""
    clusters: List[str] = []
    for ch in text:
        if clusters and unicodedata.category(ch).startswith("M"):
            clusters[-1] += ch
        else:
            clusters.append(ch)
    return clusters


def sanitize(name: str) -> str:
    """Return a filesystem-safe base name.

    Path separators, shell-hostile punctuation, brackets, and whitespace become `_`;
    control characters are dropped; any other character that is neither alphanumeric
    nor one of `_ - .` becomes `_`. Runs of `_` collapse and leading/trailing `_` are
    trimmed. The result keeps at most 200 graphemes and is never empty.
    Applying it twice gives the same result as applying it once.

    Args:
        name: Candidate base name without extension.

    Returns:
        str: Canonical base name.
    """
    text = unicodedata.normalize("NFC", name)
    text = _FORBIDDEN_RE.sub("_", text)
    text = "".join(ch for ch in text if unicodedata.category(ch) != "Cc")
    text = "".join(ch if _keep(ch) else "_" for ch in text)
    text = _UNDERSCORE_RUN_RE.sub("_", text).strip("_")
    clusters = graphemes(text)
    if len(clusters) > MAX_GRAPHEMES:
        text = "".join(clusters[:MAX_GRAPHEMES]).rstrip("_")
    return text or EMPTY_NAME


def with_extension(base: str, extension: str) -> str:
    """Attach `extension` (without dot, kept verbatim) to `base`."""
    return f"{base}.{extension}" if extension else base


class CollisionResolver:
    """Hand out unique file names per directory.

    Each directory's name set is seeded with its current listing the first time it
    is used. A file's own current name never counts as a collision for that file.
    All access goes through one lock so concurrent callers get a total order.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._taken: dict[Path, set[str]] = {}

    def seed(self, directory: Path, names: Iterable[str]) -> None:
        """Pre-populate the name set for `directory`."""
        with self._lock:
            self._taken.setdefault(directory, set()).update(names)

    def _names_for(self, directory: Path) -> set[str]:
        names = self._taken.get(directory)
        if names is None:
            try:
                names = set(os.listdir(directory))
            except OSError as exc:
                LOGGER.warning("Unable to list %s: %s", directory, exc)
                names = set()
            self._taken[directory] = names
        return names

    def claim(self, directory: Path, base: str, extension: str, current_name: str) -> str:
        """Reserve and return a unique name for a file in `directory`.

        Args:
            directory: Directory the file lives in.
            base: Sanitized base name.
            extension: Extension to attach verbatim.
            current_name: The file's present name.

        Returns:
            str: `base.ext`, or `base_N.ext` with the smallest free N.
        """
        with self._lock:
            names = self._names_for(directory)
            candidate = with_extension(base, extension)
            counter = 1
            while candidate in names and candidate != current_name:
                candidate = with_extension(f"{base}_{counter}", extension)
                counter += 1
            names.add(candidate)
            return candidate


__all__ = [
    "EMPTY_NAME",
    "MAX_GRAPHEMES",
    "CollisionResolver",
    "graphemes",
    "sanitize",
    "with_extension",
]
