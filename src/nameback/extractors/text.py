"""Title extraction for plain text, markdown, CSV, JSON, and YAML files."""

from __future__ import annotations

import csv
import json
import logging
from itertools import islice
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence

import yaml

from nameback.context.key_phrases import top_key_phrase
from nameback.naming.models import NameSource

from .base import KEY_PHRASE_THRESHOLD, TITLE_LIMIT, ContentExtractor, clean_text, truncate_text

LOGGER = logging.getLogger(__name__)

GENERIC_HEADINGS = frozenset(
    {
        "introduction",
        "overview",
        "table of contents",
        "contents",
        "summary",
        "conclusion",
        "abstract",
        "preface",
        "foreword",
    }
)
SEMANTIC_COLUMNS = frozenset(
    {"name", "title", "description", "subject", "label", "product", "item"}
)
PRIORITY_KEY_PATHS: Sequence[Sequence[str]] = (
    ("title",),
    ("name",),
    ("displayName",),
    ("label",),
    ("description",),
    ("metadata", "title"),
    ("data", "title"),
    ("data", "name"),
    ("config", "name"),
    ("package", "name"),
    ("project", "name"),
)
YAML_LINE_KEYS = ("title:", "name:", "description:", "label:")

PLAIN_TEXT_LINES = 100
PLAIN_TEXT_CHARS = 500
YAML_SCAN_LINES = 50
STRUCTURED_READ_LIMIT = 1024 * 1024


def _read_lines(path: Path, limit: int) -> List[str]:
    with path.open("r", encoding="utf-8", errors="replace") as handle:
        return [line.rstrip("\r\n") for line in islice(handle, limit)]


def _strip_quotes(value: str) -> str:
    return value.strip().strip("\"'").strip()


def lookup_key_path(document: Any, key_path: Iterable[str]) -> Optional[str]:
    """Follow `key_path` through nested mappings and return a string leaf, if present."""
    current = document
    for key in key_path:
        if not isinstance(current, dict) or key not in current:
            return None
        current = current[key]
    return current if isinstance(current, str) else None


def first_priority_value(document: Any) -> Optional[str]:
    """Return the first usable string found along the priority key paths."""
    for key_path in PRIORITY_KEY_PATHS:
        value = lookup_key_path(document, key_path)
        if value is None:
            continue
        cleaned = clean_text(value)
        if len(cleaned) > 3:
            return truncate_text(cleaned)
    return None


class TextExtractor(ContentExtractor):
    """Pick a title from text-family files according to their format."""

    source = NameSource.TEXT_EXTRACT

    def extract(self, path: Path) -> Optional[str]:
        suffix = path.suffix.lower().lstrip(".")
        handler = {
            "md": self.from_markdown,
            "markdown": self.from_markdown,
            "csv": self.from_csv,
            "json": self.from_json,
            "yaml": self.from_yaml,
            "yml": self.from_yaml,
        }.get(suffix, self.from_plain_text)
        try:
            return handler(path)
        except (OSError, UnicodeError) as exc:
            LOGGER.debug("Text extraction failed for %s: %s", path, exc)
            return None

    def from_markdown(self, path: Path) -> Optional[str]:
        """Front-matter `title:`, else the first non-generic heading, else plain text."""
        lines = _read_lines(path, PLAIN_TEXT_LINES)
        in_front_matter = False
        for index, line in enumerate(lines):
            stripped = line.strip()
            if index == 0 and stripped == "---":
                in_front_matter = True
                continue
            if in_front_matter:
                if stripped == "---":
                    in_front_matter = False
                elif stripped.startswith("title:"):
                    value = _strip_quotes(stripped[len("title:") :])
                    if len(value) > 3:
                        return truncate_text(value)
                continue
            if stripped.startswith("#"):
                heading = stripped.lstrip("#").strip()
                if heading.lower() in GENERIC_HEADINGS:
                    continue
                if len(heading) > 3:
                    return truncate_text(heading)
        return self.from_plain_text(path)

    def from_csv(self, path: Path) -> Optional[str]:
        """Promote descriptive header columns, skipping ids, timestamps, and numbers."""
        rows = list(islice(csv.reader(_read_lines(path, 2)), 2))
        if not rows:
            return None
        headers = [_strip_quotes(header) for header in rows[0]]
        first_row = [value.strip() for value in rows[1]] if len(rows) > 1 else []

        chosen: List[str] = []
        for index, header in enumerate(headers):
            if not header:
                continue
            lower = header.lower()
            if lower in SEMANTIC_COLUMNS:
                chosen.insert(0, header)
            else:
                is_identifier = (
                    "id" in lower or "key" in lower or "guid" in lower or lower == "index"
                )
                is_timestamp = (
                    "date" in lower
                    or "time" in lower
                    or "created" in lower
                    or "modified" in lower
                    or lower == "timestamp"
                )
                if not is_identifier and not is_timestamp and len(chosen) < 2:
                    if index < len(first_row) and not _is_number(first_row[index]):
                        chosen.append(header)
            if len(chosen) >= 2:
                break

        if not chosen:
            return None
        joined = clean_text("_".join(chosen))
        return truncate_text(joined) if len(joined) > 3 else None

    def from_json(self, path: Path) -> Optional[str]:
        """Walk the priority key paths of a parsed JSON document."""
        try:
            with path.open("r", encoding="utf-8", errors="replace") as handle:
                document = json.loads(handle.read(STRUCTURED_READ_LIMIT))
        except json.JSONDecodeError as exc:
            LOGGER.debug("Invalid JSON in %s: %s", path, exc)
        else:
            value = first_priority_value(document)
            if value:
                return value
        return self.from_plain_text(path)

    def from_yaml(self, path: Path) -> Optional[str]:
        """Parse with PyYAML first, then fall back to scanning for `title:`-style lines."""
        try:
            with path.open("r", encoding="utf-8", errors="replace") as handle:
                document = yaml.safe_load(handle.read(STRUCTURED_READ_LIMIT))
        except yaml.YAMLError as exc:
            LOGGER.debug("Invalid YAML in %s: %s", path, exc)
        else:
            value = first_priority_value(document)
            if value:
                return value

        for line in _read_lines(path, YAML_SCAN_LINES):
            stripped = line.strip()
            for key in YAML_LINE_KEYS:
                if stripped.startswith(key):
                    value = clean_text(_strip_quotes(stripped[len(key) :]))
                    if len(value) > 3:
                        return truncate_text(value)
        return self.from_plain_text(path)

    def from_plain_text(self, path: Path) -> Optional[str]:
        """Key phrase of the opening text when long enough, else its word-bounded prefix."""
        collected = ""
        line_count = 0
        for line in _read_lines(path, PLAIN_TEXT_LINES):
            stripped = line.strip()
            if stripped:
                collected += stripped + " "
                line_count += 1
            if len(collected) > PLAIN_TEXT_CHARS:
                break

        if len(collected) <= 10:
            return None
        cleaned = clean_text(collected)
        if len(cleaned) > KEY_PHRASE_THRESHOLD and line_count > 3:
            phrase = top_key_phrase(cleaned)
            if phrase:
                return phrase
        return truncate_text(cleaned, TITLE_LIMIT)


def _is_number(value: str) -> bool:
    try:
        float(value)
    except ValueError:
        return False
    return True


__all__ = ["GENERIC_HEADINGS", "PRIORITY_KEY_PATHS", "TextExtractor", "first_priority_value"]
