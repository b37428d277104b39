"""Title extraction for saved HTML pages."""

from __future__ import annotations

import html
import logging
import re
from pathlib import Path
from typing import Optional

from nameback.naming.models import NameSource

from .base import ContentExtractor

LOGGER = logging.getLogger(__name__)

HEAD_READ_LIMIT = 256 * 1024
SITE_SUFFIXES = (
    " - Google Search",
    " - Google",
    " - Wikipedia",
    " - YouTube",
    " | Facebook",
    " | Twitter",
    " | LinkedIn",
)

_TITLE_RE = re.compile(r"<title[^>]*>(.*?)</title>", re.IGNORECASE | re.DOTALL)
_META_RE = re.compile(
    r"""<meta\s+name=["']description["']\s+content=["']([^"']+)["']""", re.IGNORECASE
)
_HEAD_END_RE = re.compile(r"</head>|<body", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")


def clean_title(raw: str) -> str:
    """Decode entities, drop site suffixes and tags, and join words with `_`."""
    text = html.unescape(raw).replace("\xa0", " ")
    for suffix in SITE_SUFFIXES:
        position = text.find(suffix)
        if position != -1:
            text = text[:position]
    text = _TAG_RE.sub("", text)
    kept = "".join(ch for ch in text if ch.isalnum() or ch.isspace() or ch in "-_")
    return "_".join(kept.split())


class WebExtractor(ContentExtractor):
    """Use the page `<title>`, falling back to the meta description."""

    source = NameSource.METADATA

    def extract(self, path: Path) -> Optional[str]:
        try:
            with path.open("r", encoding="utf-8", errors="replace") as handle:
                content = handle.read(HEAD_READ_LIMIT)
        except OSError as exc:
            LOGGER.debug("Unable to read %s: %s", path, exc)
            return None

        head_end = _HEAD_END_RE.search(content)
        head = content[: head_end.start()] if head_end else content

        for pattern in (_TITLE_RE, _META_RE):
            match = pattern.search(head)
            if match:
                cleaned = clean_title(match.group(1))
                if cleaned:
                    return cleaned
        return None


__all__ = ["SITE_SUFFIXES", "WebExtractor", "clean_title"]
