"""Name RFC 822 messages after their subject, sender, and date."""

from __future__ import annotations

import logging
from email import policy
from email.parser import HeaderParser
from email.utils import parseaddr, parsedate_to_datetime
from itertools import islice
from pathlib import Path
from typing import Optional

from nameback.naming.models import NameSource

from .base import ContentExtractor

LOGGER = logging.getLogger(__name__)

HEADER_LINE_LIMIT = 200
MONTHS = ("jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec")


def clean_field(value: str) -> str:
    """Keep letters, digits, and whitespace, then join words with `_`."""
    kept = "".join(ch for ch in value if ch.isalnum() or ch.isspace())
    return "_".join(kept.split())


def sender_name(header: str) -> str:
    """Return the display name, else the mailbox local part, cleaned for a file name."""
    display, address = parseaddr(header)
    if display.strip():
        return clean_field(display)
    if "@" in address:
        return clean_field(address.split("@", 1)[0])
    if "<" in header:
        return clean_field(header.split("<", 1)[0])
    return clean_field(header.split("@", 1)[0])


def simple_date(header: str) -> Optional[str]:
    """Return `YYYY-MM-DD` from a Date header, if one can be recognized."""
    try:
        parsed = parsedate_to_datetime(header)
    except (TypeError, ValueError, IndexError):
        parsed = None
    if parsed is not None:
        return parsed.strftime("%Y-%m-%d")

    tokens = header.replace(",", " ").split()
    year = next((token for token in tokens if len(token) == 4 and token.isdigit()), None)
    month = next(
        (
            f"{index + 1:02d}"
            for token in tokens
            for index, name in enumerate(MONTHS)
            if name in token.lower()
        ),
        None,
    )
    day = next(
        (
            f"{int(token):02d}"
            for token in tokens
            if len(token) <= 2 and token.isdigit() and 1 <= int(token) <= 31
        ),
        None,
    )
    if year and month and day:
        return f"{year}-{month}-{day}"
    return None


class EmailExtractor(ContentExtractor):
    """Build `subject_from_sender_YYYY-MM-DD` from message headers."""

    source = NameSource.METADATA

    def extract(self, path: Path) -> Optional[str]:
        try:
            with path.open("r", encoding="utf-8", errors="replace") as handle:
                head_lines = []
                for line in islice(handle, HEADER_LINE_LIMIT):
                    if not line.strip():
                        break
                    head_lines.append(line)
        except OSError as exc:
            LOGGER.debug("Unable to read %s: %s", path, exc)
            return None

        headers = HeaderParser(policy=policy.default).parsestr("".join(head_lines))
        parts = []
        subject = headers.get("Subject")
        if subject:
            cleaned = clean_field(str(subject))
            if cleaned:
                parts.append(cleaned)
        sender = headers.get("From")
        if sender:
            name = sender_name(str(sender))
            if name:
                parts.append(f"from_{name}")
        date = headers.get("Date")
        if date:
            formatted = simple_date(str(date))
            if formatted:
                parts.append(formatted)
        return "_".join(parts) or None


__all__ = ["EmailExtractor", "clean_field", "sender_name", "simple_date"]
