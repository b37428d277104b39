"""EXIF probe backed by the `exiftool` command."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping, Optional

from nameback import external
from nameback.external import ToolError

from .models import EXIFTOOL_FIELDS, MetadataRecord
from .quality import rejection_reason

LOGGER = logging.getLogger(__name__)

EXIFTOOL = "exiftool"


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, list):
        parts = [str(item) for item in value if item is not None]
        return ", ".join(parts) or None
    if isinstance(value, (dict, bool)):
        return None
    text = str(value).strip()
    return text or None


def record_from_exiftool(payload: Mapping[str, Any]) -> MetadataRecord:
    """Decode one exiftool JSON object into a metadata record.

    Author is coalesced from Author, Creator, then LastModifiedBy and dropped when
    it fails the quality checks, which catches scanner and printer model strings.

    Args:
        payload: The first object of `exiftool -json` output.

    Returns:
        MetadataRecord: Record carrying the fixed field schema.
    """
    values = {field: _as_text(payload.get(tag)) for tag, field in EXIFTOOL_FIELDS.items()}
    author = values["author"] or values["creator"] or values["last_modified_by"]
    reason = rejection_reason(author)
    if author is not None and reason is not None:
        LOGGER.debug("Discarding author %r: %s", author, reason)
        author = None
    values["author"] = author
    return MetadataRecord(**values)


class MetadataProbe:
    """Run exiftool against a file and decode its JSON output."""

    def __init__(self, *, executable: str = EXIFTOOL, timeout: float = 30.0) -> None:
        self.executable = executable
        self.timeout = timeout

    def probe(self, path: Path) -> MetadataRecord:
        """Return the metadata record for `path`.

        Any tool failure or malformed output yields an empty record.

        Args:
            path: File to inspect.

        Returns:
            MetadataRecord: Decoded fields, possibly all empty.
        """
        try:
            result = external.run([self.executable, "-json", path], timeout=self.timeout)
        except ToolError as exc:
            LOGGER.debug("exiftool failed for %s: %s", path, exc)
            return MetadataRecord()

        try:
            parsed = json.loads(result.stdout or "[]")
        except json.JSONDecodeError as exc:
            LOGGER.debug("exiftool returned invalid JSON for %s: %s", path, exc)
            return MetadataRecord()

        if not isinstance(parsed, list) or not parsed or not isinstance(parsed[0], dict):
            return MetadataRecord()
        return record_from_exiftool(parsed[0])


__all__ = ["EXIFTOOL", "MetadataProbe", "record_from_exiftool"]
