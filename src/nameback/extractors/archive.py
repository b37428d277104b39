"""Suggest names for archives from the files they contain."""

from __future__ import annotations

import logging
import re
import tarfile
import zipfile
from pathlib import Path, PurePosixPath
from typing import List, Optional, Sequence

from nameback.external import ToolError, run
from nameback.naming.models import NameSource

from .base import ContentExtractor

LOGGER = logging.getLogger(__name__)

JUNK_PREFIXES = (".ds_store", "thumbs.db", "desktop.ini", "__macosx")
BOILERPLATE = re.compile(r"(readme|licen[cs]e|copying)([._-]|$)")
TAR_SUFFIXES = (".tar", ".tgz", ".tar.gz", ".tar.bz2", ".tar.xz")
# Dashed rule framing the member table of `7z l` and `unrar l`.
TABLE_RULE = re.compile(r"^\s*-{3,}[- ]*$")


def is_junk(member: str) -> bool:
    """Return True for OS droppings and readme/license files."""
    lower = member.lower()
    name = PurePosixPath(lower).name
    if lower.startswith(JUNK_PREFIXES) or name.startswith(JUNK_PREFIXES):
        return True
    return BOILERPLATE.match(name) is not None


def clean_member_name(name: str) -> str:
    kept = "".join(ch for ch in name if ch.isalnum() or ch in "_-")
    return kept.strip("_-")


def member_stem(member: str) -> Optional[str]:
    """Return the cleaned stem of a single archive member, if longer than two chars."""
    name = member.rsplit("/", 1)[-1]
    stem = name.rsplit(".", 1)[0] if "." in name else name
    if len(stem) <= 2:
        return None
    return clean_member_name(stem) or None


def common_prefix(members: Sequence[str]) -> Optional[str]:
    """Shared prefix of all members, cut back to the last non-alphanumeric boundary."""
    if not members:
        return None
    first = members[0]
    length = 0
    for index, char in enumerate(first):
        if any(len(other) <= index or other[index] != char for other in members[1:]):
            break
        length = index + 1
    if length <= 3:
        return None

    prefix = first[:length]
    boundary = max(
        (index for index, char in enumerate(prefix) if not char.isalnum()), default=-1
    )
    if boundary > 0:
        prefix = prefix[:boundary]
    return clean_member_name(prefix) or None


def name_from_members(members: Sequence[str]) -> Optional[str]:
    """Choose a name from an archive listing, ignoring directories and junk."""
    significant = [
        member for member in members if member and not member.endswith("/") and not is_junk(member)
    ]
    if len(significant) == 1:
        return member_stem(significant[0])
    if len(significant) > 1:
        prefix = common_prefix(significant)
        if prefix and len(prefix) > 3:
            return prefix
    return None


def _is_directory_row(fields: Sequence[str]) -> bool:
    # 7z marks folders with "D....", unrar with "drwx..." or "...D...".
    return any(
        not any(char.isdigit() for char in field) and (field.startswith("d") or "D" in field)
        for field in fields
    )


def listing_names(output: str) -> List[str]:
    """Parse the member table of a `7z l` or `unrar l` listing.

    Members are the rows between the first two dashed rules. The name column
    starts where the last dash run of the opening rule does, so names may
    contain spaces. Header, banner, and summary lines are ignored.

    Args:
        output: Captured stdout of the listing command.

    Returns:
        List[str]: Member names, with directories suffixed by "/".
    """
    names: List[str] = []
    column: Optional[int] = None
    for line in output.splitlines():
        if TABLE_RULE.match(line):
            if column is not None:
                break
            column = line.rstrip().rfind(" ") + 1
            continue
        if column is None:
            continue
        name = line[column:].strip()
        if not name:
            continue
        names.append(name + "/" if _is_directory_row(line[:column].split()) else name)
    return names


class ArchiveExtractor(ContentExtractor):
    """List archive contents without extracting them."""

    source = NameSource.METADATA

    def __init__(self, *, timeout: float = 30.0) -> None:
        self.timeout = timeout

    def list_members(self, path: Path) -> List[str]:
        """Return member paths for zip, tar, 7z, and rar archives.

        Args:
            path: Archive to inspect.

        Returns:
            List[str]: Member names; empty when the archive cannot be listed.
        """
        lower = path.name.lower()
        try:
            if lower.endswith(".zip"):
                with zipfile.ZipFile(path) as archive:
                    return archive.namelist()
            if lower.endswith(TAR_SUFFIXES):
                with tarfile.open(path) as archive:
                    return [
                        member.name + ("/" if member.isdir() else "")
                        for member in archive.getmembers()
                    ]
            if lower.endswith(".7z"):
                return listing_names(run(["7z", "l", path], timeout=self.timeout).stdout)
            if lower.endswith(".rar"):
                return listing_names(run(["unrar", "l", path], timeout=self.timeout).stdout)
        except (OSError, zipfile.BadZipFile, tarfile.TarError, ToolError) as exc:
            LOGGER.debug("Unable to list archive %s: %s", path, exc)
        return []

    def extract(self, path: Path) -> Optional[str]:
        return name_from_members(self.list_members(path))


__all__ = [
    "ArchiveExtractor",
    "common_prefix",
    "is_junk",
    "listing_names",
    "member_stem",
    "name_from_members",
]
