"""Surface meaningful parent directory names as naming context."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

GENERIC_DIRECTORY_NAMES = frozenset(
    {
        # user folders
        "documents", "downloads", "desktop", "pictures", "videos", "music", "photos", "files",
        "mydocuments",
        # scratch space
        "tmp", "temp", "temporary", "cache", "data",
        # catch-all folders
        "misc", "miscellaneous", "other", "stuff", "things", "new", "old", "archive", "backup",
        # build trees
        "src", "lib", "bin", "build", "dist", "output",
    }
)


def is_generic_directory(name: str) -> bool:
    """Return True for directory names too broad to describe their contents."""
    lower = name.lower()
    if not lower or lower in GENERIC_DIRECTORY_NAMES:
        return True
    if len(lower) == 4 and lower.isdigit() and 1900 <= int(lower) <= 2100:
        return True
    if len(lower) == 2 and lower.isdigit() and 1 <= int(lower) <= 12:
        return True
    return False


def directory_context(path: Path) -> Optional[str]:
    """Return `grandparent_parent` (generic names removed) for the file at `path`.

    The grandparent is only used when it differs from the parent.
    """
    parent = path.parent
    parent_name = parent.name
    if not parent_name:
        return None

    parts = []
    if not is_generic_directory(parent_name):
        parts.append(parent_name)
    grandparent_name = parent.parent.name
    if grandparent_name and grandparent_name != parent_name and not is_generic_directory(
        grandparent_name
    ):
        parts.insert(0, grandparent_name)
    return "_".join(parts) or None


__all__ = ["GENERIC_DIRECTORY_NAMES", "directory_context", "is_generic_directory"]
