"""File discovery utilities."""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

from .models import PendingFile

LOGGER = logging.getLogger(__name__)


class DirectoryScanner:
    """Discover files beneath a directory, optionally skipping dot-prefixed entries."""

    def __init__(self, *, skip_hidden: bool, follow_symlinks: bool = False) -> None:
        self.skip_hidden = skip_hidden
        self.follow_symlinks = follow_symlinks

    def scan(self, root: Path) -> Iterator[PendingFile]:
        """Yield files discovered under `root` in sorted, depth-first order.

        Hidden directories are pruned rather than filtered so their contents are
        never visited. Entries that vanish or cannot be stat'ed are logged and skipped.

        Args:
            root: Directory to walk.

        Yields:
            PendingFile: One record per regular file.
        """
        root = root.expanduser().resolve()
        for dirpath, dirnames, filenames in os.walk(
            root, followlinks=self.follow_symlinks, onerror=self._on_error
        ):
            if self.skip_hidden:
                dirnames[:] = [name for name in dirnames if not name.startswith(".")]
            dirnames.sort()
            for name in sorted(filenames):
                if self.skip_hidden and name.startswith("."):
                    continue
                path = Path(dirpath) / name
                if path.is_symlink() and not self.follow_symlinks:
                    continue
                try:
                    stat = path.stat()
                except OSError as exc:
                    LOGGER.warning("Failed to access %s: %s", path, exc)
                    continue
                if not path.is_file():
                    continue
                yield PendingFile(
                    path=path,
                    size_bytes=stat.st_size,
                    modified_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
                )

    @staticmethod
    def _on_error(exc: OSError) -> None:
        LOGGER.warning("Failed to access entry: %s", exc)


__all__ = ["DirectoryScanner"]
