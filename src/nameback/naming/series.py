"""Detection and consistent renaming of numbered file series."""

from __future__ import annotations

import logging
import re
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Tuple

LOGGER = logging.getLogger(__name__)

MIN_SERIES_MEMBERS = 3
MIN_INDEX_WIDTH = 3


class SeriesPattern(str, Enum):
    """How the sequence number is attached to the series base."""

    UNDERSCORE = "underscore"
    PARENTHESES = "parentheses"
    HYPHEN = "hyphen"
    SPACE = "space"

    @property
    def regex(self) -> re.Pattern[str]:
        return _PATTERNS[self]

    def format(self, base: str, index: int, width: int) -> str:
        """Attach a zero-padded `index` to `base` using this pattern's separator."""
        number = f"{index:0{width}d}"
        if self is SeriesPattern.UNDERSCORE:
            return f"{base}_{number}"
        if self is SeriesPattern.PARENTHESES:
            return f"{base}({number})"
        if self is SeriesPattern.HYPHEN:
            return f"{base}-{number}"
        return f"{base} {number}"


_PATTERNS = {
    SeriesPattern.UNDERSCORE: re.compile(r"^(.+?)_(\d+)$"),
    SeriesPattern.PARENTHESES: re.compile(r"^(.+?)\((\d+)\)$"),
    SeriesPattern.HYPHEN: re.compile(r"^(.+?)-(\d+)$"),
    SeriesPattern.SPACE: re.compile(r"^(.+?)\s+(\d+)$"),
}


@dataclass(slots=True)
class Series:
    """A group of sibling files that share a base and a numbering pattern.

    Attributes:
        base_name: Shared prefix of the original stems.
        pattern: Numbering pattern the members follow.
        directory: Directory holding every member.
        members: `(path, index)` pairs ordered by index.
    """

    base_name: str
    pattern: SeriesPattern
    directory: Path
    members: List[Tuple[Path, int]] = field(default_factory=list)

    @property
    def width(self) -> int:
        """Zero-padding width: the digits of the largest index, at least three."""
        largest = max((index for _, index in self.members), default=0)
        return max(MIN_INDEX_WIDTH, len(str(largest)))

    def index_of(self, path: Path) -> Optional[int]:
        for member, index in self.members:
            if member == path:
                return index
        return None

    def member_name(self, path: Path, base: str) -> Optional[str]:
        """Return the unsanitized series name for `path`, or None if it is not a member."""
        index = self.index_of(path)
        if index is None:
            return None
        return self.pattern.format(base, index, self.width)


def detect_series(paths: Iterable[Path]) -> List[Series]:
    """Group sibling files whose stems differ only by a trailing number.

    Patterns are tried in order (underscore, parentheses, hyphen, space); a
    file belongs to the first series that claims it. Groups of fewer than
    three files are not series.

    Args:
        paths: Files of one batch.

    Returns:
        List[Series]: Detected series in pattern order, then by directory and base name.
    """
    ordered = sorted(set(paths))
    claimed: Set[Path] = set()
    detected: List[Series] = []

    for pattern in SeriesPattern:
        groups: Dict[Tuple[Path, str], List[Tuple[Path, int]]] = defaultdict(list)
        for path in ordered:
            if path in claimed:
                continue
            match = pattern.regex.match(path.stem)
            if match:
                groups[(path.parent, match.group(1))].append((path, int(match.group(2))))

        for (directory, base), members in sorted(groups.items(), key=lambda item: item[0]):
            if len(members) < MIN_SERIES_MEMBERS:
                continue
            members.sort(key=lambda member: (member[1], member[0]))
            series = Series(base_name=base, pattern=pattern, directory=directory, members=members)
            claimed.update(path for path, _ in members)
            detected.append(series)
            LOGGER.debug(
                "Detected %s series %r in %s with %d members",
                pattern.value,
                base,
                directory,
                len(members),
            )
    return detected


__all__ = ["MIN_SERIES_MEMBERS", "Series", "SeriesPattern", "detect_series"]
