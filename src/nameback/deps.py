"""External tool availability checks."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence, Set, Tuple

from nameback.external import ToolError, run

LOGGER = logging.getLogger(__name__)

SAMPLE_DEPTH = 3
SAMPLE_LIMIT = 1000

OCR_IMAGE_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "gif", "bmp", "tiff", "tif", "webp"})
HEIC_EXTENSIONS = frozenset({"heic", "heif"})
VIDEO_EXTENSIONS = frozenset({"mp4", "mov", "avi", "mkv", "webm", "flv", "wmv", "m4v"})


@dataclass(slots=True, frozen=True)
class Dependency:
    """An external program the pipeline can use.

    Attributes:
        key: Short identifier used by the installer.
        name: Display name.
        commands: Executables that satisfy the dependency, tried in order.
        version_args: Arguments that make the executable exit cleanly.
        required: Whether nameback refuses to run without it.
        description: What the tool is used for.
    """

    key: str
    name: str
    commands: Tuple[str, ...]
    version_args: Tuple[str, ...]
    required: bool
    description: str


EXIFTOOL = Dependency(
    "exiftool", "ExifTool", ("exiftool",), ("-ver",), True, "Metadata extraction"
)
TESSERACT = Dependency(
    "tesseract",
    "Tesseract OCR",
    ("tesseract",),
    ("--version",),
    False,
    "OCR for images, scanned PDFs, and video frames",
)
FFMPEG = Dependency("ffmpeg", "FFmpeg", ("ffmpeg",), ("-version",), False, "Video frame extraction")
IMAGEMAGICK = Dependency(
    "imagemagick",
    "ImageMagick",
    ("magick", "convert"),
    ("-version",),
    False,
    "HEIC/HEIF conversion before OCR",
)
PDFTOPPM = Dependency(
    "pdftoppm", "Poppler pdftoppm", ("pdftoppm",), ("-v",), False, "Rasterizing scanned PDFs"
)

DEPENDENCIES: Tuple[Dependency, ...] = (EXIFTOOL, TESSERACT, FFMPEG, IMAGEMAGICK, PDFTOPPM)


def is_available(dependency: Dependency) -> bool:
    """Return True when any of the dependency's executables runs successfully."""
    for command in dependency.commands:
        try:
            run([command, *dependency.version_args], timeout=10)
        except ToolError as exc:
            LOGGER.debug("%s", exc)
            continue
        return True
    return False


def check_dependencies(
    dependencies: Sequence[Dependency] = DEPENDENCIES,
) -> List[Tuple[Dependency, bool]]:
    """Return every dependency paired with its availability."""
    return [(dependency, is_available(dependency)) for dependency in dependencies]


@dataclass(slots=True)
class DependencyNeeds:
    """Dependencies missing for a particular directory."""

    missing_required: List[Dependency] = field(default_factory=list)
    missing_optional: List[Dependency] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.missing_required and not self.missing_optional

    @property
    def has_required_missing(self) -> bool:
        return bool(self.missing_required)


def sample_extensions(
    directory: Path, *, depth: int = SAMPLE_DEPTH, limit: int = SAMPLE_LIMIT
) -> Set[str]:
    """Return lowercase extensions of up to `limit` files within `depth` levels."""
    root = directory.expanduser()
    base_depth = len(root.parts)
    extensions: Set[str] = set()
    seen = 0
    for dirpath, dirnames, filenames in os.walk(root):
        if len(Path(dirpath).parts) - base_depth >= depth - 1:
            dirnames[:] = []
        for name in filenames:
            seen += 1
            if seen > limit:
                return extensions
            suffix = Path(name).suffix.lower().lstrip(".")
            if suffix:
                extensions.add(suffix)
    return extensions


def detect_needed_dependencies(directory: Path) -> DependencyNeeds:
    """Work out which missing tools matter for the files in `directory`.

    ExifTool is always checked. Tesseract is needed for images, PDFs, and
    videos; FFmpeg for videos; ImageMagick for HEIC/HEIF; pdftoppm for PDFs.

    Args:
        directory: Directory whose files are sampled.

    Returns:
        DependencyNeeds: Missing required and optional dependencies.
    """
    extensions = sample_extensions(directory)
    wanted = []
    if extensions & (OCR_IMAGE_EXTENSIONS | HEIC_EXTENSIONS | VIDEO_EXTENSIONS | {"pdf"}):
        wanted.append(TESSERACT)
    if extensions & VIDEO_EXTENSIONS:
        wanted.append(FFMPEG)
    if extensions & HEIC_EXTENSIONS:
        wanted.append(IMAGEMAGICK)
    if "pdf" in extensions:
        wanted.append(PDFTOPPM)

    needs = DependencyNeeds()
    if not is_available(EXIFTOOL):
        needs.missing_required.append(EXIFTOOL)
    for dependency in wanted:
        if not is_available(dependency):
            needs.missing_optional.append(dependency)
    return needs


__all__ = [
    "DEPENDENCIES",
    "EXIFTOOL",
    "Dependency",
    "DependencyNeeds",
    "check_dependencies",
    "detect_needed_dependencies",
    "is_available",
]
