"""Install external tools through the platform package manager."""

from __future__ import annotations

import logging
import platform
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from nameback.deps import DEPENDENCIES, Dependency, is_available
from nameback.external import ToolError, run, which
from nameback.renaming.models import ProgressEvent

LOGGER = logging.getLogger(__name__)

INSTALL_TIMEOUT = 900.0


class InstallError(Exception):
    """Raised when no package manager is usable or an install command fails."""


@dataclass(slots=True, frozen=True)
class PackageManager:
    """How to install packages with one package manager.

    Attributes:
        name: Executable name.
        install_prefix: Command prefix that installs the packages appended to it.
        packages: Package names per dependency key.
    """

    name: str
    install_prefix: Tuple[str, ...]
    packages: Dict[str, Tuple[str, ...]]

    def command_for(self, dependency: Dependency) -> Optional[List[str]]:
        names = self.packages.get(dependency.key)
        if not names:
            return None
        return [*self.install_prefix, *names]


PACKAGE_MANAGERS: Dict[str, Tuple[PackageManager, ...]] = {
    "Darwin": (
        PackageManager(
            "brew",
            ("brew", "install"),
            {
                "exiftool": ("exiftool",),
                "tesseract": ("tesseract", "tesseract-lang"),
                "ffmpeg": ("ffmpeg",),
                "imagemagick": ("imagemagick",),
                "pdftoppm": ("poppler",),
            },
        ),
        PackageManager(
            "port",
            ("sudo", "port", "install"),
            {
                "exiftool": ("p5-image-exiftool",),
                "tesseract": ("tesseract", "tesseract-chi_sim", "tesseract-chi_tra"),
                "ffmpeg": ("ffmpeg",),
                "imagemagick": ("ImageMagick",),
                "pdftoppm": ("poppler",),
            },
        ),
    ),
    "Linux": (
        PackageManager(
            "apt-get",
            ("sudo", "apt-get", "install", "-y"),
            {
                "exiftool": ("libimage-exiftool-perl",),
                "tesseract": ("tesseract-ocr", "tesseract-ocr-chi-sim", "tesseract-ocr-chi-tra"),
                "ffmpeg": ("ffmpeg",),
                "imagemagick": ("imagemagick",),
                "pdftoppm": ("poppler-utils",),
            },
        ),
        PackageManager(
            "dnf",
            ("sudo", "dnf", "install", "-y"),
            {
                "exiftool": ("perl-Image-ExifTool",),
                "tesseract": (
                    "tesseract",
                    "tesseract-langpack-chi_sim",
                    "tesseract-langpack-chi_tra",
                ),
                "ffmpeg": ("ffmpeg",),
                "imagemagick": ("ImageMagick",),
                "pdftoppm": ("poppler-utils",),
            },
        ),
        PackageManager(
            "pacman",
            ("sudo", "pacman", "-S", "--noconfirm"),
            {
                "exiftool": ("perl-image-exiftool",),
                "tesseract": (
                    "tesseract",
                    "tesseract-data-eng",
                    "tesseract-data-chi_sim",
                    "tesseract-data-chi_tra",
                ),
                "ffmpeg": ("ffmpeg",),
                "imagemagick": ("imagemagick",),
                "pdftoppm": ("poppler",),
            },
        ),
    ),
    "Windows": (
        PackageManager(
            "scoop",
            ("scoop", "install"),
            {
                "exiftool": ("exiftool",),
                "tesseract": ("tesseract",),
                "ffmpeg": ("ffmpeg",),
                "imagemagick": ("imagemagick",),
                "pdftoppm": ("poppler",),
            },
        ),
        PackageManager(
            "choco",
            ("choco", "install", "-y"),
            {
                "exiftool": ("exiftool",),
                "tesseract": ("tesseract",),
                "ffmpeg": ("ffmpeg",),
                "imagemagick": ("imagemagick",),
                "pdftoppm": ("poppler",),
            },
        ),
    ),
}


def detect_package_manager(system: Optional[str] = None) -> Optional[PackageManager]:
    """Return the first package manager for this platform that is on PATH."""
    for manager in PACKAGE_MANAGERS.get(system or platform.system(), ()):
        if which(manager.name) is not None:
            return manager
    return None


def install_dependencies(
    dependencies: Sequence[Dependency] = DEPENDENCIES,
    *,
    progress: Optional[Callable[[ProgressEvent], None]] = None,
    manager: Optional[PackageManager] = None,
) -> List[Dependency]:
    """Install every missing dependency.

    Args:
        dependencies: Dependencies to install when missing.
        progress: Receives `(percent, message)` events as work proceeds.
        manager: Package manager to use; detected from the platform when omitted.

    Returns:
        List[Dependency]: Dependencies that were installed.

    Raises:
        InstallError: If no package manager is available or an install fails.
    """

    def report(percent: float, message: str) -> None:
        LOGGER.info("%s", message)
        if progress is not None:
            progress(ProgressEvent(percent=percent, message=message))

    report(0, "Starting installation")
    manager = manager or detect_package_manager()
    if manager is None:
        raise InstallError(f"No supported package manager found for {platform.system()}")

    missing = [dependency for dependency in dependencies if not is_available(dependency)]
    installed: List[Dependency] = []
    for index, dependency in enumerate(missing):
        command = manager.command_for(dependency)
        if command is None:
            LOGGER.debug("%s has no package for %s", manager.name, dependency.name)
            continue
        report(100 * index / len(missing), f"Installing {dependency.name} with {manager.name}")
        try:
            run(command, timeout=INSTALL_TIMEOUT)
        except ToolError as exc:
            if dependency.required:
                raise InstallError(f"Failed to install {dependency.name}: {exc}") from exc
            LOGGER.warning("Failed to install optional %s: %s", dependency.name, exc)
            continue
        installed.append(dependency)
    report(100, "Installation complete")
    return installed


__all__ = [
    "InstallError",
    "PACKAGE_MANAGERS",
    "PackageManager",
    "detect_package_manager",
    "install_dependencies",
]
