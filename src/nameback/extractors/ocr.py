"""Optical character recognition for images via Tesseract."""

from __future__ import annotations

import logging
import tempfile
import threading
from pathlib import Path
from typing import Optional, Sequence, Set

from nameback.external import ToolError, run
from nameback.naming.models import NameSource

from .base import TITLE_LIMIT, ContentExtractor, clean_text

try:  # pragma: no cover - optional dependency
    from PIL import Image
except ImportError:  # pragma: no cover - executed when Pillow missing
    Image = None

try:  # pragma: no cover - optional dependency
    import pytesseract
except ImportError:  # pragma: no cover - executed when pytesseract missing
    pytesseract = None

LOGGER = logging.getLogger(__name__)

DEFAULT_LANGUAGES = ("chi_tra", "chi_sim", "eng")
MIN_OCR_CHARS = 10
HEIC_EXTENSIONS = frozenset({"heic", "heif"})
IMAGEMAGICK_COMMANDS = ("magick", "convert")


class OcrEngine:
    """Run Tesseract once per language and keep the most confident reading."""

    def __init__(self, languages: Sequence[str] = DEFAULT_LANGUAGES, *, timeout: float = 30.0):
        self.languages = tuple(languages)
        self.timeout = timeout
        self._installed: Optional[Set[str]] = None
        self._lock = threading.Lock()

    def installed_languages(self) -> Set[str]:
        """Return the language packs Tesseract reports, cached after the first call."""
        with self._lock:
            if self._installed is None:
                try:
                    self._installed = set(pytesseract.get_languages(config=""))
                except (
                    pytesseract.TesseractError, pytesseract.TesseractNotFoundError, OSError
                ) as exc:
                    LOGGER.debug("Unable to list Tesseract languages: %s", exc)
                    self._installed = set()
            return self._installed

    def available(self) -> bool:
        return pytesseract is not None and Image is not None and bool(self.installed_languages())

    def read(self, image: "Image.Image") -> Optional[str]:
        """Recognize text in `image`.

        Each configured language is tried in order; missing language packs are
        skipped. The reading with the highest mean word confidence wins, with
        ties going to the longer cleaned text.

        Args:
            image: Pillow image to recognize.

        Returns:
            Optional[str]: Cleaned text of the best reading, or None when nothing was read.
        """
        if not self.available():
            return None
        installed = self.installed_languages()
        best: Optional[tuple] = None
        for language in self.languages:
            if language not in installed:
                LOGGER.debug("Skipping OCR language %s; pack not installed", language)
                continue
            try:
                data = pytesseract.image_to_data(
                    image,
                    lang=language,
                    output_type=pytesseract.Output.DICT,
                    timeout=self.timeout,
                )
            except (pytesseract.TesseractError, RuntimeError, OSError) as exc:
                LOGGER.debug("OCR with %s failed: %s", language, exc)
                continue

            words = []
            confidences = []
            for word, confidence in zip(data.get("text", []), data.get("conf", [])):
                value = float(confidence)
                if value < 0 or not str(word).strip():
                    continue
                words.append(str(word).strip())
                confidences.append(value)
            if not words:
                continue
            text = clean_text(" ".join(words))
            rank = (sum(confidences) / len(confidences), len(text))
            LOGGER.debug("OCR with %s: confidence %.1f, %d chars", language, rank[0], rank[1])
            if best is None or rank > best[0]:
                best = (rank, text)
        return best[1] if best else None

    def read_path(self, path: Path) -> Optional[str]:
        if Image is None:
            return None
        try:
            with Image.open(path) as image:
                image.load()
                return self.read(image)
        except OSError as exc:
            LOGGER.debug("Unable to open image %s: %s", path, exc)
            return None


def finalize_ocr_text(text: Optional[str]) -> Optional[str]:
    """Reject readings shorter than ten characters and cut the rest to 80."""
    if not text:
        return None
    cleaned = clean_text(text)
    if len(cleaned) < MIN_OCR_CHARS:
        return None
    return cleaned[:TITLE_LIMIT]


def convert_to_png(source: Path, destination: Path, *, timeout: float = 30.0) -> bool:
    """Convert `source` to PNG with ImageMagick, trying `magick` before `convert`."""
    for command in IMAGEMAGICK_COMMANDS:
        try:
            run([command, source, destination], timeout=timeout)
        except ToolError as exc:
            LOGGER.debug("%s", exc)
            continue
        if destination.exists():
            return True
    return False


class ImageOcrExtractor(ContentExtractor):
    """Read text rendered inside photos, screenshots, and scans."""

    source = NameSource.OCR_IMAGE

    def __init__(self, engine: Optional[OcrEngine] = None) -> None:
        self.engine = engine or OcrEngine()

    def extract(self, path: Path) -> Optional[str]:
        if path.suffix.lower().lstrip(".") in HEIC_EXTENSIONS:
            with tempfile.TemporaryDirectory(prefix="nameback_") as workdir:
                converted = Path(workdir) / f"{path.stem}.png"
                if not convert_to_png(path, converted, timeout=self.engine.timeout):
                    LOGGER.debug("HEIC conversion failed for %s", path)
                    return None
                return finalize_ocr_text(self.engine.read_path(converted))
        return finalize_ocr_text(self.engine.read_path(path))


__all__ = [
    "DEFAULT_LANGUAGES",
    "ImageOcrExtractor",
    "OcrEngine",
    "convert_to_png",
    "finalize_ocr_text",
]
