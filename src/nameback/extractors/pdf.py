"""Title extraction from PDF text layers, with an OCR fallback for scans."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Tuple

from nameback.naming.models import Candidate, NameSource
from nameback.naming.scorer import make_candidate

from .base import ContentExtractor, phrase_or_prefix
from .ocr import OcrEngine

try:  # pragma: no cover - optional dependency
    from pypdf import PdfReader
    from pypdf.errors import PyPdfError
except ImportError:  # pragma: no cover - executed when pypdf missing
    PdfReader = None
    PyPdfError = Exception

try:  # pragma: no cover - optional dependency
    from pdf2image import convert_from_path
    from pdf2image.exceptions import PDFInfoNotInstalledError, PDFPageCountError, PDFSyntaxError
except ImportError:  # pragma: no cover - executed when pdf2image missing
    convert_from_path = None
    PDFInfoNotInstalledError = PDFPageCountError = PDFSyntaxError = OSError

LOGGER = logging.getLogger(__name__)

HEADER_LINES = 4
SHORT_LINE = 30
COMBINED_LIMIT = 80
MIN_TITLE = 10
RASTER_DPI = 200


def title_from_lines(text: str) -> Optional[str]:
    """Combine the opening lines of a document into a title.

    The first line is always used; later lines of at most 30 characters are
    appended while the result stays within 80 characters, stopping once it
    reaches 30. Titles shorter than 10 characters are rejected.

    Args:
        text: Raw extracted text with its line breaks intact.

    Returns:
        Optional[str]: Combined title, or None.
    """
    lines = [line.strip() for line in text.splitlines()]
    lines = [line for line in lines if len(line) > 3][:HEADER_LINES]
    combined = ""
    for line in lines:
        if not combined:
            combined = line
        elif len(line) <= SHORT_LINE:
            candidate = f"{combined} {line}"
            if len(candidate) > COMBINED_LIMIT:
                break
            combined = candidate
        if len(combined) >= SHORT_LINE:
            break
    return combined if len(combined) >= MIN_TITLE else None


class PdfExtractor(ContentExtractor):
    """Read the PDF text layer, rasterizing page one for OCR when it is empty."""

    source = NameSource.PDF_TEXT

    def __init__(self, ocr: Optional[OcrEngine] = None, *, ocr_enabled: bool = True) -> None:
        self.ocr = ocr or OcrEngine()
        self.ocr_enabled = ocr_enabled

    def read_text(self, path: Path) -> Optional[str]:
        if PdfReader is None:
            return None
        try:
            reader = PdfReader(str(path), strict=False)
            if not reader.pages:
                return None
            return "\n".join(page.extract_text() or "" for page in reader.pages[:3])
        except (PyPdfError, OSError, ValueError, KeyError) as exc:
            LOGGER.debug("PDF text extraction failed for %s: %s", path, exc)
            return None

    def ocr_first_page(self, path: Path) -> Optional[str]:
        if not self.ocr_enabled or convert_from_path is None or not self.ocr.available():
            return None
        try:
            pages = convert_from_path(
                str(path), dpi=RASTER_DPI, first_page=1, last_page=1, timeout=self.ocr.timeout
            )
        except (PDFInfoNotInstalledError, PDFPageCountError, PDFSyntaxError, OSError) as exc:
            LOGGER.debug("Unable to rasterize %s: %s", path, exc)
            return None
        if not pages:
            return None
        return self.ocr.read(pages[0])

    def extract_with_source(self, path: Path) -> Optional[Tuple[str, NameSource]]:
        """Return the best title and the source it came from."""
        text = self.read_text(path)
        if text:
            title = title_from_lines(text) or phrase_or_prefix(text)
            if title:
                return title, NameSource.PDF_TEXT
            LOGGER.debug("PDF text too short in %s; trying OCR", path)

        scanned = self.ocr_first_page(path)
        if scanned:
            title = phrase_or_prefix(scanned)
            if title:
                return title, NameSource.OCR_IMAGE
        return None

    def extract(self, path: Path) -> Optional[str]:
        result = self.extract_with_source(path)
        return result[0] if result else None

    def candidates(self, path: Path) -> List[Candidate]:
        result = self.extract_with_source(path)
        if result is None:
            return []
        text, source = result
        return [make_candidate(text, source)]


__all__ = ["PdfExtractor", "title_from_lines"]
