"""Content extractors that derive candidate names from file contents."""

from .archive import ArchiveExtractor
from .base import ContentExtractor
from .email import EmailExtractor
from .ocr import ImageOcrExtractor, OcrEngine
from .pdf import PdfExtractor
from .source_code import SourceCodeExtractor
from .text import TextExtractor
from .video import VideoOcrExtractor
from .web import WebExtractor

__all__ = [
    "ArchiveExtractor",
    "ContentExtractor",
    "EmailExtractor",
    "ImageOcrExtractor",
    "OcrEngine",
    "PdfExtractor",
    "SourceCodeExtractor",
    "TextExtractor",
    "VideoOcrExtractor",
    "WebExtractor",
]
