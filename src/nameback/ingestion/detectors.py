"""File type detection and hashing utilities."""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path
from typing import Optional, Tuple

try:  # pragma: no cover - optional dependency
    import magic
except ImportError:  # pragma: no cover - executed when python-magic/libmagic missing
    magic = None

from .models import FileCategory

LOGGER = logging.getLogger(__name__)

SNIFF_BYTES = 8 * 1024
HASH_WHOLE_FILE_LIMIT = 1024 * 1024
HASH_CHUNK = 64 * 1024

EXTENSION_CATEGORIES: dict[str, FileCategory] = {
    **dict.fromkeys(
        ("jpg", "jpeg", "png", "gif", "bmp", "tiff", "tif", "webp", "heic", "heif", "ico", "svg"),
        FileCategory.IMAGE,
    ),
    **dict.fromkeys(
        (
            "pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx", "odt", "ods", "odp", "rtf",
            "txt", "md", "markdown", "csv", "json", "yaml", "yml",
        ),
        FileCategory.DOCUMENT,
    ),
    **dict.fromkeys(("eml", "msg"), FileCategory.EMAIL),
    **dict.fromkeys(("html", "htm", "mhtml"), FileCategory.WEB),
    **dict.fromkeys(("zip", "tar", "gz", "tgz", "bz2", "xz", "7z", "rar"), FileCategory.ARCHIVE),
    **dict.fromkeys(
        ("py", "js", "jsx", "ts", "tsx", "rs", "java", "c", "cpp", "cc", "cxx", "h", "hpp", "hxx"),
        FileCategory.SOURCE_CODE,
    ),
    **dict.fromkeys(
        ("mp3", "wav", "flac", "aac", "ogg", "m4a", "wma", "opus"), FileCategory.AUDIO
    ),
    **dict.fromkeys(
        ("mp4", "avi", "mkv", "mov", "wmv", "flv", "webm", "m4v", "mpg", "mpeg"),
        FileCategory.VIDEO,
    ),
}

# MIME types that carry no useful signature; the extension decides instead.
_WEAK_MIME_TYPES = {
    "application/octet-stream",
    "application/json",
    "application/zip",
    "application/x-empty",
    "inode/x-empty",
}

_DOCUMENT_MIME_PREFIXES = (
    "application/vnd.openxmlformats-officedocument",
    "application/vnd.ms-",
    "application/vnd.oasis.opendocument",
)

_ARCHIVE_MIME_TYPES = {
    "application/zip",
    "application/x-tar",
    "application/gzip",
    "application/x-gzip",
    "application/x-bzip2",
    "application/x-xz",
    "application/x-7z-compressed",
    "application/x-rar",
    "application/vnd.rar",
    "application/x-rar-compressed",
}


def category_for_extension(extension: str) -> FileCategory:
    """Map a file extension (with or without the dot) to a category."""
    return EXTENSION_CATEGORIES.get(extension.lower().lstrip("."), FileCategory.UNKNOWN)


def category_for_mime(mime: str) -> FileCategory:
    """Map a MIME type to a category, returning UNKNOWN when no rule applies."""
    if mime.startswith("image/"):
        return FileCategory.IMAGE
    if mime.startswith("audio/"):
        return FileCategory.AUDIO
    if mime.startswith("video/"):
        return FileCategory.VIDEO
    if mime == "message/rfc822":
        return FileCategory.EMAIL
    if mime == "text/html":
        return FileCategory.WEB
    if mime in {"application/pdf", "application/rtf", "text/rtf", "application/msword"}:
        return FileCategory.DOCUMENT
    if mime.startswith(_DOCUMENT_MIME_PREFIXES):
        return FileCategory.DOCUMENT
    if mime in _ARCHIVE_MIME_TYPES:
        return FileCategory.ARCHIVE
    if mime.startswith("text/"):
        return FileCategory.DOCUMENT
    return FileCategory.UNKNOWN


class TypeDetector:
    """Identify MIME type and file category using python-magic with an extension fallback."""

    def sniff(self, path: Path) -> Optional[str]:
        """Return the MIME type derived from the first 8 KiB, if libmagic is available.

        Raises:
            OSError: If the file cannot be read.
        """
        with path.open("rb") as handle:
            head = handle.read(SNIFF_BYTES)
        if magic is None:
            return None
        try:
            return magic.from_buffer(head, mime=True)
        except Exception as exc:  # pragma: no cover - libmagic internal failure
            LOGGER.debug("libmagic failed on %s: %s", path, exc)
            return None

    def detect(self, path: Path) -> Tuple[str, FileCategory]:
        """Return MIME type and category for `path`.

        Read errors are logged and reported as an unknown category.

        Args:
            path: File to classify.

        Returns:
            Tuple[str, FileCategory]: Detected MIME type (empty when undetermined) and category.
        """
        by_extension = category_for_extension(path.suffix)
        try:
            mime = self.sniff(path)
        except OSError as exc:
            LOGGER.warning("Unable to read %s for type detection: %s", path, exc)
            return "", FileCategory.UNKNOWN

        if not mime:
            return "", by_extension

        if by_extension is not FileCategory.UNKNOWN and (
            mime in _WEAK_MIME_TYPES or mime.startswith("text/")
        ):
            return mime, by_extension

        by_mime = category_for_mime(mime)
        if by_mime is FileCategory.UNKNOWN:
            return mime, by_extension
        return mime, by_mime


class HashComputer:
    """Compute fast 64-bit content hashes for cache invalidation.

    Files under 1 MiB are hashed whole. Larger files hash their size followed by
    the first and last 64 KiB, which is enough to notice edits but not to
    deduplicate content.
    """

    def compute(self, path: Path) -> str:
        """Return a 16-character hex digest of the file contents.

        Raises:
            OSError: If the file cannot be read.
        """
        digest = hashlib.blake2b(digest_size=8)
        size = path.stat().st_size
        with path.open("rb") as handle:
            if size < HASH_WHOLE_FILE_LIMIT:
                for chunk in iter(lambda: handle.read(HASH_CHUNK), b""):
                    digest.update(chunk)
            else:
                digest.update(size.to_bytes(8, "little"))
                digest.update(handle.read(HASH_CHUNK))
                handle.seek(max(size - HASH_CHUNK, 0))
                digest.update(handle.read(HASH_CHUNK))
        return digest.hexdigest()


__all__ = [
    "EXTENSION_CATEGORIES",
    "HashComputer",
    "TypeDetector",
    "category_for_extension",
    "category_for_mime",
]
