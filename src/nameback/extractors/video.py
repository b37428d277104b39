"""Frame-grab OCR for videos with burned-in titles."""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import List, Optional, Sequence

from nameback.external import ToolError, run
from nameback.naming.models import Candidate, NameSource
from nameback.naming.scorer import make_candidate, select_best

from .base import ContentExtractor
from .ocr import OcrEngine, finalize_ocr_text

LOGGER = logging.getLogger(__name__)

MULTIFRAME_TIMESTAMPS = ("00:00:01", "00:00:05", "00:00:10")
SINGLE_FRAME_TIMESTAMPS = ("00:00:01",)


def grab_frame(video: Path, timestamp: str, destination: Path, *, timeout: float = 30.0) -> bool:
    """Write the frame at `timestamp` to `destination` as PNG using ffmpeg."""
    try:
        run(
            [
                "ffmpeg",
                "-ss",
                timestamp,
                "-i",
                video,
                "-vframes",
                "1",
                "-f",
                "image2",
                destination,
                "-y",
            ],
            timeout=timeout,
        )
    except ToolError as exc:
        LOGGER.debug("Frame grab at %s failed for %s: %s", timestamp, video, exc)
        return False
    return destination.exists()


class VideoOcrExtractor(ContentExtractor):
    """OCR one or more early frames and keep the best-scoring reading."""

    source = NameSource.OCR_VIDEO

    def __init__(self, ocr: Optional[OcrEngine] = None, *, multiframe: bool = True) -> None:
        self.ocr = ocr or OcrEngine()
        self.multiframe = multiframe

    @property
    def timestamps(self) -> Sequence[str]:
        return MULTIFRAME_TIMESTAMPS if self.multiframe else SINGLE_FRAME_TIMESTAMPS

    def frame_texts(self, path: Path) -> List[str]:
        """Return the accepted OCR reading for each frame that produced one."""
        if not self.ocr.available():
            LOGGER.debug("Tesseract unavailable; skipping video OCR for %s", path)
            return []
        texts: List[str] = []
        with tempfile.TemporaryDirectory(prefix="nameback_") as workdir:
            for timestamp in self.timestamps:
                frame = Path(workdir) / f"frame_{timestamp.replace(':', '_')}.png"
                if not grab_frame(path, timestamp, frame, timeout=self.ocr.timeout):
                    continue
                text = finalize_ocr_text(self.ocr.read_path(frame))
                if text:
                    LOGGER.debug("Frame at %s read as %r", timestamp, text)
                    texts.append(text)
        return texts

    def candidates(self, path: Path) -> List[Candidate]:
        scored = [make_candidate(text, self.source) for text in self.frame_texts(path)]
        best = select_best(scored)
        return [best] if best else []

    def extract(self, path: Path) -> Optional[str]:
        found = self.candidates(path)
        return found[0].text if found else None


__all__ = ["MULTIFRAME_TIMESTAMPS", "VideoOcrExtractor", "grab_frame"]
