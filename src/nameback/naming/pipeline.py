"""Per-file candidate collection and selection."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from nameback.config.models import EnrichmentOptions, ProcessingOptions
from nameback.context.directory import directory_context
from nameback.context.stem import StemAnalysis, analyze_stem
from nameback.enrichment import enrich
from nameback.enrichment.geocoding import ReverseGeocoder
from nameback.extractors import (
    ArchiveExtractor,
    ContentExtractor,
    EmailExtractor,
    ImageOcrExtractor,
    OcrEngine,
    PdfExtractor,
    SourceCodeExtractor,
    TextExtractor,
    VideoOcrExtractor,
    WebExtractor,
)
from nameback.ingestion.models import FileCategory, PathEntry
from nameback.metadata.models import MetadataRecord
from nameback.metadata.probe import MetadataProbe
from nameback.metadata.quality import any_useful, rejection_reason

from .models import Candidate, FileAnalysis, NameSource
from .scorer import make_candidate, select_best

LOGGER = logging.getLogger(__name__)

# Metadata fields offered as candidates, per category, in priority order.
CATEGORY_FIELDS: Dict[FileCategory, Tuple[str, ...]] = {
    FileCategory.IMAGE: ("title", "description", "date_time_original"),
    FileCategory.DOCUMENT: ("title", "subject", "author"),
    FileCategory.AUDIO: ("title", "artist", "album"),
    FileCategory.VIDEO: ("title", "effective_creation_date"),
}

TEXT_EXTENSIONS = frozenset({"txt", "md", "markdown", "csv", "json", "yaml", "yml", "log", "rst"})


@dataclass(slots=True)
class ExtractorSet:
    """The content extractors a pipeline dispatches to."""

    pdf: ContentExtractor
    text: ContentExtractor
    image: ContentExtractor
    video: ContentExtractor
    email: ContentExtractor
    web: ContentExtractor
    archive: ContentExtractor
    source_code: ContentExtractor

    @classmethod
    def from_options(cls, options: ProcessingOptions) -> "ExtractorSet":
        """Build the default extractors sharing one OCR engine."""
        timeout = float(options.tool_timeout_seconds)
        ocr = OcrEngine(options.ocr_languages, timeout=timeout)
        return cls(
            pdf=PdfExtractor(ocr),
            text=TextExtractor(),
            image=ImageOcrExtractor(ocr),
            video=VideoOcrExtractor(ocr, multiframe=options.multiframe_video),
            email=EmailExtractor(),
            web=WebExtractor(),
            archive=ArchiveExtractor(timeout=timeout),
            source_code=SourceCodeExtractor(),
        )

    def for_category(self, category: FileCategory) -> Optional[ContentExtractor]:
        """Format handler whose result stands in for metadata, if the category has one."""
        return {
            FileCategory.EMAIL: self.email,
            FileCategory.WEB: self.web,
            FileCategory.ARCHIVE: self.archive,
            FileCategory.SOURCE_CODE: self.source_code,
        }.get(category)


class NamingPipeline:
    """Fuse metadata, content, and context signals into one ranked candidate list.

    Args:
        processing: Processing options; controls OCR languages and video sampling.
        enrichment: Location and date enrichment switches.
        probe: Metadata probe. Defaults to an exiftool-backed probe.
        extractors: Content extractors. Defaults to `ExtractorSet.from_options`.
        geocoder: Reverse geocoder for location enrichment.
    """

    def __init__(
        self,
        processing: Optional[ProcessingOptions] = None,
        enrichment: Optional[EnrichmentOptions] = None,
        *,
        probe: Optional[MetadataProbe] = None,
        extractors: Optional[ExtractorSet] = None,
        geocoder: Optional[ReverseGeocoder] = None,
    ) -> None:
        self.processing = processing or ProcessingOptions()
        self.enrichment = enrichment or EnrichmentOptions()
        self.probe = probe or MetadataProbe(timeout=float(self.processing.tool_timeout_seconds))
        self.extractors = extractors or ExtractorSet.from_options(self.processing)
        self.geocoder = geocoder

    def read_metadata(self, entry: PathEntry) -> MetadataRecord:
        """Probe `entry` and stamp the enrichment switches onto the record."""
        record = self.probe.probe(entry.absolute_path)
        return record.model_copy(
            update={
                "include_location": self.enrichment.include_location,
                "include_timestamp": self.enrichment.include_timestamp,
                "geocode_enabled": self.enrichment.geocode,
            }
        )

    def metadata_candidates(self, entry: PathEntry, metadata: MetadataRecord) -> List[Candidate]:
        candidates: List[Candidate] = []
        for field_name in CATEGORY_FIELDS.get(entry.category, ()):
            value = getattr(metadata, field_name)
            if value is None:
                continue
            reason = rejection_reason(value)
            if reason is not None:
                LOGGER.debug(
                    "Skipping %s %r for %s: %s", field_name, value, entry.original_name, reason
                )
                continue
            candidates.append(make_candidate(value, NameSource.METADATA))
        return candidates

    def content_extractor(
        self, entry: PathEntry, metadata: MetadataRecord
    ) -> Optional[ContentExtractor]:
        """Pick the content extractor to run, or None when metadata already suffices.

        PDFs are read when neither title nor subject is useful; text files and
        images when none of title, description, or capture date is; videos
        when neither title nor creation date is.
        """
        extension = entry.extension.lower()
        descriptive = any_useful(metadata.title, metadata.description, metadata.date_time_original)
        if extension == "pdf":
            if any_useful(metadata.title, metadata.subject):
                return None
            return self.extractors.pdf
        if entry.category is FileCategory.DOCUMENT and extension in TEXT_EXTENSIONS:
            return None if descriptive else self.extractors.text
        if entry.category is FileCategory.IMAGE:
            return None if descriptive else self.extractors.image
        if entry.category is FileCategory.VIDEO:
            if any_useful(metadata.title, metadata.effective_creation_date):
                return None
            return self.extractors.video
        return None

    def _run(self, extractor: ContentExtractor, entry: PathEntry) -> List[Candidate]:
        try:
            return extractor.candidates(entry.absolute_path)
        except Exception as exc:  # pragma: no cover - extractors are best effort
            LOGGER.debug(
                "%s failed for %s: %s", type(extractor).__name__, entry.absolute_path, exc,
                exc_info=True,
            )
            return []

    def collect_candidates(
        self, entry: PathEntry, metadata: MetadataRecord, stem: Optional[StemAnalysis] = None
    ) -> List[Candidate]:
        """Gather every candidate for `entry` in priority order.

        Metadata fields come first, then content extraction or the category's
        format handler, then the analyzed file stem, then directory context.

        Args:
            entry: File being analyzed.
            metadata: Probed metadata.
            stem: Pre-computed stem analysis; computed when omitted.

        Returns:
            List[Candidate]: Scored candidates; empty for unknown file types.
        """
        if entry.category is FileCategory.UNKNOWN:
            return []

        candidates = self.metadata_candidates(entry, metadata)

        extractor = self.extractors.for_category(entry.category)
        if extractor is None:
            extractor = self.content_extractor(entry, metadata)
        if extractor is not None:
            candidates.extend(self._run(extractor, entry))

        if stem is None:
            stem = analyze_stem(entry.stem)
        if stem.text:
            candidates.append(make_candidate(stem.text, NameSource.FILENAME_ANALYSIS))

        context = directory_context(entry.absolute_path)
        if context:
            candidates.append(make_candidate(context, NameSource.DIRECTORY_CONTEXT))
        return candidates

    @staticmethod
    def choose(candidates: List[Candidate], stem: StemAnalysis) -> Optional[Candidate]:
        """Select the winner, falling back to the stem's dates when nothing is acceptable."""
        best = select_best(candidates)
        if best is None and stem.dates_only and stem.text:
            return make_candidate(stem.text, NameSource.FALLBACK)
        return best

    def analyze(self, entry: PathEntry) -> FileAnalysis:
        """Probe, collect, and choose for a single file.

        The proposed name is left unset; the engine assigns it once series and
        collisions across the batch are known.
        """
        if entry.category is FileCategory.UNKNOWN:
            LOGGER.debug("Skipping %s: unknown file type", entry.absolute_path)
            return FileAnalysis(path_entry=entry)

        metadata = self.read_metadata(entry)
        stem = analyze_stem(entry.stem)
        candidates = self.collect_candidates(entry, metadata, stem)
        chosen = self.choose(candidates, stem)
        if (
            chosen is not None
            and entry.original_name.startswith(".")
            and chosen.source is not NameSource.METADATA
        ):
            # Dotfiles keep their name unless the file itself declares a title.
            LOGGER.debug("Keeping %s: no metadata name", entry.original_name)
            chosen = None
        if chosen is None:
            LOGGER.debug("No acceptable name for %s", entry.absolute_path)
        else:
            LOGGER.debug(
                "Chose %r (%s, %.2f) for %s",
                chosen.text,
                chosen.source.value,
                chosen.score,
                entry.original_name,
            )
        return FileAnalysis(
            path_entry=entry, candidates=candidates, chosen_candidate=chosen, metadata=metadata
        )

    def base_name(self, analysis: FileAnalysis, text: Optional[str] = None) -> Optional[str]:
        """Return the enriched, unsanitized base name for an analysis.

        Args:
            analysis: Analysis with a chosen candidate.
            text: Replacement base text, as used for series members.

        Returns:
            Optional[str]: Base followed by location and date parts when enabled.
        """
        base = text if text is not None else (
            analysis.chosen_candidate.text if analysis.chosen_candidate else None
        )
        if base is None:
            return None
        return enrich(base, analysis.metadata, self.geocoder)


__all__ = ["CATEGORY_FIELDS", "ExtractorSet", "NamingPipeline", "TEXT_EXTENSIONS"]
