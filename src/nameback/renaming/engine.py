"""Batch orchestration: scan, analyze, name, and rename a directory."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, Dict, List, Optional

from nameback.config.models import NamebackConfig
from nameback.enrichment.geocoding import ReverseGeocoder
from nameback.ingestion.detectors import TypeDetector
from nameback.ingestion.discovery import DirectoryScanner
from nameback.ingestion.models import FileCategory, PathEntry, PendingFile
from nameback.naming.models import FileAnalysis
from nameback.naming.pipeline import NamingPipeline
from nameback.naming.sanitizer import CollisionResolver, sanitize
from nameback.naming.series import detect_series
from nameback.state.cache import MetadataCache
from nameback.state.errors import CacheError, HistoryError
from nameback.state.history import RenameHistory
from nameback.state.models import RenameOperation as HistoryOperation

from .executor import RenameExecutor
from .models import ProgressEvent, RenameOperation, RenameResult

LOGGER = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressEvent], None]


class DirectoryError(Exception):
    """Raised when the target directory is missing or unreadable."""


class RenameEngine:
    """Run the naming pipeline over a directory and apply the proposals.

    Args:
        config: Resolved configuration. Defaults to built-in defaults.
        pipeline: Naming pipeline; built from `config` when omitted.
        detector: File type detector.
        cache: Metadata cache. Loaded from `config.cache.path` when omitted and
            caching is enabled.
        history: Rename history. Loaded from `config.history.path` on first use.
    """

    def __init__(
        self,
        config: Optional[NamebackConfig] = None,
        *,
        pipeline: Optional[NamingPipeline] = None,
        detector: Optional[TypeDetector] = None,
        cache: Optional[MetadataCache] = None,
        history: Optional[RenameHistory] = None,
    ) -> None:
        self.config = config or NamebackConfig()
        if pipeline is None:
            geocoder = None
            if self.config.enrichment.include_location and self.config.enrichment.geocode:
                geocoder = ReverseGeocoder(self.config.geocoding)
            pipeline = NamingPipeline(
                self.config.processing, self.config.enrichment, geocoder=geocoder
            )
        self.pipeline = pipeline
        self.detector = detector or TypeDetector()
        self._cache = cache
        self._history = history
        self._callbacks: List[ProgressCallback] = []

    def subscribe(self, callback: ProgressCallback) -> None:
        """Register `callback` to receive progress events."""
        self._callbacks.append(callback)

    def _emit(self, percent: float, message: str) -> None:
        event = ProgressEvent(percent=max(0.0, min(100.0, percent)), message=message)
        for callback in self._callbacks:
            callback(event)

    @property
    def cache(self) -> Optional[MetadataCache]:
        if self._cache is None and self.config.cache.enabled:
            self._cache = MetadataCache.load(Path(self.config.cache.path))
        return self._cache

    @property
    def history(self) -> RenameHistory:
        """Rename history, loaded on first use.

        Raises:
            HistoryError: If the stored history is corrupt.
        """
        if self._history is None:
            self._history = RenameHistory.load(
                Path(self.config.history.path), self.config.history.max_entries
            )
        return self._history

    def _validate_directory(self, directory: Path) -> Path:
        resolved = directory.expanduser().resolve()
        if not resolved.exists():
            raise DirectoryError(f"Directory does not exist: {directory}")
        if not resolved.is_dir():
            raise DirectoryError(f"Not a directory: {directory}")
        if not os.access(resolved, os.R_OK | os.X_OK):
            raise DirectoryError(f"Directory is not readable: {directory}")
        return resolved

    def _path_entry(self, pending: PendingFile) -> PathEntry:
        _, category = self.detector.detect(pending.path)
        return PathEntry(
            absolute_path=pending.path,
            original_name=pending.path.name,
            extension=pending.path.suffix[1:],
            size=pending.size_bytes,
            mtime=pending.modified_at.timestamp(),
            category=category,
        )

    def _from_cache(self, entry: PathEntry) -> Optional[FileAnalysis]:
        cache = self.cache
        if cache is None or entry.category is FileCategory.UNKNOWN:
            return None
        cached = cache.lookup(entry)
        if cached is None or cached.chosen is None or cached.metadata is None:
            return None
        enrichment = self.config.enrichment
        metadata = cached.metadata.model_copy(
            update={
                "include_location": enrichment.include_location,
                "include_timestamp": enrichment.include_timestamp,
                "geocode_enabled": enrichment.geocode,
            }
        )
        chosen = cached.chosen.to_candidate()
        LOGGER.debug("Cache hit for %s", entry.absolute_path)
        return FileAnalysis(
            path_entry=entry,
            candidates=[chosen],
            chosen_candidate=chosen,
            metadata=metadata,
            from_cache=True,
        )

    def analyze_directory(self, directory: Path) -> List[FileAnalysis]:
        """Analyze every file under `directory` and assign collision-free proposals.

        Args:
            directory: Directory to scan recursively.

        Returns:
            List[FileAnalysis]: One analysis per file, in scan order.

        Raises:
            DirectoryError: If the directory is missing or unreadable.
        """
        root = self._validate_directory(directory)
        self._emit(0, f"Scanning {root}")
        scanner = DirectoryScanner(skip_hidden=self.config.processing.skip_hidden)
        pending = list(scanner.scan(root))
        total = len(pending)
        self._emit(5, f"Found {total} files")

        analyses: List[FileAnalysis] = []
        for index, item in enumerate(pending, start=1):
            entry = self._path_entry(item)
            analysis = self._from_cache(entry) or self.pipeline.analyze(entry)
            analyses.append(analysis)
            self._emit(5 + 85 * index / max(total, 1), f"Analyzed {entry.original_name}")

        self.assign_names(analyses)

        cache = self.cache
        if cache is not None:
            for analysis in analyses:
                if analysis.path_entry.category is not FileCategory.UNKNOWN:
                    cache.store(analysis)
            pruned = cache.cleanup_stale_entries()
            if pruned:
                LOGGER.debug("Pruned %d cache entries for missing files", pruned)
            self._save_cache(cache)

        self._emit(100, "Analysis complete")
        return analyses

    def _save_cache(self, cache: MetadataCache) -> None:
        try:
            cache.save()
        except CacheError as exc:
            LOGGER.warning("%s", exc)

    def series_bases(self, analyses: List[FileAnalysis]) -> Dict[Path, Optional[str]]:
        """Return the series name for every file that belongs to a series.

        Members of a series whose files have no chosen candidate map to None
        so that none of them is renamed.
        """
        by_path = {
            analysis.original_path: analysis
            for analysis in analyses
            if analysis.path_entry.category is not FileCategory.UNKNOWN
        }
        names: Dict[Path, Optional[str]] = {}
        for series in detect_series(by_path):
            members = [by_path[path] for path, _ in series.members]
            best = None
            for member in members:
                chosen = member.chosen_candidate
                if chosen is not None and (best is None or chosen.score > best.score):
                    best = chosen
            for member in members:
                if best is None:
                    names[member.original_path] = None
                    continue
                enriched = self.pipeline.base_name(member, text=best.text)
                names[member.original_path] = series.member_name(member.original_path, enriched)
        return names

    def assign_names(self, analyses: List[FileAnalysis]) -> None:
        """Fill in `proposed_name` for each analysis.

        Series naming runs first, then enrichment, sanitization, and collision
        resolution against the directory listing and earlier proposals.
        """
        resolver = CollisionResolver()
        series_names = self.series_bases(analyses)
        for analysis in analyses:
            path = analysis.original_path
            if path in series_names:
                base = series_names[path]
            else:
                base = self.pipeline.base_name(analysis)
            if base is None:
                analysis.proposed_name = None
                continue
            entry = analysis.path_entry
            analysis.proposed_name = resolver.claim(
                entry.directory, sanitize(base), entry.extension, entry.original_name
            )

    def rename_files(
        self, analyses: List[FileAnalysis], dry_run: bool = False
    ) -> List[RenameResult]:
        """Rename every analyzed file that has a proposal different from its name.

        Args:
            analyses: Output of `analyze_directory`.
            dry_run: Report what would happen without touching the filesystem.

        Returns:
            List[RenameResult]: One result per attempted rename.
        """
        operations = [
            RenameOperation(
                source=analysis.original_path,
                destination=analysis.original_path.with_name(analysis.proposed_name),
            )
            for analysis in analyses
            if analysis.needs_rename
        ]
        executor = RenameExecutor(None if dry_run else self.history)
        total = len(operations)
        results: List[RenameResult] = []
        for index, operation in enumerate(operations, start=1):
            results.append(executor.rename(operation, dry_run=dry_run))
            verb = "Would rename" if dry_run else "Renamed"
            self._emit(100 * index / total, f"{verb} {operation.source.name}")
        renamed = [result for result in results if result.success]
        if dry_run or not renamed:
            return results
        try:
            self.history.save()
        except HistoryError as exc:
            LOGGER.warning("%s", exc)
        cache = self.cache
        if cache is not None:
            # Entries are keyed by path; the old names no longer exist.
            for result in renamed:
                cache.discard(result.original_path)
            self._save_cache(cache)
        return results

    def process_directory(self, directory: Path, dry_run: bool = False) -> List[RenameResult]:
        """Analyze `directory` and apply the resulting renames."""
        return self.rename_files(self.analyze_directory(directory), dry_run=dry_run)

    def undo_last(self) -> HistoryOperation:
        """Revert the most recent rename and persist the history.

        Raises:
            UndoError: If nothing can be undone.
        """
        operation = self.history.undo_last()
        self.history.save()
        return operation


__all__ = ["DirectoryError", "ProgressCallback", "RenameEngine"]
