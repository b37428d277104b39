"""Configuration models describing nameback settings."""

from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field


class NamebackBaseModel(BaseModel):
    """Shared configuration for nameback Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class ProcessingOptions(NamebackBaseModel):
    """Options governing which files are analyzed and how.

    Attributes:
        skip_hidden: Whether dot-prefixed files and directories are skipped.
        multiframe_video: Whether video OCR samples several frames.
        ocr_languages: Tesseract language codes tried in order.
        tool_timeout_seconds: Timeout applied to external tool invocations.
    """

    skip_hidden: bool = False
    multiframe_video: bool = True
    ocr_languages: List[str] = Field(default_factory=lambda: ["chi_tra", "chi_sim", "eng"])
    tool_timeout_seconds: int = 30


class EnrichmentOptions(NamebackBaseModel):
    """Optional suffixes appended to chosen names.

    Attributes:
        include_location: Append a location token when GPS data is present.
        include_timestamp: Append a `YYYY-MM-DD` date when a capture date is present.
        geocode: Resolve GPS coordinates to a city token instead of raw coordinates.
    """

    include_location: bool = False
    include_timestamp: bool = False
    geocode: bool = True


class GeocodingSettings(NamebackBaseModel):
    """Reverse-geocoding client settings.

    Attributes:
        endpoint: Reverse lookup URL.
        user_agent: User-Agent header sent with each request.
        timeout_seconds: HTTP timeout for a single lookup.
        min_interval_seconds: Minimum spacing between outbound requests.
        cache_ttl_seconds: Lifetime of memoized lookups.
    """

    endpoint: str = "https://nominatim.openstreetmap.org/reverse"
    user_agent: str = "nameback/0.1 (https://github.com/nameback/nameback)"
    timeout_seconds: float = 5.0
    min_interval_seconds: float = 1.0
    cache_ttl_seconds: int = 3_600


class CacheSettings(NamebackBaseModel):
    """Metadata cache settings.

    Attributes:
        enabled: Whether analysis results are cached between runs.
        path: Location of the cache file.
    """

    enabled: bool = True
    path: str = "~/.nameback/cache/metadata.json"


class HistorySettings(NamebackBaseModel):
    """Rename history settings.

    Attributes:
        path: Location of the history file.
        max_entries: Maximum number of operations retained.
    """

    path: str = "~/.nameback/history.json"
    max_entries: int = 1_000


class LoggingSettings(NamebackBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level used when no override is given.
    """

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


class CLIOptions(NamebackBaseModel):
    """CLI presentation defaults.

    Attributes:
        history_limit: Number of history entries shown by `--history`.
        show_unchanged: Whether files without a proposed name are listed in previews.
    """

    history_limit: int = 20
    show_unchanged: bool = False


class NamebackConfig(NamebackBaseModel):
    """Top-level configuration for nameback.

    Attributes:
        processing: File selection and extraction settings.
        enrichment: Location/date suffix settings.
        geocoding: Reverse-geocoding client settings.
        cache: Metadata cache settings.
        history: Rename history settings.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    processing: ProcessingOptions = Field(default_factory=ProcessingOptions)
    enrichment: EnrichmentOptions = Field(default_factory=EnrichmentOptions)
    geocoding: GeocodingSettings = Field(default_factory=GeocodingSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    history: HistorySettings = Field(default_factory=HistorySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "NamebackBaseModel",
    "ProcessingOptions",
    "EnrichmentOptions",
    "GeocodingSettings",
    "CacheSettings",
    "HistorySettings",
    "LoggingSettings",
    "CLIOptions",
    "NamebackConfig",
]
