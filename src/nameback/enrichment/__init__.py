"""Location and date enrichment for proposed names."""

from __future__ import annotations

import logging
from typing import List, Optional

from nameback.metadata.models import MetadataRecord

from .geocoding import ReverseGeocoder, format_address
from .gps import Coordinates, coordinates_from_metadata, format_coordinates, parse_coordinate
from .timestamps import date_from_metadata, format_timestamp

LOGGER = logging.getLogger(__name__)


def location_label(
    metadata: MetadataRecord, geocoder: Optional[ReverseGeocoder] = None
) -> Optional[str]:
    """Place name for the file's GPS position, or its formatted coordinates."""
    coordinates = coordinates_from_metadata(metadata)
    if coordinates is None:
        return None
    if metadata.geocode_enabled and geocoder is not None:
        label = geocoder.lookup(coordinates)
        if label:
            return label
    return format_coordinates(coordinates)


def enrich(
    base: str, metadata: MetadataRecord, geocoder: Optional[ReverseGeocoder] = None
) -> str:
    """Append the enabled location and date parts to `base`, joined with `_`.

    Args:
        base: Chosen candidate text.
        metadata: Metadata record carrying the enrichment switches.
        geocoder: Reverse geocoder used when geocoding is enabled.

    Returns:
        str: `base`, then location, then date, each only when available.
    """
    parts: List[str] = [base]
    if metadata.include_location:
        location = location_label(metadata, geocoder)
        if location:
            parts.append(location)
    if metadata.include_timestamp:
        date = date_from_metadata(metadata)
        if date:
            parts.append(date)
    return "_".join(parts)


__all__ = [
    "Coordinates",
    "ReverseGeocoder",
    "coordinates_from_metadata",
    "date_from_metadata",
    "enrich",
    "format_address",
    "format_coordinates",
    "format_timestamp",
    "location_label",
    "parse_coordinate",
]
