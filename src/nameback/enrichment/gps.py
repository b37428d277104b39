"""Parse EXIF GPS coordinates and format them for file names."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from nameback.metadata.models import MetadataRecord

DIRECTION_TOKENS = frozenset({"N", "S", "E", "W"})
NEGATIVE_REFS = frozenset({"S", "SOUTH", "W", "WEST"})


@dataclass(slots=True, frozen=True)
class Coordinates:
    """Signed decimal degrees."""

    latitude: float
    longitude: float


def parse_coordinate(value: str) -> Optional[float]:
    """Parse a DMS (`37 deg 46' 26.40" N`), degree-minute, or decimal coordinate.

    Args:
        value: Coordinate as reported by exiftool.

    Returns:
        Optional[float]: Unsigned decimal degrees, or None when unparseable.
    """
    cleaned = value.replace("deg", " ").replace("'", " ").replace('"', " ")
    parts = [part for part in cleaned.split() if part.upper() not in DIRECTION_TOKENS]
    try:
        numbers = [float(part) for part in parts]
    except ValueError:
        return None
    if len(numbers) == 1:
        return numbers[0]
    if len(numbers) == 2:
        return numbers[0] + numbers[1] / 60.0
    if len(numbers) == 3:
        return numbers[0] + numbers[1] / 60.0 + numbers[2] / 3600.0
    return None


def coordinates_from_metadata(metadata: MetadataRecord) -> Optional[Coordinates]:
    """Return signed coordinates when all four GPS fields are present and parse."""
    fields = (
        metadata.gps_latitude,
        metadata.gps_latitude_ref,
        metadata.gps_longitude,
        metadata.gps_longitude_ref,
    )
    if any(field is None for field in fields):
        return None
    latitude = parse_coordinate(metadata.gps_latitude)
    longitude = parse_coordinate(metadata.gps_longitude)
    if latitude is None or longitude is None:
        return None
    if metadata.gps_latitude_ref.strip().upper() in NEGATIVE_REFS:
        latitude = -latitude
    if metadata.gps_longitude_ref.strip().upper() in NEGATIVE_REFS:
        longitude = -longitude
    return Coordinates(latitude=latitude, longitude=longitude)


def format_coordinates(coordinates: Coordinates) -> str:
    """Render as `37.77N_122.42W`."""
    lat_dir = "N" if coordinates.latitude >= 0 else "S"
    lon_dir = "E" if coordinates.longitude >= 0 else "W"
    return (
        f"{abs(coordinates.latitude):.2f}{lat_dir}_"
        f"{abs(coordinates.longitude):.2f}{lon_dir}"
    )


__all__ = ["Coordinates", "coordinates_from_metadata", "format_coordinates", "parse_coordinate"]
