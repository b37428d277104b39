"""Metadata record decoded from the EXIF probe."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

# exiftool tag name -> record field
EXIFTOOL_FIELDS: dict[str, str] = {
    "Title": "title",
    "Artist": "artist",
    "Album": "album",
    "DateTimeOriginal": "date_time_original",
    "Description": "description",
    "Subject": "subject",
    "Author": "author",
    "Creator": "creator",
    "LastModifiedBy": "last_modified_by",
    "CreationDate": "creation_date",
    "CreateDate": "create_date",
    "GPSLatitude": "gps_latitude",
    "GPSLatitudeRef": "gps_latitude_ref",
    "GPSLongitude": "gps_longitude",
    "GPSLongitudeRef": "gps_longitude_ref",
}


class MetadataRecord(BaseModel):
    """Flat metadata fields for one file plus enrichment switches.

    Every probe field keeps the string form exiftool reported. The enrichment
    switches are filled in by the engine from configuration.
    """

    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = None
    artist: Optional[str] = None
    album: Optional[str] = None
    date_time_original: Optional[str] = None
    description: Optional[str] = None
    subject: Optional[str] = None
    author: Optional[str] = None
    creator: Optional[str] = None
    last_modified_by: Optional[str] = None
    creation_date: Optional[str] = None
    create_date: Optional[str] = None
    gps_latitude: Optional[str] = None
    gps_latitude_ref: Optional[str] = None
    gps_longitude: Optional[str] = None
    gps_longitude_ref: Optional[str] = None

    include_location: bool = False
    include_timestamp: bool = False
    geocode_enabled: bool = True

    @property
    def effective_creation_date(self) -> Optional[str]:
        """Creation date coalesced from CreationDate then CreateDate."""
        return self.creation_date or self.create_date

    @property
    def capture_date(self) -> Optional[str]:
        """Date used for timestamp enrichment."""
        return self.date_time_original or self.effective_creation_date


__all__ = ["EXIFTOOL_FIELDS", "MetadataRecord"]
