"""Reverse geocoding of GPS coordinates through Nominatim."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Dict, Mapping, Optional, Tuple

import requests

from nameback.config.models import GeocodingSettings

from .gps import Coordinates

LOGGER = logging.getLogger(__name__)

US_STATES: Dict[str, str] = {
    "alabama": "AL",
    "alaska": "AK",
    "arizona": "AZ",
    "arkansas": "AR",
    "california": "CA",
    "colorado": "CO",
    "connecticut": "CT",
    "delaware": "DE",
    "florida": "FL",
    "georgia": "GA",
    "hawaii": "HI",
    "idaho": "ID",
    "illinois": "IL",
    "indiana": "IN",
    "iowa": "IA",
    "kansas": "KS",
    "kentucky": "KY",
    "louisiana": "LA",
    "maine": "ME",
    "maryland": "MD",
    "massachusetts": "MA",
    "michigan": "MI",
    "minnesota": "MN",
    "mississippi": "MS",
    "missouri": "MO",
    "montana": "MT",
    "nebraska": "NE",
    "nevada": "NV",
    "new hampshire": "NH",
    "new jersey": "NJ",
    "new mexico": "NM",
    "new york": "NY",
    "north carolina": "NC",
    "north dakota": "ND",
    "ohio": "OH",
    "oklahoma": "OK",
    "oregon": "OR",
    "pennsylvania": "PA",
    "rhode island": "RI",
    "south carolina": "SC",
    "south dakota": "SD",
    "tennessee": "TN",
    "texas": "TX",
    "utah": "UT",
    "vermont": "VT",
    "virginia": "VA",
    "washington": "WA",
    "west virginia": "WV",
    "wisconsin": "WI",
    "wyoming": "WY",
}

CANADIAN_PROVINCES: Dict[str, str] = {
    "alberta": "AB",
    "british columbia": "BC",
    "manitoba": "MB",
    "new brunswick": "NB",
    "newfoundland and labrador": "NL",
    "northwest territories": "NT",
    "nova scotia": "NS",
    "nunavut": "NU",
    "ontario": "ON",
    "prince edward island": "PE",
    "quebec": "QC",
    "québec": "QC",
    "saskatchewan": "SK",
    "yukon": "YT",
}

CITY_KEYS = ("city", "town", "village", "hamlet", "suburb")


def clean_place(value: str) -> str:
    """Replace non-alphanumeric runs with `_`."""
    cleaned = "".join(ch if ch.isalnum() else "_" for ch in value)
    return "_".join(part for part in cleaned.split("_") if part)


def format_address(address: Mapping[str, str]) -> Optional[str]:
    """Build `City_REGION` from a Nominatim address block.

    US states and Canadian provinces are abbreviated; elsewhere the region is
    the country name.

    Args:
        address: The `address` object of a Nominatim reverse response.

    Returns:
        Optional[str]: Location label, or None when the address has no usable parts.
    """
    city = next((address[key] for key in CITY_KEYS if address.get(key)), None)
    country_code = (address.get("country_code") or "").lower()
    state = address.get("state")
    region: Optional[str]
    if country_code == "us" and state:
        region = US_STATES.get(state.strip().lower(), state)
    elif country_code == "ca" and state:
        region = CANADIAN_PROVINCES.get(state.strip().lower(), state)
    else:
        region = address.get("country")

    parts = [clean_place(part) for part in (city, region) if part]
    label = "_".join(part for part in parts if part)
    return label or None


class ReverseGeocoder:
    """Rate-limited, memoizing Nominatim client.

    Lookups are serialized behind one lock and spaced at least
    `min_interval_seconds` apart. Results are memoized per coordinate pair
    rounded to four decimals for `cache_ttl_seconds`.
    """

    def __init__(
        self,
        settings: Optional[GeocodingSettings] = None,
        *,
        session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.settings = settings or GeocodingSettings()
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": self.settings.user_agent})
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._memo: Dict[str, Tuple[Optional[str], float]] = {}
        self._last_request: Optional[float] = None

    @staticmethod
    def cache_key(coordinates: Coordinates) -> str:
        return f"{coordinates.latitude:.4f},{coordinates.longitude:.4f}"

    def lookup(self, coordinates: Coordinates) -> Optional[str]:
        """Return `City_REGION` for `coordinates`, or None when the lookup fails."""
        key = self.cache_key(coordinates)
        with self._lock:
            cached = self._memo.get(key)
            now = self._clock()
            if cached is not None and now - cached[1] < self.settings.cache_ttl_seconds:
                LOGGER.debug("Geocode cache hit for %s", key)
                return cached[0]

            if self._last_request is not None:
                wait = self.settings.min_interval_seconds - (now - self._last_request)
                if wait > 0:
                    self._sleep(wait)
            self._last_request = self._clock()

            label = self._request(coordinates)
            if label is not None:
                self._memo[key] = (label, self._clock())
            return label

    def _request(self, coordinates: Coordinates) -> Optional[str]:
        params = {
            "lat": f"{coordinates.latitude}",
            "lon": f"{coordinates.longitude}",
            "format": "json",
            "zoom": "10",
        }
        LOGGER.debug("Geocoding %s via %s", params, self.settings.endpoint)
        try:
            response = self.session.get(
                self.settings.endpoint, params=params, timeout=self.settings.timeout_seconds
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as exc:
            LOGGER.warning("Geocoding failed: %s", exc)
            return None
        address = payload.get("address") if isinstance(payload, dict) else None
        if not isinstance(address, dict):
            LOGGER.debug("No address in geocoding response for %s", self.cache_key(coordinates))
            return None
        return format_address(address)


__all__ = ["CANADIAN_PROVINCES", "ReverseGeocoder", "US_STATES", "format_address"]
