"""
Open-Meteo Geocoding Provider for Dry Spot Finder

Resolves a free-text place name to coordinates with the Open-Meteo
geocoding API. Only the first (highest ranked) match is used.
"""

import logging
from typing import Optional

from dry_spot.errors import IncompleteData, InvalidInput
from dry_spot.geo import Coordinate
from dry_spot.transport import FetchJson

logger = logging.getLogger(__name__)


class OpenMeteoGeocoder:
    """GeoResolver backed by geocoding-api.open-meteo.com."""

    BASE_URL = "https://geocoding-api.open-meteo.com/v1/search"

    def __init__(self, fetch_json: FetchJson, language: str = "de"):
        self.fetch_json = fetch_json
        self.language = language

    async def resolve(self, place: str) -> Optional[Coordinate]:
        """
        Look up place.

        Returns:
            Coordinate of the first match, or None when there is no match

        Raises:
            InvalidInput: place is blank
            FetchError: the lookup itself failed
        """
        if not isinstance(place, str) or not place.strip():
            raise InvalidInput("Place name must not be empty")
        place = place.strip()

        params = {
            "name": place,
            "count": 1,
            "language": self.language,
            "format": "json",
        }
        logger.info(f"[OpenMeteoGeocoder] Resolving {place!r}...")
        data = await self.fetch_json(self.BASE_URL, params)
        return parse_geocoding_payload(data, place)


def parse_geocoding_payload(data, place: str = "") -> Optional[Coordinate]:
    """Extract the first result's coordinate from a geocoding response."""
    if not isinstance(data, dict):
        raise IncompleteData(f"Geocoding response is not an object: {type(data).__name__}")

    results = data.get("results")
    if not isinstance(results, list) or not results:
        logger.info(f"[OpenMeteoGeocoder] No match for {place!r}")
        return None

    first = results[0]
    try:
        coordinate = Coordinate(
            latitude=float(first["latitude"]),
            longitude=float(first["longitude"]),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise IncompleteData(f"Geocoding result for {place!r} has no usable coordinates") from e

    logger.info(
        f"[OpenMeteoGeocoder] {place!r} -> {first.get('name', '?')}, "
        f"{first.get('country', '?')} ({coordinate.label()})"
    )
    return coordinate
