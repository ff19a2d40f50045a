"""
Collaborator interfaces for Dry Spot Finder.

The search only depends on these two shapes, so any geocoder or forecast
source (or a test fake) can be plugged in.
"""

from typing import Optional, Protocol

from dry_spot.evaluation import ForecastSample
from dry_spot.geo import Coordinate


class GeoResolver(Protocol):
    async def resolve(self, place: str) -> Optional[Coordinate]:
        """Return the best match for place, or None when nothing matches."""


class ForecastClient(Protocol):
    name: str

    async def fetch(self, coordinate: Coordinate) -> ForecastSample:
        """Return the day-one hourly series for coordinate."""
