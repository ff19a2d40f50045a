"""
Candidate generation for Dry Spot Finder.

Turns one origin coordinate plus a radius into nine sample points: the
origin itself and eight compass offsets at the requested radius.

Uses the flat-earth approximation 1 degree latitude = 111 km, with the
longitude step widened by 1/cos(latitude) for meridian convergence.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional

from dry_spot.errors import InvalidInput

logger = logging.getLogger(__name__)

KM_PER_DEGREE = 111.0

# Bearing in degrees clockwise from north, in generation order
COMPASS_BEARINGS = (
    ("N", 0),
    ("NE", 45),
    ("E", 90),
    ("SE", 135),
    ("S", 180),
    ("SW", 225),
    ("W", 270),
    ("NW", 315),
)

ORIGIN = "origin"


@dataclass(frozen=True)
class Coordinate:
    """Immutable latitude/longitude pair in decimal degrees."""
    latitude: float
    longitude: float

    def __post_init__(self):
        for name, value, limit in (("latitude", self.latitude, 90.0),
                                   ("longitude", self.longitude, 180.0)):
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidInput(f"{name} must be a number, got {value!r}")
            if not math.isfinite(value):
                raise InvalidInput(f"{name} must be finite, got {value!r}")
            if not -limit <= value <= limit:
                raise InvalidInput(f"{name} must be between -{limit:g} and {limit:g}, got {value}")

    def label(self) -> str:
        return f"{self.latitude:.4f},{self.longitude:.4f}"


@dataclass(frozen=True)
class CandidatePoint:
    """A coordinate tagged as the origin or one of the compass offsets."""
    coordinate: Coordinate
    direction: str = ORIGIN
    bearing: Optional[int] = None

    @property
    def is_origin(self) -> bool:
        return self.direction == ORIGIN


def validate_radius(radius_km) -> float:
    """
    Coerce and check a search radius.

    Accepts numbers and numeric strings ("10", "2.5").

    Raises:
        InvalidInput: radius is not a number, not finite, or not positive
    """
    if isinstance(radius_km, bool):
        raise InvalidInput(f"Radius must be a number, got {radius_km!r}")
    try:
        radius = float(radius_km)
    except (TypeError, ValueError):
        raise InvalidInput(f"Radius must be a number, got {radius_km!r}") from None
    if not math.isfinite(radius):
        raise InvalidInput(f"Radius must be finite, got {radius_km!r}")
    if radius <= 0:
        raise InvalidInput(f"Radius must be greater than 0 km, got {radius:g}")
    return radius


def _wrap_longitude(lon: float) -> float:
    if -180.0 <= lon < 180.0:
        return lon
    return ((lon + 180.0) % 360.0) - 180.0


def _clamp_latitude(lat: float) -> float:
    return max(-90.0, min(90.0, lat))


def generate_candidates(origin: Coordinate, radius_km) -> List[CandidatePoint]:
    """
    Generate the origin plus eight compass offsets at radius_km.

    Args:
        origin: Search centre
        radius_km: Offset distance in kilometres (> 0)

    Returns:
        Nine CandidatePoints: origin first, then N, NE, E, SE, S, SW, W, NW

    Raises:
        InvalidInput: bad radius, or origin exactly at a pole where the
            longitude step is undefined
    """
    radius = validate_radius(radius_km)
    if abs(origin.latitude) == 90.0:
        raise InvalidInput(
            f"Cannot search around a pole (latitude {origin.latitude:g}): "
            "longitude offsets are undefined there"
        )

    lat_delta = radius / KM_PER_DEGREE
    lon_delta = radius / (KM_PER_DEGREE * math.cos(math.radians(origin.latitude)))
    if not math.isfinite(lon_delta):
        raise InvalidInput(f"Radius {radius:g} km is too large around latitude {origin.latitude:g}")

    candidates = [CandidatePoint(coordinate=origin)]
    for direction, bearing in COMPASS_BEARINGS:
        theta = math.radians(bearing)
        lat = _clamp_latitude(origin.latitude + lat_delta * math.cos(theta))
        lon = _wrap_longitude(origin.longitude + lon_delta * math.sin(theta))
        candidates.append(
            CandidatePoint(
                coordinate=Coordinate(latitude=lat, longitude=lon),
                direction=direction,
                bearing=bearing,
            )
        )

    logger.debug(
        f"[generate_candidates] {len(candidates)} points around {origin.label()} "
        f"(radius={radius:g} km, lat_delta={lat_delta:.5f}, lon_delta={lon_delta:.5f})"
    )
    return candidates


def approx_distance_km(a: Coordinate, b: Coordinate) -> float:
    """Equirectangular distance in km using the same 111 km/degree constant."""
    mean_lat = math.radians((a.latitude + b.latitude) / 2.0)
    d_lat = b.latitude - a.latitude
    d_lon = _wrap_longitude(b.longitude - a.longitude)
    return KM_PER_DEGREE * math.hypot(d_lat, d_lon * math.cos(mean_lat))
