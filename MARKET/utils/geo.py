# MARKET/utils/geo.py
import math
import re
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from MARKET.core.config import (
    DEFAULT_RADIUS_KM,
    EARTH_RADIUS_KM,
    RADIUS_OPTIONS_KM,
)

_LEADING_INT = re.compile(r"\s*[-+]?\d+")


@dataclass(frozen=True)
class Point:
    """A geographic point. Stored coordinates are always ``[lng, lat]``."""

    lng: float
    lat: float

    @classmethod
    def from_coordinates(cls, coordinates: Sequence[float]) -> "Point":
        lng, lat = coordinates
        return cls(lng=float(lng), lat=float(lat))

    def to_coordinates(self) -> List[float]:
        return [self.lng, self.lat]


def point_from_location(location: Any) -> Optional[Point]:
    """Read a stored location dict; None when it has no usable coordinates."""
    if not isinstance(location, dict):
        return None
    coords = location.get("coordinates")
    if not coords or len(coords) != 2:
        return None
    try:
        return Point.from_coordinates(coords)
    except (TypeError, ValueError):
        return None


def central_angle(a: Point, b: Point) -> float:
    """Great-circle angle between two points, in radians (Haversine)."""
    lat1, lat2 = math.radians(a.lat), math.radians(b.lat)
    d_lat = math.radians(b.lat - a.lat)
    d_lng = math.radians(b.lng - a.lng)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    )
    h = min(1.0, h)
    return 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def distance_km(a: Point, b: Point) -> float:
    return EARTH_RADIUS_KM * central_angle(a, b)


def radius_to_radians(radius_km: float) -> float:
    return radius_km / EARTH_RADIUS_KM


def is_within_radius(center: Point, point: Point, radius_km: float) -> bool:
    """Spherical containment: the point lies inside the cap of `radius_km` around center."""
    return central_angle(center, point) <= radius_to_radians(radius_km)


def resolve_radius(requested: Any) -> int:
    """
    Radius for the search endpoint: only the allow-listed values are honoured,
    anything else (out of list, non-numeric, missing) silently becomes 1 km.
    """
    if requested is None:
        return DEFAULT_RADIUS_KM
    match = _LEADING_INT.match(str(requested))
    if not match:
        return DEFAULT_RADIUS_KM
    value = int(match.group())
    return value if value in RADIUS_OPTIONS_KM else DEFAULT_RADIUS_KM


def parse_radius(requested: Any, default: float = DEFAULT_RADIUS_KM) -> float:
    """Free-form km radius; unparsable or non-positive values use the default."""
    if requested is None or isinstance(requested, bool):
        return float(default)
    try:
        value = float(requested)
    except (TypeError, ValueError):
        return float(default)
    if math.isnan(value) or value <= 0:
        return float(default)
    return value
