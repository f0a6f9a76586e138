"""
Domain types shared by the cache, the diff planner and the manifest generator.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class GeoPoint:
    """A coordinate pair in GeoJSON order (longitude first)."""
    longitude: float
    latitude: float

    def as_list(self) -> List[float]:
        return [self.longitude, self.latitude]

    def rounded(self, digits: int = 3) -> Tuple[float, float]:
        """Presentation copy of the point; the stored values keep full precision."""
        return (round(self.longitude, digits), round(self.latitude, digits))


@dataclass(frozen=True)
class Country:
    """A configured country with its ISO alpha-3 code."""
    identifier: str
    name: str
    code: str
    local_name: Optional[str] = None


@dataclass(frozen=True)
class Location:
    """A configured location, owned by exactly one country."""
    identifier: str
    name: str
    country: str
    local_name: Optional[str] = None


@dataclass(frozen=True)
class Trip:
    """A configured trip. Dates stay as raw "YYYY/MM" strings until generation."""
    identifier: str
    name: str
    description: str
    locations: Tuple[str, ...] = ()
    dates: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CacheEntry:
    """
    A resolved location as stored in the coordinate cache.

    The entry is keyed by the canonicalized display name, which equals the
    location identifier.
    """
    key: str
    name: str
    country_code: str
    point: GeoPoint
    local_name: Optional[str] = None


@dataclass
class TripGeometry:
    """Ordered line geometry of a trip, rebuilt from cache points on every run."""
    trip_id: str
    name: str
    points: List[GeoPoint] = field(default_factory=list)
