"""
Pure diff and planning over the configuration and the coordinate cache.

Nothing here touches the network or the filesystem: given a registry and a
cache, these functions decide what must be geocoded and how trip lines are
assembled. The workflow executes the plan.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List

from .places_cache import PlaceCache
from .places_config import CountryCodeTable, PlaceRegistry
from .places_errors import MissingCoordinate
from .places_model import TripGeometry


class ResolutionPolicy(str, Enum):
    """
    Which configured locations are geocoded on a run.

    NEW_LOCATIONS: every location whose key is absent from the cache.
    STRICT: additionally every location of a country with no cached entries,
        even when the location itself is cached.
    """
    NEW_LOCATIONS = "new-locations"
    STRICT = "strict"


@dataclass
class CacheDiff:
    """Configured entities not yet represented in the cache."""
    new_countries: List[str] = field(default_factory=list)
    new_locations: List[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.new_countries and not self.new_locations


@dataclass(frozen=True)
class ResolutionRequest:
    """One geocoding lookup to perform."""
    location_id: str
    country_id: str
    query: str


def compute_diff(cache: PlaceCache,
                 registry: PlaceRegistry,
                 codes: CountryCodeTable) -> CacheDiff:
    """
    Compare the configuration against the cache.

    New countries are configured countries whose identifier is not among the
    countries named (via the code table) by the cached ISO codes. New
    locations are configured locations whose key is not cached.
    """
    cached_countries = set()
    for code in cache.codes():
        identifier = codes.identifier_for_code(code)
        if identifier is not None:
            cached_countries.add(identifier)

    new_countries = [
        country_id for country_id in registry.countries
        if country_id not in cached_countries
    ]

    cached_locations = cache.location_ids()
    new_locations = [
        location_id for location_id in registry.locations
        if location_id not in cached_locations
    ]

    return CacheDiff(new_countries=new_countries, new_locations=new_locations)


def geocode_query(registry: PlaceRegistry, location_id: str) -> str:
    """Free-text search of the form "<location>, <country>"."""
    location = registry.location(location_id)
    country = registry.country(location.country)
    return f"{location.name}, {country.name}"


def plan_resolutions(diff: CacheDiff,
                     registry: PlaceRegistry,
                     policy: ResolutionPolicy = ResolutionPolicy.NEW_LOCATIONS
                     ) -> List[ResolutionRequest]:
    """
    Turn a diff into an ordered list of lookups, at most one per location.

    Order follows the registry (countries by identifier, then declaration order).
    """
    selected = set(diff.new_locations)
    if policy == ResolutionPolicy.STRICT:
        new_countries = set(diff.new_countries)
        selected.update(
            loc.identifier for loc in registry.locations.values()
            if loc.country in new_countries
        )

    return [
        ResolutionRequest(
            location_id=loc.identifier,
            country_id=loc.country,
            query=geocode_query(registry, loc.identifier),
        )
        for loc in registry.locations.values()
        if loc.identifier in selected
    ]


def build_trip_geometries(registry: PlaceRegistry, cache: PlaceCache) -> List[TripGeometry]:
    """
    Resolve every trip's locations against cached points.

    Raises:
        MissingCoordinate: A trip names a location that is not configured or
            has no cached coordinates
    """
    geometries = []
    for trip in registry.trips:
        points = []
        for location_id in trip.locations:
            if location_id not in registry.locations:
                raise MissingCoordinate(
                    f"Trip {trip.identifier} references {location_id}, "
                    f"which is not a configured location"
                )
            point = cache.point_for(location_id)
            if point is None:
                raise MissingCoordinate(
                    f"Could not find coordinates for {location_id} (trip {trip.identifier})"
                )
            points.append(point)
        geometries.append(TripGeometry(trip_id=trip.identifier, name=trip.name, points=points))
    return geometries
