"""
Assembly of the Manifest from the registry, the cache and the gallery.

Everything here is pure: it reads already-loaded data and raises on the first
inconsistency, before any output is written.
"""

from typing import Iterable, List, Optional

from ..config.logger_module import log_info
from ..places.places_cache import PlaceCache
from ..places.places_config import PlaceRegistry
from ..places.places_errors import IdentifierMismatch, MissingCoordinate
from ..places.places_model import TripGeometry
from .manifest_model import (
    CountryRow,
    ImageRow,
    LocationRow,
    Manifest,
    Month,
    TripDate,
    TripRow,
    is_year,
)


def parse_trip_date(trip_id: str, text: str) -> TripDate:
    """
    Parse a "YYYY/MM" trip date.

    Args:
        trip_id: Trip identifier, used in the error message
        text: Raw date string from the configuration

    Raises:
        IdentifierMismatch: If the separator is missing, the year is not
            numeric, or the month is not 01-12
    """
    year_text, separator, month_text = text.partition("/")
    if not separator:
        raise IdentifierMismatch(f"{trip_id} has a malformed date string '{text}'")
    if not is_year(year_text):
        raise IdentifierMismatch(f"{trip_id} has a malformed year in '{text}'")
    try:
        month = Month.from_text(month_text)
    except IdentifierMismatch as e:
        raise IdentifierMismatch(f"{trip_id} has a malformed date string '{text}': {e}") from e
    return TripDate(year=int(year_text), month=month)


def build_manifest(registry: PlaceRegistry,
                   cache: PlaceCache,
                   geometries: List[TripGeometry],
                   images: Optional[Iterable[ImageRow]] = None) -> Manifest:
    """
    Resolve every configured entity into manifest rows.

    Countries and locations are ordered by identifier so that unchanged input
    renders byte-identical output; trips keep declaration order.

    Raises:
        MissingCoordinate: A location or trip has no resolved coordinates
        IdentifierMismatch: A trip date is malformed
    """
    countries = [
        CountryRow(
            identifier=country.identifier,
            name=country.name,
            code=country.code,
            local_name=country.local_name,
        )
        for country in sorted(registry.countries.values(), key=lambda c: c.identifier)
    ]

    locations = []
    for location in registry.sorted_locations():
        point = cache.point_for(location.identifier)
        if point is None:
            raise MissingCoordinate(f"Could not find coordinates for {location.identifier}")
        locations.append(LocationRow(
            identifier=location.identifier,
            name=location.name,
            country=location.country,
            point=point,
            local_name=location.local_name,
        ))

    trips = [
        TripRow(
            identifier=trip.identifier,
            name=trip.name,
            description=trip.description,
            locations=list(trip.locations),
            dates=[parse_trip_date(trip.identifier, text) for text in trip.dates],
        )
        for trip in registry.trips
    ]

    geometry_table = {geometry.trip_id: list(geometry.points) for geometry in geometries}
    for trip in trips:
        unknown = [loc for loc in trip.locations if loc not in registry.locations]
        if unknown:
            raise MissingCoordinate(
                f"Trip {trip.identifier} references unconfigured locations: {', '.join(unknown)}"
            )
        if trip.identifier not in geometry_table:
            raise MissingCoordinate(f"No line geometry was built for trip {trip.identifier}")

    image_rows = sorted(images or (), key=lambda row: row.relative_path)

    log_info(
        f"Built manifest: {len(countries)} countries, {len(locations)} locations, "
        f"{len(trips)} trips, {len(image_rows)} images"
    )
    return Manifest(
        countries=countries,
        locations=locations,
        trips=trips,
        geometries=geometry_table,
        images=image_rows,
    )
