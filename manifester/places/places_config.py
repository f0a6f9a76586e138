"""
Loading of the place/trip configuration and the country-code table.

The YAML configuration is validated with pydantic models and turned into a
PlaceRegistry: a data-driven replacement for compiled Country/Location
enumerations. The registry is built once per run and never mutated.
"""

import json
from pathlib import Path
from typing import Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from ..config.logger_module import log_info
from .places_errors import ConfigParseError, IdentifierMismatch
from .places_model import Country, Location, Trip
from .places_naming import (
    RESERVED_CONSTRUCTORS,
    canonicalize,
    country_display_name,
    country_key,
    is_valid_identifier,
    location_display_name,
    trip_identifier,
)

# Reserved location key carrying a country's local-language name.
LOCAL_PSEUDO_LOCATION = "Local"


class TripDocument(BaseModel):
    """A trip as written in odyssey.yaml."""
    name: str
    description: str
    cities: List[str] = Field(default_factory=list)
    dates: List[str] = Field(default_factory=list)


class PlacesDocument(BaseModel):
    """Top level of odyssey.yaml: Country -> Location -> optional local name, plus trips."""
    places: Dict[str, Optional[Dict[str, Optional[str]]]]
    trips: List[TripDocument] = Field(default_factory=list)


class CountryCodeRecord(BaseModel):
    """One row of the ISO 3166 table; extra columns are ignored."""
    name: str
    alpha3: str = Field(alias="alpha-3")


_COUNTRY_CODES = TypeAdapter(List[CountryCodeRecord])


def load_place_config(path: Union[str, Path]) -> PlacesDocument:
    """
    Read and validate the place/trip configuration.

    Raises:
        ConfigParseError: If the file is missing, is not YAML, or has the wrong shape
    """
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle)
    except OSError as e:
        raise ConfigParseError(f"Cannot read configuration {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigParseError(f"Invalid YAML in {path}: {e}") from e

    if raw is None:
        raise ConfigParseError(f"Configuration {path} is empty")

    try:
        document = PlacesDocument.model_validate(raw)
    except ValidationError as e:
        raise ConfigParseError(f"Invalid configuration in {path}: {e}") from e

    log_info(
        f"Loaded configuration from {path}: {len(document.places)} countries, "
        f"{len(document.trips)} trips"
    )
    return document


class CountryCodeTable:
    """Static, read-only name <-> ISO alpha-3 lookup."""

    def __init__(self, codes: Dict[str, str]):
        self._codes = dict(codes)
        self._names_by_code: Dict[str, str] = {}
        for name, code in self._codes.items():
            self._names_by_code.setdefault(code, name)

    @classmethod
    def from_records(cls, records: List[CountryCodeRecord]) -> "CountryCodeTable":
        return cls({record.name: record.alpha3 for record in records})

    def __len__(self) -> int:
        return len(self._codes)

    def code_for(self, name: str) -> Optional[str]:
        """ISO code for a country display name, if known."""
        return self._codes.get(name)

    def identifier_for_code(self, code: str) -> Optional[str]:
        """Country identifier for an ISO code, e.g. "GBR" -> "UnitedKingdom"."""
        name = self._names_by_code.get(code)
        return country_key(name) if name is not None else None


def load_country_codes(path: Union[str, Path]) -> CountryCodeTable:
    """
    Read the country-code table (a JSON list of {name, alpha-3} objects).

    Raises:
        ConfigParseError: If the file is missing or malformed
    """
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as handle:
            raw = json.load(handle)
        records = _COUNTRY_CODES.validate_python(raw)
    except OSError as e:
        raise ConfigParseError(f"Cannot read country codes {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigParseError(f"Invalid JSON in {path}: {e}") from e
    except ValidationError as e:
        raise ConfigParseError(f"Invalid country code table {path}: {e}") from e

    table = CountryCodeTable.from_records(records)
    log_info(f"Loaded {len(table)} country codes from {path}")
    return table


def _check_constructor_clashes(countries: List[Country],
                               locations: List[Location],
                               trips: List[Trip]) -> None:
    """
    Country, Location and Trip identifiers become constructors of one
    module, so no two may share a name and none may take a reserved one.

    Raises:
        IdentifierMismatch: On the first clash
    """
    owners: Dict[str, str] = {}
    for kind, identifiers in (("Country", [c.identifier for c in countries]),
                              ("Location", [loc.identifier for loc in locations]),
                              ("Trip", [t.identifier for t in trips])):
        for identifier in identifiers:
            if identifier in RESERVED_CONSTRUCTORS:
                raise IdentifierMismatch(
                    f"{kind} {identifier} clashes with a name reserved by the manifest module"
                )
            if identifier in owners:
                raise IdentifierMismatch(
                    f"{kind} {identifier} clashes with {owners[identifier]} {identifier}"
                )
            owners[identifier] = kind


class PlaceRegistry:
    """
    Countries, locations and trips declared by the configuration.

    Countries are ordered by identifier. Locations keep declaration order
    within their (ordered) country; trips keep declaration order.
    """

    def __init__(self,
                 countries: List[Country],
                 locations: List[Location],
                 trips: List[Trip]):
        self.countries: Dict[str, Country] = {c.identifier: c for c in countries}
        self.locations: Dict[str, Location] = {loc.identifier: loc for loc in locations}
        self.trips: List[Trip] = list(trips)

    @classmethod
    def from_config(cls,
                    document: PlacesDocument,
                    codes: CountryCodeTable) -> "PlaceRegistry":
        """
        Build the registry, enforcing identifier invariants.

        Raises:
            ConfigParseError: Invalid, duplicate or missing identifiers
            IdentifierMismatch: A country absent from the code table, a location
                identifier that does not survive canonicalization, or an
                identifier shared across domains or with a reserved name
        """
        countries: List[Country] = []
        locations: List[Location] = []
        seen_locations: Dict[str, str] = {}

        for country_id in sorted(document.places):
            if not is_valid_identifier(country_id):
                raise ConfigParseError(f"'{country_id}' is not a valid country identifier")

            name = country_display_name(country_id)
            code = codes.code_for(name)
            if code is None:
                raise IdentifierMismatch(f"{name} does not exist in the country code table")

            entries = document.places[country_id] or {}
            countries.append(Country(
                identifier=country_id,
                name=name,
                code=code,
                local_name=entries.get(LOCAL_PSEUDO_LOCATION),
            ))

            for location_id, local_name in entries.items():
                if location_id == LOCAL_PSEUDO_LOCATION:
                    continue
                if not is_valid_identifier(location_id):
                    raise ConfigParseError(
                        f"'{location_id}' in {country_id} is not a valid location identifier"
                    )
                if location_id in seen_locations:
                    raise ConfigParseError(
                        f"Location {location_id} is declared under both "
                        f"{seen_locations[location_id]} and {country_id}"
                    )
                location_name = location_display_name(location_id)
                if canonicalize(location_name) != location_id:
                    raise IdentifierMismatch(
                        f"Location {location_id} displays as '{location_name}', which "
                        f"canonicalizes to {canonicalize(location_name)}"
                    )
                seen_locations[location_id] = country_id
                locations.append(Location(
                    identifier=location_id,
                    name=location_name,
                    country=country_id,
                    local_name=local_name,
                ))

        trips: List[Trip] = []
        seen_trips = set()
        for trip_doc in document.trips:
            trip_id = trip_identifier(trip_doc.description)
            if not is_valid_identifier(trip_id):
                raise ConfigParseError(
                    f"Trip description '{trip_doc.description}' does not yield a valid identifier"
                )
            if trip_id in seen_trips:
                raise ConfigParseError(f"Two trips share the identifier {trip_id}")
            seen_trips.add(trip_id)
            trips.append(Trip(
                identifier=trip_id,
                name=trip_doc.name,
                description=trip_doc.description,
                locations=tuple(trip_doc.cities),
                dates=tuple(trip_doc.dates),
            ))

        if not countries:
            raise ConfigParseError("Configuration declares no countries")
        if not locations:
            raise ConfigParseError("Configuration declares no locations")
        if not trips:
            raise ConfigParseError("Configuration declares no trips")

        _check_constructor_clashes(countries, locations, trips)
        return cls(countries, locations, trips)

    def country(self, identifier: str) -> Country:
        return self.countries[identifier]

    def location(self, identifier: str) -> Location:
        return self.locations[identifier]

    def sorted_locations(self) -> List[Location]:
        """Locations ordered by identifier, the emission order of the manifest."""
        return sorted(self.locations.values(), key=lambda loc: loc.identifier)
