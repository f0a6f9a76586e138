"""
Places module for the Odyssey manifester.

This module provides functionality for:
- Loading the place/trip configuration and the country-code table
- Canonicalizing display names into cache keys and identifiers
- Loading, merging and atomically persisting the coordinate cache
- Diffing configuration against the cache and planning lookups
- Rebuilding trip line geometries

Main classes:
- PlaceRegistry: Countries, locations and trips declared by the configuration
- PlaceCache: Persisted coordinate cache
- CountryCodeTable: Static name <-> ISO alpha-3 lookup

Errors:
- ConfigParseError, CacheParseError, CacheWriteError
- IdentifierMismatch, MissingCoordinate
"""

from .places_cache import PlaceCache, write_text_atomically, write_trip_geometries
from .places_config import (
    LOCAL_PSEUDO_LOCATION,
    CountryCodeTable,
    PlaceRegistry,
    load_country_codes,
    load_place_config,
)
from .places_errors import (
    CacheParseError,
    CacheWriteError,
    ConfigParseError,
    IdentifierMismatch,
    MissingCoordinate,
    PlacesError,
)
from .places_model import CacheEntry, Country, GeoPoint, Location, Trip, TripGeometry
from .places_naming import canonicalize
from .places_plan import (
    CacheDiff,
    ResolutionPolicy,
    ResolutionRequest,
    build_trip_geometries,
    compute_diff,
    plan_resolutions,
)

__all__ = [
    # Main classes
    "PlaceRegistry",
    "PlaceCache",
    "CountryCodeTable",
    "CacheDiff",
    "ResolutionPolicy",
    "ResolutionRequest",

    # Model
    "CacheEntry",
    "Country",
    "GeoPoint",
    "Location",
    "Trip",
    "TripGeometry",

    # Functions
    "canonicalize",
    "compute_diff",
    "plan_resolutions",
    "build_trip_geometries",
    "load_place_config",
    "load_country_codes",
    "write_text_atomically",
    "write_trip_geometries",
    "LOCAL_PSEUDO_LOCATION",

    # Errors
    "PlacesError",
    "ConfigParseError",
    "CacheParseError",
    "CacheWriteError",
    "IdentifierMismatch",
    "MissingCoordinate",
]
