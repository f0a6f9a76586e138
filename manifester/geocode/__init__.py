"""
Geocode module for the Odyssey manifester.

This module provides functionality for:
- Resolving "<location>, <country>" queries to coordinates
- Spacing consecutive lookups with a politeness delay

Main classes:
- GeocodeClient: Abstract provider interface
- NominatimClient: OpenStreetMap Nominatim over requests
- GoogleMapsClient: Google Maps geocoding through googlemaps
- PolitenessDelay: Minimum interval between lookups

Errors:
- LookupNotFound: The service returned no result
- LookupTransportError: Network, HTTP or response failures
"""

from .geocode_client import (
    GeocodeClient,
    GoogleMapsClient,
    NominatimClient,
    create_geocode_client,
)
from .geocode_errors import GeocodeError, LookupNotFound, LookupTransportError
from .geocode_rate_limiter import PolitenessDelay

__all__ = [
    # Main classes
    "GeocodeClient",
    "NominatimClient",
    "GoogleMapsClient",
    "PolitenessDelay",
    "create_geocode_client",

    # Errors
    "GeocodeError",
    "LookupNotFound",
    "LookupTransportError",
]
