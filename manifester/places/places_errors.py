"""
Custom exceptions for the places module.

These exceptions cover the failure modes of loading configuration and the
persisted cache, and of resolving identifiers and coordinates. Every one of
them is fatal to a manifester run.
"""


class PlacesError(Exception):
    """Base exception for place configuration and cache failures."""
    pass


class ConfigParseError(PlacesError):
    """Raised when the place/trip configuration or country table cannot be read."""
    pass


class CacheParseError(PlacesError):
    """Raised when the persisted coordinate cache is unreadable or inconsistent."""
    pass


class IdentifierMismatch(PlacesError):
    """Raised on a malformed date string or an identifier that cannot be resolved."""
    pass


class MissingCoordinate(PlacesError):
    """Raised when a trip references a location without resolved coordinates."""
    pass


class CacheWriteError(PlacesError):
    """Raised when the cache or trip geometry file cannot be written."""
    pass
