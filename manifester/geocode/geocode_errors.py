"""
Custom exceptions for the geocode module.

Both lookup failures are fatal to a run; nothing is retried.
"""


class GeocodeError(Exception):
    """Base exception for geocoding failures."""
    pass


class LookupNotFound(GeocodeError):
    """Raised when the search service returns zero results for a query."""
    pass


class LookupTransportError(GeocodeError):
    """Raised on any lower-level failure: network, HTTP status, or unreadable response."""
    pass
