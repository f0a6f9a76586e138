"""
Geocoding clients.

Each client turns a free-text query into one best-match coordinate. Clients
do not rate-limit themselves; the workflow spaces calls with a
PolitenessDelay and never calls them concurrently.
"""

from abc import ABC, abstractmethod
from typing import Optional

import googlemaps
import requests

from ..config.config_module import ConfigError, get_config
from ..config.logger_module import log_error, log_info
from ..places.places_model import GeoPoint
from .geocode_errors import LookupNotFound, LookupTransportError

DEFAULT_NOMINATIM_ENDPOINT = "https://nominatim.openstreetmap.org"
DEFAULT_USER_AGENT = "odyssey-manifester/1.0"

# Statuses the googlemaps SDK would otherwise retry inside a single call
_RETRIABLE_STATUSES = frozenset({500, 503, 504})


def _reject_retriable_status(response, *args, **kwargs):
    if response.status_code in _RETRIABLE_STATUSES:
        raise requests.exceptions.HTTPError(
            f"HTTP {response.status_code} from {response.url}", response=response
        )


class GeocodeClient(ABC):
    """Abstract base class for geocoding providers."""

    @abstractmethod
    def geocode(self, query: str) -> GeoPoint:
        """
        Resolve a query to its single best match.

        Args:
            query: Free-text search, e.g. "Kyoto, Japan"

        Returns:
            The matched coordinate

        Raises:
            LookupNotFound: If the service has no result for the query
            LookupTransportError: On any network or protocol failure
        """
        pass


class NominatimClient(GeocodeClient):
    """OpenStreetMap Nominatim search over a requests session."""

    def __init__(self,
                 endpoint: str = None,
                 user_agent: str = None,
                 request_timeout: float = 30.0):
        """
        Initialize the Nominatim client.

        Args:
            endpoint: Base URL of the Nominatim instance
            user_agent: Descriptive User-Agent, required by the usage policy
            request_timeout: HTTP request timeout in seconds
        """
        self.endpoint = (endpoint or DEFAULT_NOMINATIM_ENDPOINT).rstrip("/")
        self.request_timeout = request_timeout

        self._session = requests.Session()
        self._session.headers.update({
            "User-Agent": user_agent or DEFAULT_USER_AGENT
        })

        log_info(f"NominatimClient initialized (endpoint={self.endpoint})")

    def geocode(self, query: str) -> GeoPoint:
        if not query or not query.strip():
            raise LookupNotFound("Empty query provided")

        params = {"format": "jsonv2", "q": query, "limit": "1"}

        try:
            log_info(f"Geocoding '{query}'")
            response = self._session.get(
                f"{self.endpoint}/search",
                params=params,
                timeout=self.request_timeout
            )
        except requests.exceptions.Timeout as e:
            log_error(f"Timeout geocoding '{query}'")
            raise LookupTransportError(f"Timeout geocoding '{query}'") from e
        except requests.exceptions.RequestException as e:
            log_error(f"Request error geocoding '{query}': {e}")
            raise LookupTransportError(f"Request failed for '{query}': {e}") from e

        if response.status_code != 200:
            log_error(
                f"HTTP {response.status_code} geocoding '{query}': "
                f"{response.text[:200]}"
            )
            raise LookupTransportError(f"HTTP {response.status_code} geocoding '{query}'")

        try:
            results = response.json()
        except ValueError as e:
            raise LookupTransportError(f"Undecodable response for '{query}'") from e

        if not isinstance(results, list):
            raise LookupTransportError(f"Unexpected response shape for '{query}'")
        if not results:
            raise LookupNotFound(f"Search for {query} did not find coordinates")

        try:
            point = GeoPoint(longitude=float(results[0]["lon"]),
                             latitude=float(results[0]["lat"]))
        except (KeyError, TypeError, ValueError) as e:
            raise LookupTransportError(f"Malformed coordinates for '{query}': {e}") from e

        log_info(f"Geocoded '{query}' to ({point.longitude}, {point.latitude})")
        return point


class GoogleMapsClient(GeocodeClient):
    """
    Google Maps geocoding through the googlemaps SDK.

    The SDK retries 5xx responses and OVER_QUERY_LIMIT on its own. Both are
    switched off so one geocode() call issues exactly one HTTP request.
    """

    def __init__(self, api_key: str = None, request_timeout: float = 30.0):
        """
        Initialize the Google Maps client.

        Args:
            api_key: Google Maps API key (loaded from config if not provided)
            request_timeout: HTTP request timeout in seconds

        Raises:
            ConfigError: If the key is missing or rejected by the SDK
        """
        self.api_key = api_key or get_config("GOOGLE_MAPS_API_KEY")
        if not self.api_key:
            raise ConfigError("GOOGLE_MAPS_API_KEY not provided or found in config")

        try:
            self._gmaps = googlemaps.Client(
                key=self.api_key,
                timeout=request_timeout,
                retry_over_query_limit=False,
                requests_kwargs={"hooks": {"response": [_reject_retriable_status]}},
            )
        except ValueError as e:
            raise ConfigError(f"Invalid GOOGLE_MAPS_API_KEY: {e}") from e

        log_info("GoogleMapsClient initialized")

    def geocode(self, query: str) -> GeoPoint:
        if not query or not query.strip():
            raise LookupNotFound("Empty query provided")

        try:
            log_info(f"Geocoding '{query}'")
            results = self._gmaps.geocode(query)
        except googlemaps.exceptions.Timeout as e:
            log_error(f"Timeout geocoding '{query}'")
            raise LookupTransportError(f"Timeout geocoding '{query}'") from e
        except (googlemaps.exceptions.ApiError,
                googlemaps.exceptions.HTTPError,
                googlemaps.exceptions.TransportError) as e:
            log_error(f"Google Maps API error for '{query}': {e}")
            raise LookupTransportError(f"API error geocoding '{query}': {e}") from e

        if not results:
            raise LookupNotFound(f"Search for {query} did not find coordinates")

        try:
            location = results[0]["geometry"]["location"]
            point = GeoPoint(longitude=float(location["lng"]), latitude=float(location["lat"]))
        except (KeyError, TypeError, ValueError) as e:
            raise LookupTransportError(f"Malformed coordinates for '{query}': {e}") from e

        log_info(f"Geocoded '{query}' to ({point.longitude}, {point.latitude})")
        return point


def create_geocode_client(provider: str = "nominatim",
                          endpoint: Optional[str] = None,
                          user_agent: Optional[str] = None,
                          api_key: Optional[str] = None,
                          request_timeout: float = 30.0) -> GeocodeClient:
    """
    Build the client for a provider name.

    Raises:
        ValueError: For an unknown provider
    """
    provider = provider.lower()
    if provider == "nominatim":
        return NominatimClient(endpoint=endpoint, user_agent=user_agent,
                               request_timeout=request_timeout)
    if provider == "google":
        return GoogleMapsClient(api_key=api_key, request_timeout=request_timeout)
    raise ValueError(f"Unknown geocoder provider: {provider}")
