"""
Run configuration for the manifester workflow.

Every setting comes from the environment (optionally via .env); the path
defaults reproduce the fixed file layout of the site repository, relative to
the working directory.
"""

from dataclasses import dataclass
from typing import Optional

from ..config.config_module import (
    ConfigError,
    get_config,
    get_float_config,
    get_int_config,
    validate_config,
)
from ..geocode.geocode_client import DEFAULT_NOMINATIM_ENDPOINT, DEFAULT_USER_AGENT
from ..places.places_plan import ResolutionPolicy

PROVIDERS = ("nominatim", "google")


@dataclass
class WorkflowConfig:
    """Settings for one manifester run."""

    # Geocoding
    provider: str = "nominatim"
    delay_seconds: float = 1.0
    nominatim_endpoint: str = DEFAULT_NOMINATIM_ENDPOINT
    user_agent: str = DEFAULT_USER_AGENT
    request_timeout: float = 30.0
    google_api_key: Optional[str] = None
    resolution_policy: ResolutionPolicy = ResolutionPolicy.NEW_LOCATIONS

    # Derivative generation
    asset_workers: int = 4

    # Inputs
    config_path: str = "odyssey.yaml"
    country_codes_path: str = "world/cca3.json"
    countries_path: str = "world/countries.json"

    # Outputs (the cache is both)
    cities_path: str = "world/cities.json"
    trips_path: str = "world/trips.json"
    world_output: str = "../dist/assets/world.json"
    gallery_dir: str = "../dist/gallery"
    manifest_output: str = "../src/Manifest.elm"

    def __post_init__(self):
        """Validate configuration values."""
        self.provider = self.provider.lower()
        if self.provider not in PROVIDERS:
            raise ConfigError(
                f"Invalid geocoder provider: {self.provider}. "
                f"Must be one of {', '.join(PROVIDERS)}"
            )

        if self.provider == "google" and not self.google_api_key:
            raise ConfigError("GOOGLE_MAPS_API_KEY is required for the google provider")

        if self.delay_seconds < 0:
            raise ConfigError(f"delay_seconds must be >= 0, got {self.delay_seconds}")

        if self.request_timeout <= 0:
            raise ConfigError(f"request_timeout must be positive, got {self.request_timeout}")

        if self.asset_workers < 1:
            raise ConfigError(f"asset_workers must be >= 1, got {self.asset_workers}")

        try:
            self.resolution_policy = ResolutionPolicy(self.resolution_policy)
        except ValueError:
            raise ConfigError(
                f"Invalid resolution policy: {self.resolution_policy}. "
                f"Must be one of {', '.join(p.value for p in ResolutionPolicy)}"
            )

    @classmethod
    def from_env(cls) -> "WorkflowConfig":
        """
        Build the configuration from environment variables.

        Raises:
            ConfigError: On missing or invalid values
        """
        provider = get_config("GEOCODER_PROVIDER", "nominatim")
        if provider.lower() == "google":
            validate_config(["GOOGLE_MAPS_API_KEY"])

        return cls(
            provider=provider,
            delay_seconds=get_float_config("GEOCODE_DELAY_SECONDS", 1.0),
            nominatim_endpoint=get_config("NOMINATIM_ENDPOINT", DEFAULT_NOMINATIM_ENDPOINT),
            user_agent=get_config("GEOCODER_USER_AGENT", DEFAULT_USER_AGENT),
            request_timeout=get_float_config("GEOCODE_TIMEOUT_SECONDS", 30.0),
            google_api_key=get_config("GOOGLE_MAPS_API_KEY"),
            resolution_policy=get_config("RESOLUTION_POLICY", ResolutionPolicy.NEW_LOCATIONS.value),
            asset_workers=get_int_config("ASSET_WORKERS", 4),
            config_path=get_config("ODYSSEY_CONFIG", "odyssey.yaml"),
            country_codes_path=get_config("COUNTRY_CODES_FILE", "world/cca3.json"),
            countries_path=get_config("COUNTRIES_FILE", "world/countries.json"),
            cities_path=get_config("CITIES_CACHE_FILE", "world/cities.json"),
            trips_path=get_config("TRIPS_FILE", "world/trips.json"),
            world_output=get_config("WORLD_OUTPUT", "../dist/assets/world.json"),
            gallery_dir=get_config("GALLERY_DIR", "../dist/gallery"),
            manifest_output=get_config("MANIFEST_OUTPUT", "../src/Manifest.elm"),
        )
