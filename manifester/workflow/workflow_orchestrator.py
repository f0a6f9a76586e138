"""
High-level orchestrator for a manifester run.

Coordinates configuration loading, incremental geocoding, cache persistence,
trip geometry, gallery derivatives and manifest generation. Everything that
can fail on bad input is checked before the generated module is written.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List

from ..assets.assets_gallery import catalog_image, discover_images
from ..assets.assets_pipeline import AssetPipeline
from ..config.logger_module import log_error, log_info
from ..geocode.geocode_client import GeocodeClient, create_geocode_client
from ..geocode.geocode_errors import GeocodeError
from ..geocode.geocode_rate_limiter import PolitenessDelay
from ..manifest.manifest_builder import build_manifest
from ..manifest.manifest_renderer import ElmManifestRenderer, ManifestRenderer, write_artifact
from ..places.places_cache import PlaceCache, write_trip_geometries
from ..places.places_config import PlaceRegistry, load_country_codes, load_place_config
from ..places.places_model import CacheEntry
from ..places.places_plan import (
    ResolutionRequest,
    build_trip_geometries,
    compute_diff,
    plan_resolutions,
)
from .workflow_config import WorkflowConfig
from .workflow_tools import build_world_topology, format_elm


@dataclass
class RunReport:
    """Outcome of a successful run."""
    lookups_issued: int
    entries_added: int
    cache_persisted: bool
    artifact_path: Path
    image_count: int
    derivatives_written: int = 0


class ManifestOrchestrator:
    """
    Runs the whole manifest workflow once.

    Lookups are strictly sequential and spaced by the politeness delay.
    Resolved entries are held in memory until every lookup of the run has
    succeeded; only then is the cache merged and written.
    """

    def __init__(self,
                 config: WorkflowConfig = None,
                 geocode_client: GeocodeClient = None,
                 delay: PolitenessDelay = None,
                 renderer: ManifestRenderer = None,
                 asset_pipeline: AssetPipeline = None):
        """
        Initialize the orchestrator.

        Args:
            config: Run configuration (defaults for every unset field)
            geocode_client: Geocoding client; created from config on first use
            delay: Politeness delay between lookups
            renderer: Manifest renderer
            asset_pipeline: Derivative generator
        """
        self.config = config or WorkflowConfig()
        self._client = geocode_client
        self.delay = delay or PolitenessDelay(self.config.delay_seconds)
        self.renderer = renderer or ElmManifestRenderer()
        self.asset_pipeline = asset_pipeline or AssetPipeline(self.config.asset_workers)

        log_info(
            f"ManifestOrchestrator initialized "
            f"(provider={self.config.provider}, policy={self.config.resolution_policy.value})"
        )

    @property
    def client(self) -> GeocodeClient:
        if self._client is None:
            self._client = create_geocode_client(
                self.config.provider,
                endpoint=self.config.nominatim_endpoint,
                user_agent=self.config.user_agent,
                api_key=self.config.google_api_key,
                request_timeout=self.config.request_timeout,
            )
        return self._client

    def run(self) -> RunReport:
        """
        Execute one run.

        Workflow:
        1. Load the configuration and country codes
        2. Load (or start) the cache and plan the lookups
        3. Geocode new locations sequentially
        4. Merge and persist the cache if anything changed
        5. Rebuild trip geometries and catalog the gallery
        6. Build and render the manifest
        7. Write trip lines, derivatives and the manifest module
        8. Hand off to elm-format and topojson when available

        Raises:
            PlacesError: Configuration, cache, identifier or coordinate failures
            GeocodeError: A lookup failed (the cache file is left untouched)
            AssetError: A gallery image could not be processed
            ManifestError: The manifest module could not be written
        """
        cfg = self.config

        # Step 1: configuration
        log_info("Step 1: Loading configuration")
        codes = load_country_codes(cfg.country_codes_path)
        registry = PlaceRegistry.from_config(load_place_config(cfg.config_path), codes)

        # Step 2: diff and plan
        log_info("Step 2: Comparing configuration with the cache")
        cache = PlaceCache.load(cfg.cities_path)
        diff = compute_diff(cache, registry, codes)
        log_info(
            f"New countries: {len(diff.new_countries)}, new locations: {len(diff.new_locations)}"
        )
        requests = plan_resolutions(diff, registry, cfg.resolution_policy)

        # Step 3: lookups
        if requests:
            log_info(f"Step 3: Geocoding {len(requests)} locations")
        else:
            log_info("Step 3: Cache is up to date, no lookups needed")
        resolved = self._resolve(requests, registry)

        # Step 4: commit
        changed = cache.merge(resolved) if resolved else 0
        if changed:
            log_info(f"Step 4: Persisting cache with {changed} new or updated entries")
            cache.persist(cfg.cities_path)
        else:
            log_info("Step 4: Cache unchanged, not rewriting")

        # Step 5: geometry and gallery
        log_info("Step 5: Rebuilding trip geometries and cataloguing the gallery")
        geometries = build_trip_geometries(registry, cache)
        images = discover_images(cfg.gallery_dir)
        image_rows = [catalog_image(cfg.gallery_dir, image, registry) for image in images]

        # Step 6: generation
        log_info("Step 6: Generating manifest")
        manifest = build_manifest(registry, cache, geometries, image_rows)
        text = self.renderer.render(manifest)

        # Step 7: outputs
        log_info("Step 7: Writing outputs")
        write_trip_geometries(geometries, cfg.trips_path)
        derivatives = self.asset_pipeline.generate_derivatives(images)
        write_artifact(text, cfg.manifest_output)

        # Step 8: optional tools
        log_info("Step 8: Running external tools")
        format_elm(cfg.manifest_output)
        build_world_topology(cfg.countries_path, cfg.cities_path, cfg.trips_path,
                             cfg.world_output)

        report = RunReport(
            lookups_issued=len(requests),
            entries_added=changed,
            cache_persisted=bool(changed),
            artifact_path=Path(cfg.manifest_output),
            image_count=len(image_rows),
            derivatives_written=derivatives,
        )
        log_info(f"Run complete: {report}")
        return report

    def _resolve(self,
                 requests: List[ResolutionRequest],
                 registry: PlaceRegistry) -> List[CacheEntry]:
        """
        Geocode each request in order; never concurrently.

        Raises:
            GeocodeError: On the first failed lookup; nothing resolved so far is kept
        """
        entries: List[CacheEntry] = []
        for idx, request in enumerate(requests, 1):
            self.delay.wait()
            try:
                point = self.client.geocode(request.query)
            except GeocodeError as e:
                log_error(
                    f"Lookup {idx}/{len(requests)} for {request.location_id} failed: {e}"
                )
                raise
            finally:
                self.delay.mark()

            location = registry.location(request.location_id)
            country = registry.country(request.country_id)
            entries.append(CacheEntry(
                key=location.identifier,
                name=location.name,
                country_code=country.code,
                point=point,
                local_name=location.local_name,
            ))
            log_info(f"Resolved {request.location_id} ({idx}/{len(requests)})")
        return entries
