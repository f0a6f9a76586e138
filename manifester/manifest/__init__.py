"""
Manifest module for the Odyssey manifester.

This module provides functionality for:
- Parsing trip dates
- Assembling an ordered, fully resolved Manifest
- Rendering the Manifest as an Elm module with total case expressions
- Writing the generated module atomically

Main classes:
- Manifest: Rows for countries, locations, trips, trip lines and images
- ElmManifestRenderer: Elm source renderer

Errors:
- ArtifactWriteError: The generated module could not be written
"""

from .manifest_builder import build_manifest, parse_trip_date
from .manifest_errors import ArtifactWriteError, ManifestError
from .manifest_model import (
    CountryRow,
    ImageRow,
    LocationRow,
    Manifest,
    Month,
    TripDate,
    TripRow,
)
from .manifest_renderer import ElmManifestRenderer, ManifestRenderer, write_artifact

__all__ = [
    # Main classes
    "Manifest",
    "ManifestRenderer",
    "ElmManifestRenderer",

    # Rows
    "CountryRow",
    "LocationRow",
    "TripRow",
    "ImageRow",
    "TripDate",
    "Month",

    # Functions
    "build_manifest",
    "parse_trip_date",
    "write_artifact",

    # Errors
    "ManifestError",
    "ArtifactWriteError",
]
