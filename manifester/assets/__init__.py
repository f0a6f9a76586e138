"""
Assets module for the Odyssey manifester.

This module provides functionality for:
- Discovering gallery images and cataloguing them for the manifest
- Reading (or creating) per-image description side-files
- Generating missing thumbnails and blurred placeholders in parallel

Main classes:
- AssetPipeline: Thread-pooled derivative generation

Errors:
- AssetError: Unreadable images or unwritable derivatives
"""

from .assets_errors import AssetError
from .assets_gallery import aspect_ratio, catalog_image, discover_images, read_description
from .assets_pipeline import AssetPipeline
from .assets_policy import derivative_paths, pending_derivatives, thumbnail_width

__all__ = [
    # Main classes
    "AssetPipeline",

    # Functions
    "discover_images",
    "catalog_image",
    "read_description",
    "aspect_ratio",
    "derivative_paths",
    "pending_derivatives",
    "thumbnail_width",

    # Errors
    "AssetError",
]
