"""
Discovery and cataloguing of gallery images.

Gallery images live under `<gallery>/<YYYY>/<MM>/<Country>/<Location>/<file>`.
Directory names use spaces or underscores freely; the location directory is
canonicalized to the identifier the configuration declares.
"""

import os
from pathlib import Path
from typing import List, Union

from PIL import Image

from ..config.logger_module import log_info, log_warning
from ..manifest.manifest_model import ImageRow, Month, TripDate, is_year
from ..places.places_config import PlaceRegistry
from ..places.places_errors import IdentifierMismatch
from ..places.places_naming import canonicalize
from .assets_errors import AssetError
from .assets_policy import description_path, is_source_image


def discover_images(gallery: Union[str, Path]) -> List[Path]:
    """
    List source images below the gallery root, ordered by relative path.

    Derivatives (`_small` / `_blur`) are skipped. A missing gallery yields an
    empty list with a warning.
    """
    gallery = Path(gallery)
    if not gallery.is_dir():
        log_warning(f"Gallery directory {gallery} not found, manifest will list no images")
        return []

    images = []
    for root, _dirs, files in os.walk(gallery, followlinks=True):
        for name in files:
            path = Path(root) / name
            if is_source_image(path):
                images.append(path)

    images.sort(key=lambda path: path.relative_to(gallery).as_posix())
    log_info(f"Discovered {len(images)} gallery images under {gallery}")
    return images


def read_description(image: Path) -> str:
    """
    Caption from the image's `.desc` side-file, trimmed.

    A missing side-file is created empty so it can be filled in later.

    Raises:
        AssetError: If the side-file exists but cannot be read, or cannot be created
    """
    path = description_path(image)
    try:
        if not path.exists():
            path.touch()
            log_info(f"Created empty description {path}")
            return ""
        return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        raise AssetError(f"Cannot read description {path}: {e}") from e


def aspect_ratio(image: Path) -> float:
    """
    Width over height of an image file.

    Raises:
        AssetError: If the file cannot be decoded
    """
    try:
        with Image.open(image) as img:
            width, height = img.size
    except (OSError, Image.DecompressionBombError) as e:
        raise AssetError(f"Cannot open image {image}: {e}") from e
    if height == 0:
        raise AssetError(f"Image {image} has zero height")
    return width / height


def catalog_image(gallery: Union[str, Path], image: Path, registry: PlaceRegistry) -> ImageRow:
    """
    Build the manifest row of one gallery image.

    Raises:
        IdentifierMismatch: The path does not follow the gallery layout, the
            month is not 01-12, or the location is not configured
        AssetError: The image or its description cannot be read
    """
    relative = Path(image).relative_to(gallery)
    parts = relative.parts
    if len(parts) != 5:
        raise IdentifierMismatch(
            f"{relative.as_posix()} is not laid out as YYYY/MM/Country/Location/file"
        )
    year_text, month_text, _country_dir, location_dir, file_name = parts

    if not is_year(year_text):
        raise IdentifierMismatch(f"{relative.as_posix()} has a malformed year directory")
    month = Month.from_text(month_text)

    location = canonicalize(location_dir)
    if location not in registry.locations:
        raise IdentifierMismatch(
            f"{relative.as_posix()}: {location} is not a configured location"
        )

    return ImageRow(
        file=file_name,
        relative_path=relative.as_posix(),
        date=TripDate(year=int(year_text), month=month),
        location=location,
        aspect_ratio=aspect_ratio(image),
        description=read_description(image),
    )
