"""
Derivative naming and sizing rules for gallery images.

Each source image gets a thumbnail (`<stem>_small.<ext>`) and a blurred
placeholder (`<stem>_blur.<ext>`). A derivative is produced only when its
file does not exist yet, which makes regeneration idempotent.
"""

from pathlib import Path
from typing import Dict, List

IMAGE_SUFFIXES = {".png", ".jpg", ".jpeg"}

THUMBNAIL_SUFFIX = "_small"
BLUR_SUFFIX = "_blur"

THUMBNAIL_HEIGHT = 500
NARROW_WIDTH = 500
WIDE_WIDTH = 900
WIDE_ASPECT_RATIO = 3.0
BLUR_RADIUS = 30


def thumbnail_width(aspect_ratio: float) -> int:
    """Panoramas (ratio 3.0 and up) get the wide thumbnail."""
    return NARROW_WIDTH if aspect_ratio < WIDE_ASPECT_RATIO else WIDE_WIDTH


def is_derivative(path: Path) -> bool:
    return THUMBNAIL_SUFFIX in path.name or BLUR_SUFFIX in path.name


def is_source_image(path: Path) -> bool:
    return path.suffix.lower() in IMAGE_SUFFIXES and not is_derivative(path)


def derivative_paths(image: Path) -> Dict[str, Path]:
    """
    Output paths of both derivatives, keyed by kind.

    Example:
        gallery/2018/04/Japan/Kyoto/temple.jpg ->
            {"thumbnail": .../temple_small.jpg, "blur": .../temple_blur.jpg}
    """
    stem, suffix = image.stem, image.suffix
    return {
        "thumbnail": image.with_name(f"{stem}{THUMBNAIL_SUFFIX}{suffix}"),
        "blur": image.with_name(f"{stem}{BLUR_SUFFIX}{suffix}"),
    }


def pending_derivatives(image: Path) -> List[str]:
    """Kinds of derivative whose output file is missing."""
    return [kind for kind, path in derivative_paths(image).items() if not path.exists()]


def description_path(image: Path) -> Path:
    """Side-file holding an image's caption: temple.jpg -> temple.desc."""
    return image.with_suffix(".desc")
