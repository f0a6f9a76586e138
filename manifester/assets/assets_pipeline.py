"""
Thumbnail and blur generation for gallery images.

Every image is an independent task with no shared state, so the work is
spread over a thread pool. The first failure aborts the batch.
"""

import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Sequence

from PIL import Image, ImageFilter

from ..config.logger_module import log_error, log_info
from .assets_errors import AssetError
from .assets_policy import (
    BLUR_RADIUS,
    THUMBNAIL_HEIGHT,
    derivative_paths,
    pending_derivatives,
    thumbnail_width,
)

_SAVE_FORMATS = {".png": "PNG", ".jpg": "JPEG", ".jpeg": "JPEG"}


class AssetPipeline:
    """Generates missing derivatives for a batch of gallery images."""

    def __init__(self, max_workers: int = 4):
        """
        Initialize the pipeline.

        Args:
            max_workers: Size of the thread pool

        Raises:
            ValueError: If max_workers is not positive
        """
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self.max_workers = max_workers

        log_info(f"AssetPipeline initialized (max_workers={max_workers})")

    def generate_derivatives(self, images: Sequence[Path]) -> int:
        """
        Produce every missing thumbnail and blur.

        Args:
            images: Source image paths

        Returns:
            Number of derivative files written

        Raises:
            AssetError: On the first image that cannot be processed; tasks not
                yet started are cancelled
        """
        todo = [image for image in images if pending_derivatives(image)]
        if not todo:
            log_info("All gallery derivatives are up to date")
            return 0

        log_info(f"Generating derivatives for {len(todo)} of {len(images)} images")
        written = 0
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {executor.submit(self.process_image, image): image for image in todo}
            for future in as_completed(futures):
                try:
                    written += future.result()
                except AssetError as e:
                    log_error(f"Derivative generation failed for {futures[future]}: {e}")
                    for pending in futures:
                        pending.cancel()
                    raise

        log_info(f"Wrote {written} derivative files")
        return written

    def process_image(self, image: Path) -> int:
        """
        Write the missing derivatives of one image.

        Returns:
            Number of files written (0, 1 or 2)
        """
        pending = pending_derivatives(image)
        if not pending:
            return 0

        outputs = derivative_paths(image)
        save_format = _SAVE_FORMATS.get(image.suffix.lower())
        if save_format is None:
            raise AssetError(f"Unsupported image type: {image}")

        try:
            with Image.open(image) as img:
                img.load()
                width, height = img.size
                thumb = img.copy()
        except (OSError, Image.DecompressionBombError) as e:
            raise AssetError(f"Cannot open image {image}: {e}") from e

        if height == 0:
            raise AssetError(f"Image {image} has zero height")

        bounds = (thumbnail_width(width / height), THUMBNAIL_HEIGHT)
        thumb.thumbnail(bounds, Image.Resampling.LANCZOS)
        if save_format == "JPEG" and thumb.mode not in ("RGB", "L"):
            thumb = thumb.convert("RGB")
        elif thumb.mode == "P":
            thumb = thumb.convert("RGBA")

        written = 0
        if "thumbnail" in pending:
            self._save(thumb, outputs["thumbnail"], save_format)
            written += 1
        if "blur" in pending:
            self._save(thumb.filter(ImageFilter.GaussianBlur(BLUR_RADIUS)), outputs["blur"],
                       save_format)
            written += 1
        return written

    @staticmethod
    def _save(img: Image.Image, path: Path, save_format: str) -> None:
        # Written under a temporary name first: an existing derivative is never half-written.
        tmp_path = path.with_name(f".{path.name}.tmp")
        try:
            img.save(tmp_path, format=save_format)
            os.replace(tmp_path, path)
        except (OSError, ValueError) as e:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise AssetError(f"Cannot write {path}: {e}") from e
