"""Image export for rendered frames.

The image sink takes tone-mapped pixels as an ``(height, width, 3)`` uint8
array whose row 0 is the TOP of the image, and encodes them with Pillow.

Supported formats:
    - BMP (default): 14-byte file header, 40-byte BITMAPINFOHEADER, 24-bit
      BGR rows stored bottom-up and padded to a multiple of 4 bytes
    - PNG and any other format Pillow infers from the file extension

Write failures are reported as ImageWriteError carrying the path and the
underlying cause; nothing is retried.

Example:
    >>> from src.sdftrace.preview.export import save_image
    >>> from src.sdftrace.core.progressive import ProgressiveRenderer
    >>>
    >>> renderer = ProgressiveRenderer(240, 135)
    >>> renderer.render(24)
    >>> save_image(renderer.get_image_uint8(), "room.bmp")
"""

from __future__ import annotations

import io
import logging
from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

logger = logging.getLogger(__name__)

# Size of the BMP file header plus the BITMAPINFOHEADER
BMP_HEADER_SIZE = 14 + 40


class ImageWriteError(OSError):
    """Raised when a rendered image cannot be written to disk."""

    def __init__(self, path: str | Path, cause: Exception) -> None:
        super().__init__(f"Failed to write image to {path}: {cause}")
        self.path = Path(path)
        self.cause = cause


def _to_pil(pixels: npt.NDArray[np.uint8]) -> PILImage.Image:
    """Wrap a top-down RGB byte array as a Pillow image.

    Raises:
        ValueError: If the array is not (H, W, 3) uint8.
    """
    if pixels.ndim != 3 or pixels.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) array, got shape {pixels.shape}")
    if pixels.dtype != np.uint8:
        raise ValueError(f"Expected dtype uint8, got {pixels.dtype}")
    return PILImage.fromarray(np.ascontiguousarray(pixels))


def encode_image(pixels: npt.NDArray[np.uint8], image_format: str = "BMP") -> bytes:
    """Encode pixels into an in-memory image file.

    Args:
        pixels: RGB bytes of shape (H, W, 3), row 0 at the top.
        image_format: Pillow format name (default "BMP").

    Returns:
        The encoded file contents.
    """
    buffer = io.BytesIO()
    _to_pil(pixels).save(buffer, format=image_format)
    return buffer.getvalue()


def save_image(
    pixels: npt.NDArray[np.uint8],
    filepath: str | Path,
    *,
    image_format: str | None = None,
) -> Path:
    """Write pixels to an image file.

    Args:
        pixels: RGB bytes of shape (H, W, 3), row 0 at the top.
        filepath: Output file path. Without an extension or an explicit
            format the image is written as BMP.
        image_format: Optional Pillow format name overriding the extension.

    Returns:
        The path that was written.

    Raises:
        ValueError: If the pixel array has the wrong shape or dtype.
        ImageWriteError: If the file cannot be opened or written.
    """
    path = Path(filepath)
    image = _to_pil(pixels)
    if image_format is None and not path.suffix:
        image_format = "BMP"

    try:
        image.save(path, format=image_format)
    except OSError as e:
        raise ImageWriteError(path, e) from e

    logger.info("Saved %dx%d image to %s", image.width, image.height, path)
    return path


def write_bmp(pixels: npt.NDArray[np.uint8], filepath: str | Path) -> Path:
    """Write pixels as a 24-bit BMP regardless of the file extension."""
    return save_image(pixels, filepath, image_format="BMP")


def compute_rmse(
    image_a: npt.NDArray[np.generic],
    image_b: npt.NDArray[np.generic],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(
            f"Image shapes must match: {image_a.shape} vs {image_b.shape}"
        )

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
