"""Progressive renderer for iterative sample accumulation.

This module wraps the core integrator with a small stateful interface:
- Progressive rendering that refines over time
- Batch rendering (multiple SPP per call) with progress callbacks
- Reset and resize of the accumulation buffers

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.sdftrace.camera.pinhole import PinholeCamera
    >>> from src.sdftrace.core.progressive import ProgressiveRenderer
    >>>
    >>> renderer = ProgressiveRenderer(240, 135, camera=PinholeCamera(), seed=7)
    >>> renderer.render(24)  # Render 24 SPP
    >>> pixels = renderer.get_image_uint8()
"""

import logging
from collections.abc import Callable, Generator

import numpy as np
import numpy.typing as npt

from src.sdftrace.camera.pinhole import PinholeCamera, setup_camera
from src.sdftrace.core.integrator import (
    clear_render_target,
    get_radiance_numpy,
    get_total_samples,
    render_image,
    setup_render_target,
)
from src.sdftrace.preview.display import tone_map_card

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (current_samples, total_target_samples)
ProgressCallback = Callable[[int, int], None]


class ProgressiveRenderer:
    """A progressive renderer that accumulates samples over time.

    The renderer owns the image size, the camera and the render seed, and
    delegates to the global integrator buffers (which are Taichi fields).
    Rendering the same number of samples with the same seed always yields
    the same image.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        seed: The render seed.
    """

    def __init__(
        self,
        width: int,
        height: int,
        camera: PinholeCamera | None = None,
        seed: int = 0,
    ) -> None:
        """Initialize the progressive renderer.

        Args:
            width: Image width in pixels (max 2048).
            height: Image height in pixels (max 2048).
            camera: Camera configuration; the default room view when omitted.
            seed: Seed for the per-sample random streams.

        Raises:
            ValueError: If dimensions are not positive or exceed the
                maximum supported size.
        """
        self._camera = camera if camera is not None else PinholeCamera()
        self._seed = seed
        self.resize(width, height)

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._height

    @property
    def seed(self) -> int:
        """Get the render seed."""
        return self._seed

    @property
    def sample_count(self) -> int:
        """Get the current number of accumulated samples per pixel."""
        return get_total_samples()

    def reset(self) -> None:
        """Clear the accumulator without changing the image dimensions."""
        clear_render_target()

    def resize(self, width: int, height: int) -> None:
        """Resize the render target, set up the camera and reset.

        Args:
            width: New image width in pixels.
            height: New image height in pixels.

        Raises:
            ValueError: If dimensions are not positive or exceed the
                maximum supported size.
        """
        setup_render_target(width, height)
        setup_camera(self._camera, width, height)
        self._width = width
        self._height = height

    def render(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Render samples progressively with optional progress callback.

        Accumulates the specified number of samples into the existing buffer.
        Can be called multiple times to continue refining the image.

        Args:
            num_samples: Total number of samples to add.
            batch_size: Number of samples to render before each callback.
            callback: Optional callback function called after each batch.
                Receives (current_total_samples, target_total_samples).
        """
        for current, target in self.render_progressive(num_samples, batch_size):
            if callback is not None:
                callback(current, target)

    def render_progressive(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
    ) -> Generator[tuple[int, int], None, None]:
        """Render samples progressively, yielding progress after each batch.

        Args:
            num_samples: Total number of samples to add.
            batch_size: Number of samples to render before each yield.

        Yields:
            Tuple of (current_total_samples, target_total_samples).

        Raises:
            ValueError: If batch_size is not positive.
        """
        if num_samples <= 0:
            return
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")

        target_samples = self.sample_count + num_samples
        logger.info(
            "Rendering %d samples per pixel at %dx%d (seed %d)",
            num_samples, self._width, self._height, self._seed,
        )

        remaining = num_samples
        while remaining > 0:
            batch = min(batch_size, remaining)
            render_image(batch, seed=self._seed)
            remaining -= batch
            yield (self.sample_count, target_samples)

    def get_image_numpy(self) -> npt.NDArray[np.float32]:
        """Get the averaged linear radiance.

        Returns:
            NumPy array of shape (height, width, 3), row 0 at the top.
        """
        return get_radiance_numpy()

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Get the tone-mapped image as bytes.

        Returns:
            NumPy array of shape (height, width, 3) with dtype uint8, row 0
            at the top.
        """
        return tone_map_card(self.get_image_numpy())

    def save_image(self, filepath: str) -> None:
        """Tone map the image and write it to a file.

        Args:
            filepath: Output path; the format follows the extension.

        Raises:
            ImageWriteError: If the file cannot be written.
        """
        from src.sdftrace.preview.export import save_image

        save_image(self.get_image_uint8(), filepath)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"ProgressiveRenderer(width={self.width}, height={self.height}, "
            f"samples={self.sample_count}, seed={self.seed})"
        )
