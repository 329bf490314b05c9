"""Path tracing integrator for the SDF room scene.

This module implements the light transport of the renderer. A path starts at
the camera and bounces through the scene at most MAX_BOUNCES times. At each
bounce the ray marcher finds the next surface and its kind decides the
response:

- SKY: the path sees the emitting sky, adds ``attenuation * SKY_COLOR`` and
  ends;
- PATTERNED_WALL: diffuse scatter. Direct sunlight is gathered with a shadow
  ray toward LIGHT_DIRECTION and the path continues in a cosine-weighted
  direction;
- LETTER: mirror reflection, no direct light;
- NONE: the ray escaped or stalled and the path ends.

Every scattering event multiplies the path attenuation by
BOUNCE_ATTENUATION. Radiance is linear and unbounded; tone mapping happens
at readout.

Randomness comes from explicit per-sample streams (see ``core.sampler``), so
a render is reproducible for a given seed.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.sdftrace.camera.pinhole import PinholeCamera, setup_camera
    >>> from src.sdftrace.core.integrator import setup_render_target, render_image
    >>> setup_render_target(240, 135)
    >>> setup_camera(PinholeCamera(), 240, 135)
    >>> render_image(num_samples=8, seed=1)
"""

import logging
import math

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.sdftrace.camera.pinhole import get_camera_origin, get_ray_jittered
from src.sdftrace.core.ray import normalize
from src.sdftrace.core.sampler import seed_stream
from src.sdftrace.materials.diffuse import diffuse_incidence, scatter_diffuse
from src.sdftrace.materials.mirror import scatter_mirror
from src.sdftrace.scene.field import SurfaceKind
from src.sdftrace.scene.marcher import march

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Light Transport Constants
# =============================================================================

# Maximum number of surface interactions per path
MAX_BOUNCES = 3

# Reflectance applied at every scattering event
BOUNCE_ATTENUATION = 0.2

# Offset of shadow ray origins along the surface normal
SURFACE_BIAS = 0.1

# Direction toward the sun (directional light), normalized (0.6, 0.6, 1)
_LIGHT_NORM = math.sqrt(0.6 * 0.6 + 0.6 * 0.6 + 1.0 * 1.0)
LIGHT_DIRECTION = vec3(0.6 / _LIGHT_NORM, 0.6 / _LIGHT_NORM, 1.0 / _LIGHT_NORM)

# Direct sunlight received by walls
WALL_LIGHT_COLOR = vec3(500.0, 400.0, 100.0)

# Radiance of the sky
SKY_COLOR = vec3(50.0, 80.0, 100.0)

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Radiance sum per pixel, indexed [row, column] with row 0 at the top
_radiance_sum = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

# Sample count per pixel
_sample_count = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffers.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum
            supported size.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffers to zero."""
    _radiance_sum.fill(0.0)
    _sample_count.fill(0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions.

    Returns:
        Tuple of (width, height).
    """
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def trace(origin: vec3, direction: vec3, state: ti.u32):
    """Estimate the radiance arriving at ``origin`` from ``direction``.

    Args:
        origin: The ray origin.
        direction: The ray direction (unit length).
        state: The random stream state of this sample.

    Returns:
        A tuple (radiance, state) where radiance is linear RGB and state is
        the advanced random stream.
    """
    ray_origin = origin
    ray_direction = direction
    stream = state

    color = vec3(0.0, 0.0, 0.0)
    attenuation = 1.0

    active = 1
    for _ in range(MAX_BOUNCES):
        if active == 1:
            hit = march(ray_origin, ray_direction)

            if hit.kind == int(SurfaceKind.NONE):
                active = 0

            elif hit.kind == int(SurfaceKind.LETTER):
                ray_origin, ray_direction = scatter_mirror(hit.position, ray_direction, hit.normal)
                attenuation *= BOUNCE_ATTENUATION

            elif hit.kind == int(SurfaceKind.PATTERNED_WALL):
                incidence = diffuse_incidence(hit.normal, LIGHT_DIRECTION)
                ray_origin, ray_direction, stream = scatter_diffuse(hit.position, hit.normal, stream)
                attenuation *= BOUNCE_ATTENUATION

                if incidence > 0.0:
                    shadow = march(hit.position + hit.normal * SURFACE_BIAS, LIGHT_DIRECTION)
                    if shadow.kind == int(SurfaceKind.SKY):
                        color += attenuation * incidence * WALL_LIGHT_COLOR

            elif hit.kind == int(SurfaceKind.SKY):
                color += attenuation * SKY_COLOR
                active = 0

    return color, stream


@ti.func
def render_sample_impl(
    column: ti.i32, row: ti.i32, width: ti.i32, height: ti.i32, seed: ti.u32, sample_index: ti.i32
) -> vec3:
    """Trace one jittered camera sample through a pixel.

    Args:
        column: Pixel column (0 = left).
        row: Pixel row (0 = top).
        width: Image width in pixels.
        height: Image height in pixels.
        seed: The global render seed.
        sample_index: Index of the sample within the pixel.

    Returns:
        The estimated radiance (RGB) for this sample.
    """
    state = seed_stream(seed, row * width + column, sample_index)
    direction, state = get_ray_jittered(column, row, width, height, state)
    color, _ = trace(get_camera_origin(), direction, state)
    return color


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_batch(width: ti.i32, height: ti.i32, seed: ti.u32, num_samples: ti.i32):
    """Trace a batch of samples for every pixel and accumulate them.

    Each pixel continues its own sample numbering, so its random streams do
    not depend on how samples are split into batches.
    """
    for row, column in ti.ndrange(height, width):
        first_sample = _sample_count[row, column]
        total = vec3(0.0, 0.0, 0.0)
        for s in range(num_samples):
            total += render_sample_impl(column, row, width, height, seed, first_sample + s)

        _radiance_sum[row, column] += total
        _sample_count[row, column] += num_samples


@ti.kernel
def _trace_kernel(
    ox: ti.f32, oy: ti.f32, oz: ti.f32, dx: ti.f32, dy: ti.f32, dz: ti.f32, seed: ti.u32
) -> vec3:
    """Trace a single ray with a stream derived from ``seed``."""
    color, _ = trace(vec3(ox, oy, oz), normalize(vec3(dx, dy, dz)), seed_stream(seed, 0, 0))
    return color


# =============================================================================
# Public Rendering API
# =============================================================================


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    seed: int = 0,
) -> tuple[float, float, float]:
    """Trace a single path from Python.

    Args:
        origin: The ray origin (x, y, z).
        direction: The ray direction; normalized before tracing.
        seed: Seed of the random stream used by the path.

    Returns:
        Tuple of (R, G, B) linear radiance.
    """
    color = _trace_kernel(
        float(origin[0]), float(origin[1]), float(origin[2]),
        float(direction[0]), float(direction[1]), float(direction[2]),
        seed & 0xFFFFFFFF,
    )
    return (float(color[0]), float(color[1]), float(color[2]))


def render_image(num_samples: int = 1, seed: int = 0) -> None:
    """Render the image with the specified number of samples per pixel.

    Accumulates samples into the render target. Can be called multiple times
    to add more samples; sample numbering continues across calls.

    Args:
        num_samples: Number of samples to render per pixel.
        seed: The global render seed.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If num_samples is negative.
    """
    _check_render_target_initialized()
    if num_samples < 0:
        raise ValueError(f"num_samples must be non-negative, got {num_samples}")
    if num_samples == 0:
        return

    width, height = get_image_dimensions()
    _render_batch(width, height, seed & 0xFFFFFFFF, num_samples)


def get_total_samples() -> int:
    """Get the number of samples rendered so far per pixel.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    return int(_sample_count[0, 0])


def get_radiance_numpy() -> npt.NDArray[np.float32]:
    """Get the averaged linear radiance as a NumPy array.

    Returns:
        Array of shape (height, width, 3), row 0 at the top of the image.
        Pixels without samples are zero.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    sums = _radiance_sum.to_numpy()[:height, :width, :]
    counts = _sample_count.to_numpy()[:height, :width]

    image = np.zeros_like(sums)
    np.divide(sums, counts[..., None], out=image, where=counts[..., None] > 0)
    return image.astype(np.float32)
