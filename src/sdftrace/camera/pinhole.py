"""Pinhole camera model for primary ray generation.

The camera looks from ``position`` toward ``look_at``. Its image plane sits at
unit distance along the view direction and is one unit wide, so each pixel
spans ``1 / width`` units. The basis is built from:

- goal: the unit view direction;
- left: the horizontal direction to the left of the view, scaled by 1 / width;
- up: ``goal x left``, perpendicular to both.

Pixels are addressed by (column, row) with row 0 at the TOP of the image and
column 0 at the left. Each sample adds a uniform sub-pixel offset on both
axes, which antialiases edges when samples are averaged.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.sdftrace.camera.pinhole import PinholeCamera, setup_camera
    >>> setup_camera(PinholeCamera(), width=240, height=135)
"""

import logging
from dataclasses import dataclass

import numpy as np
import taichi as ti
import taichi.math as tm

from src.sdftrace.core.ray import normalize
from src.sdftrace.core.sampler import next_float

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class PinholeCamera:
    """Configuration for a pinhole camera.

    The defaults frame the room from one corner, looking across toward the
    far wall.

    Attributes:
        position: Camera position in world space (x, y, z).
        look_at: Point the camera is looking at in world space (x, y, z).
    """

    position: tuple[float, float, float] = (-22.0, 5.0, 25.0)
    look_at: tuple[float, float, float] = (-3.0, 4.0, 0.0)


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_goal = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_left = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_up = ti.Vector.field(3, dtype=ti.f32, shape=())


def _normalized(v: np.ndarray) -> np.ndarray:
    norm = np.linalg.norm(v)
    if norm < 1e-8:
        return np.zeros_like(v)
    return v / norm


def setup_camera(camera: PinholeCamera, width: int, height: int) -> None:
    """Initialize camera state for an image of the given size.

    Args:
        camera: Camera configuration with position and target.
        width: Image width in pixels.
        height: Image height in pixels.

    Raises:
        ValueError: If the image size is not positive or the camera position
            coincides with its target.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")

    position = np.array(camera.position, dtype=np.float32)
    look_at = np.array(camera.look_at, dtype=np.float32)

    goal = _normalized(look_at - position)
    if not goal.any():
        raise ValueError("Camera position and look_at must differ")

    # Horizontal direction to the left of the view, one pixel long
    left = _normalized(np.array([goal[2], 0.0, -goal[0]], dtype=np.float32)) / width
    up = np.cross(goal, left)

    _camera_origin[None] = position.tolist()
    _camera_goal[None] = goal.tolist()
    _camera_left[None] = left.tolist()
    _camera_up[None] = up.tolist()

    logger.debug("Camera at %s looking at %s (%dx%d)", camera.position, camera.look_at, width, height)


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def get_camera_origin() -> vec3:
    """Get the camera position in world space."""
    return _camera_origin[None]


@ti.func
def get_ray_direction(
    column: ti.i32, row: ti.i32, width: ti.i32, height: ti.i32, jitter_u: ti.f32, jitter_v: ti.f32
) -> vec3:
    """Direction through a point of a pixel.

    Args:
        column: Pixel column (0 = left).
        row: Pixel row (0 = top).
        width: Image width in pixels.
        height: Image height in pixels.
        jitter_u: Horizontal offset within the pixel in [0, 1).
        jitter_v: Vertical offset within the pixel in [0, 1).

    Returns:
        The unit direction from the camera through the sample point.
    """
    # The left vector grows toward the left edge, the up vector toward the top
    x = ti.cast(width - column - width // 2, ti.f32) + jitter_u
    y = ti.cast(height - row - height // 2, ti.f32) + jitter_v
    return normalize(_camera_goal[None] + _camera_left[None] * x + _camera_up[None] * y)


@ti.func
def get_ray_jittered(column: ti.i32, row: ti.i32, width: ti.i32, height: ti.i32, state: ti.u32):
    """Generate a jittered primary ray direction for anti-aliasing.

    Args:
        column: Pixel column (0 = left).
        row: Pixel row (0 = top).
        width: Image width in pixels.
        height: Image height in pixels.
        state: The random stream state of the current sample.

    Returns:
        A tuple (direction, state) where state is the advanced stream.
    """
    stream, jitter_u = next_float(state)
    stream, jitter_v = next_float(stream)
    return get_ray_direction(column, row, width, height, jitter_u, jitter_v), stream


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, goal, left and up vectors.
    """
    info = {}
    for name, field in (
        ("origin", _camera_origin),
        ("goal", _camera_goal),
        ("left", _camera_left),
        ("up", _camera_up),
    ):
        vec = field[None]
        info[name] = (float(vec[0]), float(vec[1]), float(vec[2]))
    return info
