"""Scene distance field: the room, its ceiling lattice and the sky light.

The whole scene is an implicit surface. ``query_scene`` returns, for any
point, the signed distance to the closest surface together with the kind of
that surface. Primitives are combined with constructive solid geometry:

- ``min(a, b)`` is the union of two solids;
- ``-min(a, b)`` carves the union of two boxes out of space, turning the box
  interiors into free space and everything else into solid.

The room is the lower box with the ceiling recess carved out, unioned with a
lattice of ceiling planks repeated every 8 units along x. Everything above
the sky height is the emitting sky.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.sdftrace.scene.field import query_point
    >>> distance, kind = query_point((0.0, 5.0, 0.0))
    >>> kind
    <SurfaceKind.PATTERNED_WALL: 2>
"""

from enum import IntEnum

import taichi as ti
import taichi.math as tm

from src.sdftrace.geometry.box import box_test, repeat_x
from src.sdftrace.geometry.letters import is_letters_enabled, letters_distance

# Type alias for 3D vectors
vec3 = tm.vec3


class SurfaceKind(IntEnum):
    """Classification of the surface closest to a point.

    Used by the integrator to pick the material response of a hit.
    """

    NONE = 0
    LETTER = 1
    PATTERNED_WALL = 2
    SKY = 3


# =============================================================================
# Scene Constants
# =============================================================================

# Lower room, carved out of the solid
LOWER_ROOM_MIN = vec3(-30.0, -0.5, -30.0)
LOWER_ROOM_MAX = vec3(30.0, 18.0, 30.0)

# Vaulted ceiling recess above the lower room
CEILING_RECESS_MIN = vec3(-25.0, 17.0, -25.0)
CEILING_RECESS_MAX = vec3(25.0, 20.0, 25.0)

# One ceiling plank, repeated along x
PLANK_MIN = vec3(1.5, 18.5, -25.0)
PLANK_MAX = vec3(6.5, 20.0, 25.0)
PLANK_PERIOD = 8.0

# Everything above this height is sky
SKY_HEIGHT = 19.9

# Distance reported when no primitive is closer
FAR_DISTANCE = 1e9


# =============================================================================
# Distance Field
# =============================================================================


@ti.func
def room_distance(position: vec3) -> ti.f32:
    """Signed distance to the room walls and ceiling planks.

    Positive in the free space inside the room, negative inside the walls.
    """
    carved = -ti.min(
        box_test(position, LOWER_ROOM_MIN, LOWER_ROOM_MAX),
        box_test(position, CEILING_RECESS_MIN, CEILING_RECESS_MAX),
    )
    planks = box_test(repeat_x(position, PLANK_PERIOD), PLANK_MIN, PLANK_MAX)
    return ti.min(carved, planks)


@ti.func
def sky_distance(position: vec3) -> ti.f32:
    """Signed distance to the sky half-space above SKY_HEIGHT."""
    return SKY_HEIGHT - position.y


@ti.func
def query_scene(position: vec3):
    """Evaluate the scene distance field at a point.

    The field is total: every point, including points deep inside a solid,
    gets a finite distance.

    Args:
        position: The query point in world space.

    Returns:
        A tuple (distance, kind) where kind is a SurfaceKind value.
    """
    distance = FAR_DISTANCE
    kind = int(SurfaceKind.NONE)

    if is_letters_enabled() == 1:
        distance = letters_distance(position)
        kind = int(SurfaceKind.LETTER)

    room = room_distance(position)
    if room < distance:
        distance = room
        kind = int(SurfaceKind.PATTERNED_WALL)

    sky = sky_distance(position)
    if sky < distance:
        distance = sky
        kind = int(SurfaceKind.SKY)

    return distance, kind


# =============================================================================
# Python-side Probe
# =============================================================================

_probe_distance = ti.field(dtype=ti.f32, shape=())
_probe_kind = ti.field(dtype=ti.i32, shape=())


@ti.kernel
def _query_kernel(x: ti.f32, y: ti.f32, z: ti.f32):
    distance, kind = query_scene(vec3(x, y, z))
    _probe_distance[None] = distance
    _probe_kind[None] = kind


def query_point(position: tuple[float, float, float]) -> tuple[float, SurfaceKind]:
    """Evaluate the scene distance field at a single point from Python.

    Args:
        position: The query point (x, y, z).

    Returns:
        Tuple of (signed distance, closest SurfaceKind).
    """
    _query_kernel(float(position[0]), float(position[1]), float(position[2]))
    return float(_probe_distance[None]), SurfaceKind(int(_probe_kind[None]))
