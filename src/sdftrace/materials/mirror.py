"""Mirror (perfect specular) material.

The letters of the logo primitive reflect like polished metal: the outgoing
direction is the incoming one reflected about the surface normal, and no
direct light is gathered at the hit.

Example:
    >>> # Use within a Taichi kernel:
    >>> # origin, direction = scatter_mirror(hit_point, direction, normal)
"""

import taichi as ti
import taichi.math as tm

from src.sdftrace.core.ray import reflect

# Type alias for 3D vectors
vec3 = tm.vec3

# Distance the new origin is pushed along the outgoing direction
MIRROR_BIAS = 0.1


@ti.func
def scatter_mirror(hit_point: vec3, incident_direction: vec3, normal: vec3):
    """Reflect a ray off a mirror surface.

    Args:
        hit_point: The surface point that was hit.
        incident_direction: The incoming ray direction (unit length).
        normal: The surface normal at the hit point (unit length).

    Returns:
        A tuple (origin, direction) for the continuation ray. The origin is
        offset along the reflected direction to leave the surface.
    """
    direction = reflect(incident_direction, normal)
    origin = hit_point + direction * MIRROR_BIAS
    return origin, direction
