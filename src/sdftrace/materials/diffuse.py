"""Diffuse (Lambertian) wall material.

Walls scatter light with a cosine-weighted distribution around the surface
normal. The continuation ray carries indirect light; direct light from the
sun is gathered separately by the integrator with a shadow ray, weighted by
``diffuse_incidence``.

Because cosine-weighted sampling matches the Lambertian cosine term, the
sample weight is a constant and the integrator applies a single reflectance
factor per bounce.

Example:
    >>> # Use within a Taichi kernel:
    >>> # origin, direction, state = scatter_diffuse(hit_point, normal, state)
"""

import taichi as ti
import taichi.math as tm

from src.sdftrace.core.ray import dot, sample_cosine_hemisphere
from src.sdftrace.core.sampler import next_float

# Type alias for 3D vectors
vec3 = tm.vec3

# Distance the new origin is pushed along the outgoing direction
DIFFUSE_BIAS = 0.1


@ti.func
def diffuse_incidence(normal: vec3, light_direction: vec3) -> ti.f32:
    """Cosine between the surface normal and the direction toward the light.

    Negative when the light is behind the surface.
    """
    return dot(normal, light_direction)


@ti.func
def scatter_diffuse(hit_point: vec3, normal: vec3, state: ti.u32):
    """Sample a diffuse continuation ray.

    Args:
        hit_point: The surface point that was hit.
        normal: The surface normal at the hit point (unit length).
        state: The random stream state of the current sample.

    Returns:
        A tuple (origin, direction, state) where state is the advanced
        random stream.
    """
    stream, u1 = next_float(state)
    stream, u2 = next_float(stream)
    direction = sample_cosine_hemisphere(normal, u1, u2)
    origin = hit_point + direction * DIFFUSE_BIAS
    return origin, direction, stream
