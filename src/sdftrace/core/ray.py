"""Ray data structure and vector utilities for SDF path tracing.

This module provides the Ray dataclass and the small set of vector helpers the
ray marcher and integrator rely on. Vectors are ``taichi.math.vec3`` values,
so addition, subtraction and scaling use the ordinary operators; the helpers
here add the operations that need care (guarded normalization, reflection and
the orthonormal basis used for diffuse sampling).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 5.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 1.0, 0.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Vectors shorter than this normalize to the zero vector
NORMALIZE_EPSILON = 1e-8


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Expected to be
            unit length for ray marching.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the Euclidean length of a vector."""
    return ti.sqrt(tm.dot(v, v))


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product a . b."""
    return tm.dot(a, b)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    Unlike ``tm.normalize`` this never divides by zero: a vector whose length
    is below NORMALIZE_EPSILON normalizes to the zero vector.

    Args:
        v: The input vector.

    Returns:
        A unit vector in the direction of v, or the zero vector.
    """
    result = vec3(0.0, 0.0, 0.0)
    len_v = length(v)
    if len_v > NORMALIZE_EPSILON:
        result = v / len_v
    return result


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a unit normal: d - 2(n.d)n."""
    return incident - 2.0 * tm.dot(normal, incident) * normal


# =============================================================================
# Hemisphere Sampling
# =============================================================================


@ti.func
def build_onb_from_normal(normal: vec3):
    """Build an orthonormal basis around a unit normal.

    Uses the branch on the sign of ``normal.z`` so that the denominator
    ``sign + normal.z`` has magnitude at least one for any unit normal,
    including normals close to (0, 0, +-1).

    Args:
        normal: The surface normal (unit length).

    Returns:
        A tuple (tangent, bitangent) perpendicular to the normal.
    """
    sign = 1.0
    if normal.z < 0.0:
        sign = -1.0
    a = -1.0 / (sign + normal.z)
    b = normal.x * normal.y * a
    tangent = vec3(b, sign + normal.y * normal.y * a, -normal.y)
    bitangent = vec3(1.0 + sign * normal.x * normal.x * a, sign * b, -sign * normal.x)
    return tangent, bitangent


@ti.func
def sample_cosine_hemisphere(normal: vec3, u1: ti.f32, u2: ti.f32) -> vec3:
    """Cosine-weighted hemisphere direction around a normal.

    The azimuth is ``2 * pi * u1``; ``u2`` is the squared cosine of the polar
    angle, so the sampled direction has density cos(theta) / pi.

    Args:
        normal: The surface normal defining the hemisphere (unit length).
        u1: Uniform random number in [0, 1) for the azimuth.
        u2: Uniform random number in [0, 1) for the polar angle.

    Returns:
        The sampled direction in world space.
    """
    phi = 2.0 * tm.pi * u1
    sin_theta = ti.sqrt(1.0 - u2)
    tangent, bitangent = build_onb_from_normal(normal)
    return (
        tangent * (ti.cos(phi) * sin_theta)
        + bitangent * (ti.sin(phi) * sin_theta)
        + normal * ti.sqrt(u2)
    )
