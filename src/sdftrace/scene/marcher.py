"""Sphere-tracing ray marcher over the scene distance field.

The marcher walks along a ray in steps equal to the distance field value at
the current point. Because the field never overestimates the distance to the
closest surface, no surface can be skipped. The walk stops when:

- the distance drops below HIT_EPSILON (a hit);
- MAX_MARCH_STEPS steps have been taken without converging (a miss);
- the travelled distance reaches MAX_MARCH_DISTANCE (a miss).

On a hit, the surface normal is the finite-difference gradient of the field,
which for a true distance field has unit length at the surface.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.sdftrace.scene.marcher import march_ray
    >>> kind, position, normal = march_ray((0.0, 5.0, 0.0), (0.0, 1.0, 0.0))
    >>> kind
    <SurfaceKind.SKY: 3>
"""

import taichi as ti
import taichi.math as tm

from src.sdftrace.core.ray import Ray, normalize, ray_at
from src.sdftrace.scene.field import SurfaceKind, query_scene

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Marching Constants
# =============================================================================

# Distance below which a point counts as on the surface
HIT_EPSILON = 0.01

# Step budget per ray
MAX_MARCH_STEPS = 100

# Rays travelling further than this escape the scene
MAX_MARCH_DISTANCE = 100.0

# Offset for the finite-difference normal
NORMAL_EPSILON = 0.01


@ti.dataclass
class MarchResult:
    """Result of marching a ray through the scene.

    Attributes:
        kind: The SurfaceKind that was hit (SurfaceKind.NONE on a miss).
        position: The hit point. Only valid if kind != NONE.
        normal: The unit surface normal at the hit point, pointing into
            free space. Only valid if kind != NONE.
        steps: Number of field evaluations taken by the march.
    """

    kind: ti.i32
    position: vec3
    normal: vec3
    steps: ti.i32


@ti.func
def estimate_normal(position: vec3, distance: ti.f32) -> vec3:
    """Estimate the surface normal by forward differences of the field.

    Args:
        position: A point on (or very near) the surface.
        distance: The field value at that point.

    Returns:
        The normalized field gradient, or the zero vector if it vanishes.
    """
    dx, _ = query_scene(position + vec3(NORMAL_EPSILON, 0.0, 0.0))
    dy, _ = query_scene(position + vec3(0.0, NORMAL_EPSILON, 0.0))
    dz, _ = query_scene(position + vec3(0.0, 0.0, NORMAL_EPSILON))
    return normalize(vec3(dx - distance, dy - distance, dz - distance))


@ti.func
def march(origin: vec3, direction: vec3) -> MarchResult:
    """March a ray through the scene until it hits a surface or gives up.

    Never fails: a ray that does not converge within the step or distance
    budget is reported as a miss.

    Args:
        origin: The ray origin.
        direction: The ray direction (unit length).

    Returns:
        A MarchResult describing the hit.
    """
    kind = int(SurfaceKind.NONE)
    position = origin
    normal = vec3(0.0, 0.0, 0.0)
    steps = 0

    ray = Ray(origin=origin, direction=direction)
    t = 0.0
    # Active flag replaces early exit from the loop
    active = 1
    for _ in range(MAX_MARCH_STEPS):
        if active == 1:
            if t >= MAX_MARCH_DISTANCE:
                active = 0
            else:
                position = ray_at(ray, t)
                distance, hit_kind = query_scene(position)
                steps += 1
                if distance < HIT_EPSILON:
                    kind = hit_kind
                    normal = estimate_normal(position, distance)
                    active = 0
                else:
                    t += distance

    return MarchResult(kind=kind, position=position, normal=normal, steps=steps)


# =============================================================================
# Python-side Probe
# =============================================================================

_probe_result = MarchResult.field(shape=())


@ti.kernel
def _march_kernel(ox: ti.f32, oy: ti.f32, oz: ti.f32, dx: ti.f32, dy: ti.f32, dz: ti.f32):
    _probe_result[None] = march(vec3(ox, oy, oz), normalize(vec3(dx, dy, dz)))


def march_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
) -> tuple[SurfaceKind, tuple[float, float, float], tuple[float, float, float]]:
    """March a single ray from Python.

    Args:
        origin: The ray origin (x, y, z).
        direction: The ray direction; normalized before marching.

    Returns:
        Tuple of (kind, hit position, hit normal).
    """
    _march_kernel(
        float(origin[0]), float(origin[1]), float(origin[2]),
        float(direction[0]), float(direction[1]), float(direction[2]),
    )
    position = _probe_result.position[None]
    normal = _probe_result.normal[None]
    return (
        SurfaceKind(int(_probe_result.kind[None])),
        (float(position[0]), float(position[1]), float(position[2])),
        (float(normal[0]), float(normal[1]), float(normal[2])),
    )


def get_last_march_steps() -> int:
    """Number of field evaluations used by the last ``march_ray`` call."""
    return int(_probe_result.steps[None])
