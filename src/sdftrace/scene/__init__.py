"""Scene module: the distance field and the ray marcher.

Components:
    field: Scene distance field and surface classification
    marcher: Sphere-tracing ray marcher with normal estimation
"""

from .field import (
    SKY_HEIGHT,
    SurfaceKind,
    query_point,
    query_scene,
    room_distance,
    sky_distance,
)
from .marcher import (
    HIT_EPSILON,
    MAX_MARCH_DISTANCE,
    MAX_MARCH_STEPS,
    MarchResult,
    march,
    march_ray,
)

__all__ = [
    "SurfaceKind",
    "SKY_HEIGHT",
    "query_scene",
    "query_point",
    "room_distance",
    "sky_distance",
    "MarchResult",
    "march",
    "march_ray",
    "HIT_EPSILON",
    "MAX_MARCH_STEPS",
    "MAX_MARCH_DISTANCE",
]
