"""Core rendering module.

Components:
    ray: Ray data structure, vector utilities and hemisphere sampling
    sampler: Explicit per-sample random number streams
    integrator: Path tracing light transport and the render target
    progressive: Progressive accumulation wrapper around the integrator

All compute-intensive operations use Taichi kernels.
"""

from .ray import (
    Ray,
    build_onb_from_normal,
    dot,
    length,
    normalize,
    ray_at,
    reflect,
    sample_cosine_hemisphere,
    vec3,
)
from .sampler import next_float, pcg_hash, seed_stream

# Note: integrator and progressive are NOT imported here to avoid circular imports.
# Import them directly: from src.sdftrace.core.integrator import ...

__all__ = [
    "Ray",
    "build_onb_from_normal",
    "dot",
    "length",
    "next_float",
    "normalize",
    "pcg_hash",
    "ray_at",
    "reflect",
    "sample_cosine_hemisphere",
    "seed_stream",
    "vec3",
]
