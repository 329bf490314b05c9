"""Material responses used by the path tracer.

Components:
    diffuse: Cosine-weighted Lambertian scatter for the walls
    mirror: Perfect specular reflection for the letters
"""

from .diffuse import diffuse_incidence, scatter_diffuse
from .mirror import scatter_mirror

__all__ = [
    "diffuse_incidence",
    "scatter_diffuse",
    "scatter_mirror",
]
