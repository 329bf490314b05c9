"""Camera module for primary ray generation.

Components:
    pinhole: Pinhole camera with jittered per-pixel ray directions

Pixels are addressed by (column, row) with row 0 at the top of the image.
"""

from .pinhole import (
    PinholeCamera,
    get_camera_info,
    get_camera_origin,
    get_ray_direction,
    get_ray_jittered,
    setup_camera,
)

__all__ = [
    "PinholeCamera",
    "setup_camera",
    "get_ray_direction",
    "get_ray_jittered",
    "get_camera_origin",
    "get_camera_info",
]
