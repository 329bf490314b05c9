"""Preview module: tone mapping and image export.

Components:
    display: Tone curve mapping linear radiance to bytes
    export: Image sink writing BMP/PNG files through Pillow
"""

from src.sdftrace.preview.display import tone_curve, tone_map_card
from src.sdftrace.preview.export import (
    ImageWriteError,
    compute_rmse,
    encode_image,
    save_image,
    write_bmp,
)

__all__ = [
    "tone_curve",
    "tone_map_card",
    "ImageWriteError",
    "save_image",
    "write_bmp",
    "encode_image",
    "compute_rmse",
]
