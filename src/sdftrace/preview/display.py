"""Tone mapping of linear radiance to displayable bytes.

The renderer produces unbounded linear radiance (the sky alone is about 100
per channel). The tone curve used for output is a shifted Reinhard operator

    mapped = 255 * (v + 14/241) / (v + 255/241)

which lifts black to about 14 and approaches 255 as v grows, so it never
needs explicit clamping at the top.

Example:
    >>> import numpy as np
    >>> from src.sdftrace.preview.display import tone_map_card
    >>> tone_map_card(np.zeros((1, 1, 3), dtype=np.float32))
    array([[[14, 14, 14]]], dtype=uint8)
"""

import numpy as np
import numpy.typing as npt

# The curve in integer form: 255 * (241 v + 14) / (241 v + 255)
TONE_SCALE = 241.0
TONE_BLACK = 14.0
TONE_WHITE = 255.0


def tone_curve(
    image: npt.NDArray[np.floating[npt.NBitBase]],
) -> npt.NDArray[np.float64]:
    """Apply the shifted Reinhard curve.

    Args:
        image: Linear radiance, any shape.

    Returns:
        Values in [14, 255), as float64. Zero maps exactly to 14.
    """
    values = np.maximum(np.asarray(image, dtype=np.float64), 0.0)
    scaled = values * TONE_SCALE
    return TONE_WHITE * (scaled + TONE_BLACK) / (scaled + TONE_WHITE)


def tone_map_card(
    image: npt.NDArray[np.floating[npt.NBitBase]],
) -> npt.NDArray[np.uint8]:
    """Tone map linear radiance to 8-bit values.

    Fractional results are truncated toward zero.

    Args:
        image: Linear radiance array of shape (H, W, 3).

    Returns:
        Array of shape (H, W, 3) with dtype uint8.
    """
    return tone_curve(image).astype(np.uint8)
