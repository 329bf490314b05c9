"""Decorative letter primitive: the "PIXAR" logo as a distance field.

The glyphs are drawn in the z = 0 plane from fifteen straight strokes and two
half-ring curves (the bowls of the P and the R). The 2-D distance to the
nearest stroke is extruded along z with a rounded L8 norm, giving letters
with softened edges that are about one unit thick.

The primitive is optional. It contributes to the scene only after
``enable_letters()`` has uploaded the stroke table; hits on it are reported
as ``SurfaceKind.LETTER`` and shaded as a mirror.

Each stroke is encoded as four characters ``x0 y0 x1 y1``; a character c
stands for the coordinate ``(ord(c) - 79) / 2``.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.sdftrace.geometry.letters import enable_letters, letters_enabled
    >>> enable_letters()
    >>> letters_enabled()
    True
"""

import logging

import numpy as np
import taichi as ti
import taichi.math as tm

from src.sdftrace.core.ray import dot, length

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Glyph Tables
# =============================================================================

# Fifteen two-point strokes: P (stem and bars), I, X, A, R (stem, bars, leg)
GLYPH_STROKES = (
    "5O5_" "5W9W" "5_9_"
    "AOEO" "COC_" "A_E_"
    "IOQ_" "I_QO"
    "UOY_" "Y_]O" "WW[W"
    "aOa_" "aWeW" "a_e_" "cWiO"
)

# Centers of the half-ring bowls of P and R
CURVE_CENTERS = ((-11.0, 6.0), (11.0, 6.0))
CURVE_RADIUS = 2.0

# Half thickness of the extruded letters
LETTER_ROUNDING = 0.5


def decode_strokes(encoded: str) -> np.ndarray:
    """Decode a stroke string into an array of segment endpoints.

    Args:
        encoded: Groups of four characters ``x0 y0 x1 y1``.

    Returns:
        Array of shape (N, 4) holding (x0, y0, x1, y1) per stroke.

    Raises:
        ValueError: If the string length is not a multiple of four.
    """
    if len(encoded) % 4 != 0:
        raise ValueError(f"Stroke table length {len(encoded)} is not a multiple of 4")
    codes = np.frombuffer(encoded.encode("ascii"), dtype=np.uint8).astype(np.float32)
    return ((codes - 79.0) * 0.5).reshape(-1, 4)


STROKES = decode_strokes(GLYPH_STROKES)
NUM_STROKES = STROKES.shape[0]

# =============================================================================
# Taichi Fields
# =============================================================================

_stroke_segments = ti.Vector.field(4, dtype=ti.f32, shape=NUM_STROKES)
_letters_enabled = ti.field(dtype=ti.i32, shape=())


def enable_letters() -> None:
    """Upload the stroke table and add the letters to the scene."""
    _stroke_segments.from_numpy(STROKES)
    _letters_enabled[None] = 1
    logger.debug("Letter primitive enabled with %d strokes", NUM_STROKES)


def disable_letters() -> None:
    """Remove the letters from the scene."""
    _letters_enabled[None] = 0


def letters_enabled() -> bool:
    """Check whether the letter primitive contributes to the scene."""
    return bool(_letters_enabled[None])


# =============================================================================
# Distance Functions
# =============================================================================


@ti.func
def is_letters_enabled() -> ti.i32:
    """Kernel-side view of the enable flag."""
    return _letters_enabled[None]


@ti.func
def _stroke_distance_sq(flat: vec3, begin: vec3, end: vec3) -> ti.f32:
    """Squared distance from a point to a line segment."""
    edge = end - begin
    h = tm.clamp(dot(flat - begin, edge) / dot(edge, edge), 0.0, 1.0)
    offset = flat - (begin + edge * h)
    return dot(offset, offset)


@ti.func
def _curve_distance(flat: vec3, center: vec3) -> ti.f32:
    """Distance from a point to a half ring opening toward -x."""
    o = flat - center
    d = 0.0
    if o.x > 0.0:
        d = ti.abs(length(o) - CURVE_RADIUS)
    else:
        # Left of the center: distance to the nearer ring endpoint
        if o.y > 0.0:
            o[1] -= CURVE_RADIUS
        else:
            o[1] += CURVE_RADIUS
        d = length(o)
    return d


@ti.func
def letters_distance(position: vec3) -> ti.f32:
    """Signed distance from a point to the extruded letters.

    Args:
        position: The query point.

    Returns:
        The distance to the letter surface (negative inside a letter).
    """
    flat = vec3(position.x, position.y, 0.0)

    dist_sq = 1e9
    for i in range(NUM_STROKES):
        seg = _stroke_segments[i]
        begin = vec3(seg[0], seg[1], 0.0)
        end = vec3(seg[2], seg[3], 0.0)
        dist_sq = ti.min(dist_sq, _stroke_distance_sq(flat, begin, end))
    distance = ti.sqrt(dist_sq)

    for i in ti.static(range(len(CURVE_CENTERS))):
        center = vec3(CURVE_CENTERS[i][0], CURVE_CENTERS[i][1], 0.0)
        distance = ti.min(distance, _curve_distance(flat, center))

    return ti.pow(ti.pow(distance, 8.0) + ti.pow(ti.abs(position.z), 8.0), 0.125) - LETTER_ROUNDING
