"""Geometry module for distance field primitives.

Components:
    box: Axis-aligned box distance and domain repetition
    letters: Optional "PIXAR" logo primitive

All distance functions are Taichi functions (@ti.func) returning the signed
distance to the primitive surface, negative inside.
"""

from .box import box_test, repeat_x
from .letters import (
    disable_letters,
    enable_letters,
    letters_distance,
    letters_enabled,
)

__all__ = [
    "box_test",
    "repeat_x",
    "enable_letters",
    "disable_letters",
    "letters_enabled",
    "letters_distance",
]
