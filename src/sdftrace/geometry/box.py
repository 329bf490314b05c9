"""Axis-aligned box primitive and domain repetition for distance fields.

The box test returns the signed distance to the surface of the rectangular
prism spanned by two opposite corners: negative inside, positive outside.
Combined with ``min`` (union) and negation (carving), it builds the room,
the vaulted ceiling recess and the plank lattice of the scene.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.sdftrace.geometry.box import box_test
    >>> # Use box_test within a Taichi kernel:
    >>> # d = box_test(p, vec3(-1, -1, -1), vec3(1, 1, 1))
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.func
def box_test(position: vec3, lower_left: vec3, upper_right: vec3) -> ti.f32:
    """Signed distance from a point to the surface of an axis-aligned box.

    With ``a = position - lower_left`` and ``b = upper_right - position``,
    every component of a and b is positive exactly when the point is inside,
    and the smallest one is the distance to the closest face.

    Args:
        position: The query point.
        lower_left: The corner with the smallest coordinates.
        upper_right: The corner with the largest coordinates.

    Returns:
        ``-min(min(min(a.x, b.x), min(a.y, b.y)), min(a.z, b.z))``.
    """
    a = position - lower_left
    b = upper_right - position
    return -ti.min(ti.min(ti.min(a.x, b.x), ti.min(a.y, b.y)), ti.min(a.z, b.z))


@ti.func
def repeat_x(position: vec3, period: ti.f32) -> vec3:
    """Fold space so that the x axis repeats with the given period.

    The fold is mirrored about x = 0 (``|x| mod period``), so a primitive
    placed in ``[0, period)`` is repeated on both sides of the origin.
    """
    return vec3(ti.abs(position.x) % period, position.y, position.z)
