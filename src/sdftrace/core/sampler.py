"""Explicit random number streams for Monte Carlo sampling.

Every sample traced by the integrator owns a 32-bit stream state derived from
``(seed, pixel_index, sample_index)``. The state is threaded through Taichi
functions by value: each draw returns the advanced state together with the
random number. Parallel pixels therefore never share generator state, and a
render is bit-reproducible for a given seed.

The generator is the PCG hash ("Hash Functions for GPU Rendering",
Jarzynski & Olano, 2020), applied repeatedly to the state.

Example:
    >>> @ti.kernel
    ... def draw() -> ti.f32:
    ...     state = seed_stream(ti.u32(7), 0, 0)
    ...     state, u = next_float(state)
    ...     return u
"""

import taichi as ti

# 2^-24: maps the top 24 bits of a u32 onto [0, 1)
_UNIT_SCALE = 1.0 / 16777216.0


@ti.func
def pcg_hash(value: ti.u32) -> ti.u32:
    """Hash a 32-bit value with the PCG output permutation."""
    # + 2891336453 (mod 2^32), kept inside the i32 literal range
    state = value * ti.u32(747796405) - ti.u32(1403630843)
    word = ((state >> ((state >> ti.u32(28)) + ti.u32(4))) ^ state) * ti.u32(277803737)
    return (word >> ti.u32(22)) ^ word


@ti.func
def seed_stream(seed: ti.u32, pixel_index: ti.i32, sample_index: ti.i32) -> ti.u32:
    """Derive an independent stream state for one sample of one pixel.

    Args:
        seed: The global render seed.
        pixel_index: Linear pixel index (row * width + column).
        sample_index: Index of the sample within the pixel.

    Returns:
        The initial stream state.
    """
    state = pcg_hash(ti.cast(sample_index, ti.u32))
    state = pcg_hash(ti.cast(pixel_index, ti.u32) ^ state)
    return pcg_hash(seed ^ state)


@ti.func
def next_float(state: ti.u32):
    """Draw a uniform float in [0, 1) from a stream.

    Args:
        state: The current stream state.

    Returns:
        A tuple (new_state, value).
    """
    new_state = pcg_hash(state)
    value = ti.cast(new_state >> ti.u32(8), ti.f32) * _UNIT_SCALE
    return new_state, value
