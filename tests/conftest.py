"""Pytest configuration for sdftrace tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def reset_scene_state():
    """Reset the optional scene primitives and the accumulator around each test.

    This ensures tests are isolated from each other.
    """
    # Import here so Taichi is initialized before any field is touched
    from src.sdftrace.geometry.letters import disable_letters

    def _reset():
        disable_letters()

        try:
            from src.sdftrace.core.integrator import clear_render_target

            clear_render_target()
        except (ImportError, RuntimeError):
            # Render target not set up yet
            pass

    _reset()

    yield

    _reset()
