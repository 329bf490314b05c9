"""Integration tests for the end-to-end rendering pipeline.

This module tests the complete rendering pipeline from camera setup through
final image output. It verifies that all components work together correctly
and that the output meets basic quality criteria.

Tests are designed to be fast (low resolution, few samples) while still
exercising the full pipeline.

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np


def _render_bytes(width: int, height: int, samples: int, seed: int, **camera) -> np.ndarray:
    from src.sdftrace.camera.pinhole import PinholeCamera
    from src.sdftrace.core.progressive import ProgressiveRenderer

    renderer = ProgressiveRenderer(width, height, camera=PinholeCamera(**camera), seed=seed)
    renderer.render(samples)
    return renderer.get_image_uint8()


class TestRoomIntegration:
    """End-to-end renders of the room."""

    def test_default_view_renders(self) -> None:
        """Test the default view produces a valid, non-uniform image."""
        from src.sdftrace.camera.pinhole import PinholeCamera
        from src.sdftrace.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(32, 18, camera=PinholeCamera(), seed=1)
        renderer.render(num_samples=4, batch_size=2)
        radiance = renderer.get_image_numpy()
        pixels = renderer.get_image_uint8()

        assert radiance.shape == (18, 32, 3)
        assert not np.any(np.isnan(radiance))
        assert not np.any(np.isinf(radiance))
        assert np.all(radiance >= 0.0)
        assert pixels.min() >= 14
        assert pixels.max() > pixels.min()

    def test_pixel_seeing_only_sky(self) -> None:
        """Test a pixel whose every sample reaches the sky gets the sky bytes."""
        camera = {"position": (0.0, 17.0, 0.0), "look_at": (0.0, 30.0, 0.01)}

        one = _render_bytes(8, 8, 1, 0, **camera)
        many = _render_bytes(8, 8, 256, 0, **camera)

        assert one[4, 4].tolist() == [250, 251, 252]
        assert many[4, 4].tolist() == [250, 251, 252]

    def test_same_seed_same_bytes(self) -> None:
        """Test repeated renders with the same seed are byte-identical."""
        first = _render_bytes(16, 9, 3, 5)
        second = _render_bytes(16, 9, 3, 5)

        np.testing.assert_array_equal(first, second)

    def test_letters_change_the_image(self) -> None:
        """Test enabling the letters puts them in view of the default camera."""
        from src.sdftrace.geometry.letters import disable_letters, enable_letters

        disable_letters()
        plain = _render_bytes(32, 18, 2, 0)

        enable_letters()
        with_letters = _render_bytes(32, 18, 2, 0)

        assert not np.array_equal(plain, with_letters)

    def test_saved_files_identical(self, tmp_path: Path) -> None:
        """Test two runs with the same seed write the same BMP bytes."""
        from src.sdftrace.preview.export import save_image

        a = save_image(_render_bytes(10, 6, 2, 8), tmp_path / "a.bmp")
        b = save_image(_render_bytes(10, 6, 2, 8), tmp_path / "b.bmp")

        assert a.read_bytes() == b.read_bytes()
        assert len(a.read_bytes()) == 54 + 6 * 32


class TestConvergence:
    """Test that more samples per pixel reduce the noise on lit walls."""

    @staticmethod
    def _radiance(samples: int, seed: int) -> np.ndarray:
        from src.sdftrace.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(16, 9, seed=seed)
        renderer.render(num_samples=samples, batch_size=64)
        return renderer.get_image_numpy()

    def test_error_shrinks_with_samples(self) -> None:
        """Test the error against a high-sample reference drops from 1 to 64 spp."""
        from src.sdftrace.preview.export import compute_rmse

        reference = self._radiance(256, seed=100)
        coarse = compute_rmse(self._radiance(1, seed=1), reference)
        fine = compute_rmse(self._radiance(64, seed=1), reference)

        assert fine < coarse * 0.5

    def test_wall_pixel_spread_across_seeds_shrinks(self) -> None:
        """Test a wall pixel varies less between seeds at 64 spp than at 1 spp."""
        # Row 6, column 4 of the default view looks at the floor
        coarse = np.array([self._radiance(1, seed=s)[6, 4] for s in range(8)])
        fine = np.array([self._radiance(64, seed=s)[6, 4] for s in range(8)])

        assert coarse.std(axis=0).sum() > 0.0
        assert fine.std(axis=0).sum() < coarse.std(axis=0).sum()
