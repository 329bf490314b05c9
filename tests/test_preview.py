"""Tests for the preview module.

This module tests the preview/display and preview/export functionality including:
- The tone curve and its byte conversion
- BMP layout (header, bottom-up rows, row padding)
- PNG export
- Write failures
- RMSE computation
"""

import numpy as np
import pytest
from PIL import Image as PILImage


class TestToneCurve:
    """Test the shifted Reinhard tone curve."""

    def test_black_maps_to_black_level(self):
        """Test zero radiance maps to 14."""
        from src.sdftrace.preview.display import tone_map_card

        result = tone_map_card(np.zeros((2, 2, 3), dtype=np.float32))

        assert np.all(result == 14)

    def test_formula(self):
        """Test the curve 255 * (241 v + 14) / (241 v + 255)."""
        from src.sdftrace.preview.display import tone_curve

        for value in [0.0, 0.01, 0.5, 1.0, 50.0]:
            expected = 255.0 * (241.0 * value + 14.0) / (241.0 * value + 255.0)
            result = tone_curve(np.full((1, 1, 3), value, dtype=np.float32))
            assert np.allclose(result, expected, rtol=1e-6)

    def test_sky_radiance_bytes(self):
        """Test the sky color maps to (250, 251, 252)."""
        from src.sdftrace.preview.display import tone_map_card

        sky = np.array([[[50.0, 80.0, 100.0]]], dtype=np.float32)

        assert tone_map_card(sky).tolist() == [[[250, 251, 252]]]

    def test_monotonic_and_bounded(self):
        """Test brighter input never maps darker and never reaches past 255."""
        from src.sdftrace.preview.display import tone_map_card

        values = np.linspace(0.0, 1e6, 1001, dtype=np.float32).reshape(-1, 1, 1)
        result = tone_map_card(np.repeat(values, 3, axis=2))[:, 0, 0].astype(int)

        assert np.all(np.diff(result) >= 0)
        assert result.max() <= 255

    def test_negative_input_clamped(self):
        """Test negative radiance is treated as black."""
        from src.sdftrace.preview.display import tone_map_card

        result = tone_map_card(np.full((1, 1, 3), -5.0, dtype=np.float32))

        assert np.all(result == 14)


class TestBmpExport:
    """Test the BMP image sink."""

    def test_header_size_and_padding(self):
        """Test a 2x2 image has a 54 byte header and 8 bytes per padded row."""
        from src.sdftrace.preview.export import BMP_HEADER_SIZE, encode_image

        pixels = np.zeros((2, 2, 3), dtype=np.uint8)
        data = encode_image(pixels)

        assert data[:2] == b"BM"
        assert int.from_bytes(data[10:14], "little") == BMP_HEADER_SIZE
        assert int.from_bytes(data[18:22], "little", signed=True) == 2
        assert int.from_bytes(data[22:26], "little", signed=True) == 2
        assert int.from_bytes(data[28:30], "little") == 24
        # Two rows of 6 bytes, each padded to 8
        assert len(data) == BMP_HEADER_SIZE + 2 * 8

    def test_rows_bottom_up_in_bgr(self):
        """Test the first stored row is the bottom of the image, in BGR order."""
        from src.sdftrace.preview.export import BMP_HEADER_SIZE, encode_image

        pixels = np.zeros((2, 1, 3), dtype=np.uint8)
        pixels[0, 0] = (10, 20, 30)  # top
        pixels[1, 0] = (40, 50, 60)  # bottom
        data = encode_image(pixels)

        body = data[BMP_HEADER_SIZE:]
        assert tuple(body[0:3]) == (60, 50, 40)
        assert tuple(body[4:7]) == (30, 20, 10)

    def test_save_defaults_to_bmp_without_extension(self, tmp_path):
        """Test a path without an extension is written as BMP."""
        from src.sdftrace.preview.export import save_image

        path = save_image(np.full((3, 5, 3), 128, dtype=np.uint8), tmp_path / "frame")

        assert path.read_bytes()[:2] == b"BM"

    def test_write_bmp_ignores_extension(self, tmp_path):
        """Test write_bmp always writes BMP."""
        from src.sdftrace.preview.export import write_bmp

        path = write_bmp(np.zeros((3, 3, 3), dtype=np.uint8), tmp_path / "frame.img")

        assert path.read_bytes()[:2] == b"BM"

    def test_roundtrip_pixels(self, tmp_path):
        """Test pixels read back unchanged with row 0 on top."""
        from src.sdftrace.preview.export import save_image

        pixels = np.arange(4 * 3 * 3, dtype=np.uint8).reshape(4, 3, 3)
        path = save_image(pixels, tmp_path / "frame.bmp")

        with PILImage.open(path) as image:
            np.testing.assert_array_equal(np.asarray(image.convert("RGB")), pixels)


class TestOtherFormats:
    """Test formats inferred from the extension."""

    def test_png_export(self, tmp_path):
        """Test a .png path writes a PNG file."""
        from src.sdftrace.preview.export import save_image

        path = save_image(np.zeros((4, 4, 3), dtype=np.uint8), tmp_path / "frame.png")

        with PILImage.open(path) as image:
            assert image.format == "PNG"
            assert image.size == (4, 4)


class TestExportErrors:
    """Test rejected input and write failures."""

    def test_wrong_shape_rejected(self, tmp_path):
        """Test a grayscale array is rejected."""
        from src.sdftrace.preview.export import save_image

        with pytest.raises(ValueError, match="shape"):
            save_image(np.zeros((4, 4), dtype=np.uint8), tmp_path / "frame.bmp")

    def test_wrong_dtype_rejected(self, tmp_path):
        """Test a float array is rejected."""
        from src.sdftrace.preview.export import save_image

        with pytest.raises(ValueError, match="uint8"):
            save_image(np.zeros((4, 4, 3), dtype=np.float32), tmp_path / "frame.bmp")

    def test_missing_directory_raises_image_write_error(self, tmp_path):
        """Test writing into a missing directory raises ImageWriteError."""
        from src.sdftrace.preview.export import ImageWriteError, save_image

        target = tmp_path / "missing" / "frame.bmp"

        with pytest.raises(ImageWriteError) as excinfo:
            save_image(np.zeros((2, 2, 3), dtype=np.uint8), target)

        assert excinfo.value.path == target
        assert isinstance(excinfo.value.cause, OSError)
        assert isinstance(excinfo.value, OSError)


class TestComputeRmse:
    """Test RMSE computation."""

    def test_identical_images_zero(self):
        """Test identical images have zero error."""
        from src.sdftrace.preview.export import compute_rmse

        image = np.full((4, 4, 3), 7, dtype=np.uint8)

        assert compute_rmse(image, image) == 0.0

    def test_known_difference(self):
        """Test a constant offset gives that offset as RMSE."""
        from src.sdftrace.preview.export import compute_rmse

        a = np.zeros((4, 4, 3), dtype=np.uint8)
        b = np.full((4, 4, 3), 3, dtype=np.uint8)

        assert compute_rmse(a, b) == pytest.approx(3.0)

    def test_shape_mismatch(self):
        """Test different shapes are rejected."""
        from src.sdftrace.preview.export import compute_rmse

        with pytest.raises(ValueError, match="shapes must match"):
            compute_rmse(np.zeros((2, 2, 3)), np.zeros((3, 2, 3)))
