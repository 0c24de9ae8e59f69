"""Tests for luminance extraction"""

import pytest
import numpy as np

from imagediff.errors import InvalidSample, UnsupportedPixelFormat
from imagediff.fileio import PixelBuffer
from imagediff.luminance import LUMINANCE_WEIGHTS, extract_luminance, luminance


class TestScalarLuminance:

    def test_white(self):
        assert luminance(1.0, 1.0, 1.0) == pytest.approx(0.212671 + 0.715160 + 0.072169)
        assert luminance(1.0, 1.0, 1.0) == pytest.approx(1.0, abs=1e-12)

    def test_red(self):
        assert luminance(1.0, 0.0, 0.0) == 0.212671

    def test_custom_weights(self):
        assert luminance(1.0, 2.0, 3.0, weights=(1.0, 0.0, 0.0)) == 1.0


class TestExtractLuminance:
    """Buffer -> luminance field"""

    def test_length_and_order(self):
        image = np.zeros((2, 3, 3), dtype=np.float32)
        image[0, 1] = (1.0, 0.0, 0.0)  # top row, second pixel
        image[1, 2] = (0.0, 1.0, 0.0)  # bottom-right pixel
        field = extract_luminance(PixelBuffer.from_array(image))

        assert field.shape == (6,)
        assert field.dtype == np.float64
        assert field[1] == pytest.approx(0.212671)
        assert field[5] == pytest.approx(0.715160)
        assert np.count_nonzero(field) == 2

    def test_alpha_is_ignored(self, solid_image):
        rgb = PixelBuffer.from_array(solid_image(2, 2, (0.5, 0.25, 2.0)))
        rgba = PixelBuffer.from_array(solid_image(2, 2, (0.5, 0.25, 2.0), alpha=np.nan))
        np.testing.assert_array_equal(extract_luminance(rgb), extract_luminance(rgba))

    def test_row_stride_padding_is_skipped(self):
        image = np.arange(2 * 3 * 3, dtype=np.float32).reshape(2, 3, 3)
        packed = PixelBuffer.from_array(image)
        padded = PixelBuffer.from_array(image, row_padding=5)
        # Padding samples must never be read as pixels
        padded.data.reshape(2, padded.row_stride)[:, 9:] = np.nan

        assert padded.row_stride == 14
        np.testing.assert_array_equal(extract_luminance(packed), extract_luminance(padded))

    def test_bottom_up_storage_reads_top_to_bottom(self):
        image = np.zeros((2, 1, 3), dtype=np.float32)
        image[0, 0] = (1.0, 1.0, 1.0)
        field = extract_luminance(PixelBuffer.from_array(image, bottom_up=True))
        assert field[0] == pytest.approx(sum(LUMINANCE_WEIGHTS))
        assert field[1] == 0.0

    @pytest.mark.parametrize("bad", [np.inf, -np.inf, np.nan])
    def test_non_finite_sample_is_fatal(self, bad):
        image = np.ones((2, 2, 3), dtype=np.float32)
        image[1, 0, 2] = bad
        with pytest.raises(InvalidSample, match="pixel 2"):
            extract_luminance(PixelBuffer.from_array(image))

    def test_integer_buffer_rejected(self):
        image = np.zeros((2, 2, 3), dtype=np.uint8)
        with pytest.raises(UnsupportedPixelFormat):
            extract_luminance(PixelBuffer.from_array(image))

    @pytest.mark.parametrize("channels", [1, 2, 5])
    def test_channel_count_rejected(self, channels):
        image = np.zeros((2, 2, channels), dtype=np.float32)
        with pytest.raises(UnsupportedPixelFormat):
            extract_luminance(PixelBuffer.from_array(image))
