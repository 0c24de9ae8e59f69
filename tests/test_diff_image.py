"""Tests for difference image construction"""

import pytest
import numpy as np

from imagediff.diff_image import build_diff_buffer, difference_field, export_diff_image
from imagediff.errors import DimensionMismatch, EmptyInput, LengthMismatch


class TestDifferenceField:

    def test_absolute_values(self):
        diff = difference_field(np.array([1.0, 0.0, 2.5]), np.array([0.0, 3.0, 2.5]))
        np.testing.assert_array_equal(diff, [1.0, 3.0, 0.0])

    def test_length_mismatch(self):
        with pytest.raises(LengthMismatch):
            difference_field(np.zeros(3), np.zeros(4))

    def test_empty(self):
        with pytest.raises(EmptyInput):
            difference_field(np.zeros(0), np.zeros(0))


class TestBuildDiffBuffer:

    def test_rgba_layout(self):
        diff = np.array([0.0, 1.0, 2.0, 3.0, 4.0, 5.0])
        buffer = build_diff_buffer(diff, width=3, height=2)

        assert (buffer.width, buffer.height, buffer.channels) == (3, 2, 4)
        assert buffer.data.dtype == np.float32
        assert not buffer.bottom_up
        image = buffer.as_array()
        # Row-major, top-to-bottom: index 4 is x=1, y=1
        np.testing.assert_array_equal(buffer.pixel(1, 1), [4.0, 4.0, 4.0, 1.0])
        np.testing.assert_array_equal(image[..., 0].ravel(), diff)
        np.testing.assert_array_equal(image[..., 3], np.ones((2, 3)))

    def test_dimension_mismatch(self):
        with pytest.raises(DimensionMismatch):
            build_diff_buffer(np.zeros(6), width=2, height=2)


class TestExportDiffImage:

    def test_writes_through_codec(self, memory_codecs, tmp_path):
        a = np.array([0.0, 2.0, 0.0, 1.0])
        b = np.array([1.0, 0.0, 0.0, 1.0])
        path = export_diff_image(a, b, 2, 2, tmp_path / "diff1.exr")

        written = memory_codecs["exr"].images[str(path)]
        np.testing.assert_array_equal(written[..., 0], [[1.0, 2.0], [0.0, 0.0]])
        np.testing.assert_array_equal(written[..., 3], np.ones((2, 2)))

    def test_dimension_mismatch_writes_nothing(self, memory_codecs, tmp_path):
        with pytest.raises(DimensionMismatch):
            export_diff_image(np.zeros(4), np.zeros(4), 4, 4, tmp_path / "diff1.exr")
        assert not (tmp_path / "diff1.exr").exists()
