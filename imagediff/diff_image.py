"""
Difference Image Module
-----------------------
Builds per-pixel absolute luminance differences and packages them as a
linear RGBA float image for viewing.

Rows are emitted top-to-bottom, the same order luminance fields are
extracted in.
"""

import logging
from pathlib import Path
from typing import Union

import numpy as np

from imagediff.errors import DimensionMismatch, EmptyInput, LengthMismatch
from imagediff.fileio import PixelBuffer, encode

logger = logging.getLogger(__name__)

def difference_field(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Absolute per-pixel difference |a[i] - b[i]|."""
    if len(a) != len(b):
        raise LengthMismatch(f"Luminance fields differ in length: {len(a)} vs {len(b)}")
    if len(a) == 0:
        raise EmptyInput("Cannot build a difference image from empty fields")
    return np.abs(np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64))

def build_diff_buffer(diff: np.ndarray, width: int, height: int) -> PixelBuffer:
    """
    Expand a difference field into an RGBA float32 buffer (R=G=B=diff, A=1).

    Raises:
        DimensionMismatch: width*height does not match the field length.
    """
    if width * height != len(diff):
        raise DimensionMismatch(
            f"Difference field has {len(diff)} values, cannot fill a {width}x{height} image")

    rgba = np.ones((height, width, 4), dtype=np.float32)
    rgba[..., :3] = np.asarray(diff, dtype=np.float32).reshape(height, width, 1)
    return PixelBuffer.from_array(rgba, bottom_up=False)

def export_diff_image(a: np.ndarray, b: np.ndarray, width: int, height: int,
                      path: Union[str, Path]) -> Path:
    """Build the difference image of `a` and `b` and write it to `path`."""
    buffer = build_diff_buffer(difference_field(a, b), width, height)
    output_path = encode(buffer, path)
    logger.debug(f"Difference image {width}x{height} written to {output_path}")
    return output_path
