"""
Luminance Extraction Module
---------------------------
Collapses decoded floating-point RGB(A) buffers into a flat luminance field.
"""

import logging
from typing import Sequence

import numpy as np

from imagediff.errors import InvalidSample, UnsupportedPixelFormat
from imagediff.fileio import PixelBuffer, SUPPORTED_CHANNEL_COUNTS

logger = logging.getLogger(__name__)

# ITU-R BT.709 derived weights for linear RGB
LUMINANCE_WEIGHTS = (0.212671, 0.715160, 0.072169)

def luminance(r: float, g: float, b: float, weights: Sequence[float] = LUMINANCE_WEIGHTS) -> float:
    """Luminance of a single linear RGB sample."""
    return weights[0] * r + weights[1] * g + weights[2] * b

def extract_luminance(buffer: PixelBuffer, weights: Sequence[float] = LUMINANCE_WEIGHTS) -> np.ndarray:
    """
    Convert a floating-point RGB(A) buffer to a luminance field.

    Only the first three components are used; alpha is neither read nor
    validated. Rows are read through the buffer's row stride, top-to-bottom.

    Args:
        buffer: Decoded image.
        weights: (R, G, B) weights.

    Returns:
        float64 array of width*height values in row-major order.

    Raises:
        UnsupportedPixelFormat: Samples are not floating-point RGB/RGBA.
        InvalidSample: Any R, G or B component is infinite or NaN.
    """
    if not buffer.is_float:
        raise UnsupportedPixelFormat(
            f"Pixel type {buffer.data.dtype} is not floating point; only HDR float RGB/RGBA is supported")
    if buffer.channels not in SUPPORTED_CHANNEL_COUNTS:
        raise UnsupportedPixelFormat(
            f"{buffer.channels}-channel images are not supported; expected RGB or RGBA")

    rgb = buffer.as_array()[..., :3].reshape(-1, 3).astype(np.float64)

    finite = np.isfinite(rgb).all(axis=1)
    if not finite.all():
        index = int(np.argmin(finite))
        x, y = index % buffer.width, index // buffer.width
        raise InvalidSample(
            f"Non-finite sample at pixel {index} (x={x}, y={y}): "
            f"R={rgb[index, 0]} G={rgb[index, 1]} B={rgb[index, 2]}")

    field = rgb @ np.asarray(weights, dtype=np.float64)
    logger.debug(f"Extracted {field.size} luminance values from {buffer.width}x{buffer.height} buffer")
    return field
