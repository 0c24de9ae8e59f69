"""
Metrics Module
--------------
RMSE and worst-pixel statistics between two luminance fields.
"""

import logging
from typing import NamedTuple

import numpy as np

from imagediff.errors import EmptyInput, LengthMismatch

logger = logging.getLogger(__name__)

class MaxDiff(NamedTuple):
    """Flat pixel index and magnitude of the largest absolute difference."""
    index: int
    value: float

def _check_fields(a: np.ndarray, b: np.ndarray) -> None:
    if len(a) != len(b):
        raise LengthMismatch(f"Luminance fields differ in length: {len(a)} vs {len(b)}")
    if len(a) == 0:
        raise EmptyInput("Cannot compare empty luminance fields")

def _scaled_rms(delta: np.ndarray) -> float:
    """RMS of `delta`, scaled by its largest magnitude so squares neither underflow nor overflow."""
    scale = float(np.max(np.abs(delta)))
    if scale == 0.0:
        return 0.0
    scaled = delta / scale
    return scale * float(np.sqrt(np.mean(scaled * scaled)))

def rmse(a: np.ndarray, b: np.ndarray) -> float:
    """
    Root-mean-square error between two equal-length fields.

    Raises:
        LengthMismatch: Fields differ in length.
        EmptyInput: Fields are empty.
    """
    _check_fields(a, b)
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    delta = a - b
    if np.isinf(delta).any():
        # Finite inputs of opposite sign can overflow the subtraction
        return 2.0 * _scaled_rms(a / 2.0 - b / 2.0)
    return _scaled_rms(delta)

def max_diff(a: np.ndarray, b: np.ndarray) -> MaxDiff:
    """
    Locate the largest |a[i] - b[i]|.

    Ties resolve to the lowest index (first occurrence in row-major order).

    Raises:
        LengthMismatch: Fields differ in length.
        EmptyInput: Fields are empty.
    """
    _check_fields(a, b)
    delta = np.abs(np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64))
    # argmax returns the first index of the maximum
    index = int(np.argmax(delta))
    return MaxDiff(index=index, value=float(delta[index]))
