"""
Error Types Module
------------------
Exception hierarchy for the comparison tool. Every error is fatal for the
current invocation; the CLI maps each one to an exit code.
"""


class ImageDiffError(Exception):
    """Base class for all comparison failures."""
    exit_code = 2


class UsageError(ImageDiffError):
    """Bad command-line invocation."""
    exit_code = 1


class UnsupportedFormat(ImageDiffError):
    """File extension is neither .hdr nor .exr."""


class DecodeError(ImageDiffError):
    """The codec failed to read a file it claims to support."""


class EncodeError(ImageDiffError):
    """The codec failed to write an output image."""


class UnsupportedPixelFormat(ImageDiffError):
    """Decoded data is not floating-point RGB or RGBA."""


class InvalidSample(ImageDiffError):
    """A color component is infinite or NaN."""


class LengthMismatch(ImageDiffError):
    """Two luminance fields have different lengths."""


class DimensionMismatch(ImageDiffError):
    """Image or buffer dimensions do not agree."""


class EmptyInput(ImageDiffError):
    """A luminance field has no elements."""
