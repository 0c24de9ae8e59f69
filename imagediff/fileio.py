"""
File Input/Output Module
------------------------
Decodes and encodes linear floating-point HDR images.

Each supported container (Radiance .hdr, OpenEXR .exr) has a codec registered
under its format name. Codecs read through OpenCV, falling back to imageio,
and hand back a PixelBuffer: an owned flat float array with explicit row
stride and orientation metadata.

Channel order: OpenCV works in BGR(A); everything leaving this module is RGB(A).
Orientation: decoded buffers are top-to-bottom (row 0 is the top scanline).
"""

import os
# OpenCV only reads/writes OpenEXR when this is set before cv2 is imported.
os.environ.setdefault("OPENCV_IO_ENABLE_OPENEXR", "1")

from dataclasses import dataclass
from pathlib import Path
import logging
import time
from typing import Dict, Optional, Tuple, Union

import cv2
import imageio.v2 as imageio
import numpy as np

from imagediff.errors import DecodeError, EncodeError, UnsupportedFormat, UnsupportedPixelFormat

# Setup logger for fileio module
logger = logging.getLogger(__name__)

SUPPORTED_CHANNEL_COUNTS = (3, 4)

@dataclass(frozen=True)
class PixelBuffer:
    """
    Decoded image samples.

    `data` is a flat array of `height * row_stride` samples. Each stored row
    holds `width * channels` samples followed by `row_stride - width * channels`
    padding samples. When `bottom_up` is set, stored row 0 is the bottom
    scanline of the picture; accessors always present rows top-to-bottom.
    """
    data: np.ndarray
    width: int
    height: int
    channels: int
    row_stride: int
    bottom_up: bool = False

    def __post_init__(self):
        if self.data.ndim != 1:
            raise ValueError(f"PixelBuffer data must be flat, got shape {self.data.shape}")
        if self.width < 0 or self.height < 0 or self.channels < 1:
            raise ValueError(f"Invalid buffer geometry {self.width}x{self.height}x{self.channels}")
        if self.row_stride < self.width * self.channels:
            raise ValueError(f"Row stride {self.row_stride} is shorter than a row of "
                             f"{self.width} pixels x {self.channels} channels")
        if self.data.size != self.height * self.row_stride:
            raise ValueError(f"Buffer holds {self.data.size} samples, expected "
                             f"{self.height} rows x {self.row_stride} stride")

    @property
    def is_float(self) -> bool:
        return np.issubdtype(self.data.dtype, np.floating)

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def _stored_row(self, y: int) -> int:
        return self.height - 1 - y if self.bottom_up else y

    def pixel(self, x: int, y: int) -> np.ndarray:
        """Components of pixel (x, y), with y counted from the top. Bounds-checked."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self.width}x{self.height} image")
        offset = self._stored_row(y) * self.row_stride + x * self.channels
        return self.data[offset:offset + self.channels]

    def as_array(self) -> np.ndarray:
        """(height, width, channels) view in top-to-bottom order, skipping row padding."""
        rows = self.data.reshape(self.height, self.row_stride)[:, :self.width * self.channels]
        image = rows.reshape(self.height, self.width, self.channels)
        return image[::-1] if self.bottom_up else image

    @classmethod
    def from_array(cls, array: np.ndarray, bottom_up: bool = False, row_padding: int = 0) -> 'PixelBuffer':
        """
        Copy an (H, W) or (H, W, C) top-to-bottom array into an owned buffer.

        Args:
            array: Image samples, rows ordered top-to-bottom.
            bottom_up: Store rows bottom-to-top (the buffer still reads top-to-bottom).
            row_padding: Extra samples appended to each stored row.
        """
        if array.ndim == 2:
            array = array[..., np.newaxis]
        if array.ndim != 3:
            raise ValueError(f"Expected a 2D or 3D image array, got shape {array.shape}")
        if row_padding < 0:
            raise ValueError("row_padding must be >= 0")

        height, width, channels = array.shape
        stored = array[::-1] if bottom_up else array
        row_stride = width * channels + row_padding
        data = np.zeros(height * row_stride, dtype=array.dtype)
        data.reshape(height, row_stride)[:, :width * channels] = stored.reshape(height, width * channels)
        return cls(data=data, width=width, height=height, channels=channels,
                   row_stride=row_stride, bottom_up=bottom_up)

def _swap_red_blue(image: np.ndarray) -> np.ndarray:
    """Convert between OpenCV's BGR(A) and RGB(A). Other layouts pass through untouched."""
    if image.ndim != 3:
        return image
    if image.shape[2] == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
    if image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
    return image

class ImageCodec:
    """
    Reads and writes one container format.

    Subclasses set `format_name`, `extensions` and the imageio plugin used
    when OpenCV cannot handle a file.
    """
    format_name: str = ''
    extensions: Tuple[str, ...] = ()
    imageio_format: Optional[str] = None

    def read(self, path: Path) -> np.ndarray:
        """Return an RGB(A) array, rows top-to-bottom."""
        try:
            image = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
        except cv2.error as cv_err:
            logger.warning(f"OpenCV failed to read {path} ({cv_err}).")
            image = None

        if image is not None:
            return _swap_red_blue(image)

        if self.imageio_format is None:
            raise DecodeError(f"Failed to decode {self.format_name.upper()} image: {path}")

        logger.warning(f"OpenCV could not decode {path}. Trying imageio ({self.imageio_format})...")
        try:
            return np.asarray(imageio.imread(str(path), format=self.imageio_format))
        except Exception as e:
            raise DecodeError(f"Failed to decode {self.format_name.upper()} image {path}: {e}") from e

    def prepare(self, image: np.ndarray) -> np.ndarray:
        """Adapt an RGB(A) float array to what this container can store."""
        return np.ascontiguousarray(image, dtype=np.float32)

    def write(self, path: Path, image: np.ndarray) -> None:
        """Write an RGB(A) float array, rows top-to-bottom."""
        image = self.prepare(image)
        try:
            success = cv2.imwrite(str(path), _swap_red_blue(image))
        except cv2.error as cv_err:
            logger.warning(f"OpenCV {self.format_name.upper()} save failed ({cv_err}).")
            success = False

        if success:
            return

        if self.imageio_format is None:
            raise EncodeError(f"Failed to encode {self.format_name.upper()} image: {path}")

        logger.warning(f"OpenCV could not write {path}. Trying imageio ({self.imageio_format})...")
        try:
            imageio.imwrite(str(path), image, format=self.imageio_format)
        except Exception as e:
            raise EncodeError(f"Failed to encode {self.format_name.upper()} image {path}: {e}") from e

class HdrCodec(ImageCodec):
    """Radiance RGBE (.hdr)."""
    format_name = 'hdr'
    extensions = ('.hdr',)
    imageio_format = 'HDR-FI'

    def prepare(self, image: np.ndarray) -> np.ndarray:
        # RGBE has no alpha channel
        if image.ndim == 3 and image.shape[2] == 4:
            logger.debug("Dropping alpha channel for Radiance HDR output")
            image = image[..., :3]
        return super().prepare(image)

class ExrCodec(ImageCodec):
    """OpenEXR (.exr)."""
    format_name = 'exr'
    extensions = ('.exr',)
    imageio_format = 'EXR-FI'

# --- Codec registry ---
_CODECS: Dict[str, ImageCodec] = {}
_EXTENSIONS: Dict[str, str] = {}

def register_codec(codec: ImageCodec) -> None:
    """Register `codec` under its format name and claim its extensions."""
    _CODECS[codec.format_name] = codec
    for ext in codec.extensions:
        _EXTENSIONS[ext.lower()] = codec.format_name

def get_codec(fmt: str) -> ImageCodec:
    try:
        return _CODECS[fmt.lower()]
    except KeyError:
        raise UnsupportedFormat(f"No codec registered for format '{fmt}'") from None

register_codec(HdrCodec())
register_codec(ExrCodec())

def supported_extensions() -> Tuple[str, ...]:
    return tuple(sorted(_EXTENSIONS))

def detect_format(path: Union[str, Path]) -> str:
    """
    Pick the format name from the file extension (case-insensitive).

    Raises:
        UnsupportedFormat: If no codec claims the extension.
    """
    ext = Path(path).suffix.lower()
    fmt = _EXTENSIONS.get(ext)
    if fmt is None:
        raise UnsupportedFormat(
            f"The format of {path} is neither HDR nor EXR, not supported for RMSE computation "
            f"(supported extensions: {', '.join(supported_extensions())})")
    return fmt

def decode(path: Union[str, Path]) -> PixelBuffer:
    """
    Load an HDR image into a PixelBuffer.

    Raises:
        UnsupportedFormat: Extension not recognized (checked before any file access).
        DecodeError: File missing or not decodable.
        UnsupportedPixelFormat: Decoded samples are not floating-point RGB/RGBA.
    """
    fmt = detect_format(path)
    image_path = Path(path)
    if not image_path.is_file():
        raise DecodeError(f"Image file not found or path is not a file: {image_path}")

    load_start = time.perf_counter()
    image = get_codec(fmt).read(image_path)

    channels = image.shape[2] if image.ndim == 3 else 1
    if channels not in SUPPORTED_CHANNEL_COUNTS or not np.issubdtype(image.dtype, np.floating):
        raise UnsupportedPixelFormat(
            f"{image_path} decodes to {channels} channel(s) of {image.dtype}; "
            f"only floating-point RGB or RGBA is supported")

    buffer = PixelBuffer.from_array(image)
    logger.info(f"Image: {image_path} is size {buffer.width}x{buffer.height} "
                f"with {buffer.channels} channels of {buffer.data.dtype}")
    logger.debug(f"Decoding {image_path.name} took {time.perf_counter() - load_start:.3f}s")
    return buffer

def encode(buffer: PixelBuffer, path: Union[str, Path], fmt: Optional[str] = None) -> Path:
    """
    Write a PixelBuffer to `path`, overwriting any existing file.
    Creates the output directory if it doesn't exist.

    Args:
        buffer: Floating-point RGB/RGBA samples.
        path: Output file path.
        fmt: Format name; taken from the extension when omitted.

    Returns:
        The path written.

    Raises:
        UnsupportedFormat, UnsupportedPixelFormat, EncodeError
    """
    fmt = fmt or detect_format(path)
    codec = get_codec(fmt)
    if not buffer.is_float or buffer.channels not in SUPPORTED_CHANNEL_COUNTS:
        raise UnsupportedPixelFormat(
            f"Cannot encode {buffer.channels} channel(s) of {buffer.data.dtype}; "
            f"only floating-point RGB or RGBA is supported")

    output_path = Path(path)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise EncodeError(f"Cannot create output directory {output_path.parent}: {e}") from e

    codec.write(output_path, buffer.as_array())
    logger.info(f"Saved {fmt.upper()} image: {output_path}")
    return output_path
