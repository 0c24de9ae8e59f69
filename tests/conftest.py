"""Pytest configuration and shared fixtures for imagediff tests"""

from pathlib import Path
from typing import Dict

import pytest
import numpy as np

from imagediff import config as config_module
from imagediff import fileio
from imagediff.errors import DecodeError


class MemoryCodec(fileio.ImageCodec):
    """Codec keeping images in a dict; files on disk are empty placeholders."""

    def __init__(self, format_name: str):
        self.format_name = format_name
        self.extensions = (f".{format_name}",)
        self.images: Dict[str, np.ndarray] = {}
        self.reads = []

    def put(self, path: Path, image: np.ndarray) -> Path:
        path = Path(path)
        path.touch()
        self.images[str(path)] = np.asarray(image)
        return path

    def read(self, path: Path) -> np.ndarray:
        self.reads.append(Path(path))
        try:
            return self.images[str(path)].copy()
        except KeyError:
            raise DecodeError(f"not in memory: {path}") from None

    def write(self, path: Path, image: np.ndarray) -> None:
        self.put(path, self.prepare(image))


@pytest.fixture(autouse=True)
def default_config(monkeypatch):
    """Each test starts from the default global configuration"""
    monkeypatch.setattr(config_module, "_config", None)


@pytest.fixture
def memory_codecs(monkeypatch) -> Dict[str, MemoryCodec]:
    """Replace the HDR and EXR codecs with in-memory ones"""
    codecs = {name: MemoryCodec(name) for name in ("hdr", "exr")}
    for name, codec in codecs.items():
        monkeypatch.setitem(fileio._CODECS, name, codec)
    return codecs


@pytest.fixture
def solid_image():
    """Factory for an (H, W, C) float32 image filled with one RGB color"""
    def _make(width: int, height: int, rgb=(0.0, 0.0, 0.0), alpha=None) -> np.ndarray:
        channels = 3 if alpha is None else 4
        image = np.empty((height, width, channels), dtype=np.float32)
        image[..., :3] = rgb
        if alpha is not None:
            image[..., 3] = alpha
        return image
    return _make
