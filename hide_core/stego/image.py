"""
Pixel buffers and the image/file collaborators around the codec.

Images are decoded with Pillow and held as a numpy uint8 array of shape
(height, width, channels). Loaded images are converted to RGBA so every
carrier exposes four channel-slots per pixel.

Only lossless formats are written, since any lossy re-encoding destroys the
low-order bits that carry the payload. All writes go through a temporary file
in the destination directory and are moved into place once complete.
"""

import contextlib
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image

from .errors import StegoIOError, UnsupportedFormatError

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]

# Output formats that keep every channel bit intact
LOSSLESS_FORMATS = {
    ".png": "PNG",
    ".tif": "TIFF",
    ".tiff": "TIFF",
    ".tga": "TGA",
}

CARRIER_MODE = "RGBA"

_MODES_BY_CHANNELS = {1: "L", 2: "LA", 3: "RGB", 4: "RGBA"}


@dataclass(eq=False)
class PixelBuffer:
    """
    Mutable view of an image's channel bytes.

    Attributes:
        pixels: uint8 array of shape (height, width, channels)
    """

    pixels: np.ndarray

    def __post_init__(self):
        pixels = np.ascontiguousarray(self.pixels, dtype=np.uint8)
        if pixels.ndim == 2:
            pixels = pixels[:, :, None]
        if pixels.ndim != 3:
            raise ValueError(f"Pixel array must be (height, width, channels), got shape {pixels.shape}")
        self.pixels = pixels

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def channels(self) -> int:
        return self.pixels.shape[2]

    @property
    def slot_count(self) -> int:
        return self.pixels.size

    @property
    def slots(self) -> np.ndarray:
        """Flat, writable view of all channel-slots in row-major order."""
        return self.pixels.reshape(-1)

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(self.pixels.copy())

    @classmethod
    def blank(cls, width: int, height: int, channels: int = 4, fill: int = 0) -> "PixelBuffer":
        return cls(np.full((height, width, channels), fill, dtype=np.uint8))

    @classmethod
    def from_image(cls, image: Image.Image) -> "PixelBuffer":
        if image.mode != CARRIER_MODE:
            image = image.convert(CARRIER_MODE)
        return cls(np.array(image))

    def to_image(self) -> Image.Image:
        if self.channels not in _MODES_BY_CHANNELS:
            raise UnsupportedFormatError(f"Cannot build an image from {self.channels} channels")
        pixels = self.pixels[:, :, 0] if self.channels == 1 else self.pixels
        return Image.fromarray(pixels)


def load(path: PathLike) -> PixelBuffer:
    """
    Decode an image file into an RGBA pixel buffer.

    Raises:
        StegoIOError: If the file cannot be opened or decoded
    """
    try:
        with Image.open(path) as img:
            img.load()
            buffer = PixelBuffer.from_image(img)
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise StegoIOError(f"Failed to load image {path}: {e}", details={"path": str(path)}) from e
    logger.info(f"Loaded {path}: {buffer.width}x{buffer.height} pixels, {buffer.channels} channels")
    return buffer


def image_format_for(path: PathLike) -> str:
    suffix = Path(path).suffix.lower()
    try:
        return LOSSLESS_FORMATS[suffix]
    except KeyError:
        raise UnsupportedFormatError(
            f"Output format '{suffix or Path(path).name}' is not a supported lossless format",
            details={"supported": sorted(LOSSLESS_FORMATS)},
        ) from None


def _atomic_write(path: PathLike, writer) -> None:
    target = Path(path)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent or ".")
    try:
        with os.fdopen(fd, "wb") as fh:
            writer(fh)
        os.replace(tmp_name, target)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp_name)
        raise


def save(buffer: PixelBuffer, path: PathLike) -> None:
    """
    Encode the buffer to a lossless image file.

    Raises:
        UnsupportedFormatError: If the extension is not a lossless format
        StegoIOError: If the file cannot be written
    """
    fmt = image_format_for(path)
    image = buffer.to_image()
    try:
        _atomic_write(path, lambda fh: image.save(fh, format=fmt))
    except (OSError, ValueError) as e:
        raise StegoIOError(f"Unable to save image {path}: {e}", details={"path": str(path)}) from e
    logger.info(f"Saved {fmt} image to {path}")


def read_file_bytes(path: PathLike) -> bytes:
    """Read a whole file, wrapping OS errors in StegoIOError."""
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise StegoIOError(f"Unable to open file '{path}': {e.strerror or e}", details={"path": str(path)}) from e


def write_file_bytes(path: PathLike, data: bytes) -> None:
    """Write a whole file atomically, wrapping OS errors in StegoIOError."""
    try:
        _atomic_write(path, lambda fh: fh.write(data))
    except OSError as e:
        raise StegoIOError(f"Unable to save file '{path}': {e.strerror or e}", details={"path": str(path)}) from e
