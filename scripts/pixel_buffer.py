"""RGBA pixel buffers and the Pillow image codec around them.

A PixelBuffer is the common currency of the extraction pipeline: width,
height and a row-major R,G,B,A byte string with no padding. Every stage
returns a new buffer.
"""

import io
from dataclasses import dataclass

import numpy as np
from PIL import Image, UnidentifiedImageError

from errors import DecodeFailure


@dataclass(frozen=True)
class PixelBuffer:
    width: int
    height: int
    pixels: bytes

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise ValueError(f"Negative buffer size: {self.width}x{self.height}")
        expected = self.width * self.height * 4
        if len(self.pixels) != expected:
            raise ValueError(
                f"Pixel data is {len(self.pixels)} bytes, expected {expected} "
                f"for {self.width}x{self.height} RGBA"
            )

    @classmethod
    def blank(cls, width, height):
        """A fully transparent buffer."""
        return cls(width, height, bytes(width * height * 4))

    @classmethod
    def from_array(cls, array):
        """Build from an (height, width, 4) uint8 array."""
        array = np.ascontiguousarray(array, dtype=np.uint8)
        if array.ndim != 3 or array.shape[2] != 4:
            raise ValueError(f"Expected an (h, w, 4) array, got shape {array.shape}")
        height, width = array.shape[:2]
        return cls(width, height, array.tobytes())

    def to_array(self):
        """Return a writable (height, width, 4) uint8 copy of the pixels."""
        return np.frombuffer(self.pixels, dtype=np.uint8).reshape(
            self.height, self.width, 4
        ).copy()

    def pixel(self, x, y):
        i = (y * self.width + x) * 4
        return tuple(self.pixels[i:i + 4])


# ---------------------------------------------------------------------------
# Codec
# ---------------------------------------------------------------------------

def decode_image(data):
    """Decode PNG/JPEG/... bytes into an RGBA PixelBuffer."""
    if not data:
        raise DecodeFailure("Image data is empty")
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            rgba = img.convert("RGBA")
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise DecodeFailure(f"Could not decode image: {e}") from e
    return from_image(rgba)


def from_image(img):
    rgba = img if img.mode == "RGBA" else img.convert("RGBA")
    return PixelBuffer(rgba.width, rgba.height, rgba.tobytes())


def to_image(buffer):
    return Image.frombytes("RGBA", (buffer.width, buffer.height), buffer.pixels)


def encode_png(buffer):
    """Encode a PixelBuffer as PNG bytes (alpha preserved)."""
    if buffer.width == 0 or buffer.height == 0:
        raise ValueError("Cannot encode an empty buffer as PNG")
    out = io.BytesIO()
    to_image(buffer).save(out, format="PNG")
    return out.getvalue()
