"""Crop a mask to its visible content, and cut a user-selected region.

trim() finds the tight bounding box of every pixel with alpha > 0 and copies
it into a new buffer. The aspect ratio of a signature always comes from the
trimmed size, never from the source image.
"""

import logging
from dataclasses import dataclass

import numpy as np

from errors import EmptyContent, RegionTooSmall
from pixel_buffer import PixelBuffer

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrimResult:
    buffer: PixelBuffer
    width: int
    height: int
    aspect_ratio: float
    # (x0, y0) of the crop inside the source buffer
    offset: tuple = (0, 0)


def bounding_box(buffer):
    """Return (x0, y0, x1, y1) inclusive, or None if nothing is visible."""
    if buffer.width == 0 or buffer.height == 0:
        return None
    alpha = buffer.to_array()[..., 3] > 0
    rows = np.flatnonzero(alpha.any(axis=1))
    if len(rows) == 0:
        return None
    cols = np.flatnonzero(alpha.any(axis=0))
    return int(cols[0]), int(rows[0]), int(cols[-1]), int(rows[-1])


def trim(buffer):
    bbox = bounding_box(buffer)
    if bbox is None:
        raise EmptyContent("Image has no visible content after background removal")

    x0, y0, x1, y1 = bbox
    if x0 > x1 or y0 > y1:
        raise RuntimeError(f"Inverted bounding box {bbox}")

    cropped = buffer.to_array()[y0:y1 + 1, x0:x1 + 1]
    out = PixelBuffer.from_array(cropped)
    log.debug("Trimmed %dx%d -> %dx%d at (%d, %d)",
              buffer.width, buffer.height, out.width, out.height, x0, y0)
    return TrimResult(
        buffer=out,
        width=out.width,
        height=out.height,
        aspect_ratio=out.width / out.height,
        offset=(x0, y0),
    )


# ---------------------------------------------------------------------------
# User crop region
# ---------------------------------------------------------------------------

def crop_region(buffer, start, end, scale_ratio=1.0, min_size=1.0):
    """Cut the rectangle spanned by two corner points out of `buffer`.

    `start`/`end` are in the coordinates of a preview that shows the image at
    1/scale_ratio of its size; the drag may go in any direction. The region is
    clamped to the image.
    """
    (sx, sy), (ex, ey) = start, end
    x = min(sx, ex) * scale_ratio
    y = min(sy, ey) * scale_ratio
    w = abs(sx - ex) * scale_ratio
    h = abs(sy - ey) * scale_ratio
    if w < min_size or h < min_size:
        raise RegionTooSmall(
            f"Selected region {w:.1f}x{h:.1f}px is smaller than {min_size}px"
        )

    x0 = max(0, int(x))
    y0 = max(0, int(y))
    x1 = min(buffer.width, int(x + w))
    y1 = min(buffer.height, int(y + h))
    if x1 - x0 < 1 or y1 - y0 < 1:
        raise RegionTooSmall("Selected region lies outside the image")

    region = buffer.to_array()[y0:y1, x0:x1]
    return PixelBuffer.from_array(region)
