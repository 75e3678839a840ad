"""Turn a signature image into a transparent-background ink mask.

Nearest-class chroma key with a feathered edge. Each pixel is decided on its
own colour only (no neighbourhood smoothing):

- alpha below segment_min_alpha        -> transparent
- closer to background than to ink and
  within near_background_threshold     -> transparent
- within opaque_threshold of the ink   -> kept as is
- between opaque and transparent       -> kept, alpha ramps down linearly
- anything else                        -> transparent

A classification whose background and ink are the same colour (a blank or
single-colour image) has no ink to keep, so the whole buffer is keyed out.

Known limitation: any other foreground colour close to the ink (printed text
sharing the page, a stamp) is kept as ink. Crop it out first.
"""

import logging

import numpy as np

from config import ExtractionSettings
from pixel_buffer import PixelBuffer

log = logging.getLogger(__name__)


def _distance(rgb, color):
    diff = rgb - np.asarray(color[:3], dtype=np.float64)
    return np.sqrt((diff * diff).sum(axis=-1))


def segment(buffer, classification, settings=None):
    """Return a new buffer of the same size with the background keyed out."""
    settings = settings or ExtractionSettings()
    src = buffer.to_array()
    rgb = src[..., :3].astype(np.float64)
    alpha = src[..., 3].astype(np.float64)

    dist_ink = _distance(rgb, classification.ink)
    dist_bg = _distance(rgb, classification.background)

    opaque = settings.opaque_threshold
    transparent = settings.transparent_threshold

    visible = src[..., 3] >= settings.segment_min_alpha
    if tuple(classification.background[:3]) == tuple(classification.ink[:3]):
        # One colour class: nothing stands out from the page.
        visible[:] = False
    background = (dist_bg < dist_ink) & (dist_bg < settings.near_background_threshold)
    candidate = visible & ~background
    ink = candidate & (dist_ink <= opaque)
    edge = candidate & (dist_ink > opaque) & (dist_ink < transparent)

    out = np.zeros_like(src)
    out[ink] = src[ink]
    out[edge, :3] = src[edge, :3]
    ramp = (transparent - dist_ink[edge]) / (transparent - opaque)
    out[edge, 3] = np.clip(np.floor(alpha[edge] * ramp + 0.5), 0, 255).astype(np.uint8)
    # A feathered pixel that rounds to alpha 0 carries no colour either.
    out[out[..., 3] == 0] = 0

    log.debug("Segmented %dx%d: %d ink, %d feathered, %d dropped",
              buffer.width, buffer.height, int(ink.sum()), int(edge.sum()),
              int(buffer.width * buffer.height - ink.sum() - edge.sum()))
    return PixelBuffer.from_array(out)
