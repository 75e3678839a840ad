"""Estimate the paper (background) and ink colours of a signature image.

Histogram mode-finding on coarsened colours:

1. Visible pixels (alpha >= histogram_min_alpha) are bucketed by rounding each
   channel to a multiple of bucket_size, so anti-aliasing noise does not split
   one colour over many bins.
2. The most frequent bucket brighter than the luminance midpoint is the
   background, the most frequent one at or below it is the ink.
3. If one side has no buckets (near-monochrome image), the two most frequent
   buckets overall are used: the lighter is background, the darker ink, and
   the more frequent one is background when their luminance is equal.
"""

import logging
import math
from dataclasses import dataclass

import numpy as np

from config import ExtractionSettings

log = logging.getLogger(__name__)

WHITE = (255, 255, 255)
BLACK = (0, 0, 0)


@dataclass(frozen=True)
class ColorBucket:
    key: int
    count: int
    color: tuple
    luminance: float


@dataclass(frozen=True)
class ClassificationResult:
    background: tuple
    ink: tuple
    # True when the luminance split had an empty side
    fallback: bool = False


def color_distance(c1, c2):
    """Euclidean distance in RGB space."""
    return math.sqrt(sum((int(a) - int(b)) ** 2 for a, b in zip(c1[:3], c2[:3])))


def luminance(color):
    r, g, b = color[:3]
    return (299 * r + 587 * g + 114 * b) / 1000


# ---------------------------------------------------------------------------
# Histogram
# ---------------------------------------------------------------------------

def build_histogram(buffer, settings=None):
    """Return colour buckets ordered by descending frequency.

    Frequency ties are ordered by bucket key so results are reproducible.
    """
    settings = settings or ExtractionSettings()
    flat = buffer.to_array().reshape(-1, 4).astype(np.int64)
    visible = flat[flat[:, 3] >= settings.histogram_min_alpha]
    if len(visible) == 0:
        return []

    size = settings.bucket_size
    levels = 255 // size + 2
    q = (visible[:, :3] + size // 2) // size
    keys = (q[:, 0] * levels + q[:, 1]) * levels + q[:, 2]

    unique_keys, inverse, counts = np.unique(keys, return_inverse=True, return_counts=True)
    inverse = inverse.reshape(-1)
    n = len(unique_keys)
    sums = [np.bincount(inverse, weights=visible[:, ch], minlength=n) for ch in range(3)]

    buckets = []
    for i in np.argsort(-counts, kind="stable"):
        count = int(counts[i])
        sr, sg, sb = (int(s[i]) for s in sums)
        mean = tuple(int(math.floor(s / count + 0.5)) for s in (sr, sg, sb))
        buckets.append(ColorBucket(
            key=int(unique_keys[i]),
            count=count,
            color=mean,
            luminance=(299 * sr + 587 * sg + 114 * sb) / (1000 * count),
        ))
    return buckets


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def classify(buffer, settings=None):
    """Pick background and ink colours. Never fails."""
    settings = settings or ExtractionSettings()
    buckets = build_histogram(buffer, settings)

    if not buckets:
        log.warning("No visible pixels to classify; assuming black ink on white")
        return ClassificationResult(background=WHITE, ink=BLACK, fallback=True)

    light = [b for b in buckets if b.luminance > settings.luminance_midpoint]
    dark = [b for b in buckets if b.luminance <= settings.luminance_midpoint]

    if light and dark:
        result = ClassificationResult(background=light[0].color, ink=dark[0].color)
    else:
        result = _fallback(buckets)
        log.warning(
            "Image is near-monochrome (%d colour buckets); background=%s ink=%s",
            len(buckets), result.background, result.ink,
        )

    log.debug("Classified %dx%d image: background=%s ink=%s",
              buffer.width, buffer.height, result.background, result.ink)
    return result


def _fallback(buckets):
    if len(buckets) == 1:
        only = buckets[0].color
        return ClassificationResult(background=only, ink=only, fallback=True)

    first, second = buckets[0], buckets[1]
    if second.luminance > first.luminance:
        background, ink = second, first
    else:
        background, ink = first, second
    return ClassificationResult(background=background.color, ink=ink.color, fallback=True)
