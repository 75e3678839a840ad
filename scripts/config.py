"""Tunable thresholds for extraction and placement.

Defaults live here; a JSON file can override any of them:

{
    "extraction": {"opaque_threshold": 35, "transparent_threshold": 100},
    "placement": {"render_scale": 2.0}
}
"""

import json
from dataclasses import dataclass, field, fields, replace
from pathlib import Path


@dataclass(frozen=True)
class ExtractionSettings:
    # Histogram
    histogram_min_alpha: int = 200
    bucket_size: int = 8
    luminance_midpoint: float = 128.0
    # Segmentation (Euclidean RGB distances, 0..441)
    segment_min_alpha: int = 100
    near_background_threshold: float = 80.0
    opaque_threshold: float = 40.0
    transparent_threshold: float = 90.0

    def __post_init__(self):
        if self.bucket_size < 1:
            raise ValueError("bucket_size must be >= 1")
        if self.transparent_threshold <= self.opaque_threshold:
            raise ValueError("transparent_threshold must be greater than opaque_threshold")


@dataclass(frozen=True)
class PlacementSettings:
    render_scale: float = 1.5
    default_width_fraction: float = 0.15
    min_width: float = 20.0
    min_region_size: float = 1.0

    def __post_init__(self):
        if self.render_scale <= 0:
            raise ValueError("render_scale must be positive")
        if not 0 < self.default_width_fraction <= 1:
            raise ValueError("default_width_fraction must be in (0, 1]")


@dataclass(frozen=True)
class Settings:
    extraction: ExtractionSettings = field(default_factory=ExtractionSettings)
    placement: PlacementSettings = field(default_factory=PlacementSettings)


def _apply(section, overrides, name):
    known = {f.name for f in fields(section)}
    unknown = set(overrides) - known
    if unknown:
        raise ValueError(f"Unknown {name} settings: {', '.join(sorted(unknown))}")
    return replace(section, **overrides)


def settings_from_dict(data):
    unknown = set(data) - {"extraction", "placement"}
    if unknown:
        raise ValueError(f"Unknown settings sections: {', '.join(sorted(unknown))}")
    base = Settings()
    return Settings(
        extraction=_apply(base.extraction, data.get("extraction", {}), "extraction"),
        placement=_apply(base.placement, data.get("placement", {}), "placement"),
    )


def load_settings(path=None):
    """Load settings from a JSON file; no path means defaults."""
    if path is None:
        return Settings()
    with open(Path(path), "r") as f:
        return settings_from_dict(json.load(f))
