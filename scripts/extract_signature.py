#!/usr/bin/env python3
"""Extract a clean, transparent-background signature from a photo or scan.

Pipeline: decode -> optional crop region -> classify paper/ink colours ->
chroma-key segmentation -> trim to content -> PNG.

Usage:
    python extract_signature.py <photo.jpg> <signature.png> [--region X0 Y0 X1 Y1]
        [--scale-ratio 1.0] [--config settings.json] [--pretty]

Outputs JSON to stdout with the trimmed size, aspect ratio and the colours
that were detected. Errors are reported as JSON on stderr with a "kind":
decode_failure, empty_content or region_too_small.
"""

import argparse
import json
import logging
import sys
from dataclasses import dataclass, replace
from pathlib import Path

from classify import classify
from config import load_settings, Settings
from errors import SignatureError
from logging_config import setup_logging
from pixel_buffer import decode_image, encode_png
from segment import segment
from trim import crop_region, trim

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SignatureMask:
    """A trimmed, transparent signature ready to be placed."""

    png: bytes
    trim: object
    classification: object = None

    @property
    def width(self):
        return self.trim.width

    @property
    def height(self):
        return self.trim.height

    @property
    def aspect_ratio(self):
        return self.trim.aspect_ratio

    def as_dict(self):
        d = {
            "width": self.width,
            "height": self.height,
            "aspect_ratio": self.aspect_ratio,
        }
        if self.classification is not None:
            d["background"] = list(self.classification.background)
            d["ink"] = list(self.classification.ink)
            d["fallback"] = self.classification.fallback
        return d


def extract_signature(raw_bytes, region=None, scale_ratio=1.0, settings=None):
    """Run the full extraction pipeline on encoded image bytes.

    `region` is ((x0, y0), (x1, y1)) in preview coordinates; the preview shows
    the image at 1/scale_ratio of its size.
    """
    settings = settings or Settings()
    buffer = decode_image(raw_bytes)
    if region is not None:
        start, end = region
        buffer = crop_region(buffer, start, end, scale_ratio,
                             settings.placement.min_region_size)

    classification = classify(buffer, settings.extraction)
    mask = segment(buffer, classification, settings.extraction)
    trimmed = trim(mask)
    log.info("Extracted %dx%d signature (aspect %.3f) from %dx%d image",
             trimmed.width, trimmed.height, trimmed.aspect_ratio,
             buffer.width, buffer.height)
    return SignatureMask(png=encode_png(trimmed.buffer), trim=trimmed,
                         classification=classification)


def trim_drawn_signature(png_bytes):
    """Signatures drawn on the pad are already transparent: only trim them."""
    trimmed = trim(decode_image(png_bytes))
    return SignatureMask(png=encode_png(trimmed.buffer), trim=trimmed)


def main():
    parser = argparse.ArgumentParser(description="Extract a transparent signature from an image")
    parser.add_argument("image", help="Photo or scan of the signature")
    parser.add_argument("output", help="Output PNG path")
    parser.add_argument("--region", type=float, nargs=4, metavar=("X0", "Y0", "X1", "Y1"),
                        help="Crop to this rectangle before extraction")
    parser.add_argument("--scale-ratio", type=float, default=1.0,
                        help="Image pixels per region unit (default: 1.0)")
    parser.add_argument("--config", help="JSON settings file")
    parser.add_argument("--opaque", type=float, help="Override the opaque ink distance")
    parser.add_argument("--transparent", type=float, help="Override the feathering distance")
    parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON output")
    parser.add_argument("--verbose", action="store_true", help="Debug logging on stderr")
    args = parser.parse_args()

    setup_logging(args.verbose)

    if not Path(args.image).exists():
        print(json.dumps({"error": f"File not found: {args.image}"}), file=sys.stderr)
        sys.exit(1)

    try:
        settings = load_settings(args.config)
        overrides = {}
        if args.opaque is not None:
            overrides["opaque_threshold"] = args.opaque
        if args.transparent is not None:
            overrides["transparent_threshold"] = args.transparent
        if overrides:
            settings = replace(settings, extraction=replace(settings.extraction, **overrides))
    except (OSError, ValueError) as e:
        print(json.dumps({"error": f"Bad settings: {e}"}), file=sys.stderr)
        sys.exit(1)

    region = None
    if args.region:
        x0, y0, x1, y1 = args.region
        region = ((x0, y0), (x1, y1))

    try:
        mask = extract_signature(Path(args.image).read_bytes(), region,
                                 args.scale_ratio, settings)
    except SignatureError as e:
        print(json.dumps({"error": str(e), "kind": e.kind}), file=sys.stderr)
        sys.exit(1)

    Path(args.output).write_bytes(mask.png)
    indent = 2 if args.pretty else None
    print(json.dumps({"status": "extracted", "output": args.output, **mask.as_dict()},
                     indent=indent))


if __name__ == "__main__":
    main()
