#!/usr/bin/env python3
"""Sign a PDF: extract a signature image and place it on one or more pages.

Placements are given the way a viewer produces them, in render pixels of the
page rendered at --render-scale (top-left origin):

{
    "placements": [
        {"page": 1, "pointer": [300, 700]},
        {"page": 2, "pointer": [120, 90], "width": 180},
        {"page": 3, "pointer": [200, 400], "displayed_width": 600}
    ]
}

"pointer" is the placement click; the signature is centred on it at the
default size. "width" then drags the resize handle until it is that wide.
"displayed_width" is the on-screen width of the page when it differs from the
rendered raster width.

Usage:
    python sign.py <input.pdf> <signature.png> <placements.json> [output.pdf]
        [--drawn] [--render-scale 1.5] [--config settings.json]

Without output.pdf the result is written next to the input as <name>_signed.pdf.
"""

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path

from config import load_settings
from embed import signed_filename
from errors import SignatureError
from logging_config import setup_logging
from render import open_document, page_metrics
from session import Gesture, SigningSession

log = logging.getLogger(__name__)


def load_placements(path):
    with open(path, "r") as f:
        data = json.load(f)
    entries = data.get("placements", []) if isinstance(data, dict) else data
    for i, entry in enumerate(entries):
        if "page" not in entry or "pointer" not in entry:
            raise ValueError(f"Placement #{i} needs 'page' and 'pointer'")
    return entries


def place_all(session, doc, entries, render_scale):
    """Replay placement clicks (and optional resizes); returns metrics by page."""
    metrics_by_page = {}
    for entry in entries:
        page = int(entry["page"])
        metrics = metrics_by_page.get(page)
        if metrics is None:
            metrics = page_metrics(doc, page, render_scale, entry.get("displayed_width"))
            metrics_by_page[page] = metrics

        px, py = entry["pointer"]
        sig = session.place_signature(page, (px, py), metrics)
        width = entry.get("width")
        if width is not None:
            # Drag the resize handle until the instance is `width` wide.
            session.update_placement(sig.id, Gesture.RESIZE_START, (px, py))
            session.update_placement(sig.id, Gesture.MOVE, (px + float(width) - sig.width, py))
            session.update_placement(sig.id, Gesture.END, (px + float(width) - sig.width, py))
    return metrics_by_page


def sign_pdf(input_path, signature_path, placements_path, output_path=None,
             drawn=False, render_scale=None, settings=None):
    """Sign a PDF file; returns a JSON-serialisable result."""
    settings = settings or load_settings()
    if render_scale is not None:
        settings = replace(settings, placement=replace(settings.placement, render_scale=render_scale))
    output_path = output_path or signed_filename(input_path)

    session = SigningSession(settings)
    signature_bytes = Path(signature_path).read_bytes()
    if drawn:
        mask = session.load_drawn_signature(signature_bytes)
    else:
        mask = session.extract_signature(signature_bytes)

    entries = load_placements(placements_path)
    pdf_bytes = Path(input_path).read_bytes()
    doc = open_document(pdf_bytes)
    try:
        metrics_by_page = place_all(session, doc, entries, settings.placement.render_scale)
    finally:
        doc.close()

    signed = session.apply(pdf_bytes, metrics_by_page)
    with open(output_path, "wb") as f:
        f.write(signed)

    return {
        "status": "success",
        "output": str(output_path),
        "signature": mask.as_dict(),
        "placements": [
            {"page": page, **rect.as_dict()}
            for page, rect in session.export_placements(metrics_by_page)
        ],
    }


def main():
    parser = argparse.ArgumentParser(description="Place a signature on a PDF")
    parser.add_argument("input_pdf", help="Path to input PDF")
    parser.add_argument("signature", help="Signature photo/scan, or pad PNG with --drawn")
    parser.add_argument("placements", help="Path to JSON placements")
    parser.add_argument("output_pdf", nargs="?", help="Path for output PDF")
    parser.add_argument("--drawn", action="store_true",
                        help="Signature is already transparent; only trim it")
    parser.add_argument("--render-scale", type=float, default=None,
                        help="Render scale the placement coordinates refer to")
    parser.add_argument("--config", help="JSON settings file")
    parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON output")
    parser.add_argument("--verbose", action="store_true", help="Debug logging on stderr")
    args = parser.parse_args()

    setup_logging(args.verbose)

    for path, what in ((args.input_pdf, "Input PDF"), (args.signature, "Signature image"),
                       (args.placements, "Placements")):
        if not Path(path).exists():
            print(json.dumps({"error": f"{what} not found: {path}"}), file=sys.stderr)
            sys.exit(1)

    try:
        settings = load_settings(args.config)
        result = sign_pdf(args.input_pdf, args.signature, args.placements, args.output_pdf,
                          drawn=args.drawn, render_scale=args.render_scale, settings=settings)
    except SignatureError as e:
        print(json.dumps({"error": str(e), "kind": e.kind}), file=sys.stderr)
        sys.exit(1)
    except ValueError as e:
        print(json.dumps({"error": str(e)}), file=sys.stderr)
        sys.exit(1)

    indent = 2 if args.pretty else None
    print(json.dumps(result, indent=indent, ensure_ascii=False))


if __name__ == "__main__":
    main()
