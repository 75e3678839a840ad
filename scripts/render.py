"""Rasterise PDF pages and report the metrics placement needs.

The placement code only needs, per page, the rendered raster size at the fixed
render scale, the size it is displayed at, and the page height in points.

Usage:
    python render.py <input.pdf> <output.png> [--page 1] [--scale 1.5]
"""

import argparse
import json
import logging
import sys
import threading
from dataclasses import dataclass, replace
from pathlib import Path

import pymupdf as fitz

from coords import page_scale_factor
from errors import DocumentError
from logging_config import setup_logging

log = logging.getLogger(__name__)

DEFAULT_RENDER_SCALE = 1.5

_init_lock = threading.Lock()
_initialized = False


def _ensure_pymupdf():
    """One-time, process-wide MuPDF setup."""
    global _initialized
    if _initialized:
        return
    with _init_lock:
        if not _initialized:
            # MuPDF prints recoverable syntax warnings straight to stderr,
            # which would interleave with our own log output.
            fitz.TOOLS.mupdf_display_errors(False)
            _initialized = True
            log.debug("PyMuPDF %s initialised", fitz.VersionBind)


@dataclass(frozen=True)
class PageMetrics:
    page: int
    rendered_width: float
    rendered_height: float
    page_width_points: float
    page_height_points: float
    render_scale: float = DEFAULT_RENDER_SCALE
    displayed_width: float = None

    @property
    def display_width(self):
        return self.displayed_width if self.displayed_width else self.rendered_width

    @property
    def page_scale_factor(self):
        return page_scale_factor(self.rendered_width, self.display_width)

    def displayed_at(self, width):
        return replace(self, displayed_width=width)

    def as_dict(self):
        return {
            "page": self.page,
            "rendered_width": self.rendered_width,
            "rendered_height": self.rendered_height,
            "displayed_width": self.display_width,
            "page_width_points": self.page_width_points,
            "page_height_points": self.page_height_points,
            "render_scale": self.render_scale,
        }


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------

def open_document(pdf_bytes):
    _ensure_pymupdf()
    if not pdf_bytes:
        raise DocumentError("PDF data is empty")
    try:
        doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    except (RuntimeError, ValueError) as e:
        raise DocumentError(f"Could not open PDF: {e}") from e
    if doc.page_count == 0:
        doc.close()
        raise DocumentError("PDF has no pages")
    return doc


def _page(doc, page):
    if not 1 <= page <= doc.page_count:
        raise ValueError(f"Page {page} out of range 1..{doc.page_count}")
    return doc[page - 1]


def page_metrics(doc, page, render_scale=DEFAULT_RENDER_SCALE, displayed_width=None):
    """Metrics of one page (1-based) rendered at `render_scale`."""
    rect = _page(doc, page).rect
    return PageMetrics(
        page=page,
        rendered_width=rect.width * render_scale,
        rendered_height=rect.height * render_scale,
        page_width_points=rect.width,
        page_height_points=rect.height,
        render_scale=render_scale,
        displayed_width=displayed_width,
    )


def render_page(doc, page, render_scale=DEFAULT_RENDER_SCALE):
    """Render one page to PNG bytes; returns (png_bytes, PageMetrics)."""
    pix = _page(doc, page).get_pixmap(matrix=fitz.Matrix(render_scale, render_scale))
    return pix.tobytes("png"), page_metrics(doc, page, render_scale)


def metrics_for_pages(pdf_bytes, pages, render_scale=DEFAULT_RENDER_SCALE, displayed_widths=None):
    """PageMetrics for each requested page, keyed by page number."""
    displayed_widths = displayed_widths or {}
    doc = open_document(pdf_bytes)
    try:
        return {
            p: page_metrics(doc, p, render_scale, displayed_widths.get(p))
            for p in sorted(set(pages))
        }
    finally:
        doc.close()


def main():
    parser = argparse.ArgumentParser(description="Render a PDF page for signature placement")
    parser.add_argument("pdf", help="Path to PDF file")
    parser.add_argument("output", help="Output PNG path")
    parser.add_argument("--page", type=int, default=1, help="Page to render (1-indexed)")
    parser.add_argument("--scale", type=float, default=DEFAULT_RENDER_SCALE, help="Render scale")
    parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON output")
    parser.add_argument("--verbose", action="store_true", help="Debug logging on stderr")
    args = parser.parse_args()

    setup_logging(args.verbose)

    if not Path(args.pdf).exists():
        print(json.dumps({"error": f"File not found: {args.pdf}"}), file=sys.stderr)
        sys.exit(1)

    try:
        doc = open_document(Path(args.pdf).read_bytes())
        png, metrics = render_page(doc, args.page, args.scale)
        doc.close()
    except DocumentError as e:
        print(json.dumps({"error": str(e), "kind": e.kind}), file=sys.stderr)
        sys.exit(1)
    except ValueError as e:
        print(json.dumps({"error": str(e)}), file=sys.stderr)
        sys.exit(1)

    Path(args.output).write_bytes(png)
    indent = 2 if args.pretty else None
    print(json.dumps({"status": "rendered", "output": args.output, **metrics.as_dict()},
                     indent=indent))


if __name__ == "__main__":
    main()
