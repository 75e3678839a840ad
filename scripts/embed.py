"""Bake signature PNGs into PDF pages.

Each page that has placements gets one overlay page drawn with reportlab,
which is merged onto the original page with pypdf. Pages without placements
are copied unchanged, so page count and order are preserved.

A placement is (png_bytes, x, y, width, height) in PDF points, origin
bottom-left of the page as it is displayed, as produced by
coords.to_document_rect. That is the frame the renderer measures: the
CropBox, moved to (0, 0) and turned by the page's /Rotate. Before drawing,
each placement is mapped back into the page's raw user space.
"""

import io
import logging
from dataclasses import dataclass
from pathlib import Path

from pypdf import PdfReader, PdfWriter
from pypdf.errors import PdfReadError
from pypdf.generic import RectangleObject
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from errors import DocumentError

log = logging.getLogger(__name__)


def signed_filename(name):
    """report.pdf -> report_signed.pdf"""
    p = Path(name)
    if p.suffix:
        return str(p.with_name(f"{p.stem}_signed{p.suffix}"))
    return f"{name}_signed"


@dataclass(frozen=True)
class PageFrame:
    """Visible box of a page in user space, plus its clockwise /Rotate."""

    left: float
    bottom: float
    width: float
    height: float
    rotation: int = 0

    @classmethod
    def of(cls, page):
        box = page.cropbox
        return cls(
            left=float(box.left),
            bottom=float(box.bottom),
            width=float(box.width),
            height=float(box.height),
            rotation=page.rotation % 360,
        )

    def to_user_space(self, x, y):
        """Displayed bottom-left point -> unrotated user-space point."""
        if self.rotation == 90:
            return self.left + self.width - y, self.bottom + x
        if self.rotation == 180:
            return self.left + self.width - x, self.bottom + self.height - y
        if self.rotation == 270:
            return self.left + y, self.bottom + self.height - x
        return self.left + x, self.bottom + y


def create_overlay(placements, frame):
    """Create a one-page PDF with the signature images at their rects."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=(frame.width, frame.height))

    images = {}
    for png, x, y, width, height in placements:
        # Same PNG on several placements is decoded once.
        reader = images.get(id(png))
        if reader is None:
            reader = images[id(png)] = ImageReader(io.BytesIO(png))
        ux, uy = frame.to_user_space(x, y)
        c.saveState()
        c.translate(ux, uy)
        # Counter the viewer's clockwise turn so the image reads upright.
        c.rotate(frame.rotation)
        c.drawImage(reader, 0, 0, width=width, height=height, mask="auto")
        c.restoreState()

    c.save()
    buf.seek(0)
    return buf


def embed_signatures(pdf_bytes, placements_by_page):
    """Return new PDF bytes with every placement drawn on its (1-based) page."""
    try:
        reader = PdfReader(io.BytesIO(pdf_bytes))
        num_pages = len(reader.pages)
    except PdfReadError as e:
        raise DocumentError(f"Could not read PDF: {e}") from e

    bad = [p for p in placements_by_page if not 1 <= p <= num_pages]
    if bad:
        raise ValueError(f"Placements reference missing pages {bad} (document has {num_pages})")

    writer = PdfWriter()
    for pg_num, page in enumerate(reader.pages, start=1):
        placements = placements_by_page.get(pg_num)
        if placements:
            frame = PageFrame.of(page)
            overlay = PdfReader(create_overlay(placements, frame)).pages[0]
            # merge_page clips the overlay to its own box: give it the target's.
            box = [page.cropbox.left, page.cropbox.bottom, page.cropbox.right, page.cropbox.top]
            overlay.mediabox = RectangleObject(box)
            overlay.cropbox = RectangleObject(box)
            page.merge_page(overlay)
            log.debug("Embedded %d signature(s) on page %d (%s)", len(placements), pg_num, frame)
        writer.add_page(page)

    out = io.BytesIO()
    writer.write(out)
    return out.getvalue()
