"""One signing session: the active signature image plus its placements.

Every state change is an explicit call. Replacing the signature image
immediately rewrites the geometry of existing placements; nothing is
recomputed behind the caller's back.
"""

import logging
from enum import Enum

from config import Settings
from coords import to_document_rect
from embed import embed_signatures
from errors import NoActiveMask, NothingToApply
from extract_signature import extract_signature, trim_drawn_signature
from placement import PlacementStore

log = logging.getLogger(__name__)


class Gesture(str, Enum):
    DRAG_START = "drag_start"
    RESIZE_START = "resize_start"
    MOVE = "move"
    END = "end"


class SigningSession:
    def __init__(self, settings=None):
        self.settings = settings or Settings()
        self.placements = PlacementStore(self.settings.placement)
        self.mask = None

    # -------- Signature image ------------------------------------------------
    def extract_signature(self, raw_bytes, region=None, scale_ratio=1.0):
        """Extract from a photo/scan and make it the active signature."""
        mask = extract_signature(raw_bytes, region, scale_ratio, self.settings)
        self._activate(mask)
        return mask

    def load_drawn_signature(self, png_bytes):
        """Adopt a drawing-pad PNG (transparent already) as the active signature."""
        mask = trim_drawn_signature(png_bytes)
        self._activate(mask)
        return mask

    def _activate(self, mask):
        self.mask = mask
        self.placements.replace_aspect_ratio(mask.aspect_ratio)
        log.info("Active signature is now %dx%d; %d placement(s) updated",
                 mask.width, mask.height, len(self.placements))

    # -------- Placements -----------------------------------------------------
    def place_signature(self, page, pointer, metrics):
        if self.mask is None:
            raise NoActiveMask("Create or import a signature before placing it")
        return self.placements.place(page, pointer, metrics.display_width,
                                     self.mask.aspect_ratio)

    def update_placement(self, signature_id, gesture, pointer):
        gesture = Gesture(gesture)
        store = self.placements
        if gesture is Gesture.DRAG_START:
            return store.begin_drag(signature_id, pointer)
        if gesture is Gesture.RESIZE_START:
            return store.begin_resize(signature_id, pointer)
        if gesture is Gesture.MOVE:
            if store.active_id == signature_id:
                return store.move(pointer)
            return store.get(signature_id)
        # An unknown id raises before the active gesture is touched.
        store.get(signature_id)
        store.end()
        return store.get(signature_id)

    def delete_placement(self, signature_id):
        self.placements.delete(signature_id)

    # -------- Export ---------------------------------------------------------
    def export_placements(self, metrics_by_page):
        """Placements as (page, point-space Rect), grouped by page."""
        groups = {}
        for sig in self.placements:
            groups.setdefault(sig.page, []).append(sig)

        exported = []
        for page, sigs in groups.items():
            metrics = metrics_by_page.get(page)
            if metrics is None:
                raise ValueError(f"No page metrics for page {page}")
            for sig in sigs:
                exported.append((page, to_document_rect(
                    sig.rect,
                    metrics.page_scale_factor,
                    metrics.render_scale,
                    metrics.page_height_points,
                )))
        return exported

    def apply(self, pdf_bytes, metrics_by_page):
        """Return signed PDF bytes with the active signature at every placement."""
        if self.mask is None:
            raise NoActiveMask("No signature to apply")
        if not len(self.placements):
            raise NothingToApply("Place at least one signature before applying")

        by_page = {}
        for page, r in self.export_placements(metrics_by_page):
            by_page.setdefault(page, []).append((self.mask.png, r.x, r.y, r.width, r.height))
        log.info("Applying %d placement(s) on %d page(s)", len(self.placements), len(by_page))
        return embed_signatures(pdf_bytes, by_page)

    def reset(self):
        self.placements.clear()
        self.mask = None
