"""Placed signature instances and the pointer gestures that edit them.

All geometry is in render pixels of the instance's page. Width is the only
independent size: height is always width / aspect_ratio, and the aspect ratio
is shared by every instance (it belongs to the active signature image).

Only one drag or resize can be active at a time:

    IDLE --begin_drag--> DRAGGING --end--> IDLE
    IDLE --begin_resize--> RESIZING --end--> IDLE
"""

import logging
import uuid
from dataclasses import dataclass, replace
from enum import Enum

from config import PlacementSettings
from coords import Rect
from errors import GestureInProgress, UnknownPlacement

log = logging.getLogger(__name__)


class Interaction(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    RESIZING = "resizing"


@dataclass(frozen=True)
class PlacedSignature:
    id: str
    page: int
    position: tuple
    width: float
    height: float
    aspect_ratio: float

    @property
    def rect(self):
        return Rect(self.position[0], self.position[1], self.width, self.height)

    def as_dict(self):
        return {
            "id": self.id,
            "page": self.page,
            "x": self.position[0],
            "y": self.position[1],
            "width": self.width,
            "height": self.height,
            "aspect_ratio": self.aspect_ratio,
        }


@dataclass(frozen=True)
class _ActiveGesture:
    kind: Interaction
    signature_id: str
    start_pointer: tuple
    start_position: tuple
    start_width: float


class PlacementStore:
    """Ordered collection of placed signatures across all pages."""

    def __init__(self, settings=None):
        self.settings = settings or PlacementSettings()
        self._items = {}
        self._gesture = None

    # -------- Queries --------------------------------------------------------
    def __iter__(self):
        return iter(list(self._items.values()))

    def __len__(self):
        return len(self._items)

    def __contains__(self, signature_id):
        return signature_id in self._items

    def get(self, signature_id):
        try:
            return self._items[signature_id]
        except KeyError:
            raise UnknownPlacement(signature_id) from None

    def by_page(self, page):
        return [s for s in self._items.values() if s.page == page]

    @property
    def interaction(self):
        return self._gesture.kind if self._gesture else Interaction.IDLE

    @property
    def active_id(self):
        return self._gesture.signature_id if self._gesture else None

    # -------- Placement ------------------------------------------------------
    def place(self, page, pointer, displayed_width, aspect_ratio):
        """Create an instance centred on `pointer`, sized from the page width."""
        if page < 1:
            raise ValueError(f"Pages are numbered from 1, got {page}")
        if aspect_ratio <= 0:
            raise ValueError(f"Aspect ratio must be positive, got {aspect_ratio}")

        width = displayed_width * self.settings.default_width_fraction
        height = width / aspect_ratio
        px, py = pointer
        sig = PlacedSignature(
            id=uuid.uuid4().hex,
            page=page,
            position=(px - width / 2, py - height / 2),
            width=width,
            height=height,
            aspect_ratio=aspect_ratio,
        )
        self._items[sig.id] = sig
        log.debug("Placed %s on page %d at (%.1f, %.1f) %.1fx%.1f",
                  sig.id, page, sig.position[0], sig.position[1], width, height)
        return sig

    def replace_aspect_ratio(self, aspect_ratio):
        """Apply a new signature image's aspect ratio to every instance."""
        if aspect_ratio <= 0:
            raise ValueError(f"Aspect ratio must be positive, got {aspect_ratio}")
        for sig_id, sig in self._items.items():
            self._items[sig_id] = replace(
                sig, aspect_ratio=aspect_ratio, height=sig.width / aspect_ratio
            )

    def delete(self, signature_id):
        if signature_id not in self._items:
            raise UnknownPlacement(signature_id)
        if self.active_id == signature_id:
            self._gesture = None
        del self._items[signature_id]

    def clear(self):
        self._items.clear()
        self._gesture = None

    # -------- Gestures -------------------------------------------------------
    def begin_drag(self, signature_id, pointer):
        return self._begin(Interaction.DRAGGING, signature_id, pointer)

    def begin_resize(self, signature_id, pointer):
        return self._begin(Interaction.RESIZING, signature_id, pointer)

    def _begin(self, kind, signature_id, pointer):
        if self._gesture is not None:
            raise GestureInProgress(
                f"{self._gesture.kind.value} of {self._gesture.signature_id} is still active"
            )
        sig = self.get(signature_id)
        self._gesture = _ActiveGesture(
            kind=kind,
            signature_id=signature_id,
            start_pointer=tuple(pointer),
            start_position=sig.position,
            start_width=sig.width,
        )
        return sig

    def move(self, pointer):
        """Feed a pointer move; returns the updated instance, or None when idle."""
        g = self._gesture
        if g is None:
            return None
        sig = self._items[g.signature_id]
        dx = pointer[0] - g.start_pointer[0]
        dy = pointer[1] - g.start_pointer[1]

        if g.kind is Interaction.DRAGGING:
            sig = replace(sig, position=(g.start_position[0] + dx, g.start_position[1] + dy))
        else:
            width = max(self.settings.min_width, g.start_width + dx)
            sig = replace(sig, width=width, height=width / sig.aspect_ratio)

        self._items[sig.id] = sig
        return sig

    def end(self):
        """Pointer released anywhere; returns the instance that was edited."""
        g, self._gesture = self._gesture, None
        if g is None:
            return None
        return self._items.get(g.signature_id)
