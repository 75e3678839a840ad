"""Error kinds raised by the signature extraction and placement code.

None of these are retried. Extraction errors are user-correctable (pick
another image or region) except DecodeFailure, which ends the operation.
Placement errors are caller mistakes that must still fail without side effects.
"""


class SignatureError(Exception):
    """Base class; `kind` is what the CLIs report in their JSON error."""

    kind = "error"


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------

class ExtractionError(SignatureError):
    kind = "extraction_error"


class DecodeFailure(ExtractionError):
    """Image bytes could not be decoded into pixels."""

    kind = "decode_failure"


class EmptyContent(ExtractionError):
    """Segmentation or trimming left nothing visible."""

    kind = "empty_content"


class RegionTooSmall(ExtractionError):
    """The selected crop region is below the minimum pixel size."""

    kind = "region_too_small"


# ---------------------------------------------------------------------------
# Placement
# ---------------------------------------------------------------------------

class PlacementError(SignatureError):
    kind = "placement_error"


class NoActiveMask(PlacementError):
    kind = "no_active_mask"


class UnknownPlacement(PlacementError, KeyError):
    kind = "unknown_placement"


class GestureInProgress(PlacementError):
    kind = "gesture_in_progress"


class NothingToApply(PlacementError):
    kind = "nothing_to_apply"


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------

class DocumentError(SignatureError):
    """PDF bytes could not be opened for rendering or embedding."""

    kind = "document_error"
