"""Definition locator, admission filter, overlay manager and scheduler."""

from .models import (
    CLASS_MARKER,
    FUNCTION_MARKER,
    BufferEvent,
    BufferHandle,
    BufferState,
    DefinitionKind,
    DefinitionSite,
    EventKind,
    MarkerSpec,
    OverlayEntry,
    marker_for,
)
from .admission import admit, is_blank
from .language import detect_language, language_from_shebang
from .locator import BlockLocator
from .overlay import OverlayManager, PlacementReport
from .scheduler import BufferStatus, RefreshScheduler, StateStore

__all__ = [
    "CLASS_MARKER",
    "FUNCTION_MARKER",
    "BlockLocator",
    "BufferEvent",
    "BufferHandle",
    "BufferState",
    "BufferStatus",
    "DefinitionKind",
    "DefinitionSite",
    "EventKind",
    "MarkerSpec",
    "OverlayEntry",
    "OverlayManager",
    "PlacementReport",
    "RefreshScheduler",
    "StateStore",
    "admit",
    "detect_language",
    "is_blank",
    "language_from_shebang",
    "marker_for",
]
