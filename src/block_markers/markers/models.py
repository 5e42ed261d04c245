"""Dataclasses describing definition sites, marker glyphs and overlay entries."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping

BufferHandle = int

MARKER_WIDTH = 100
MARKER_STYLE = "comment"


class DefinitionKind(str, Enum):
    """Syntactic categories that receive a marker."""

    FUNCTION = "function"
    DECORATED_FUNCTION = "decorated_function"
    CLASS = "class"


class BufferState(str, Enum):
    DISABLED = "disabled"
    ENABLED = "enabled"


class EventKind(str, Enum):
    """Host editor events the scheduler reacts to."""

    BUFFER_ENTER = "buffer-enter"
    FILETYPE = "filetype"
    TEXT_CHANGED = "text-changed"
    TEXT_CHANGED_INSERT = "text-changed-in-insert-mode"
    INSERT_LEAVE = "insert-leave"
    POST_SAVE = "post-save"
    BUFFER_CLOSED = "buffer-closed"


ATTACH_EVENTS = frozenset({EventKind.BUFFER_ENTER, EventKind.FILETYPE})
REFRESH_EVENTS = frozenset(
    {
        EventKind.TEXT_CHANGED,
        EventKind.TEXT_CHANGED_INSERT,
        EventKind.INSERT_LEAVE,
        EventKind.POST_SAVE,
    }
)


@dataclass(frozen=True, slots=True)
class BufferEvent:
    kind: EventKind
    buffer: BufferHandle


@dataclass(frozen=True, slots=True)
class DefinitionSite:
    """A located definition, anchored at its first (0-based) line."""

    kind: DefinitionKind
    anchor_line: int

    def __post_init__(self) -> None:
        if self.anchor_line < 0:
            raise ValueError("anchor_line cannot be negative")


@dataclass(frozen=True, slots=True)
class MarkerSpec:
    """Glyph run and style tag rendered for one definition kind."""

    text: str
    style: str = MARKER_STYLE

    def __post_init__(self) -> None:
        if not self.text:
            raise ValueError("marker text cannot be empty")

    @classmethod
    def repeat(cls, glyph: str, *, width: int = MARKER_WIDTH) -> "MarkerSpec":
        return cls(text=glyph * width)


@dataclass(frozen=True, slots=True)
class OverlayEntry:
    buffer: BufferHandle
    line: int
    text: str
    style: str = MARKER_STYLE


FUNCTION_MARKER = MarkerSpec.repeat("~")
CLASS_MARKER = MarkerSpec.repeat("#")

# Decorated definitions share the function glyph.
MARKERS: Mapping[DefinitionKind, MarkerSpec] = MappingProxyType(
    {
        DefinitionKind.FUNCTION: FUNCTION_MARKER,
        DefinitionKind.DECORATED_FUNCTION: FUNCTION_MARKER,
        DefinitionKind.CLASS: CLASS_MARKER,
    }
)

# Grammar node types queried for each kind, per language.
TARGET_NODE_TYPES: Mapping[str, Mapping[DefinitionKind, str]] = MappingProxyType(
    {
        "python": MappingProxyType(
            {
                DefinitionKind.FUNCTION: "function_definition",
                DefinitionKind.DECORATED_FUNCTION: "decorated_definition",
                DefinitionKind.CLASS: "class_definition",
            }
        ),
    }
)


def marker_for(kind: DefinitionKind) -> MarkerSpec:
    return MARKERS[kind]


__all__ = [
    "ATTACH_EVENTS",
    "REFRESH_EVENTS",
    "BufferEvent",
    "BufferHandle",
    "BufferState",
    "EventKind",
    "DefinitionKind",
    "DefinitionSite",
    "MarkerSpec",
    "OverlayEntry",
    "FUNCTION_MARKER",
    "CLASS_MARKER",
    "MARKERS",
    "MARKER_STYLE",
    "MARKER_WIDTH",
    "TARGET_NODE_TYPES",
    "marker_for",
]
