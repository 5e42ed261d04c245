"""Error taxonomy shared by the locator, overlay manager and scheduler.

None of these are fatal to the host: each failure path degrades to fewer
(or no) markers being shown.
"""

from __future__ import annotations

from typing import Optional


class BlockMarkersError(RuntimeError):
    """Base class for every error raised by this package."""


class HostError(BlockMarkersError):
    """Raised by host adapters when an editor primitive rejects a request."""

    def __init__(self, message: str, *, buffer: Optional[int] = None) -> None:
        super().__init__(message)
        self.buffer = buffer


class ParserUnavailable(BlockMarkersError):
    """No parser exists for the buffer's language, or parsing failed."""

    def __init__(
        self, message: str, *, buffer: Optional[int] = None, language: str = ""
    ) -> None:
        super().__init__(message)
        self.buffer = buffer
        self.language = language


class InvalidBuffer(BlockMarkersError):
    """The buffer was closed (or never existed) when an operation ran."""

    def __init__(self, buffer: int) -> None:
        super().__init__(f"Invalid buffer {buffer}")
        self.buffer = buffer


class OverlayPlacementFailed(BlockMarkersError):
    """The overlay primitive rejected a marker for one specific line."""

    def __init__(self, buffer: int, line: int, reason: str) -> None:
        super().__init__(f"Failed to place marker at line {line + 1}: {reason}")
        self.buffer = buffer
        self.line = line
        self.reason = reason


class InvalidConfiguration(BlockMarkersError):
    """A configuration option had the wrong type or an unknown value."""

    def __init__(self, field_name: str, value: object, expected: str) -> None:
        super().__init__(
            f"Invalid value {value!r} for option '{field_name}' (expected {expected})"
        )
        self.field_name = field_name
        self.value = value
        self.expected = expected


__all__ = [
    "BlockMarkersError",
    "HostError",
    "ParserUnavailable",
    "InvalidBuffer",
    "OverlayPlacementFailed",
    "InvalidConfiguration",
]
