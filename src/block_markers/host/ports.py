"""Adapter boundary types: everything the core needs from the host editor."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional, Protocol, Sequence

if TYPE_CHECKING:
    from block_markers.markers.models import BufferHandle, OverlayEntry


class BufferAccessor(Protocol):
    """Read-only view over the host's text buffers."""

    def is_valid(self, buffer: BufferHandle) -> bool:
        """Return ``False`` once the buffer has been closed or wiped."""
        ...

    def get_line(self, buffer: BufferHandle, line: int) -> Optional[str]:
        """Return the 0-based ``line`` or ``None`` when it does not exist."""
        ...

    def line_count(self, buffer: BufferHandle) -> int: ...

    def get_filetype(self, buffer: BufferHandle) -> str:
        """Explicit file-type tag set by the host, ``""`` when unknown."""
        ...

    def get_name(self, buffer: BufferHandle) -> str: ...

    def current_buffer(self) -> BufferHandle: ...


class OverlayPrimitive(Protocol):
    """Non-destructive annotations grouped by namespace."""

    def create_namespace(self, name: str) -> int: ...

    def set_overlay(
        self,
        buffer: BufferHandle,
        namespace: int,
        line: int,
        text: str,
        style: str,
        *,
        mark_id: Optional[int] = None,
    ) -> int:
        """Place an overlay; an existing mark with ``mark_id`` is replaced.

        Raises ``HostError`` when the line is rejected.
        """
        ...

    def clear_namespace(self, buffer: BufferHandle, namespace: int) -> None: ...

    def list_overlays(
        self, buffer: BufferHandle, namespace: int
    ) -> Sequence[OverlayEntry]: ...


class Notifier(Protocol):
    def notify(self, message: str, level: str = "info") -> None: ...


class SyntaxTreeProvider(Protocol):
    def parse(self, buffer: BufferHandle, language: str) -> Any:
        """Return a tree exposing ``root_node``; raise ``ParserUnavailable``."""
        ...


class EditorHost(BufferAccessor, OverlayPrimitive, Notifier, Protocol):
    """Convenience union implemented by full host adapters."""


__all__ = [
    "BufferAccessor",
    "OverlayPrimitive",
    "Notifier",
    "SyntaxTreeProvider",
    "EditorHost",
]
