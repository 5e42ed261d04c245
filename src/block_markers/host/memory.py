"""In-process host implementing every port on a simple list-of-lines model."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from block_markers.errors import HostError
from block_markers.markers.models import BufferHandle, OverlayEntry


def split_lines(text: str) -> List[str]:
    lines = text.splitlines()
    if not lines:
        lines = [""]
    elif text.endswith("\n"):
        lines.append("")
    return lines


@dataclass(slots=True)
class MemoryBuffer:
    """Text storage for one open buffer."""

    lines: List[str] = field(default_factory=lambda: [""])
    name: str = ""
    filetype: str = ""
    version: int = 0

    def replace(self, lines: Iterable[str]) -> None:
        self.lines = list(lines) or [""]
        self.version += 1


class MemoryHost:
    """Buffers, overlay namespaces and notifications kept in plain dicts.

    Marks are keyed by id inside each (buffer, namespace) pair; placing a
    mark with an id that already exists replaces it, like editor extmarks.
    """

    def __init__(self) -> None:
        self._buffers: Dict[BufferHandle, MemoryBuffer] = {}
        self._namespaces: Dict[str, int] = {}
        self._marks: Dict[Tuple[BufferHandle, int], Dict[int, OverlayEntry]] = {}
        self._next_handle = 1
        self._next_mark = 1_000_000
        self._current: Optional[BufferHandle] = None
        self.notifications: List[Tuple[str, str]] = []

    # -- buffer lifecycle -------------------------------------------------

    def open_buffer(
        self, text: str = "", *, name: str = "", filetype: str = ""
    ) -> BufferHandle:
        handle = self._next_handle
        self._next_handle += 1
        self._buffers[handle] = MemoryBuffer(
            lines=split_lines(text), name=name, filetype=filetype
        )
        if self._current is None:
            self._current = handle
        return handle

    def close_buffer(self, buffer: BufferHandle) -> None:
        self._buffers.pop(buffer, None)
        for key in [key for key in self._marks if key[0] == buffer]:
            del self._marks[key]
        if self._current == buffer:
            self._current = next(iter(self._buffers), None)

    def enter(self, buffer: BufferHandle) -> None:
        self._require(buffer)
        self._current = buffer

    def set_text(self, buffer: BufferHandle, text: str) -> None:
        self._require(buffer).replace(split_lines(text))

    def set_lines(
        self, buffer: BufferHandle, start: int, end: int, new_lines: Iterable[str]
    ) -> None:
        """Replace ``[start:end]`` with ``new_lines``."""

        document = self._require(buffer)
        lines = list(document.lines)
        lines[start:end] = list(new_lines)
        document.replace(lines)

    def get_text(self, buffer: BufferHandle) -> str:
        return "\n".join(self._require(buffer).lines)

    def set_filetype(self, buffer: BufferHandle, filetype: str) -> None:
        self._require(buffer).filetype = filetype

    def version(self, buffer: BufferHandle) -> int:
        return self._require(buffer).version

    # -- BufferAccessor ----------------------------------------------------

    def is_valid(self, buffer: BufferHandle) -> bool:
        return buffer in self._buffers

    def get_line(self, buffer: BufferHandle, line: int) -> Optional[str]:
        document = self._buffers.get(buffer)
        if document is None or line < 0 or line >= len(document.lines):
            return None
        return document.lines[line]

    def line_count(self, buffer: BufferHandle) -> int:
        document = self._buffers.get(buffer)
        return len(document.lines) if document else 0

    def get_filetype(self, buffer: BufferHandle) -> str:
        return self._require(buffer).filetype

    def get_name(self, buffer: BufferHandle) -> str:
        return self._require(buffer).name

    def current_buffer(self) -> BufferHandle:
        if self._current is None:
            raise HostError("No buffer is open")
        return self._current

    # -- OverlayPrimitive --------------------------------------------------

    def create_namespace(self, name: str) -> int:
        return self._namespaces.setdefault(name, len(self._namespaces) + 1)

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
        document = self._require(buffer)
        if line < 0 or line >= len(document.lines):
            raise HostError(f"Invalid 'line': out of range ({line})", buffer=buffer)
        if mark_id is None:
            mark_id = self._next_mark
            self._next_mark += 1
        marks = self._marks.setdefault((buffer, namespace), {})
        marks[mark_id] = OverlayEntry(buffer=buffer, line=line, text=text, style=style)
        return mark_id

    def clear_namespace(self, buffer: BufferHandle, namespace: int) -> None:
        self._require(buffer)
        self._marks.pop((buffer, namespace), None)

    def list_overlays(
        self, buffer: BufferHandle, namespace: int
    ) -> Sequence[OverlayEntry]:
        self._require(buffer)
        marks = self._marks.get((buffer, namespace), {})
        return tuple(sorted(marks.values(), key=lambda entry: entry.line))

    # -- Notifier ----------------------------------------------------------

    def notify(self, message: str, level: str = "info") -> None:
        self.notifications.append((level, message))

    def _require(self, buffer: BufferHandle) -> MemoryBuffer:
        try:
            return self._buffers[buffer]
        except KeyError as exc:
            raise HostError(f"Invalid buffer id: {buffer}", buffer=buffer) from exc


__all__ = ["MemoryBuffer", "MemoryHost", "split_lines"]
