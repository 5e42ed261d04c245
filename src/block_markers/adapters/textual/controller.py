"""UI-agnostic controller wiring a MemoryHost buffer into Textual callbacks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from block_markers.host.memory import MemoryHost
from block_markers.markers.models import BufferHandle, EventKind, OverlayEntry
from block_markers.markers.overlay import PlacementReport
from block_markers.plugin import BlockMarkers


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@dataclass(frozen=True, slots=True)
class PreviewRow:
    """One rendered line: buffer text, or the marker overlaying it."""

    text: str
    style: Optional[str] = None

    @property
    def is_marker(self) -> bool:
        return self.style is not None


@dataclass(slots=True)
class TextualUIHooks:
    """Callbacks invoked by the adapter to update Textual widgets."""

    update_preview: Callable[[Sequence[PreviewRow]], None]
    update_status: Callable[[str], None] = _noop
    # Optional realtime log callback a host may use to surface debug lines
    log: Callable[[str], None] = _noop


def render_rows(
    lines: Sequence[str], overlays: Mapping[int, OverlayEntry]
) -> List[PreviewRow]:
    rows = []
    for index, line in enumerate(lines):
        entry = overlays.get(index)
        if entry is None:
            rows.append(PreviewRow(text=line))
        else:
            rows.append(PreviewRow(text=entry.text, style=entry.style))
    return rows


class TextualMarkersAdapter:
    """Translates widget activity into buffer events and redraws the preview."""

    def __init__(
        self,
        plugin: BlockMarkers,
        host: MemoryHost,
        buffer: BufferHandle,
        hooks: TextualUIHooks,
    ) -> None:
        self.plugin = plugin
        self.host = host
        self.buffer = buffer
        self.hooks = hooks
        self._seen_notifications = len(host.notifications)

    def attach(self) -> None:
        """Replay the lifecycle events an editor sends when a file is opened."""

        self.host.enter(self.buffer)
        self._dispatch(EventKind.BUFFER_ENTER)
        self._dispatch(EventKind.FILETYPE)
        self._after_change()

    def on_text_changed(self, text: str, *, insert_mode: bool = True) -> None:
        if text == self.host.get_text(self.buffer):
            return
        self.host.set_text(self.buffer, text)
        kind = EventKind.TEXT_CHANGED_INSERT if insert_mode else EventKind.TEXT_CHANGED
        self._dispatch(kind)
        self._after_change()

    def on_insert_leave(self) -> None:
        self._dispatch(EventKind.INSERT_LEAVE)
        self._after_change()

    def on_saved(self) -> None:
        self._dispatch(EventKind.POST_SAVE)
        self._after_change()

    def run_command(self, command_id: str) -> bool:
        self.host.enter(self.buffer)
        ok = self.plugin.execute(command_id)
        self._log_state("command ->", command=command_id, ok=ok)
        self._after_change()
        return ok

    def process_timers(self) -> Dict[BufferHandle, PlacementReport]:
        """Forward expired debounce timers and redraw when any fired."""

        results = self.plugin.process_timers()
        if results:
            for buffer, report in results.items():
                self._log_state(
                    "refresh ->",
                    refreshed=buffer,
                    placed=report.placed,
                    failed=report.failed,
                )
            self._after_change()
        return results

    def rows(self) -> List[PreviewRow]:
        lines = [
            self.host.get_line(self.buffer, index) or ""
            for index in range(self.host.line_count(self.buffer))
        ]
        overlays = {
            entry.line: entry
            for entry in self.host.list_overlays(self.buffer, self.plugin.overlay.namespace_id)
        }
        return render_rows(lines, overlays)

    def status_line(self) -> str:
        status = self.plugin.status(self.buffer)
        pending = " (refresh pending)" if status.pending_refresh else ""
        return (
            f"{status.state.value} | {status.language or 'unknown'} | "
            f"{status.marker_count} markers{pending}"
        )

    def _dispatch(self, kind: EventKind) -> None:
        self._log_state("event ->", event=kind.value)
        self.plugin.handle(kind, self.buffer)

    def _after_change(self) -> None:
        self.hooks.update_preview(self.rows())
        notifications = self.host.notifications[self._seen_notifications :]
        self._seen_notifications = len(self.host.notifications)
        if notifications:
            level, message = notifications[-1]
            self.hooks.update_status(f"{level}: {message}")
        else:
            self.hooks.update_status(self.status_line())

    def _log_state(self, prefix: str, **fields: object) -> None:
        parts = [prefix, f"buffer={self.buffer!r}"]
        for key, value in fields.items():
            if value is not None:
                parts.append(f"{key}={value!r}")
        self.hooks.log(" ".join(parts))


__all__ = [
    "PreviewRow",
    "TextualMarkersAdapter",
    "TextualUIHooks",
    "render_rows",
]
