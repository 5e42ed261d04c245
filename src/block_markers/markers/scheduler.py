"""Per-buffer enable/disable state machine and debounced refresh scheduling."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Dict, Iterator, Optional

from block_markers.errors import InvalidBuffer
from block_markers.runtime import telemetry

from .language import detect_language
from .models import (
    ATTACH_EVENTS,
    REFRESH_EVENTS,
    BufferEvent,
    BufferHandle,
    BufferState,
    EventKind,
)
from .overlay import PlacementReport

if TYPE_CHECKING:
    from block_markers.config import BlockMarkersConfig
    from block_markers.host.ports import EditorHost

    from .locator import BlockLocator
    from .overlay import OverlayManager


@dataclass(slots=True)
class BufferRecord:
    state: BufferState = BufferState.DISABLED
    auto_attempted: bool = False


@dataclass(slots=True)
class PendingRefresh:
    deadline: float
    generation: int


@dataclass(slots=True)
class BufferStatus:
    """Diagnostics snapshot for one buffer."""

    buffer: BufferHandle
    state: BufferState
    filetype: str
    language: str
    marker_count: int
    namespace_id: int
    pending_refresh: bool

    @property
    def enabled(self) -> bool:
        return self.state is BufferState.ENABLED


class StateStore:
    """Owns the ``BufferRecord`` of every buffer the scheduler has seen."""

    def __init__(self) -> None:
        self._records: Dict[BufferHandle, BufferRecord] = {}

    def record(self, buffer: BufferHandle) -> BufferRecord:
        return self._records.setdefault(buffer, BufferRecord())

    def peek(self, buffer: BufferHandle) -> Optional[BufferRecord]:
        return self._records.get(buffer)

    def state(self, buffer: BufferHandle) -> BufferState:
        record = self._records.get(buffer)
        return record.state if record else BufferState.DISABLED

    def drop(self, buffer: BufferHandle) -> None:
        self._records.pop(buffer, None)

    def __contains__(self, buffer: object) -> bool:
        return buffer in self._records

    def __iter__(self) -> Iterator[BufferHandle]:
        return iter(tuple(self._records))

    def __len__(self) -> int:
        return len(self._records)


class RefreshScheduler:
    """Reacts to buffer events by driving the locator and overlay manager.

    All work runs synchronously inside the caller's event callback. The only
    deferred work is the debounced refresh: at most one per buffer, each new
    edit superseding the pending one, fired from ``process_timers``.
    """

    def __init__(
        self,
        host: "EditorHost",
        locator: "BlockLocator",
        overlay: "OverlayManager",
        config: BlockMarkersConfig,
        *,
        store: Optional[StateStore] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.host = host
        self.locator = locator
        self.overlay = overlay
        self.config = config
        self.store = store or StateStore()
        self._clock = clock
        self._pending: Dict[BufferHandle, PendingRefresh] = {}
        self._timer_counter = 0
        self.logger = telemetry.get_logger("block_markers.scheduler")

    # -- transitions -------------------------------------------------------

    def language_matches(self, buffer: BufferHandle) -> bool:
        return detect_language(self.host, buffer) == self.config.language

    def enable(self, buffer: BufferHandle) -> bool:
        with telemetry.span(
            "scheduler::enable", component="scheduler", metadata={"buffer": buffer}
        ) as handle:
            if not self.host.is_valid(buffer):
                self._invalid(buffer, notify=True)
                return False
            language = detect_language(self.host, buffer)
            if language != self.config.language:
                handle.add_metadata("language", language or "unknown")
                self.host.notify(
                    f"Block markers: buffer language '{language or 'unknown'}' "
                    f"is not '{self.config.language}'",
                    "warning",
                )
                return False

            self.store.record(buffer).state = BufferState.ENABLED
            self.cancel_pending(buffer)
            self._refresh_now(buffer)
            return True

    def disable(self, buffer: BufferHandle) -> bool:
        """Clear the buffer's markers; report whether any were showing."""

        with telemetry.span(
            "scheduler::disable", component="scheduler", metadata={"buffer": buffer}
        ) as handle:
            self.cancel_pending(buffer)
            if not self.host.is_valid(buffer):
                self._invalid(buffer)
                return False
            had_markers = bool(self.overlay.list_active(buffer))
            self.overlay.clear(buffer)
            self.store.record(buffer).state = BufferState.DISABLED
            handle.add_metadata("had_markers", had_markers)
            return had_markers

    def toggle(self, buffer: BufferHandle) -> bool:
        if self.disable(buffer):
            return True
        return self.enable(buffer)

    def refresh(self, buffer: BufferHandle) -> Optional[PlacementReport]:
        if self.store.state(buffer) is not BufferState.ENABLED:
            return None
        if not self.host.is_valid(buffer):
            self._invalid(buffer)
            return None
        if not self.language_matches(buffer):
            # Markers computed for the old language may now cover code.
            self.overlay.clear(buffer)
            telemetry.record_event(
                "scheduler.language_mismatch",
                level="debug",
                data={"buffer": buffer, "filetype": self.host.get_filetype(buffer)},
            )
            return None
        return self._refresh_now(buffer)

    # -- events ------------------------------------------------------------

    def handle(self, event: BufferEvent) -> None:
        """Single entry point for host events."""

        telemetry.record_event(
            "scheduler.event",
            level="debug",
            data={"kind": event.kind.value, "buffer": event.buffer},
        )
        if event.kind is EventKind.BUFFER_CLOSED:
            self.cancel_pending(event.buffer)
            self.store.drop(event.buffer)
        elif event.kind in ATTACH_EVENTS:
            self._auto_enable(event.buffer)
        elif event.kind in REFRESH_EVENTS:
            if event.kind not in self.config.refresh_events:
                return
            if self.store.state(event.buffer) is not BufferState.ENABLED:
                return
            if self.config.debounce_ms > 0:
                self.schedule(event.buffer)
            else:
                self.refresh(event.buffer)

    def _auto_enable(self, buffer: BufferHandle) -> None:
        if not self.config.auto_enable or not self.host.is_valid(buffer):
            return
        record = self.store.record(buffer)
        if record.auto_attempted or not self.language_matches(buffer):
            return
        record.auto_attempted = True
        self.enable(buffer)

    # -- debounce ----------------------------------------------------------

    def schedule(self, buffer: BufferHandle) -> None:
        self._timer_counter += 1
        self._pending[buffer] = PendingRefresh(
            deadline=self._clock() + self.config.debounce_ms / 1000.0,
            generation=self._timer_counter,
        )

    def cancel_pending(self, buffer: BufferHandle) -> None:
        self._pending.pop(buffer, None)

    def has_pending(self, buffer: BufferHandle) -> bool:
        return buffer in self._pending

    def process_timers(self) -> Dict[BufferHandle, PlacementReport]:
        """Fire every pending refresh whose quiet period has elapsed."""

        now = self._clock()
        expired = {
            buffer: pending.generation
            for buffer, pending in self._pending.items()
            if pending.deadline <= now
        }
        return self._fire(expired)

    def flush(self, buffer: Optional[BufferHandle] = None) -> Dict[BufferHandle, PlacementReport]:
        """Fire pending refreshes immediately, regardless of deadline."""

        if buffer is not None:
            pending = self._pending.get(buffer)
            return self._fire({buffer: pending.generation} if pending else {})
        return self._fire(
            {name: pending.generation for name, pending in self._pending.items()}
        )

    def _fire(self, timers: Dict[BufferHandle, int]) -> Dict[BufferHandle, PlacementReport]:
        results: Dict[BufferHandle, PlacementReport] = {}
        for buffer, generation in timers.items():
            pending = self._pending.get(buffer)
            if pending is None or pending.generation != generation:
                continue
            self._pending.pop(buffer, None)
            if buffer not in self.store or not self.host.is_valid(buffer):
                telemetry.record_event(
                    "scheduler.stale_refresh_dropped",
                    level="debug",
                    data={"buffer": buffer},
                )
                self.store.drop(buffer)
                continue
            report = self.refresh(buffer)
            if report is not None:
                results[buffer] = report
        return results

    # -- diagnostics -------------------------------------------------------

    def state_of(self, buffer: BufferHandle) -> BufferState:
        return self.store.state(buffer)

    def status(self, buffer: BufferHandle) -> BufferStatus:
        valid = self.host.is_valid(buffer)
        return BufferStatus(
            buffer=buffer,
            state=self.store.state(buffer),
            filetype=self.host.get_filetype(buffer) if valid else "",
            language=detect_language(self.host, buffer) if valid else "",
            marker_count=len(self.overlay.list_active(buffer)),
            namespace_id=self.overlay.namespace_id,
            pending_refresh=self.has_pending(buffer),
        )

    def _refresh_now(self, buffer: BufferHandle) -> Optional[PlacementReport]:
        with telemetry.span(
            "scheduler::refresh", component="scheduler", metadata={"buffer": buffer}
        ):
            try:
                sites = self.locator.locate(buffer)
                return self.overlay.refresh_all(buffer, sites)
            except InvalidBuffer:
                self._invalid(buffer)
                return None

    def _invalid(self, buffer: BufferHandle, *, notify: bool = False) -> None:
        self.cancel_pending(buffer)
        self.store.drop(buffer)
        telemetry.record_event(
            "scheduler.invalid_buffer", level="warning", data={"buffer": buffer}
        )
        if notify:
            self.host.notify(f"Block markers: {InvalidBuffer(buffer)}", "warning")


__all__ = [
    "BufferRecord",
    "BufferStatus",
    "PendingRefresh",
    "RefreshScheduler",
    "StateStore",
]
