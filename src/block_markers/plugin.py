"""Composition root wiring the locator, overlay manager and scheduler."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any, Callable, Mapping, Optional

from block_markers.commands import CommandRegistry, register_default_commands
from block_markers.config import BlockMarkersConfig, load_config
from block_markers.errors import InvalidConfiguration
from block_markers.host.treesitter import TreeSitterProvider
from block_markers.markers.locator import BlockLocator
from block_markers.markers.models import BufferEvent, BufferHandle, BufferState, EventKind
from block_markers.markers.overlay import OverlayManager
from block_markers.markers.scheduler import BufferStatus, RefreshScheduler
from block_markers.runtime import telemetry

if TYPE_CHECKING:
    from block_markers.host.ports import EditorHost, SyntaxTreeProvider


class BlockMarkers:
    """One plugin instance bound to one host."""

    def __init__(
        self,
        host: "EditorHost",
        config: BlockMarkersConfig,
        *,
        provider: Optional["SyntaxTreeProvider"] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.host = host
        self.config = config
        self.provider = provider or TreeSitterProvider(host)
        self.locator = BlockLocator(
            self.provider, language=config.language, notifier=host
        )
        self.overlay = OverlayManager(host, namespace=config.namespace)
        self.scheduler = RefreshScheduler(
            host, self.locator, self.overlay, config, clock=clock
        )
        self.commands = register_default_commands(
            CommandRegistry(host, logger_name="block_markers.commands"),
            self.scheduler,
        )

    def handle(self, kind: EventKind | str, buffer: BufferHandle) -> None:
        self.scheduler.handle(BufferEvent(kind=EventKind(kind), buffer=buffer))

    def execute(self, command_id: str) -> bool:
        return self.commands.execute(command_id)

    def process_timers(self) -> dict:
        return self.scheduler.process_timers()

    def status(self, buffer: Optional[BufferHandle] = None) -> BufferStatus:
        target = self.host.current_buffer() if buffer is None else buffer
        return self.scheduler.status(target)

    def is_enabled(self, buffer: BufferHandle) -> bool:
        return self.scheduler.state_of(buffer) is BufferState.ENABLED


def setup(
    host: "EditorHost",
    options: Optional[Mapping[str, Any]] = None,
    *,
    provider: Optional["SyntaxTreeProvider"] = None,
    clock: Callable[[], float] = time.monotonic,
) -> BlockMarkers:
    """Validate ``options`` and build a plugin instance for ``host``.

    Invalid options never abort setup: each one is reported to the host as a
    warning and the default for that field is used.
    """

    def on_invalid(error: InvalidConfiguration) -> None:
        host.notify(f"Block markers: {error}", "warning")

    config = load_config(options, on_invalid=on_invalid)
    telemetry.record_event(
        "plugin.setup",
        data={
            "language": config.language,
            "auto_enable": config.auto_enable,
            "debounce_ms": config.debounce_ms,
        },
    )
    return BlockMarkers(host, config, provider=provider, clock=clock)


__all__ = ["BlockMarkers", "setup"]
