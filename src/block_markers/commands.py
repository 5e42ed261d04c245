"""Zero-argument commands exposed to the host, bound to the current buffer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Dict, Iterator

from block_markers.errors import HostError
from block_markers.markers.models import BufferHandle
from block_markers.runtime.telemetry import span

if TYPE_CHECKING:
    from block_markers.host.ports import EditorHost
    from block_markers.markers.scheduler import RefreshScheduler

ENABLE = "enable-for-current-buffer"
DISABLE = "disable-for-current-buffer"
TOGGLE = "toggle-for-current-buffer"


@dataclass(frozen=True, slots=True)
class CommandRef:
    """Named command and the buffer operation it runs."""

    id: str
    handler: Callable[[BufferHandle], bool]
    description: str = ""

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("CommandRef id cannot be empty")
        if not callable(self.handler):
            raise TypeError("handler must be callable")

    def __call__(self, buffer: BufferHandle) -> bool:
        return self.handler(buffer)


class CommandRegistry:
    """Owns command references and runs them against the host's current buffer."""

    def __init__(self, host: "EditorHost", *, logger_name: str | None = None) -> None:
        self.host = host
        self._commands: Dict[str, CommandRef] = {}
        self._logger_name = logger_name

    def register(self, command: CommandRef, *, replace: bool = False) -> CommandRef:
        if not replace and command.id in self._commands:
            raise ValueError(f"Command '{command.id}' already registered")
        self._commands[command.id] = command
        return command

    def get(self, command_id: str) -> CommandRef:
        try:
            return self._commands[command_id]
        except KeyError as exc:
            raise KeyError(f"Command '{command_id}' is not registered") from exc

    def __iter__(self) -> Iterator[CommandRef]:
        return iter(self._commands.values())

    def __contains__(self, command_id: object) -> bool:
        return command_id in self._commands

    def execute(self, command_id: str) -> bool:
        command = self.get(command_id)
        with span(
            f"commands::{command_id}",
            logger_name=self._logger_name,
            component="commands",
            metadata={"command": command_id},
        ) as handle:
            try:
                buffer = self.host.current_buffer()
            except HostError as exc:
                handle.add_metadata("status", "no_buffer")
                self.host.notify(f"Block markers: {exc}", "warning")
                return False
            handle.add_metadata("buffer", buffer)
            ok = command(buffer)
            handle.add_metadata("status", "ok" if ok else "failed")
            return ok


def register_default_commands(
    registry: CommandRegistry, scheduler: "RefreshScheduler"
) -> CommandRegistry:
    def enable(buffer: BufferHandle) -> bool:
        if scheduler.enable(buffer):
            return True
        registry.host.notify("Block markers: Failed to enable markers", "error")
        return False

    def disable(buffer: BufferHandle) -> bool:
        scheduler.disable(buffer)
        return True

    registry.register(
        CommandRef(id=ENABLE, handler=enable, description="Show block markers")
    )
    registry.register(
        CommandRef(id=DISABLE, handler=disable, description="Hide block markers")
    )
    registry.register(
        CommandRef(
            id=TOGGLE, handler=scheduler.toggle, description="Toggle block markers"
        )
    )
    return registry


__all__ = [
    "CommandRef",
    "CommandRegistry",
    "DISABLE",
    "ENABLE",
    "TOGGLE",
    "register_default_commands",
]
