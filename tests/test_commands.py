import pytest

from block_markers import commands
from block_markers.commands import CommandRef, CommandRegistry
from block_markers.host import MemoryHost
from block_markers.markers import BufferState
from block_markers.plugin import BlockMarkers, setup

TILDES = "~" * 100


def make_plugin(text: str, *, name: str = "example.py") -> tuple[BlockMarkers, MemoryHost, int]:
    host = MemoryHost()
    buffer = host.open_buffer(text, name=name)
    host.enter(buffer)
    return setup(host, {"auto_enable": False}), host, buffer


def test_default_commands_registered() -> None:
    plugin, _host, _buffer = make_plugin("")

    ids = [command.id for command in plugin.commands]

    assert ids == [commands.ENABLE, commands.DISABLE, commands.TOGGLE]


def test_enable_command_targets_current_buffer() -> None:
    plugin, host, first = make_plugin("\ndef f():")
    second = host.open_buffer("\nclass A:", name="other.py")
    host.enter(second)

    assert plugin.execute(commands.ENABLE) is True

    assert plugin.is_enabled(second)
    assert not plugin.is_enabled(first)


def test_disable_command_always_succeeds() -> None:
    plugin, _host, buffer = make_plugin("\ndef f():")

    assert plugin.execute(commands.DISABLE) is True
    plugin.execute(commands.ENABLE)
    assert plugin.execute(commands.DISABLE) is True

    assert plugin.overlay.list_active(buffer) == set()


def test_toggle_command_round_trip() -> None:
    plugin, _host, buffer = make_plugin("\ndef f():\n    pass")

    plugin.execute(commands.TOGGLE)
    assert plugin.overlay.snapshot(buffer) == {0: TILDES}

    plugin.execute(commands.TOGGLE)
    assert plugin.overlay.snapshot(buffer) == {}
    assert plugin.scheduler.state_of(buffer) is BufferState.DISABLED


def test_enable_command_failure_is_notified() -> None:
    plugin, host, _buffer = make_plugin("\nfunction f() end", name="init.lua")

    assert plugin.execute(commands.ENABLE) is False

    assert host.notifications[-1] == ("error", "Block markers: Failed to enable markers")


def test_commands_without_open_buffer() -> None:
    host = MemoryHost()
    plugin = setup(host)

    assert plugin.execute(commands.TOGGLE) is False
    assert host.notifications[-1][0] == "warning"


def test_unknown_command_raises() -> None:
    plugin, _host, _buffer = make_plugin("")

    with pytest.raises(KeyError):
        plugin.execute("explode-current-buffer")


def test_registry_rejects_duplicates() -> None:
    registry = CommandRegistry(MemoryHost())
    registry.register(CommandRef(id="noop", handler=lambda buffer: True))

    with pytest.raises(ValueError):
        registry.register(CommandRef(id="noop", handler=lambda buffer: False))

    replacement = CommandRef(id="noop", handler=lambda buffer: False)
    registry.register(replacement, replace=True)
    assert registry.get("noop") is replacement


def test_command_ref_validation() -> None:
    with pytest.raises(ValueError):
        CommandRef(id="", handler=lambda buffer: True)
    with pytest.raises(TypeError):
        CommandRef(id="broken", handler="not callable")  # type: ignore[arg-type]
