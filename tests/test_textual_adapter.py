from __future__ import annotations

from typing import List, Sequence

from block_markers import commands
from block_markers.adapters.textual import (
    PreviewRow,
    TextualMarkersAdapter,
    TextualUIHooks,
    render_rows,
)
from block_markers.host import MemoryHost
from block_markers.markers import OverlayEntry
from block_markers.plugin import setup

TILDES = "~" * 100


def make_adapter(
    text: str,
    *,
    name: str = "example.py",
    previews: List[Sequence[PreviewRow]] | None = None,
    statuses: List[str] | None = None,
    logs: List[str] | None = None,
) -> TextualMarkersAdapter:
    host = MemoryHost()
    buffer = host.open_buffer(text, name=name)
    plugin = setup(host, {"debounce_ms": 0})
    preview_sink = previews if previews is not None else []
    status_sink = statuses if statuses is not None else []
    log_sink = logs if logs is not None else []
    hooks = TextualUIHooks(
        update_preview=preview_sink.append,
        update_status=status_sink.append,
        log=log_sink.append,
    )
    return TextualMarkersAdapter(plugin, host, buffer, hooks)


def test_render_rows_overlays_marker_lines() -> None:
    rows = render_rows(
        ["", "def f():"], {0: OverlayEntry(buffer=1, line=0, text=TILDES)}
    )

    assert rows == [PreviewRow(text=TILDES, style="comment"), PreviewRow(text="def f():")]
    assert rows[0].is_marker and not rows[1].is_marker


def test_attach_auto_enables_and_renders_markers() -> None:
    previews: List[Sequence[PreviewRow]] = []
    statuses: List[str] = []
    adapter = make_adapter("\ndef f():\n    pass", previews=previews, statuses=statuses)

    adapter.attach()

    assert previews[-1][0] == PreviewRow(text=TILDES, style="comment")
    assert statuses[-1] == "enabled | python | 1 markers"


def test_text_changes_update_preview() -> None:
    previews: List[Sequence[PreviewRow]] = []
    adapter = make_adapter("def f():\n    pass", previews=previews)
    adapter.attach()
    assert not any(row.is_marker for row in previews[-1])

    adapter.on_text_changed("x = 1\n\ndef f():\n    pass")

    assert [row.is_marker for row in previews[-1]] == [False, True, False, False]


def test_unchanged_text_is_not_dispatched() -> None:
    logs: List[str] = []
    adapter = make_adapter("\ndef f():", logs=logs)
    adapter.attach()
    count = len(logs)

    adapter.on_text_changed("\ndef f():")

    assert len(logs) == count


def test_commands_toggle_markers_off_and_on() -> None:
    previews: List[Sequence[PreviewRow]] = []
    adapter = make_adapter("\ndef f():", previews=previews)
    adapter.attach()

    assert adapter.run_command(commands.TOGGLE) is True
    assert not any(row.is_marker for row in previews[-1])

    adapter.run_command(commands.TOGGLE)
    assert previews[-1][0].is_marker


def test_notifications_surface_in_status() -> None:
    statuses: List[str] = []
    adapter = make_adapter("\nlocal x = 1", name="init.lua", statuses=statuses)
    adapter.attach()

    adapter.run_command(commands.ENABLE)

    assert statuses[-1] == "error: Block markers: Failed to enable markers"


def test_adapter_emits_log_lines() -> None:
    logs: List[str] = []
    adapter = make_adapter("\ndef f():", logs=logs)

    adapter.attach()
    adapter.on_saved()

    assert any(line.startswith("event ->") for line in logs)
    assert any("post-save" in line for line in logs)
