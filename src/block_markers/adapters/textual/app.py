"""Executable Textual app: edit a file and watch its block markers update."""

from __future__ import annotations

import argparse
import os
from pathlib import Path
from typing import Optional, Sequence

try:  # pragma: no cover - imported only when demo is run
    from rich.text import Text
    from textual.app import App, ComposeResult
    from textual.containers import Horizontal, VerticalScroll
    from textual.widgets import Footer, Header, Static, TextArea
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' package to use block_markers.adapters.textual.app"
    ) from exc

from block_markers import commands
from block_markers.host.memory import MemoryHost
from block_markers.plugin import setup
from block_markers.runtime import telemetry

from .controller import PreviewRow, TextualMarkersAdapter, TextualUIHooks

MARKER_STYLES = {"comment": "dim italic"}


def rows_to_text(rows: Sequence[PreviewRow]) -> Text:
    text = Text(no_wrap=True)
    for index, row in enumerate(rows):
        if index:
            text.append("\n")
        style = MARKER_STYLES.get(row.style, "dim") if row.is_marker else ""
        text.append(row.text, style=style)
    return text


class BlockMarkersApp(App[None]):
    """Editor pane on the left, marker preview on the right."""

    CSS = """
	#panes {
		height: 1fr;
	}

	#editor {
		width: 1fr;
	}

	#preview-area {
		width: 1fr;
		border: round $accent;
		padding: 0 1;
	}

	#status-line {
		height: 1;
		background: $surface-darken-1;
		padding: 0 1;
	}
	"""

    BINDINGS = [
        ("f5", "enable_markers", "Enable"),
        ("f6", "disable_markers", "Disable"),
        ("f7", "toggle_markers", "Toggle"),
        ("ctrl+s", "save", "Save"),
        ("escape", "insert_leave", "Leave insert"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(
        self,
        path: Path,
        *,
        filetype: str = "",
        debounce_ms: Optional[int] = None,
    ) -> None:
        super().__init__()
        self.path = path
        self.host = MemoryHost()
        text = path.read_text(encoding="utf-8") if path.exists() else ""
        self.buffer = self.host.open_buffer(text, name=str(path), filetype=filetype)
        options = {} if debounce_ms is None else {"debounce_ms": debounce_ms}
        self.plugin = setup(self.host, options)
        self.adapter: TextualMarkersAdapter | None = None
        self._preview: Static | None = None
        self._status: Static | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Horizontal(id="panes"):
            yield TextArea(self.host.get_text(self.buffer), id="editor")
            with VerticalScroll(id="preview-area"):
                self._preview = Static("", id="preview")
                yield self._preview
        self._status = Static("", id="status-line")
        yield self._status
        yield Footer()

    def on_mount(self) -> None:
        hooks = TextualUIHooks(
            update_preview=self._update_preview,
            update_status=self._update_status,
            log=self.log.info,
        )
        self.adapter = TextualMarkersAdapter(self.plugin, self.host, self.buffer, hooks)
        self.adapter.attach()
        self.set_interval(0.05, self._process_timers)

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        if self.adapter:
            self.adapter.on_text_changed(event.text_area.text)

    def action_enable_markers(self) -> None:
        self._run(commands.ENABLE)

    def action_disable_markers(self) -> None:
        self._run(commands.DISABLE)

    def action_toggle_markers(self) -> None:
        self._run(commands.TOGGLE)

    def action_insert_leave(self) -> None:
        if self.adapter:
            self.adapter.on_insert_leave()

    def action_save(self) -> None:
        self.path.write_text(self.host.get_text(self.buffer), encoding="utf-8")
        if self.adapter:
            self.adapter.on_saved()

    def _run(self, command_id: str) -> None:
        if self.adapter:
            self.adapter.run_command(command_id)

    def _process_timers(self) -> None:
        if self.adapter:
            self.adapter.process_timers()

    def _update_preview(self, rows: Sequence[PreviewRow]) -> None:
        if self._preview:
            self._preview.update(rows_to_text(rows))

    def _update_status(self, status: str) -> None:
        if self._status:
            self._status.update(Text(status))


def _env_int(key: str) -> Optional[int]:
    value = os.environ.get(key)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Edit a Python file with live block markers."
    )
    parser.add_argument("path", type=Path, help="File to open (created on save)")
    parser.add_argument(
        "--filetype",
        default="",
        help="Explicit file-type tag; detected from the name or shebang when empty",
    )
    parser.add_argument(
        "--debounce-ms",
        type=int,
        default=_env_int("BLOCK_MARKERS_DEBOUNCE_MS"),
        help="Quiet period before an edit triggers a refresh (default: 100)",
    )
    parser.add_argument(
        "--log-preset",
        choices=telemetry.PRESETS,
        default=telemetry.env("LOG_PRESET"),
        help="Named telelog preset; environment overrides apply when omitted",
    )
    args = parser.parse_args(argv)
    if args.log_preset is not None and args.log_preset not in telemetry.PRESETS:
        parser.error(f"unknown log preset '{args.log_preset}'")
    return args


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    telemetry.configure(preset=args.log_preset)
    app = BlockMarkersApp(args.path, filetype=args.filetype, debounce_ms=args.debounce_ms)
    app.run()


if __name__ == "__main__":  # pragma: no cover - manual demo
    main()
