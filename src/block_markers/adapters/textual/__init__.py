"""Textual host adapter for block markers."""

from .controller import PreviewRow, TextualMarkersAdapter, TextualUIHooks, render_rows

__all__ = ["PreviewRow", "TextualMarkersAdapter", "TextualUIHooks", "render_rows"]
