"""Host editor ports and the adapters that implement them."""

from .memory import MemoryBuffer, MemoryHost, split_lines
from .ports import (
    BufferAccessor,
    EditorHost,
    Notifier,
    OverlayPrimitive,
    SyntaxTreeProvider,
)
from .treesitter import GRAMMARS, TreeSitterProvider

__all__ = [
    "BufferAccessor",
    "EditorHost",
    "GRAMMARS",
    "MemoryBuffer",
    "MemoryHost",
    "Notifier",
    "OverlayPrimitive",
    "SyntaxTreeProvider",
    "TreeSitterProvider",
    "split_lines",
]
