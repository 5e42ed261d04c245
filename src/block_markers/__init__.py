"""Syntax-aware block markers for editor buffers."""

__all__ = [
    "adapters",
    "commands",
    "config",
    "errors",
    "host",
    "markers",
    "plugin",
    "runtime",
]

__version__ = "0.1.0"
