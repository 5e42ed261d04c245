"""Blank-line admission: a marker may only overlay an empty line."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from .models import BufferHandle, DefinitionSite

if TYPE_CHECKING:
    from block_markers.host.ports import BufferAccessor


def is_blank(line: Optional[str]) -> bool:
    return line is not None and not line.strip()


def admit(
    accessor: "BufferAccessor", buffer: BufferHandle, site: DefinitionSite
) -> Optional[int]:
    """Return the line above ``site`` when it is blank, else ``None``.

    The marker overlays that line in place, so only an empty (or
    whitespace-only) line is safe to cover.
    """

    if site.anchor_line == 0:
        return None
    candidate = site.anchor_line - 1
    if is_blank(accessor.get_line(buffer, candidate)):
        return candidate
    return None


__all__ = ["admit", "is_blank"]
