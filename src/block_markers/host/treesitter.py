"""Syntax-tree provider backed by py-tree-sitter grammars."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Dict, Mapping, Optional

import tree_sitter_python as tspython
from tree_sitter import Language, Parser, Tree

from block_markers.errors import ParserUnavailable
from block_markers.markers.models import BufferHandle

if TYPE_CHECKING:
    from .ports import BufferAccessor

GRAMMARS: Mapping[str, Callable[[], Any]] = {
    "python": tspython.language,
}


class TreeSitterProvider:
    """Parses the accessor's current buffer text on demand.

    One ``Parser`` is kept per language; trees are never cached, so every
    call reflects the latest buffer contents.
    """

    def __init__(
        self,
        accessor: "BufferAccessor",
        *,
        grammars: Optional[Mapping[str, Callable[[], Any]]] = None,
    ) -> None:
        self._accessor = accessor
        self._grammars = dict(GRAMMARS if grammars is None else grammars)
        self._parsers: Dict[str, Parser] = {}

    def supports(self, language: str) -> bool:
        return language in self._grammars

    def parse(self, buffer: BufferHandle, language: str) -> Tree:
        parser = self._parser_for(buffer, language)
        source = self._buffer_text(buffer).encode("utf-8")
        try:
            return parser.parse(source)
        except (ValueError, TypeError) as exc:
            raise ParserUnavailable(
                f"Failed to parse buffer {buffer}: {exc}",
                buffer=buffer,
                language=language,
            ) from exc

    def _parser_for(self, buffer: BufferHandle, language: str) -> Parser:
        parser = self._parsers.get(language)
        if parser is not None:
            return parser
        factory = self._grammars.get(language)
        if factory is None:
            raise ParserUnavailable(
                f"TreeSitter parser for '{language}' not available",
                buffer=buffer,
                language=language,
            )
        parser = Parser(Language(factory()))
        self._parsers[language] = parser
        return parser

    def _buffer_text(self, buffer: BufferHandle) -> str:
        lines = []
        for index in range(self._accessor.line_count(buffer)):
            line = self._accessor.get_line(buffer, index)
            if line is None:
                break
            lines.append(line)
        return "\n".join(lines)


__all__ = ["GRAMMARS", "TreeSitterProvider"]
