"""Find definition sites in a buffer by walking its syntax tree."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterator, Mapping, Optional

from block_markers.errors import ParserUnavailable
from block_markers.runtime import telemetry

from .models import TARGET_NODE_TYPES, BufferHandle, DefinitionKind, DefinitionSite

if TYPE_CHECKING:
    from block_markers.host.ports import Notifier, SyntaxTreeProvider


def iter_nodes(root: Any, node_type: str) -> Iterator[Any]:
    """Yield every node of ``node_type`` below ``root`` in pre-order."""

    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == node_type:
            yield node
        stack.extend(reversed(node.children))


class BlockLocator:
    """Queries the syntax-tree provider for each configured target kind."""

    def __init__(
        self,
        provider: "SyntaxTreeProvider",
        *,
        language: str = "python",
        targets: Optional[Mapping[DefinitionKind, str]] = None,
        notifier: Optional["Notifier"] = None,
    ) -> None:
        self.provider = provider
        self.language = language
        self.targets = dict(targets or TARGET_NODE_TYPES.get(language, {}))
        self.notifier = notifier
        self.logger = telemetry.get_logger("block_markers.locator")

    def locate(self, buffer: BufferHandle) -> tuple[DefinitionSite, ...]:
        with telemetry.span(
            "locator::locate",
            component="locator",
            metadata={"buffer": buffer, "language": self.language},
        ) as handle:
            try:
                tree = self.provider.parse(buffer, self.language)
            except ParserUnavailable as exc:
                handle.add_metadata("status", "parser_unavailable")
                self._report_unavailable(buffer, str(exc))
                return ()

            root = getattr(tree, "root_node", None)
            if root is None:
                handle.add_metadata("status", "no_root")
                self._report_unavailable(buffer, "No root node found in syntax tree")
                return ()

            sites: list[DefinitionSite] = []
            for kind, node_type in self.targets.items():
                for node in iter_nodes(root, node_type):
                    sites.append(
                        DefinitionSite(kind=kind, anchor_line=node.start_point[0])
                    )
            handle.add_metadata("sites", len(sites))
            return tuple(sites)

    def _report_unavailable(self, buffer: BufferHandle, reason: str) -> None:
        telemetry.record_event(
            "locator.parser_unavailable",
            level="warning",
            data={"buffer": buffer, "language": self.language, "reason": reason},
        )
        if self.notifier is not None:
            self.notifier.notify(f"Block markers: {reason}", "warning")


__all__ = ["BlockLocator", "iter_nodes"]
