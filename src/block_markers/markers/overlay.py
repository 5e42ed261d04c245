"""Overlay manager owning the per-buffer set of placed markers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Iterable, Set

from block_markers.errors import HostError, InvalidBuffer, OverlayPlacementFailed
from block_markers.runtime import telemetry

from .admission import admit
from .models import BufferHandle, DefinitionSite, MarkerSpec, marker_for

if TYPE_CHECKING:
    from block_markers.host.ports import EditorHost

DEFAULT_NAMESPACE = "bmark"


@dataclass(slots=True)
class PlacementReport:
    """Outcome of one ``refresh_all`` pass."""

    placed: int = 0
    failed: int = 0
    rejected: int = 0

    @property
    def ok(self) -> bool:
        return self.failed == 0


class OverlayManager:
    """Clears and places markers through the host's overlay primitive.

    Every mark uses its line number as id, so the host replaces rather than
    stacks a second marker on an already-marked line.
    """

    def __init__(self, host: "EditorHost", *, namespace: str = DEFAULT_NAMESPACE) -> None:
        self.host = host
        self.namespace = namespace
        self.namespace_id = host.create_namespace(namespace)
        self.logger = telemetry.get_logger("block_markers.overlay")

    def clear(self, buffer: BufferHandle) -> None:
        self._require_valid(buffer)
        try:
            self.host.clear_namespace(buffer, self.namespace_id)
        except HostError as exc:
            raise InvalidBuffer(buffer) from exc

    def place(self, buffer: BufferHandle, line: int, spec: MarkerSpec) -> int:
        try:
            return self.host.set_overlay(
                buffer,
                self.namespace_id,
                line,
                spec.text,
                spec.style,
                mark_id=line,
            )
        except HostError as exc:
            raise OverlayPlacementFailed(buffer, line, str(exc)) from exc

    def list_active(self, buffer: BufferHandle) -> Set[int]:
        return set(self.snapshot(buffer))

    def snapshot(self, buffer: BufferHandle) -> Dict[int, str]:
        """Map of marked line -> marker text, for inspection."""

        if not self.host.is_valid(buffer):
            return {}
        entries = self.host.list_overlays(buffer, self.namespace_id)
        return {entry.line: entry.text for entry in entries}

    def refresh_all(
        self, buffer: BufferHandle, sites: Iterable[DefinitionSite]
    ) -> PlacementReport:
        """Clear the buffer's markers, then place one per admitted site."""

        report = PlacementReport()
        with telemetry.span(
            "overlay::refresh_all",
            component="overlay",
            metadata={"buffer": buffer, "namespace": self.namespace},
        ) as handle:
            self.clear(buffer)
            for site in sites:
                line = admit(self.host, buffer, site)
                if line is None:
                    report.rejected += 1
                    continue
                try:
                    self.place(buffer, line, marker_for(site.kind))
                except OverlayPlacementFailed as exc:
                    report.failed += 1
                    telemetry.record_event(
                        "overlay.placement_failed",
                        level="warning",
                        data={"buffer": buffer, "line": exc.line, "reason": exc.reason},
                    )
                    continue
                report.placed += 1

            handle.add_metadata("placed", report.placed)
            handle.add_metadata("failed", report.failed)

        if report.failed:
            self.host.notify(
                f"Block markers: Added {report.placed} markers with "
                f"{report.failed} errors",
                "warning",
            )
        return report

    def _require_valid(self, buffer: BufferHandle) -> None:
        if not self.host.is_valid(buffer):
            raise InvalidBuffer(buffer)


__all__ = ["DEFAULT_NAMESPACE", "OverlayManager", "PlacementReport"]
