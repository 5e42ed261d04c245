"""Runtime services shared by every component (telemetry, logging)."""

from . import telemetry

__all__ = ["telemetry"]
