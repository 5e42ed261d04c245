"""Plugin configuration: defaults, environment overrides and option validation."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Callable, Mapping, Optional, Tuple

from block_markers.errors import InvalidConfiguration
from block_markers.markers.models import EventKind, REFRESH_EVENTS
from block_markers.runtime import telemetry

DEFAULT_REFRESH_EVENTS: Tuple[EventKind, ...] = (
    EventKind.TEXT_CHANGED,
    EventKind.TEXT_CHANGED_INSERT,
    EventKind.POST_SAVE,
    EventKind.INSERT_LEAVE,
)

InvalidHandler = Callable[[InvalidConfiguration], None]


@dataclass(slots=True)
class BlockMarkersConfig:
    """Options read once at setup; mutable afterwards."""

    auto_enable: bool = True
    refresh_events: Tuple[EventKind, ...] = DEFAULT_REFRESH_EVENTS
    language: str = "python"
    debounce_ms: int = 100
    namespace: str = "bmark"


def _check_bool(value: Any) -> Optional[bool]:
    return value if isinstance(value, bool) else None


def _check_name(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _check_language(value: Any) -> Optional[str]:
    # File-type tags are compared lowercased.
    name = _check_name(value)
    return name.lower() if name else None


def _check_delay(value: Any) -> Optional[int]:
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return value
    return None


_EXPECTED = {
    "auto_enable": "a boolean",
    "refresh_events": "a list of event names",
    "language": "a non-empty string",
    "debounce_ms": "a non-negative integer",
    "namespace": "a non-empty string",
}

_CHECKS = {
    "auto_enable": _check_bool,
    "language": _check_language,
    "debounce_ms": _check_delay,
    "namespace": _check_name,
}


def _warn(error: InvalidConfiguration, on_invalid: Optional[InvalidHandler]) -> None:
    telemetry.record_event(
        "config.invalid",
        level="warning",
        data={"field": error.field_name, "value": error.value},
    )
    if on_invalid is not None:
        on_invalid(error)


def _refresh_events(
    value: Any, on_invalid: Optional[InvalidHandler]
) -> Optional[Tuple[EventKind, ...]]:
    if isinstance(value, (str, bytes)) or not isinstance(
        value, (list, tuple, set, frozenset)
    ):
        return None
    events: list[EventKind] = []
    for item in value:
        try:
            kind = EventKind(item)
        except ValueError:
            kind = None
        if kind is None or kind not in REFRESH_EVENTS:
            _warn(
                InvalidConfiguration("refresh_events", item, "a known edit event"),
                on_invalid,
            )
            continue
        if kind not in events:
            events.append(kind)
    return tuple(events)


def defaults_from_env(
    on_invalid: Optional[InvalidHandler] = None,
) -> BlockMarkersConfig:
    """Defaults with ``BLOCK_MARKERS_*`` environment overrides applied."""

    config = BlockMarkersConfig()
    config.auto_enable = telemetry.env_flag("AUTO_ENABLE", config.auto_enable)
    language = _check_language(telemetry.env("LANGUAGE") or "")
    if language:
        config.language = language
    raw_delay = telemetry.env("DEBOUNCE_MS")
    if raw_delay is not None:
        try:
            delay = _check_delay(int(raw_delay))
        except ValueError:
            delay = None
        if delay is None:
            _warn(
                InvalidConfiguration("debounce_ms", raw_delay, _EXPECTED["debounce_ms"]),
                on_invalid,
            )
        else:
            config.debounce_ms = delay
    return config


def load_config(
    options: Optional[Mapping[str, Any]] = None,
    *,
    base: Optional[BlockMarkersConfig] = None,
    on_invalid: Optional[InvalidHandler] = None,
) -> BlockMarkersConfig:
    """Validate ``options`` field by field on top of ``base``.

    Wrong-typed values keep the base value for that field and are reported
    through ``on_invalid``; unknown keys are reported and ignored.
    """

    config = replace(base) if base is not None else defaults_from_env(on_invalid)
    if options is None:
        return config
    if not isinstance(options, Mapping):
        _warn(InvalidConfiguration("options", options, "a mapping"), on_invalid)
        return config
    known = {item.name for item in fields(BlockMarkersConfig)}
    for key, value in options.items():
        if key not in known:
            _warn(InvalidConfiguration(key, value, "a known option"), on_invalid)
            continue
        if key == "refresh_events":
            checked: Any = _refresh_events(value, on_invalid)
        else:
            checked = _CHECKS[key](value)
        if checked is None:
            _warn(InvalidConfiguration(key, value, _EXPECTED[key]), on_invalid)
            continue
        setattr(config, key, checked)
    return config


__all__ = [
    "BlockMarkersConfig",
    "DEFAULT_REFRESH_EVENTS",
    "defaults_from_env",
    "load_config",
]
