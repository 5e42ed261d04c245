from __future__ import annotations

from typing import List

import pytest

from block_markers.config import (
    DEFAULT_REFRESH_EVENTS,
    BlockMarkersConfig,
    defaults_from_env,
    load_config,
)
from block_markers.errors import InvalidConfiguration
from block_markers.host import MemoryHost
from block_markers.markers import EventKind
from block_markers.plugin import setup


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("AUTO_ENABLE", "DEBOUNCE_MS", "LANGUAGE"):
        monkeypatch.delenv(f"BLOCK_MARKERS_{name}", raising=False)


def collect() -> tuple[List[InvalidConfiguration], object]:
    errors: List[InvalidConfiguration] = []
    return errors, errors.append


def test_defaults() -> None:
    config = load_config()

    assert config.auto_enable is True
    assert config.refresh_events == (
        EventKind.TEXT_CHANGED,
        EventKind.TEXT_CHANGED_INSERT,
        EventKind.POST_SAVE,
        EventKind.INSERT_LEAVE,
    )
    assert config.language == "python"
    assert config.debounce_ms == 100
    assert config.namespace == "bmark"


def test_valid_options_apply() -> None:
    config = load_config(
        {
            "auto_enable": False,
            "refresh_events": ["post-save", "insert-leave", "post-save"],
            "debounce_ms": 0,
        }
    )

    assert config.auto_enable is False
    assert config.refresh_events == (EventKind.POST_SAVE, EventKind.INSERT_LEAVE)
    assert config.debounce_ms == 0


def test_wrong_types_fall_back_to_defaults() -> None:
    errors, on_invalid = collect()

    config = load_config(
        {"auto_enable": "yes", "refresh_events": "text-changed", "debounce_ms": True},
        on_invalid=on_invalid,
    )

    assert config.auto_enable is True
    assert config.refresh_events == DEFAULT_REFRESH_EVENTS
    assert config.debounce_ms == 100
    assert [error.field_name for error in errors] == [
        "auto_enable",
        "refresh_events",
        "debounce_ms",
    ]


def test_unknown_event_names_are_dropped() -> None:
    errors, on_invalid = collect()

    config = load_config(
        {"refresh_events": ["post-save", "buffer-closed", "bogus"]},
        on_invalid=on_invalid,
    )

    assert config.refresh_events == (EventKind.POST_SAVE,)
    assert [error.value for error in errors] == ["buffer-closed", "bogus"]


def test_unknown_option_is_reported() -> None:
    errors, on_invalid = collect()

    load_config({"colour": "red"}, on_invalid=on_invalid)

    assert errors[0].field_name == "colour"


def test_base_config_is_not_mutated() -> None:
    base = BlockMarkersConfig(debounce_ms=5)

    config = load_config({"debounce_ms": 50}, base=base)

    assert config.debounce_ms == 50
    assert base.debounce_ms == 5


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BLOCK_MARKERS_AUTO_ENABLE", "0")
    monkeypatch.setenv("BLOCK_MARKERS_DEBOUNCE_MS", "250")

    config = defaults_from_env()

    assert config.auto_enable is False
    assert config.debounce_ms == 250


def test_bad_environment_value_is_reported(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BLOCK_MARKERS_DEBOUNCE_MS", "soon")
    errors, on_invalid = collect()

    config = defaults_from_env(on_invalid)

    assert config.debounce_ms == 100
    assert errors[0].field_name == "debounce_ms"


def test_setup_survives_invalid_options() -> None:
    host = MemoryHost()

    plugin = setup(host, {"auto_enable": 3, "debounce_ms": -1})

    assert plugin.config.auto_enable is True
    assert plugin.config.debounce_ms == 100
    assert len(host.notifications) == 2
    assert all(level == "warning" for level, _message in host.notifications)


def test_language_is_normalised_to_lowercase() -> None:
    config = load_config({"language": " Python "})

    assert config.language == "python"


def test_mixed_case_language_still_enables_python_buffers() -> None:
    host = MemoryHost()
    buffer = host.open_buffer("\ndef f():", name="example.py")
    plugin = setup(host, {"language": "Python", "auto_enable": False})

    assert plugin.scheduler.enable(buffer) is True
    assert plugin.overlay.snapshot(buffer) == {0: "~" * 100}


def test_environment_language_is_lowercased(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BLOCK_MARKERS_LANGUAGE", "PYTHON")

    assert defaults_from_env().language == "python"


def test_negative_environment_delay_is_reported(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BLOCK_MARKERS_DEBOUNCE_MS", "-5")
    errors, on_invalid = collect()

    config = defaults_from_env(on_invalid)

    assert config.debounce_ms == 100
    assert errors[0].field_name == "debounce_ms"
    assert errors[0].value == "-5"


def test_non_mapping_options_fall_back_to_defaults() -> None:
    errors, on_invalid = collect()

    config = load_config(["auto_enable"], on_invalid=on_invalid)  # type: ignore[arg-type]

    assert config == BlockMarkersConfig()
    assert errors[0].field_name == "options"


def test_setup_survives_non_mapping_options() -> None:
    host = MemoryHost()

    plugin = setup(host, ["auto_enable"])  # type: ignore[arg-type]

    assert plugin.config.auto_enable is True
    assert host.notifications == [
        ("warning", "Block markers: Invalid value ['auto_enable'] for option 'options' (expected a mapping)")
    ]
