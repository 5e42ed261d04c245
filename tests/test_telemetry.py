from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest

from block_markers.adapters.textual.app import _parse_args
from block_markers.runtime import telemetry


@pytest.fixture(autouse=True)
def restore_default_config(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.delenv("BLOCK_MARKERS_LOG_PRESET", raising=False)
    yield
    telemetry.configure()


def test_preset_replaces_active_config_and_loggers() -> None:
    before = telemetry.active_config()
    logger = telemetry.get_logger("block_markers.tests")

    telemetry.configure(preset="development")

    assert telemetry.active_config() is not before
    assert telemetry.get_logger("block_markers.tests") is not logger


def test_unknown_preset_is_rejected() -> None:
    with pytest.raises(ValueError):
        telemetry.configure(preset="chatty")


def test_config_and_preset_are_exclusive() -> None:
    with pytest.raises(ValueError):
        telemetry.configure(config=telemetry.active_config(), preset="development")


def test_events_still_record_after_preset() -> None:
    telemetry.configure(preset="development")

    telemetry.record_event("tests.preset", data={"preset": "development"})
    with telemetry.span("tests::span", component=True) as handle:
        handle.add_metadata("ok", True)

    assert handle.metadata == {"ok": "True"}


def test_cli_selects_log_preset() -> None:
    args = _parse_args(["example.py", "--log-preset", "development"])

    assert args.log_preset == "development"
    assert args.path == Path("example.py")


def test_cli_reads_log_preset_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BLOCK_MARKERS_LOG_PRESET", "performance")

    assert _parse_args(["example.py"]).log_preset == "performance"


def test_cli_rejects_unknown_preset() -> None:
    with pytest.raises(SystemExit):
        _parse_args(["example.py", "--log-preset", "chatty"])


def test_cli_defaults_to_environment_configuration() -> None:
    assert _parse_args(["example.py"]).log_preset is None
