import pytest

from block_markers.host import MemoryHost
from block_markers.markers import detect_language, language_from_shebang


def detect(text: str = "", *, name: str = "", filetype: str = "") -> str:
    host = MemoryHost()
    buffer = host.open_buffer(text, name=name, filetype=filetype)
    return detect_language(host, buffer)


def test_filetype_tag_wins() -> None:
    assert detect(name="script.lua", filetype="Python") == "python"


@pytest.mark.parametrize("name", ["main.py", "stubs.pyi", "gui.PYW", "pkg/mod.py"])
def test_python_extensions(name: str) -> None:
    assert detect(name=name) == "python"


def test_other_extension_is_not_sniffed() -> None:
    assert detect("#!/usr/bin/env python3", name="notes.txt") == ""


@pytest.mark.parametrize(
    "line",
    [
        "#!/usr/bin/python",
        "#!/usr/bin/env python3",
        "#! /usr/bin/env -S python3.11",
        "#!/opt/pypy3/bin/pypy3",
    ],
)
def test_shebang_detection(line: str) -> None:
    assert language_from_shebang(line) == "python"
    assert detect(f"{line}\nprint('hi')", name="tool") == "python"


@pytest.mark.parametrize("line", ["#!/bin/sh", "#!/usr/bin/env", "import os", "", None])
def test_non_python_shebangs(line) -> None:
    assert language_from_shebang(line) is None


def test_unknown_buffer_has_no_language() -> None:
    assert detect("echo hi", name="Makefile") == ""
