"""Buffer language detection: file-type tag, then extension, then shebang."""

from __future__ import annotations

import re
from pathlib import PurePath
from typing import TYPE_CHECKING, Mapping, Optional

from .models import BufferHandle

if TYPE_CHECKING:
    from block_markers.host.ports import BufferAccessor

EXTENSION_LANGUAGES: Mapping[str, str] = {
    ".py": "python",
    ".pyi": "python",
    ".pyw": "python",
}

SHEBANG_LANGUAGES: Mapping[str, str] = {
    "python": "python",
    "python2": "python",
    "python3": "python",
    "pypy": "python",
    "pypy3": "python",
}

_SHEBANG = re.compile(r"^#!\s*(?P<path>\S+)(?:\s+(?P<arg>.*))?$")
_VERSION_SUFFIX = re.compile(r"(\d+(\.\d+)*)$")


def language_from_shebang(first_line: Optional[str]) -> Optional[str]:
    """Resolve ``#!/usr/bin/python3`` and ``#!/usr/bin/env python3.11`` forms."""

    if not first_line:
        return None
    match = _SHEBANG.match(first_line.strip())
    if not match:
        return None
    program = PurePath(match.group("path")).name
    if program == "env":
        args = [arg for arg in (match.group("arg") or "").split() if not arg.startswith("-")]
        if not args:
            return None
        program = args[0]
    if program in SHEBANG_LANGUAGES:
        return SHEBANG_LANGUAGES[program]
    # python3.11 -> python3
    trimmed = _VERSION_SUFFIX.sub(lambda m: m.group(1).split(".")[0], program)
    return SHEBANG_LANGUAGES.get(trimmed)


def detect_language(accessor: "BufferAccessor", buffer: BufferHandle) -> str:
    """Return the buffer's language, or ``""`` when nothing matches."""

    filetype = accessor.get_filetype(buffer)
    if filetype:
        return filetype.lower()

    suffix = PurePath(accessor.get_name(buffer)).suffix.lower()
    if suffix:
        return EXTENSION_LANGUAGES.get(suffix, "")

    return language_from_shebang(accessor.get_line(buffer, 0)) or ""


__all__ = [
    "EXTENSION_LANGUAGES",
    "SHEBANG_LANGUAGES",
    "detect_language",
    "language_from_shebang",
]
