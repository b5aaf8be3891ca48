"""File extension translation and case-insensitive ordering helpers."""

from __future__ import annotations

import re
from collections.abc import Iterable

# The "extension" may be a make variable, as in ``foo.$(obj)``, so it is not
# restricted to word characters.
_EXTENSION_RE = re.compile(r"\.[^\s./\\]+$")


def get_extension(name: str) -> str | None:
    """Return the extension of ``name`` including the dot, or None."""
    match = _EXTENSION_RE.search(name)
    if match is None:
        return None
    return match.group(0)


def replace_extension(name: str, old: str, new: str) -> str:
    """Replace a trailing ``old`` extension of ``name`` with ``new``."""
    if not name.endswith(old):
        return name
    return name[: len(name) - len(old)] + new


def translate_extension(name: str, from_ext: str | None, to_ext: str | None) -> str:
    """Translate ``name`` between extensions when both are known and differ."""
    if from_ext is None or to_ext is None or from_ext == to_ext:
        return name
    return replace_extension(name, from_ext, to_ext)


def sorts_before(line: str, previous: str) -> bool:
    """Return True when ``line`` sorts before ``previous`` ignoring case."""
    return line.lower() < previous.lower()


def sort_lines(lines: Iterable[str]) -> list[str]:
    """Sort lines case-insensitively, keeping the input order of ties."""
    return sorted(lines, key=str.lower)
