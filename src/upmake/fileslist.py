"""Reader for the master files list.

The format is deliberately simple: whitespace is significant and there must
always be a single file per line::

    # Comments are allowed and ignored.
    sources =
        file1.cpp
        file2.cpp

    headers =
        file1.h
        file2.h

    # Variables may be defined in terms of variables defined before them
    # (no forward references):
    everything =
        $sources
        $headers
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import TextIO

_COMMENT_RE = re.compile(r"#.*$")
_DEFINITION_RE = re.compile(r"^(\w+)\s*=$")
_REFERENCE_RE = re.compile(r"^\$(\w+)$")


class FilesListError(ValueError):
    """Raised when the files list cannot be parsed."""

    def __init__(self, message: str, line: int) -> None:
        super().__init__(message)
        self.line = line


def read_files_list(stream: TextIO) -> dict[str, list[str]]:
    """Parse a files list into a mapping of variable names to file names.

    Variables whose definition contains no files are left out of the result.
    """
    variables: dict[str, list[str]] = {}
    defined: set[str] = set()
    current: str | None = None
    for line_number, raw in enumerate(stream, start=1):
        line = _COMMENT_RE.sub("", raw.rstrip("\r\n")).strip()
        if not line:
            continue

        definition = _DEFINITION_RE.match(line)
        if definition is not None:
            current = definition.group(1)
            defined.add(current)
            continue

        if current is None:
            raise FilesListError(
                f"Unexpected contents outside variable definition at line {line_number}.",
                line_number,
            )

        reference = _REFERENCE_RE.match(line)
        if reference is None:
            variables.setdefault(current, []).append(line)
            continue

        name = reference.group(1)
        if name not in defined:
            raise FilesListError(
                f'Reference to undefined variable "{name}" in the assignment to '
                f'"{current}" at line {line_number}.',
                line_number,
            )
        referenced = variables.get(name)
        if referenced:
            variables.setdefault(current, []).extend(referenced)

    return variables


def load_files_list(path: Path) -> dict[str, list[str]]:
    """Read the files list stored at ``path``."""
    with path.open("r", encoding="utf-8") as handle:
        return read_files_list(handle)
