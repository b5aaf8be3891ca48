"""Makefile dialect rewriter for list-valued variables.

Only the most straightforward variable or target definitions are recognized,
i.e. ``var := value``, ``var = value`` or ``target: value``, and the value
must contain a single file per line with none on the first line::

    var = \\
          foo.cpp \\
          bar.cpp

The definition must be followed by a blank line.

Entries without an extension, such as ``$(EXTRA_OBJS)``, are never removed,
as they are expansions of other make variables rather than files.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import TextIO

from upmake.logging.diagnostics import (
    DUPLICATE_FILE,
    EXPECTED_BLANK_LINE,
    INCONSISTENT_INDENT,
    MISSING_TERMINATOR,
    MIXED_EXTENSIONS,
    NO_EXTENSION,
    UNSUPPORTED_FORMAT,
    DiagnosticSink,
    emit,
)
from upmake.rewriters.base import FileLists, split_line_ending
from upmake.rewriters.extensions import (
    get_extension,
    sort_lines,
    sorts_before,
    translate_extension,
)

_HEADER_RE = re.compile(r"^\s*(?P<var>[^\s:=]+)\s*(?::?=|:)(?P<tail>.*)")
_ENTRY_RE = re.compile(r"^(?P<indent>\s*)(?P<file>\S*[^\s\\])(?P<tail>\s*\\?)$")
_CONTINUATION_RE = re.compile(r"\s*\\$")

_OBJECTS_RE = re.compile(r"^(?:objects|obj)$", re.IGNORECASE)
_SUFFIXED_RE = re.compile(r"^(\w+)_(?:objects|obj|sources|src|headers|hdr)$", re.IGNORECASE)
_MAKE_VARIABLE_SUFFIX_RE = re.compile(r"^(\w+)\$\([^)]*\)")

DEFAULT_INDENT = "    "
DEFAULT_TAIL = " \\"

ResolutionRule = Callable[[str, FileLists], str | None]


def _defined(name: str, file_lists: FileLists) -> str | None:
    return name if name in file_lists else None


def match_exact(name: str, file_lists: FileLists) -> str | None:
    """Resolve a name that is itself a defined list."""
    return _defined(name, file_lists)


def match_objects_alias(name: str, file_lists: FileLists) -> str | None:
    """Resolve ``objects``/``obj`` to ``sources``: lists hold sources, not objects."""
    if _OBJECTS_RE.match(name) is None:
        return None
    return _defined("sources", file_lists)


def match_suffixed_name(name: str, file_lists: FileLists) -> str | None:
    """Resolve ``foo_objects``, ``foo_src``, ``foo_hdr``... to ``foo`` or ``foo_sources``."""
    match = _SUFFIXED_RE.match(name)
    if match is None:
        return None
    prefix = match.group(1)
    return _defined(prefix, file_lists) or _defined(f"{prefix}_sources", file_lists)


def match_make_variable_suffix(name: str, file_lists: FileLists) -> str | None:
    """Resolve targets such as ``prog$(EXEEXT)`` to ``prog``."""
    match = _MAKE_VARIABLE_SUFFIX_RE.match(name)
    if match is None:
        return None
    return _defined(match.group(1), file_lists)


RESOLUTION_RULES: tuple[ResolutionRule, ...] = (
    match_exact,
    match_objects_alias,
    match_suffixed_name,
    match_make_variable_suffix,
)


def resolve_variable_name(name: str, file_lists: FileLists) -> str | None:
    """Map a makefile variable or target name to a file list name, if any.

    The first rule yielding a defined list wins. The alias rules match
    disjoint name shapes, so a name whose shape matches but whose list is
    missing is left unresolved.
    """
    for rule in RESOLUTION_RULES:
        resolved = rule(name, file_lists)
        if resolved is not None:
            return resolved
    return None


@dataclass(slots=True)
class BlockState:
    """Scan state of one variable definition."""

    variable: str
    presence: dict[str, bool]
    source_ext: str | None
    newline: str
    make_ext: str | None = None
    indent: str | None = None
    # Tail (spaces and backslash) of normal lines and of the last line, which
    # may not have the backslash.
    tail: str | None = None
    last_tail: str | None = None
    is_sorted: bool = True
    removed: bool = False
    values: list[str] = field(default_factory=list)
    raw_lines: list[str] = field(default_factory=list)


def update_makefile(
    in_stream: TextIO,
    out_stream: TextIO,
    file_lists: FileLists,
    sink: DiagnosticSink | None = None,
) -> bool:
    """Update list variables in a makefile from ``file_lists``.

    Copies ``in_stream`` to ``out_stream`` line by line, rewriting the body of
    every recognized variable so that it contains exactly the files of the
    corresponding list. Returns True if any changes were made.
    """
    changed = False
    block: BlockState | None = None
    line_number = 0
    for line_number, raw in enumerate(in_stream, start=1):
        text, ending = split_line_ending(raw)

        if block is not None:
            entry = _ENTRY_RE.match(text)
            if entry is not None:
                _consume_entry(block, raw, text, entry, line_number, sink)
                continue

            if text.strip():
                emit(
                    sink,
                    EXPECTED_BLANK_LINE,
                    f'Expected blank line after the definition of the variable "{block.variable}".',
                    line_number,
                    block.variable,
                )
            values, block_changed = _finish_block(block)
            if block_changed:
                changed = True
                out_stream.writelines(value + block.newline for value in values)
            else:
                out_stream.writelines(block.raw_lines)
            block = None

        header = _HEADER_RE.match(text)
        if header is not None:
            block = _start_block(header, ending or "\n", line_number, file_lists, sink)

        out_stream.write(raw)

    if block is not None:
        emit(
            sink,
            MISSING_TERMINATOR,
            f'Definition of the variable "{block.variable}" is not followed by a blank line, '
            "leaving it unchanged.",
            line_number,
            block.variable,
        )
        out_stream.writelines(block.raw_lines)

    return changed


def _start_block(
    header: re.Match[str],
    newline: str,
    line_number: int,
    file_lists: FileLists,
    sink: DiagnosticSink | None,
) -> BlockState | None:
    variable = resolve_variable_name(header.group("var"), file_lists)
    if variable is None:
        return None
    if _CONTINUATION_RE.search(header.group("tail")) is None:
        emit(
            sink,
            UNSUPPORTED_FORMAT,
            f'Unsupported format for variable "{variable}".',
            line_number,
            variable,
        )
        return None

    files = file_lists[variable]
    # All files in one list are assumed to share the extension of the first.
    return BlockState(
        variable=variable,
        presence=dict.fromkeys(files, False),
        source_ext=get_extension(files[0]) if files else None,
        newline=newline,
    )


def _consume_entry(
    block: BlockState,
    raw: str,
    text: str,
    entry: re.Match[str],
    line_number: int,
    sink: DiagnosticSink | None,
) -> None:
    indent = entry.group("indent")
    name = entry.group("file")
    tail = entry.group("tail")

    if block.indent is None:
        block.indent = indent
    elif indent != block.indent:
        emit(
            sink,
            INCONSISTENT_INDENT,
            f'Inconsistent indent in the definition of the variable "{block.variable}".',
            line_number,
            block.variable,
        )

    block.last_tail = tail
    if block.tail is None:
        block.tail = tail
    block.raw_lines.append(raw)

    file_ext = get_extension(name)
    if file_ext is None:
        canonical = name
        if canonical not in block.presence:
            emit(
                sink,
                NO_EXTENSION,
                f'Value "{name}" of the variable "{block.variable}" has no extension, '
                "keeping it.",
                line_number,
                block.variable,
            )
    else:
        if block.make_ext is None:
            block.make_ext = file_ext
        elif file_ext != block.make_ext:
            emit(
                sink,
                MIXED_EXTENSIONS,
                f'Values of variable "{block.variable}" use both "{file_ext}" '
                f'and "{block.make_ext}" extensions.',
                line_number,
                block.variable,
            )
        canonical = translate_extension(name, file_ext, block.source_ext)
        if canonical not in block.presence:
            block.removed = True
            return

    if canonical in block.presence:
        if block.presence[canonical]:
            emit(
                sink,
                DUPLICATE_FILE,
                f'Duplicate file "{canonical}" in the definition of the variable '
                f'"{block.variable}".',
                line_number,
                block.variable,
            )
        else:
            block.presence[canonical] = True

    if block.values and sorts_before(text, block.values[-1]):
        block.is_sorted = False
    block.values.append(text)


def _finish_block(block: BlockState) -> tuple[list[str], bool]:
    values = block.values
    new_files = [name for name, seen in block.presence.items() if not seen]

    if new_files:
        tail = block.tail if block.tail and block.tail.endswith("\\") else DEFAULT_TAIL
        indent = block.indent if block.indent is not None else DEFAULT_INDENT

        # The previous last line may not have had the continuation marker.
        if values and not values[-1].endswith("\\"):
            values[-1] += tail

        for name in new_files:
            name = translate_extension(name, block.source_ext, block.make_ext)
            values.append(f"{indent}{name}{tail}")

        if block.is_sorted:
            values = sort_lines(values)

    changed = bool(new_files) or block.removed
    if changed and values:
        last_tail = block.last_tail or ""
        values[-1] = _CONTINUATION_RE.sub(lambda _: last_tail, values[-1], count=1)
    return values, changed


class MakefileRewriter:
    """Rewriter for traditional makefiles."""

    name = "makefile"
    _suffixes = (".mk", ".mak", ".make")

    def supports_path(self, path: str) -> bool:
        """Return True for ``Makefile``, ``GNUmakefile``, ``makefile.*`` and ``*.mk``."""
        base = PurePath(path).name.lower()
        if base in ("makefile", "gnumakefile"):
            return True
        if base.startswith(("makefile.", "gnumakefile.")):
            return True
        return base.endswith(self._suffixes)

    def update(
        self,
        in_stream: TextIO,
        out_stream: TextIO,
        file_lists: FileLists,
        sink: DiagnosticSink | None = None,
    ) -> bool:
        """Rewrite makefile list variables."""
        return update_makefile(in_stream, out_stream, file_lists, sink)
