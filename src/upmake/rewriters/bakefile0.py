"""Bakefile-0 rewriter for ``<set var="..." hints="files">`` file lists."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TextIO

from upmake.logging.diagnostics import (
    DUPLICATE_FILE,
    MISSING_TERMINATOR,
    DiagnosticSink,
    emit,
)
from upmake.rewriters.base import FileLists, split_line_ending

_SET_RE = re.compile(r'<set var="(\w+)" hints="files">')
_COMMENT_RE = re.compile(r"<!-- .* -->")
_IF_OPEN_RE = re.compile(r"<if [^>]+>")
_IF_CLOSE_RE = re.compile(r"</if>")
_SET_CLOSE_RE = re.compile(r"</set>")

NEW_FILE_INDENT = "    "

_KEEP = "keep"
_DROP = "drop"
_INSERT = "insert"


@dataclass(slots=True)
class SetBlockState:
    """Scan state of one ``<set>`` element."""

    variable: str
    presence: dict[str, bool]
    start_line: int
    newline: str
    seen_any_files: bool = False
    # When the whole list is wrapped in <if>, new files go before its </if>.
    wrapped_in_if: bool = False
    if_nesting_level: int = 0
    changed: bool = False
    output: list[str] = field(default_factory=list)
    raw_lines: list[str] = field(default_factory=list)


def update_bakefile_0(
    in_stream: TextIO,
    out_stream: TextIO,
    file_lists: FileLists,
    sink: DiagnosticSink | None = None,
) -> bool:
    """Update file lists in a bakefile-0 file from ``file_lists``.

    New files are appended in the order of the list, before the closing
    ``</set>`` or, for lists entirely wrapped in an ``<if>``, before the
    closing ``</if>``. Existing entries are never re-sorted.

    Returns True if any changes were made.
    """
    changed = False
    block: SetBlockState | None = None
    line_number = 0
    for line_number, raw in enumerate(in_stream, start=1):
        text, ending = split_line_ending(raw)

        header = _SET_RE.search(text)
        if header is not None:
            if block is not None:
                _abandon_block(block, out_stream, line_number, sink)
                block = None
            variable = header.group(1)
            if variable in file_lists:
                block = SetBlockState(
                    variable=variable,
                    presence=dict.fromkeys(file_lists[variable], False),
                    start_line=line_number,
                    newline=ending or "\n",
                )
            out_stream.write(raw)
            continue

        if block is None:
            out_stream.write(raw)
            continue

        block.raw_lines.append(raw)
        action = _classify_line(block, text, line_number, sink)
        if action == _DROP:
            block.changed = True
            continue
        if action == _INSERT:
            _append_new_files(block)
            block.output.append(raw)
            changed = changed or block.changed
            out_stream.writelines(block.output)
            block = None
            continue
        block.output.append(raw)

    if block is not None:
        _abandon_block(block, out_stream, line_number, sink)

    return changed


def _classify_line(
    block: SetBlockState,
    text: str,
    line_number: int,
    sink: DiagnosticSink | None,
) -> str:
    """Return what to do with one body line of the current block."""
    content = _COMMENT_RE.sub("", text).strip()

    if _IF_OPEN_RE.search(content):
        if not block.seen_any_files:
            block.wrapped_in_if = True
        block.if_nesting_level += 1
        return _KEEP

    if _IF_CLOSE_RE.search(content):
        block.if_nesting_level -= 1
        if block.if_nesting_level == 0 and block.wrapped_in_if:
            return _INSERT
        return _KEEP

    if _SET_CLOSE_RE.search(content):
        return _INSERT

    if not content:
        return _KEEP

    block.seen_any_files = True
    if content not in block.presence:
        return _DROP
    if block.presence[content]:
        emit(
            sink,
            DUPLICATE_FILE,
            f'Duplicate file "{content}" in the definition of the variable "{block.variable}".',
            line_number,
            block.variable,
        )
    else:
        block.presence[content] = True
    return _KEEP


def _append_new_files(block: SetBlockState) -> None:
    for name, seen in block.presence.items():
        if seen:
            continue
        block.output.append(f"{NEW_FILE_INDENT}{name}{block.newline}")
        block.changed = True


def _abandon_block(
    block: SetBlockState,
    out_stream: TextIO,
    line_number: int,
    sink: DiagnosticSink | None,
) -> None:
    emit(
        sink,
        MISSING_TERMINATOR,
        f'Definition of the variable "{block.variable}" started at line {block.start_line} '
        "is not closed, leaving it unchanged.",
        line_number,
        block.variable,
    )
    out_stream.writelines(block.raw_lines)


class Bakefile0Rewriter:
    """Rewriter for bakefile-0 ``.bkl`` files."""

    name = "bakefile0"

    def supports_path(self, path: str) -> bool:
        """Return True when path is a ``.bkl`` file."""
        return path.lower().endswith(".bkl")

    def update(
        self,
        in_stream: TextIO,
        out_stream: TextIO,
        file_lists: FileLists,
        sink: DiagnosticSink | None = None,
    ) -> bool:
        """Rewrite bakefile-0 file lists."""
        return update_bakefile_0(in_stream, out_stream, file_lists, sink)
