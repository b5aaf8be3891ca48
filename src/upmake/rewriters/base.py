"""Shared rewriter contract and type aliases."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Protocol, TextIO

from upmake.logging.diagnostics import DiagnosticSink

FileLists = Mapping[str, Sequence[str]]

Updater = Callable[[TextIO, TextIO, FileLists, DiagnosticSink | None], bool]


class Rewriter(Protocol):
    """Protocol implemented by build file dialect rewriters."""

    name: str

    def supports_path(self, path: str) -> bool:
        """Return True when the rewriter handles files like ``path``."""

    def update(
        self,
        in_stream: TextIO,
        out_stream: TextIO,
        file_lists: FileLists,
        sink: DiagnosticSink | None = None,
    ) -> bool:
        """Copy ``in_stream`` to ``out_stream`` rewriting known variables.

        Returns True when any variable block was modified.
        """


def split_line_ending(raw: str) -> tuple[str, str]:
    """Split a raw line into its text and its line terminator."""
    text = raw.rstrip("\r\n")
    return text, raw[len(text) :]
