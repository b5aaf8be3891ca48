"""Non-fatal diagnostics reported while rewriting build files."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, TextIO

INCONSISTENT_INDENT = "INCONSISTENT_INDENT"
MIXED_EXTENSIONS = "MIXED_EXTENSIONS"
NO_EXTENSION = "NO_EXTENSION"
DUPLICATE_FILE = "DUPLICATE_FILE"
UNSUPPORTED_FORMAT = "UNSUPPORTED_FORMAT"
EXPECTED_BLANK_LINE = "EXPECTED_BLANK_LINE"
MISSING_TERMINATOR = "MISSING_TERMINATOR"


@dataclass(slots=True, frozen=True)
class Diagnostic:
    """Single structural warning tied to an input line."""

    code: str
    message: str
    line: int
    variable: str | None = None

    def render(self) -> str:
        """Return the human readable form used by stream sinks."""
        return f"{self.message} (line {self.line})"


class DiagnosticSink(Protocol):
    """Receiver for warnings emitted by rewriters."""

    def warn(self, diagnostic: Diagnostic) -> None:
        """Record one diagnostic."""


@dataclass(slots=True)
class CollectingSink:
    """Sink keeping diagnostics in memory, in emission order."""

    diagnostics: list[Diagnostic] = field(default_factory=list)

    def warn(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)

    def codes(self) -> list[str]:
        """Return collected diagnostic codes."""
        return [diagnostic.code for diagnostic in self.diagnostics]

    def messages(self) -> list[str]:
        """Return rendered messages."""
        return [diagnostic.render() for diagnostic in self.diagnostics]


class StreamSink:
    """Sink writing one ``warning:`` line per diagnostic to a text stream."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream

    def warn(self, diagnostic: Diagnostic) -> None:
        self._stream.write(f"warning: {diagnostic.render()}\n")


class NullSink:
    """Sink discarding everything."""

    def warn(self, diagnostic: Diagnostic) -> None:
        _ = diagnostic


@dataclass(slots=True)
class TeeSink:
    """Forward each diagnostic to several sinks."""

    sinks: tuple[DiagnosticSink, ...]

    def warn(self, diagnostic: Diagnostic) -> None:
        for sink in self.sinks:
            sink.warn(diagnostic)


def emit(
    sink: DiagnosticSink | None,
    code: str,
    message: str,
    line: int,
    variable: str | None = None,
) -> None:
    """Send a diagnostic to ``sink`` unless it is None."""
    if sink is None:
        return
    sink.warn(Diagnostic(code=code, message=message, line=line, variable=variable))
