"""Diagnostics and structured logging utilities."""

from .audit import JsonlAuditLogger, UpdateEvent, utc_timestamp
from .diagnostics import (
    CollectingSink,
    Diagnostic,
    DiagnosticSink,
    NullSink,
    StreamSink,
    TeeSink,
    emit,
)

__all__ = [
    "CollectingSink",
    "Diagnostic",
    "DiagnosticSink",
    "JsonlAuditLogger",
    "NullSink",
    "StreamSink",
    "TeeSink",
    "UpdateEvent",
    "emit",
    "utc_timestamp",
]
