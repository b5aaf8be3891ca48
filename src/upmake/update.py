"""Apply a rewriter to a build file on disk and report the outcome."""

from __future__ import annotations

import difflib
import io
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from upmake.logging.diagnostics import CollectingSink, DiagnosticSink, TeeSink
from upmake.rewriters.base import FileLists, Updater

TEMP_SUFFIX = ".upmake.new"


@dataclass(slots=True, frozen=True)
class UpdateOptions:
    """How to apply an update to one file."""

    path: Path
    verbose: bool = False
    quiet: bool = False
    dry_run: bool = False


@dataclass(slots=True, frozen=True)
class UpdateResult:
    """Outcome of applying an update to one file."""

    path: str
    changed: bool
    written: bool
    dry_run: bool
    diff: str | None
    warnings: tuple[str, ...]


def upmake(
    options: UpdateOptions | Path | str,
    updater: Updater,
    file_lists: FileLists,
    *,
    sink: DiagnosticSink | None = None,
    out_stream: TextIO | None = None,
) -> UpdateResult:
    """Update a file in place using ``updater``.

    The new contents are written to a temporary file next to the original
    which replaces it only if the updater reports a change. In dry-run mode
    the file is never touched and only whether it would have been updated is
    reported, along with the diff when ``verbose`` is also set.
    """
    if not isinstance(options, UpdateOptions):
        options = UpdateOptions(path=Path(options))
    report = out_stream if out_stream is not None else sys.stdout
    collected = CollectingSink()
    active_sink: DiagnosticSink = collected if sink is None else TeeSink((collected, sink))

    if options.dry_run:
        return _dry_run(options, updater, file_lists, active_sink, collected, report)

    path = options.path
    temp_path = path.with_name(path.name + TEMP_SUFFIX)
    try:
        with path.open("r", encoding="utf-8", newline="") as in_handle:
            with temp_path.open("w", encoding="utf-8", newline="") as out_handle:
                changed = updater(in_handle, out_handle, file_lists, active_sink)
    except Exception:
        temp_path.unlink(missing_ok=True)
        raise

    if changed:
        temp_path.replace(path)
        if not options.quiet:
            report.write(f'File "{path}" successfully updated.\n')
    else:
        temp_path.unlink()
        if options.verbose:
            report.write(f'No changes in the file "{path}".\n')

    return UpdateResult(
        path=str(path),
        changed=changed,
        written=changed,
        dry_run=False,
        diff=None,
        warnings=tuple(collected.messages()),
    )


def render_diff(old: str, new: str, path: str) -> str:
    """Return a unified diff between the old and new file contents."""
    return "".join(
        difflib.unified_diff(
            old.splitlines(keepends=True),
            new.splitlines(keepends=True),
            fromfile=path,
            tofile=f"{path}.new",
        )
    )


def _dry_run(
    options: UpdateOptions,
    updater: Updater,
    file_lists: FileLists,
    sink: DiagnosticSink,
    collected: CollectingSink,
    report: TextIO,
) -> UpdateResult:
    path = options.path
    with path.open("r", encoding="utf-8", newline="") as handle:
        old = handle.read()
    new_stream = io.StringIO(newline="")
    changed = updater(io.StringIO(old, newline=""), new_stream, file_lists, sink)
    new = new_stream.getvalue()

    diff: str | None = None
    if changed:
        if options.verbose:
            diff = render_diff(old, new, str(path))
            report.write(f'Would update "{path}" with the following changes:\n')
            report.write(diff)
        else:
            report.write(f'Would update "{path}".\n')
    else:
        report.write(f"Wouldn't change the file \"{path}\".\n")

    return UpdateResult(
        path=str(path),
        changed=changed,
        written=False,
        dry_run=True,
        diff=diff,
        warnings=tuple(collected.messages()),
    )
