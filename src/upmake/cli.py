"""Command line entrypoint."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from upmake.config import CliOverrides, UpmakeConfig, load_effective_config
from upmake.fileslist import load_files_list
from upmake.logging import JsonlAuditLogger, StreamSink, UpdateEvent, utc_timestamp
from upmake.rewriters import KNOWN_FORMATS, Rewriter, RewriterRegistry, build_rewriter_registry
from upmake.update import UpdateOptions, upmake

EXIT_OK = 0
EXIT_UPDATE_FAILED = 1
EXIT_USAGE = 2


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for the upmake command."""
    parser = argparse.ArgumentParser(
        prog="upmake",
        description="Update lists of files in makefiles and bakefiles from a master list.",
    )
    parser.add_argument("targets", nargs="*", metavar="TARGET", help="build files to update")
    parser.add_argument("--project-root", required=False, default=".")
    parser.add_argument("--files-list", required=False, default=None)
    parser.add_argument("--format", choices=KNOWN_FORMATS, required=False, default=None)
    parser.add_argument("--audit-log", required=False, default=None)
    parser.add_argument(
        "-n",
        "--dry-run",
        action="store_true",
        default=None,
        help="only report whether the files would be changed",
    )
    parser.add_argument("-v", "--verbose", action="store_true", default=None)
    parser.add_argument("-q", "--quiet", action="store_true", default=None)
    return parser


def plan_targets(
    config: UpmakeConfig, registry: RewriterRegistry
) -> list[tuple[Path, Rewriter]]:
    """Pair each configured target with the rewriter handling it."""
    plan: list[tuple[Path, Rewriter]] = []
    for target in config.targets:
        if target.format is not None:
            rewriter = registry.get(target.format)
        else:
            rewriter = registry.select(target.path.name)
        plan.append((target.path, rewriter))
    return plan


def main(argv: list[str] | None = None) -> int:
    """Entrypoint for the upmake command."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    overrides = CliOverrides(
        files_list=Path(args.files_list).resolve() if args.files_list is not None else None,
        targets=tuple(Path(target).resolve() for target in args.targets) or None,
        format=args.format,
        verbose=args.verbose,
        quiet=args.quiet,
        dry_run=args.dry_run,
        audit_log=Path(args.audit_log).resolve() if args.audit_log is not None else None,
    )

    try:
        config = load_effective_config(Path(args.project_root), overrides)
        file_lists = load_files_list(config.files_list)
        plan = plan_targets(config, build_rewriter_registry())
    except (ValueError, LookupError, OSError) as error:
        _error(str(error))
        return EXIT_USAGE
    if not plan:
        _error("No build files to update: pass them as arguments or list them in upmake.toml.")
        return EXIT_USAGE

    audit_logger = JsonlAuditLogger(config.audit_log) if config.audit_log is not None else None
    sink = StreamSink(sys.stderr)
    for path, rewriter in plan:
        options = UpdateOptions(
            path=path,
            verbose=config.output.verbose,
            quiet=config.output.quiet,
            dry_run=config.output.dry_run,
        )
        try:
            result = upmake(options, rewriter.update, file_lists, sink=sink)
        except OSError as error:
            _error(f'Failed to update "{path}": {error}')
            return EXIT_UPDATE_FAILED
        if audit_logger is not None:
            audit_logger.append(
                UpdateEvent(
                    timestamp=utc_timestamp(),
                    path=result.path,
                    rewriter=rewriter.name,
                    changed=result.changed,
                    written=result.written,
                    dry_run=result.dry_run,
                    warnings=list(result.warnings),
                )
            )
    return EXIT_OK


def _error(message: str) -> None:
    print(f"error: {message}", file=sys.stderr)


if __name__ == "__main__":
    raise SystemExit(main())
