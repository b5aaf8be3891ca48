"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, replace
from pathlib import Path

from upmake.rewriters.runtime import KNOWN_FORMATS

CONFIG_FILE_NAME = "upmake.toml"
DEFAULT_FILES_LIST = "files.lst"


@dataclass(slots=True, frozen=True)
class TargetConfig:
    """Build file to update and, optionally, its dialect."""

    path: Path
    format: str | None = None


@dataclass(slots=True, frozen=True)
class OutputConfig:
    """Reporting settings."""

    verbose: bool = False
    quiet: bool = False
    dry_run: bool = False


@dataclass(slots=True, frozen=True)
class UpmakeConfig:
    """Fully merged configuration."""

    project_root: Path
    files_list: Path
    targets: tuple[TargetConfig, ...]
    output: OutputConfig
    audit_log: Path | None


@dataclass(slots=True, frozen=True)
class CliOverrides:
    """Optional command line overrides applied at highest precedence."""

    files_list: Path | None = None
    targets: tuple[Path, ...] | None = None
    format: str | None = None
    verbose: bool | None = None
    quiet: bool | None = None
    dry_run: bool | None = None
    audit_log: Path | None = None


def default_config(project_root: Path) -> UpmakeConfig:
    """Build default config for a given project root."""
    resolved_root = project_root.resolve()
    return UpmakeConfig(
        project_root=resolved_root,
        files_list=resolved_root / DEFAULT_FILES_LIST,
        targets=(),
        output=OutputConfig(),
        audit_log=None,
    )


def load_config_file(project_root: Path) -> dict[str, object]:
    """Load optional upmake.toml from the project root."""
    config_path = project_root / CONFIG_FILE_NAME
    if not config_path.exists():
        return {}
    with config_path.open("rb") as handle:
        payload = tomllib.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{CONFIG_FILE_NAME} must contain a top-level table.")
    return payload


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a table.")
    return value


def _optional_bool(value: object, name: str, default: bool) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValueError(f"Config field '{name}' must be a boolean.")
    return value


def _optional_path(value: object, name: str, root: Path) -> Path | None:
    if value is None:
        return None
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Config field '{name}' must be a non-empty string.")
    return _resolve_path(root, Path(value))


def _resolve_path(root: Path, path: Path) -> Path:
    if path.is_absolute():
        return path
    return root / path


def _validate_format(value: object, name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str) or value not in KNOWN_FORMATS:
        raise ValueError(f"Config field '{name}' must be one of {', '.join(KNOWN_FORMATS)}.")
    return value


def _targets(value: object, root: Path) -> tuple[TargetConfig, ...]:
    if not isinstance(value, list):
        raise ValueError("Config field 'targets' must be an array of tables.")
    output: list[TargetConfig] = []
    for index, item in enumerate(value):
        if not isinstance(item, dict):
            raise ValueError(f"Config field 'targets[{index}]' must be a table.")
        path = _optional_path(item.get("path"), f"targets[{index}].path", root)
        if path is None:
            raise ValueError(f"Config field 'targets[{index}].path' is required.")
        output.append(
            TargetConfig(
                path=path,
                format=_validate_format(item.get("format"), f"targets[{index}].format"),
            )
        )
    return tuple(output)


def merge_config(
    base: UpmakeConfig, payload: dict[str, object], overrides: CliOverrides
) -> UpmakeConfig:
    """Merge defaults, project config, then command line overrides."""
    root = base.project_root
    output_payload = _get_table(payload, "output")

    files_list = _optional_path(payload.get("files_list"), "files_list", root) or base.files_list
    audit_log = _optional_path(payload.get("audit_log"), "audit_log", root) or base.audit_log
    targets = base.targets
    if "targets" in payload:
        targets = _targets(payload["targets"], root)

    output = OutputConfig(
        verbose=_optional_bool(
            output_payload.get("verbose"), "output.verbose", base.output.verbose
        ),
        quiet=_optional_bool(output_payload.get("quiet"), "output.quiet", base.output.quiet),
        dry_run=_optional_bool(
            output_payload.get("dry_run"), "output.dry_run", base.output.dry_run
        ),
    )

    merged = UpmakeConfig(
        project_root=root,
        files_list=files_list,
        targets=targets,
        output=output,
        audit_log=audit_log,
    )
    return apply_cli_overrides(merged, overrides)


def apply_cli_overrides(config: UpmakeConfig, overrides: CliOverrides) -> UpmakeConfig:
    """Apply command line overrides at highest precedence."""
    root = config.project_root
    fmt = _validate_format(overrides.format, "overrides.format")

    targets = config.targets
    if overrides.targets is not None:
        targets = tuple(
            TargetConfig(path=_resolve_path(root, path)) for path in overrides.targets
        )
    if fmt is not None:
        targets = tuple(replace(target, format=fmt) for target in targets)

    output = OutputConfig(
        verbose=overrides.verbose if overrides.verbose is not None else config.output.verbose,
        quiet=overrides.quiet if overrides.quiet is not None else config.output.quiet,
        dry_run=overrides.dry_run if overrides.dry_run is not None else config.output.dry_run,
    )
    files_list = config.files_list
    if overrides.files_list is not None:
        files_list = _resolve_path(root, overrides.files_list)
    audit_log = config.audit_log
    if overrides.audit_log is not None:
        audit_log = _resolve_path(root, overrides.audit_log)

    return UpmakeConfig(
        project_root=root,
        files_list=files_list,
        targets=targets,
        output=output,
        audit_log=audit_log,
    )


def load_effective_config(
    project_root: Path, overrides: CliOverrides | None = None
) -> UpmakeConfig:
    """Load effective config using merge order defaults -> upmake.toml -> overrides."""
    resolved_root = project_root.resolve()
    base = default_config(resolved_root)
    payload = load_config_file(resolved_root)
    return merge_config(base, payload, overrides or CliOverrides())
