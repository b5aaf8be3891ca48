from __future__ import annotations

from pathlib import Path

from upmake.config import CliOverrides, TargetConfig, load_effective_config


def test_defaults_without_config_file(tmp_path: Path) -> None:
    config = load_effective_config(tmp_path)

    root = tmp_path.resolve()
    assert config.project_root == root
    assert config.files_list == root / "files.lst"
    assert config.targets == ()
    assert config.audit_log is None
    assert config.output.dry_run is False


def test_merge_order_defaults_then_project_then_cli(tmp_path: Path) -> None:
    (tmp_path / "upmake.toml").write_text(
        "\n".join(
            [
                'files_list = "build/files.lst"',
                "",
                "[output]",
                "verbose = true",
                "quiet = true",
                "",
                "[[targets]]",
                'path = "Makefile.in"',
                "",
                "[[targets]]",
                'path = "build/bakefiles/files.bkl"',
                'format = "bakefile0"',
            ]
        ),
        encoding="utf-8",
    )
    overrides = CliOverrides(quiet=False, dry_run=True)

    config = load_effective_config(tmp_path, overrides)

    root = tmp_path.resolve()
    assert config.files_list == root / "build" / "files.lst"
    assert config.output.verbose is True
    assert config.output.quiet is False
    assert config.output.dry_run is True
    assert config.targets == (
        TargetConfig(path=root / "Makefile.in"),
        TargetConfig(path=root / "build" / "bakefiles" / "files.bkl", format="bakefile0"),
    )


def test_cli_targets_replace_configured_ones_and_take_format(tmp_path: Path) -> None:
    (tmp_path / "upmake.toml").write_text(
        '[[targets]]\npath = "Makefile"\n', encoding="utf-8"
    )
    custom = (tmp_path / "custom.list").resolve()

    config = load_effective_config(
        tmp_path,
        CliOverrides(targets=(Path("other.txt"),), format="makefile", files_list=custom),
    )

    root = tmp_path.resolve()
    assert config.targets == (TargetConfig(path=root / "other.txt", format="makefile"),)
    assert config.files_list == custom


def test_audit_log_override_resolves_against_root(tmp_path: Path) -> None:
    config = load_effective_config(
        tmp_path, CliOverrides(audit_log=Path(".upmake/audit.jsonl"))
    )

    root = tmp_path.resolve()
    assert config.audit_log == root / ".upmake" / "audit.jsonl"
    assert config.targets == ()
    assert config.output.dry_run is False
