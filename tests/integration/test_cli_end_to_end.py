from __future__ import annotations

import json
from pathlib import Path

import pytest

from upmake.cli import main

FILES_LIST = "\n".join(
    [
        "# Master list of the project files.",
        "sources =",
        "    src/app.cpp",
        "    src/new.cpp",
        "",
        "headers =",
        "    include/app.h",
        "",
    ]
)

MAKEFILE = "\n".join(
    [
        "CXX = g++",
        "",
        "objects = \\",
        "    src/app.o \\",
        "    src/old.o",
        "",
        "app: $(objects)",
        "\t$(CXX) -o $@ $^",
        "",
    ]
)

BAKEFILE = "\n".join(
    [
        "<?xml version=\"1.0\" ?>",
        "<makefile>",
        '<set var="sources" hints="files">',
        "    src/app.cpp",
        "    src/old.cpp",
        "</set>",
        "</makefile>",
        "",
    ]
)


def _project(tmp_path: Path) -> Path:
    root = tmp_path.resolve()
    (root / "files.lst").write_text(FILES_LIST, encoding="utf-8")
    (root / "Makefile").write_text(MAKEFILE, encoding="utf-8")
    (root / "files.bkl").write_text(BAKEFILE, encoding="utf-8")
    return root


def test_cli_updates_configured_targets(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    root = _project(tmp_path)
    (root / "upmake.toml").write_text(
        "\n".join(
            [
                'audit_log = ".upmake/audit.jsonl"',
                "[[targets]]",
                'path = "Makefile"',
                "[[targets]]",
                'path = "files.bkl"',
            ]
        ),
        encoding="utf-8",
    )

    exit_code = main(["--project-root", str(root)])

    assert exit_code == 0
    assert (root / "Makefile").read_text(encoding="utf-8") == MAKEFILE.replace(
        "    src/app.o \\\n    src/old.o\n", "    src/app.o \\\n    src/new.o\n"
    )
    assert (root / "files.bkl").read_text(encoding="utf-8") == BAKEFILE.replace(
        "src/old.cpp", "src/new.cpp"
    )
    out = capsys.readouterr().out
    assert f'File "{root / "Makefile"}" successfully updated.' in out
    assert f'File "{root / "files.bkl"}" successfully updated.' in out

    events = [
        json.loads(line)
        for line in (root / ".upmake" / "audit.jsonl").read_text(encoding="utf-8").splitlines()
    ]
    assert [(event["rewriter"], event["changed"]) for event in events] == [
        ("makefile", True),
        ("bakefile0", True),
    ]


def test_cli_dry_run_leaves_files_untouched(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    root = _project(tmp_path)

    exit_code = main(
        [
            "--project-root",
            str(root),
            "--files-list",
            str(root / "files.lst"),
            "--dry-run",
            "--verbose",
            str(root / "Makefile"),
        ]
    )

    assert exit_code == 0
    assert (root / "Makefile").read_text(encoding="utf-8") == MAKEFILE
    out = capsys.readouterr().out
    assert f'Would update "{root / "Makefile"}" with the following changes:' in out
    assert "-    src/old.o\n" in out
    assert "+    src/new.o\n" in out


def test_cli_forced_format_applies_to_unrecognized_names(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    root = _project(tmp_path)
    target = root / "build.rules"
    target.write_text(MAKEFILE, encoding="utf-8")

    exit_code = main(
        ["--project-root", str(root), "--format", "makefile", "--quiet", str(target)]
    )

    assert exit_code == 0
    assert "src/new.o" in target.read_text(encoding="utf-8")
    assert capsys.readouterr().out == ""


def test_cli_reports_warnings_on_stderr(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    root = _project(tmp_path)
    (root / "Makefile").write_text(
        "objects = \\\n    src/app.o \\\n    src/app.o \\\n    src/new.o\n\n", encoding="utf-8"
    )

    exit_code = main(["--project-root", str(root), str(root / "Makefile")])

    assert exit_code == 0
    err = capsys.readouterr().err
    assert 'warning: Duplicate file "src/app.cpp"' in err
    assert "(line 3)" in err


def test_cli_rejects_bad_files_list(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    root = _project(tmp_path)
    (root / "files.lst").write_text("stray.cpp\n", encoding="utf-8")

    exit_code = main(["--project-root", str(root), str(root / "Makefile")])

    assert exit_code == 2
    assert "error: Unexpected contents outside variable definition at line 1." in (
        capsys.readouterr().err
    )
    assert (root / "Makefile").read_text(encoding="utf-8") == MAKEFILE


def test_cli_rejects_unrecognized_target(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    root = _project(tmp_path)

    exit_code = main(["--project-root", str(root), str(root / "CMakeLists.txt")])

    assert exit_code == 2
    assert "No rewriter supports path: CMakeLists.txt" in capsys.readouterr().err


def test_cli_without_targets_is_a_usage_error(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    root = _project(tmp_path)

    assert main(["--project-root", str(root)]) == 2
    assert "No build files to update" in capsys.readouterr().err


def test_cli_missing_target_fails_update(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    root = _project(tmp_path)

    exit_code = main(["--project-root", str(root), str(root / "missing.mk")])

    assert exit_code == 1
    assert 'error: Failed to update "' in capsys.readouterr().err
