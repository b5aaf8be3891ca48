from __future__ import annotations

import io
from pathlib import Path

import pytest

from upmake.fileslist import FilesListError, load_files_list, read_files_list


def test_reads_variables_and_ignores_comments() -> None:
    source = "\n".join(
        [
            "# Master list of files.",
            "sources =",
            "    file1.cpp",
            "    file2.cpp  # trailing comment",
            "",
            "headers =",
            "\tfile1.h",
            "",
        ]
    )

    file_lists = read_files_list(io.StringIO(source))

    assert file_lists == {
        "sources": ["file1.cpp", "file2.cpp"],
        "headers": ["file1.h"],
    }


def test_references_expand_previous_definitions() -> None:
    source = "\n".join(
        [
            "sources =",
            "    a.cpp",
            "headers =",
            "    a.h",
            "everything =",
            "    $sources",
            "    $headers",
            "    extra.txt",
        ]
    )

    file_lists = read_files_list(io.StringIO(source))

    assert file_lists["everything"] == ["a.cpp", "a.h", "extra.txt"]


def test_empty_definitions_are_omitted_but_can_be_referenced() -> None:
    source = "\n".join(["empty =", "all =", "    $empty", "    a.cpp"])

    file_lists = read_files_list(io.StringIO(source))

    assert file_lists == {"all": ["a.cpp"]}


def test_contents_before_first_definition_raise() -> None:
    with pytest.raises(FilesListError, match="outside variable definition at line 2") as info:
        read_files_list(io.StringIO("# header\nstray.cpp\n"))

    assert info.value.line == 2


def test_forward_reference_raises() -> None:
    source = "\n".join(["all =", "    $later", "later =", "    a.cpp"])

    with pytest.raises(FilesListError, match='undefined variable "later"') as info:
        read_files_list(io.StringIO(source))

    assert info.value.line == 2
    assert isinstance(info.value, ValueError)


def test_load_files_list_reads_from_disk(tmp_path: Path) -> None:
    path = tmp_path / "files.lst"
    path.write_text("sources =\n    a.cpp\n", encoding="utf-8")

    assert load_files_list(path) == {"sources": ["a.cpp"]}
