import pytest

from gouml.errors import GoSyntaxError
from gouml.extractors.go.source_files import list_go_files, make_parser, parse_go_file


def test_named_imports_become_aliases(tmp_path, write_go):
    path = write_go(
        tmp_path,
        "main.go",
        """
        package main

        import (
            "fmt"
            cfg "example.com/app/config"
            _ "embed"
            . "strings"
        )

        import log "github.com/sirupsen/logrus"
        """,
    )
    parsed = parse_go_file(make_parser(), path)
    assert parsed.path == path
    assert parsed.imports == {"cfg": "config", "log": "logrus"}


def test_test_files_are_not_listed(tmp_path, write_go):
    write_go(tmp_path, "b.go", "package x\n")
    write_go(tmp_path, "a.go", "package x\n")
    write_go(tmp_path, "a_test.go", "package x\n")
    write_go(tmp_path, "notes.txt", "")
    assert [p.name for p in list_go_files(tmp_path)] == ["a.go", "b.go"]


def test_syntax_error_reports_line(tmp_path, write_go):
    path = write_go(tmp_path, "bad.go", "package x\n\nfunc f( {\n")
    with pytest.raises(GoSyntaxError) as excinfo:
        parse_go_file(make_parser(), path)
    assert excinfo.value.line is not None
