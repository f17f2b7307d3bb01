from pathlib import Path
from textwrap import dedent

import pytest

from gouml.extractors.go.source_files import make_parser
from gouml.extractors.go.type_expr import named_children


@pytest.fixture
def write_go():
    """Write dedented Go source to ``directory/name`` and return the path."""

    def _write(directory: Path, name: str, source: str) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / name
        path.write_text(dedent(source))
        return path

    return _write


@pytest.fixture(scope="session")
def go_parser():
    return make_parser()


@pytest.fixture
def parse_go(go_parser):
    def _parse(source: str):
        return go_parser.parse(dedent(source).encode("utf-8")).root_node

    return _parse


@pytest.fixture
def type_node(parse_go):
    """Return the type expression node of ``type T <expr>``."""

    def _type_node(expr: str):
        root = parse_go(f"package p\n\ntype T {expr}\n")
        declaration = next(n for n in named_children(root) if n.type == "type_declaration")
        spec = named_children(declaration)[0]
        return spec.child_by_field_name("type")

    return _type_node
