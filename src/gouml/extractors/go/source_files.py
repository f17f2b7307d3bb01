"""Find Go source files and parse them with tree-sitter-go."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import tree_sitter_go as tsgo
from tree_sitter import Language, Parser

from gouml.errors import GoSyntaxError
from gouml.extractors.go.type_expr import named_children

logger = logging.getLogger(__name__)

_TEST_SUFFIX = "_test.go"

# Directory names never walked when scanning recursively.
_SKIP_DIRS = {"vendor"}


@dataclass
class ParsedFile:
    """A parsed Go file with its import aliases."""

    path: Path
    root_node: object
    imports: dict[str, str] = field(default_factory=dict)


def make_parser() -> Parser:
    return Parser(Language(tsgo.language()))


def is_go_source(path: Path) -> bool:
    return path.suffix == ".go" and not path.name.endswith(_TEST_SUFFIX)


def list_go_files(directory: Path) -> list[Path]:
    """Non-test ``.go`` files directly inside *directory*, sorted by name."""
    return sorted(
        child for child in directory.iterdir() if child.is_file() and is_go_source(child)
    )


def iter_package_dirs(
    root: Path,
    *,
    recursive: bool,
    ignored: set[Path] | None = None,
) -> list[Path]:
    """Return the directories to scan under *root* in a stable order.

    Hidden directories, ``vendor`` and anything in *ignored* are pruned
    together with their subtrees.
    """
    root = root.resolve()
    if not recursive:
        return [root]

    ignored = {path.resolve() for path in ignored or ()}
    result: list[Path] = []
    for dirpath, dirnames, _ in os.walk(root):
        current = Path(dirpath)
        if current in ignored:
            dirnames[:] = []
            continue
        result.append(current)
        dirnames[:] = sorted(
            name
            for name in dirnames
            if not name.startswith(".")
            and name not in _SKIP_DIRS
            and (current / name) not in ignored
        )
    return result


def parse_go_file(parser: Parser, path: Path) -> ParsedFile:
    """Parse *path*; raise GoSyntaxError if the file is not valid Go."""
    source = path.read_bytes()
    tree = parser.parse(source)
    root = tree.root_node
    if root.has_error:
        raise GoSyntaxError(path, _first_error_line(root))

    imports: dict[str, str] = {}
    for node in named_children(root):
        if node.type == "import_declaration":
            imports.update(_import_aliases(node))

    logger.debug("Parsed %s (%d import aliases)", path, len(imports))
    return ParsedFile(path=path, root_node=root, imports=imports)


def _import_aliases(declaration) -> dict[str, str]:
    """Map named imports to the last segment of their import path."""
    specs = []
    for child in named_children(declaration):
        if child.type == "import_spec":
            specs.append(child)
        elif child.type == "import_spec_list":
            specs.extend(c for c in named_children(child) if c.type == "import_spec")

    aliases: dict[str, str] = {}
    for spec in specs:
        name = spec.child_by_field_name("name")
        if name is None or name.type != "package_identifier":
            continue
        path = spec.child_by_field_name("path").text.decode("utf-8").strip("\"`")
        aliases[name.text.decode("utf-8")] = path.rsplit("/", 1)[-1]
    return aliases


def _first_error_line(node) -> int | None:
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == "ERROR" or current.is_missing:
            return current.start_point[0] + 1
        if current.has_error:
            stack.extend(reversed(current.children))
    return None
