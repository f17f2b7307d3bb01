"""Map scanned Go directories to dotted package paths and a namespace tree."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from pathlib import Path

from gouml.errors import PackageDepthError
from gouml.model import PackageNode

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[-\s]")


def _sanitize(segment: str) -> str:
    return _UNSAFE_CHARS.sub("_", segment)


def _root_prefixes(roots: Sequence[Path]) -> dict[Path, list[str]]:
    """Shortest trailing run of path segments telling each root apart.

    A root whose basename is unique keeps just the basename; roots sharing
    one take as many parent segments as needed (``a/svc`` -> ``a.svc``).
    """
    unique = list(dict.fromkeys(roots))
    prefixes: dict[Path, list[str]] = {}
    for root in unique:
        parts = [part for part in root.parts if part != root.anchor]
        others = [
            [part for part in other.parts if part != other.anchor]
            for other in unique
            if other != root
        ]
        length = 1
        while length < len(parts) and any(
            other[-length:] == parts[-length:] for other in others
        ):
            length += 1
        prefixes[root] = parts[-length:] or [root.name]
    return prefixes


class PackageHierarchy:
    """Memoized directory -> PackageNode mapping for a set of scan roots.

    A directory's package path is the prefix of the root it belongs to
    (its basename, or more trailing segments when another root shares the
    basename) followed by its path relative to that root. When several roots contain
    the directory, the shortest one wins (the first configured on ties).
    """

    def __init__(self, roots: Sequence[Path], *, max_depth: int | None = None):
        self._roots = [Path(root).resolve() for root in roots]
        self._prefixes = _root_prefixes(self._roots)
        self._max_depth = max_depth
        self._nodes_by_dir: dict[Path, PackageNode] = {}
        self._nodes_by_path: dict[str, PackageNode] = {}

    def node_for(self, directory: Path) -> PackageNode:
        """Return the node for *directory*, creating it and its parents on demand.

        Raises PackageDepthError when the package is nested deeper than
        ``max_depth`` and ValueError when no root contains *directory*.
        """
        directory = Path(directory).resolve()
        node = self._nodes_by_dir.get(directory)
        if node is not None:
            return node

        root = self._root_for(directory)
        parts = [*self._prefixes[root], *directory.relative_to(root).parts]
        package_path = ".".join(_sanitize(part) for part in parts if part)
        depth = package_path.count(".") + 1
        if self._max_depth is not None and depth > self._max_depth:
            raise PackageDepthError(package_path, depth, self._max_depth)

        node = self._nodes_by_path.get(package_path)
        if node is None:
            node = PackageNode(short_name=_sanitize(parts[-1]), full_path=package_path)
            if directory != root:
                self.node_for(directory.parent).add_child(node)
            elif len(parts) > 1:
                self._prefix_node(parts[:-1]).add_child(node)
            self._nodes_by_path[package_path] = node
            logger.debug("Package %s -> %s", directory, package_path)
        self._nodes_by_dir[directory] = node
        return node

    def _prefix_node(self, parts: list[str]) -> PackageNode:
        """Namespace for the leading segments of a multi-segment root prefix."""
        package_path = ".".join(_sanitize(part) for part in parts)
        node = self._nodes_by_path.get(package_path)
        if node is None:
            node = PackageNode(short_name=_sanitize(parts[-1]), full_path=package_path)
            if len(parts) > 1:
                self._prefix_node(parts[:-1]).add_child(node)
            self._nodes_by_path[package_path] = node
        return node

    def package_path(self, directory: Path) -> str:
        return self.node_for(directory).full_path

    def top_level(self) -> list[PackageNode]:
        """Nodes without a parent, sorted by path."""
        return sorted(
            (node for node in self._nodes_by_path.values() if node.parent is None),
            key=lambda node: node.full_path,
        )

    def _root_for(self, directory: Path) -> Path:
        candidates = [
            root
            for root in self._roots
            if directory == root or root in directory.parents
        ]
        if not candidates:
            raise ValueError(f"{directory} is not under any scanned root")
        return min(candidates, key=lambda root: len(root.parts))
