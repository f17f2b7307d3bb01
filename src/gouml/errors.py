"""Exceptions raised while analyzing Go sources."""

from __future__ import annotations

from pathlib import Path


class GoumlError(Exception):
    """Base class for all gouml errors."""


class DirectoryNotFoundError(GoumlError):
    """A requested root directory is missing or is not a directory."""

    def __init__(self, path: Path, reason: str = "does not exist"):
        self.path = path
        super().__init__(f"directory {reason}: {path}")


class GoSyntaxError(GoumlError):
    """A Go source file could not be parsed."""

    def __init__(self, path: Path, line: int | None = None):
        self.path = path
        self.line = line
        where = f"{path}:{line}" if line is not None else str(path)
        super().__init__(f"syntax error in {where}")


class PackageDepthError(GoumlError):
    """A package directory is nested deeper than the configured maximum."""

    def __init__(self, package_path: str, depth: int, max_depth: int):
        self.package_path = package_path
        self.depth = depth
        self.max_depth = max_depth
        super().__init__(
            f"package {package_path} has depth {depth} (max {max_depth})"
        )


class ConfigError(GoumlError):
    """The configuration file or environment holds an invalid value."""
