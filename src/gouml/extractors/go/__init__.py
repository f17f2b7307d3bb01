"""Go extractor: parse each package directory and feed the entity model."""

from __future__ import annotations

import logging
from pathlib import Path

from gouml.errors import PackageDepthError
from gouml.extractors.go.classify import FunctionClassifier
from gouml.extractors.go.declarations import GoDeclarationBuilder
from gouml.extractors.go.package_hierarchy import PackageHierarchy
from gouml.extractors.go.source_files import list_go_files, make_parser, parse_go_file
from gouml.model import EntityModel

logger = logging.getLogger(__name__)

__all__ = [
    "FunctionClassifier",
    "GoDeclarationBuilder",
    "GoExtractor",
    "PackageHierarchy",
]


class GoExtractor:
    """Read the Go files of one directory into the entity model."""

    def __init__(
        self,
        hierarchy: PackageHierarchy,
        *,
        classifier: FunctionClassifier | None = None,
    ):
        self._hierarchy = hierarchy
        self._classifier = classifier or FunctionClassifier()
        self._parser = make_parser()

    def can_handle(self, directory: Path) -> bool:
        return bool(list_go_files(directory))

    def extract(self, directory: Path, model: EntityModel) -> None:
        try:
            package_path = self._hierarchy.package_path(directory)
        except PackageDepthError as e:
            logger.debug("Skipping %s: %s", directory, e)
            return

        # Parse everything first so a syntax error leaves the model untouched.
        parsed_files = [parse_go_file(self._parser, path) for path in list_go_files(directory)]
        for parsed in parsed_files:
            builder = GoDeclarationBuilder(
                model, package_path, parsed.imports, self._classifier
            )
            builder.consume(parsed.root_node)

        logger.debug(
            "Go package %s: %d files, %d types",
            package_path,
            len(parsed_files),
            len(model.packages.get(package_path, {})),
        )
