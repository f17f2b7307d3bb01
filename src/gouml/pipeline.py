"""Orchestrator: discover → extract → resolve → render."""

from __future__ import annotations

import logging
from pathlib import Path

from gouml.analysis import resolve_implementations
from gouml.config import GoumlConfig
from gouml.errors import ConfigError, DirectoryNotFoundError
from gouml.extractors.base import Extractor
from gouml.extractors.go import FunctionClassifier, GoExtractor, PackageHierarchy
from gouml.extractors.go.source_files import iter_package_dirs
from gouml.model import EntityModel, PackageNode
from gouml.renderer.plantuml import render_plantuml

logger = logging.getLogger(__name__)


def _check_roots(directories: list[Path]) -> list[Path]:
    roots: list[Path] = []
    for directory in directories:
        if not directory.exists():
            raise DirectoryNotFoundError(directory)
        if not directory.is_dir():
            raise DirectoryNotFoundError(directory, "is not a directory")
        roots.append(directory.resolve())
    return roots


def analyze(config: GoumlConfig) -> tuple[EntityModel, list[PackageNode]]:
    """Build the entity model for the configured directories.

    Returns the model (with interface conformance resolved) and the
    top-level package nodes.
    """
    if not config.directories:
        raise ConfigError("no directories to scan")
    roots = _check_roots(config.directories)

    model = EntityModel()
    hierarchy = PackageHierarchy(roots, max_depth=config.max_depth)
    classifier = FunctionClassifier(config.custom_keywords, config.custom_resources)
    extractors: list[Extractor] = [GoExtractor(hierarchy, classifier=classifier)]
    logger.debug("Extractors: %s", [type(e).__name__ for e in extractors])

    seen: set[Path] = set()
    for root in roots:
        for directory in iter_package_dirs(
            root,
            recursive=config.recursive,
            ignored=set(config.ignored_directories),
        ):
            if directory in seen:
                continue
            seen.add(directory)
            for ext in extractors:
                if ext.can_handle(directory):
                    ext.extract(directory, model)

    count = resolve_implementations(model)
    logger.debug("Types: %d, implementations: %d", len(model.records()), count)
    return model, hierarchy.top_level()


def run(config: GoumlConfig) -> str:
    """Analyze, render and write the diagram; return the PlantUML text."""
    model, packages = analyze(config)
    text = render_plantuml(model, config.rendering_options(), packages)

    if config.output is not None:
        config.output.parent.mkdir(parents=True, exist_ok=True)
        config.output.write_text(text, encoding="utf-8")
        logger.info("Generated %s", config.output)
    return text
