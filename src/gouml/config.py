"""Load gouml settings from YAML files and environment variables."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path

import yaml

from gouml.errors import ConfigError
from gouml.renderer.plantuml import RenderingOptions, options_legend

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAMES = ("gouml.yaml", "gouml.yml", ".gouml.yaml", ".gouml.yml")

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass
class RenderingSettings:
    """Rendering switches as written in configuration files and on the CLI."""

    show_aggregations: bool = False
    hide_fields: bool = False
    hide_methods: bool = False
    hide_connections: bool = False
    show_compositions: bool = False
    show_implementations: bool = False
    show_aliases: bool = False
    show_connection_labels: bool = False
    aggregate_private_members: bool = False
    hide_private_members: bool = False
    show_options_as_note: bool = False
    title: str = ""
    notes: str = ""  # comma separated


@dataclass
class GoumlConfig:
    directories: list[Path] = field(default_factory=list)
    ignored_directories: list[Path] = field(default_factory=list)
    recursive: bool = False
    max_depth: int | None = None
    output: Path | None = None
    rendering: RenderingSettings = field(default_factory=RenderingSettings)
    custom_keywords: dict[str, list[str]] = field(default_factory=dict)
    custom_resources: list[str] = field(default_factory=list)

    def rendering_options(self) -> RenderingOptions:
        """Translate the settings into the renderer's options.

        ``hide_connections`` switches off aliases, compositions and
        implementations except those re-enabled by their ``show_*`` flag.
        """
        settings = self.rendering
        options = RenderingOptions(
            title=settings.title,
            show_aggregations=settings.show_aggregations,
            show_connection_labels=settings.show_connection_labels,
            aggregate_private_members=settings.aggregate_private_members,
            show_private_members=not settings.hide_private_members,
            show_fields=not settings.hide_fields,
            show_methods=not settings.hide_methods,
        )
        if settings.hide_connections:
            options.show_aliases = settings.show_aliases
            options.show_compositions = settings.show_compositions
            options.show_implementations = settings.show_implementations

        notes: list[str] = []
        if settings.show_options_as_note:
            notes.append(options_legend(options))
        user_notes = [n.strip() for n in settings.notes.split(",") if n.strip()]
        if user_notes:
            notes.extend(["", "<b><u>Notes</u></b>", *user_notes])
        options.notes = "\n".join(notes)
        return options


def find_config(search_dir: Path) -> Path | None:
    for name in DEFAULT_CONFIG_NAMES:
        candidate = search_dir / name
        if candidate.is_file():
            return candidate
    return None


def load_config(path: Path | None = None, *, search_dir: Path | None = None) -> GoumlConfig:
    """Read a YAML config file into a GoumlConfig.

    Without *path* the default file names are looked up in *search_dir*
    (the working directory by default); if none exists the defaults are
    returned. Relative directories are resolved against the file's folder.
    """
    if path is None:
        path = find_config(search_dir or Path.cwd())
        if path is None:
            logger.debug("No configuration file found; using defaults")
            return GoumlConfig()

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}") from e

    logger.debug("Loaded configuration from %s", path)
    return config_from_mapping(data or {}, base_dir=Path(path).resolve().parent)


def config_from_mapping(data: object, *, base_dir: Path) -> GoumlConfig:
    if not isinstance(data, Mapping):
        raise ConfigError("configuration must be a mapping")

    config = GoumlConfig(
        directories=[base_dir / d for d in _string_list(data, "directories")],
        ignored_directories=[
            base_dir / d for d in _string_list(data, "ignored_directories")
        ],
        recursive=_typed(data, "recursive", bool, False),
        max_depth=_max_depth(data.get("max_depth")),
    )

    output = _typed(data, "output", Mapping, {})
    output_file = _typed(output, "file", str, "", prefix="output.")
    if output_file:
        config.output = base_dir / output_file

    rendering = _typed(data, "rendering_options", Mapping, {})
    for setting in fields(RenderingSettings):
        expected = str if setting.name in ("title", "notes") else bool
        value = _typed(rendering, setting.name, expected, None, prefix="rendering_options.")
        if value is not None:
            setattr(config.rendering, setting.name, value)

    keywords = _typed(data, "custom_keywords", Mapping, {})
    for category, words in keywords.items():
        if not isinstance(words, list) or not all(isinstance(w, str) for w in words):
            raise ConfigError(f"custom_keywords.{category} must be a list of strings")
        config.custom_keywords[str(category)] = list(words)
    config.custom_resources = _pattern_list(data, "custom_resources")
    return config


def apply_env(config: GoumlConfig, environ: Mapping[str, str] | None = None) -> GoumlConfig:
    """Override *config* in place from ``GOUML_*`` environment variables."""
    env = os.environ if environ is None else environ
    if env.get("GOUML_OUTPUT"):
        config.output = Path(env["GOUML_OUTPUT"])
    if "GOUML_RECURSIVE" in env:
        config.recursive = _parse_bool(env["GOUML_RECURSIVE"], "GOUML_RECURSIVE")
    if env.get("GOUML_IGNORE"):
        config.ignored_directories = [
            Path(p.strip()) for p in env["GOUML_IGNORE"].split(",") if p.strip()
        ]
    if "GOUML_TITLE" in env:
        config.rendering.title = env["GOUML_TITLE"]
    if "GOUML_NOTES" in env:
        config.rendering.notes = env["GOUML_NOTES"]
    return config


def _parse_bool(value: str, name: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean, got {value!r}")


def _typed(data: Mapping, key: str, expected: type, default, *, prefix: str = ""):
    value = data.get(key)
    if value is None:
        return default
    # bool is a subclass of int; keep the two apart.
    if not isinstance(value, expected) or (expected is not bool and isinstance(value, bool)):
        raise ConfigError(f"{prefix}{key} must be of type {expected.__name__}")
    return value


def _string_list(data: Mapping, key: str) -> list[str]:
    value = data.get(key)
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"{key} must be a list of paths")
    return value


def _pattern_list(data: Mapping, key: str) -> list[str]:
    value = data.get(key)
    if value is None:
        return []
    if isinstance(value, str):
        return [p.strip() for p in value.split(",") if p.strip()]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"{key} must be a list of strings")
    return value


def _max_depth(value: object) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigError("max_depth must be a positive integer")
    return value
