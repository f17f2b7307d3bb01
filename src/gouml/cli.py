"""Command-line interface for gouml."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from gouml.config import apply_env, load_config
from gouml.errors import GoumlError
from gouml.pipeline import run

logger = logging.getLogger(__name__)

_RENDERING_FLAGS = (
    ("--show-aggregations", "Render aggregations (uses) edges"),
    ("--hide-fields", "Hide fields"),
    ("--hide-methods", "Hide methods"),
    ("--hide-connections", "Hide all connections except those re-enabled with --show-*"),
    ("--show-compositions", "Render compositions even with --hide-connections"),
    ("--show-implementations", "Render implementations even with --hide-connections"),
    ("--show-aliases", "Render aliases even with --hide-connections"),
    ("--show-connection-labels", "Label every connection with its kind"),
    ("--aggregate-private-members", "Include private members in aggregations (needs --show-aggregations)"),
    ("--hide-private-members", "Hide private fields and methods"),
    ("--show-options-as-note", "Add a legend listing the rendering options"),
)


def _parse_keyword(value: str) -> tuple[str, list[str]]:
    category, sep, words = value.partition("=")
    if not sep or not category.strip():
        raise argparse.ArgumentTypeError(
            f"expected CATEGORY=kw1,kw2, got {value!r}"
        )
    return category.strip(), [w.strip() for w in words.split(",") if w.strip()]


def _comma_paths(value: str) -> list[Path]:
    return [Path(p.strip()) for p in value.split(",") if p.strip()]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gouml",
        description="Generate PlantUML class diagrams from Go source directories.",
    )
    parser.add_argument(
        "directories",
        nargs="*",
        type=Path,
        help="Go source directories to scan (default: from the config file)",
    )
    parser.add_argument(
        "-r",
        "--recursive",
        action="store_true",
        help="Walk the directories recursively",
    )
    parser.add_argument(
        "--ignore",
        type=_comma_paths,
        default=None,
        help="Comma separated list of directories to skip",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=None,
        help="Skip packages nested deeper than this many levels",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Output file (default: standard output)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML configuration file (default: gouml.yaml if present)",
    )
    parser.add_argument("--title", default=None, help="Diagram title")
    parser.add_argument(
        "--notes",
        default=None,
        help="Comma separated list of notes added to the legend",
    )
    for flag, help_text in _RENDERING_FLAGS:
        parser.add_argument(flag, action="store_true", help=help_text)
    parser.add_argument(
        "--keyword",
        action="append",
        type=_parse_keyword,
        default=[],
        metavar="CATEGORY=KW1,KW2",
        help="Group free functions whose name contains a keyword (repeatable)",
    )
    parser.add_argument(
        "--custom-resources",
        default=None,
        metavar="PATTERN,PATTERN",
        help="Comma separated name patterns that become function categories; checked before --keyword",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose (debug) output",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    logging.basicConfig(level=logging.WARNING, format="%(message)s")
    if args.verbose:
        logging.getLogger("gouml").setLevel(logging.DEBUG)

    try:
        config = apply_env(load_config(args.config))
        if args.directories:
            config.directories = list(args.directories)
        if args.recursive:
            config.recursive = True
        if args.ignore is not None:
            config.ignored_directories = args.ignore
        if args.max_depth is not None:
            config.max_depth = args.max_depth
        if args.output is not None:
            config.output = args.output
        if args.title is not None:
            config.rendering.title = args.title
        if args.notes is not None:
            config.rendering.notes = args.notes
        for flag, _ in _RENDERING_FLAGS:
            name = flag[2:].replace("-", "_")
            if getattr(args, name):
                setattr(config.rendering, name, True)
        if args.custom_resources is not None:
            config.custom_resources = [
                p.strip() for p in args.custom_resources.split(",") if p.strip()
            ]
        for category, words in args.keyword:
            config.custom_keywords[category] = words

        text = run(config)
    except GoumlError as e:
        logger.error("gouml: %s", e)
        sys.exit(1)

    if config.output is None:
        sys.stdout.write(text)


if __name__ == "__main__":
    main()
