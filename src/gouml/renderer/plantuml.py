"""Render an EntityModel as a PlantUML class diagram."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass

from gouml.model import (
    BUILTIN_PACKAGE,
    KIND_ALIAS,
    KIND_FUNCTIONS,
    KIND_INTERFACE,
    KIND_STRUCT,
    EntityModel,
    Field,
    Method,
    PackageNode,
    TypeRecord,
    format_return_values,
    is_primitive,
    is_private,
    package_tree,
)

logger = logging.getLogger(__name__)

_INDENT = "    "

# Alias targets that can be drawn as an edge endpoint.
_NAMED_TYPE = re.compile(r"^[\w.]+$")

_HEADERS = {
    KIND_STRUCT: "class {name} << (S,Aquamarine) >> {{",
    KIND_INTERFACE: "interface {name} {{",
    KIND_ALIAS: "class {name} << (T, #FF7700) >> {{",
    KIND_FUNCTIONS: "class {name} << (F,LightSkyBlue) >> {{",
}

ALIAS_ARROW = "#.."
COMPOSITION_ARROW = "*--"
EXTENSION_ARROW = "<|--"
AGGREGATION_ARROW = "o--"


@dataclass
class RenderingOptions:
    """Which optional parts of the diagram to draw."""

    title: str = ""
    notes: str = ""
    show_aggregations: bool = False
    show_compositions: bool = True
    show_implementations: bool = True
    show_aliases: bool = True
    show_connection_labels: bool = False
    aggregate_private_members: bool = False
    show_private_members: bool = True
    show_fields: bool = True
    show_methods: bool = True


def options_legend(options: RenderingOptions) -> str:
    """Describe the rendering options as legend text."""
    entries = [
        ("Render Aggregations", options.show_aggregations),
        ("Render Aliases", options.show_aliases),
        ("Render Compositions", options.show_compositions),
        ("Render Connection Labels", options.show_connection_labels),
        ("Render Fields", options.show_fields),
        ("Render Implementations", options.show_implementations),
        ("Render Methods", options.show_methods),
        ("Render Private Members", options.show_private_members),
        ("Aggregate Private Members", options.aggregate_private_members),
    ]
    lines = ["<u><b>Legend</b></u>"]
    lines.extend(f"{label}: {str(value).lower()}" for label, value in entries)
    return "\n".join(lines)


class _LineWriter:
    """Accumulates indented output lines; edge lines are written at most once."""

    def __init__(self):
        self._lines: list[str] = []
        self._edges: set[str] = set()

    def line(self, text: str = "", depth: int = 0) -> None:
        self._lines.append(f"{_INDENT * depth}{text}" if text else "")

    def edge(self, text: str) -> None:
        if text in self._edges:
            return
        self._edges.add(text)
        self._lines.append(text)

    def getvalue(self) -> str:
        return "\n".join(self._lines) + "\n"


def render_plantuml(
    model: EntityModel,
    options: RenderingOptions | None = None,
    hierarchy: Iterable[PackageNode] | None = None,
) -> str:
    """Return the PlantUML document for *model*.

    *hierarchy* is the list of top-level package nodes; when omitted it is
    derived from the package paths present in the model.
    """
    options = options or RenderingOptions()
    roots = list(hierarchy) if hierarchy is not None else package_tree(model.packages)
    out = _LineWriter()

    out.line("@startuml")
    if options.title:
        out.line(f"title {options.title}")
    notes = options.notes.strip()
    if notes:
        out.line("legend")
        for note in notes.splitlines():
            out.line(note)
        out.line("end legend")

    for node in sorted(roots, key=lambda n: n.full_path):
        _render_namespace(out, model, node, options, depth=0)

    if options.show_aliases:
        _render_aliases(out, model, options)
    if options.show_compositions:
        _render_edges(out, model, options, "composition")
    if options.show_implementations:
        _render_edges(out, model, options, "extends")
    if options.show_aggregations:
        _render_edges(out, model, options, "aggregations")

    if not options.show_fields:
        out.line("hide fields")
    if not options.show_methods:
        out.line("hide methods")
    out.line("@enduml")

    text = out.getvalue()
    logger.debug("Rendered %d lines", text.count("\n"))
    return text


# -- namespaces and types --------------------------------------------------


def _has_types(model: EntityModel, node: PackageNode) -> bool:
    types = model.packages.get(node.full_path, {})
    if any(record.kind for record in types.values()):
        return True
    return any(_has_types(model, child) for child in node.children.values())


def _render_namespace(
    out: _LineWriter,
    model: EntityModel,
    node: PackageNode,
    options: RenderingOptions,
    depth: int,
) -> None:
    if not _has_types(model, node):
        return
    out.line(f"namespace {node.short_name} {{", depth)
    types = model.packages.get(node.full_path, {})
    for name in sorted(types):
        record = types[name]
        if record.kind:
            _render_type(out, record, options, depth + 1)
    for child in sorted(node.children.values(), key=lambda n: n.full_path):
        _render_namespace(out, model, child, options, depth + 1)
    out.line("}", depth)


def _type_display_name(record: TypeRecord) -> str:
    if not record.type_parameters:
        return record.name
    params = ", ".join(
        f"{param.name} {param.constraint}".rstrip() for param in record.type_parameters
    )
    return f"{record.name}<{params}>"


def _render_type(
    out: _LineWriter, record: TypeRecord, options: RenderingOptions, depth: int
) -> None:
    out.line(_HEADERS[record.kind].format(name=_type_display_name(record)), depth)

    groups: list[list[str]] = []
    if options.show_fields:
        if options.show_private_members:
            groups.append([_field_line(f) for f in record.fields if is_private(f.name)])
        groups.append([_field_line(f) for f in record.fields if not is_private(f.name)])
    if options.show_methods:
        if options.show_private_members:
            groups.append([_method_line(m) for m in record.methods if is_private(m.name)])
        groups.append([_method_line(m) for m in record.methods if not is_private(m.name)])

    for group in groups:
        if not group:
            continue
        for member in group:
            out.line(member, depth + 1)
        out.line()
    out.line("}", depth)


def _visibility(name: str) -> str:
    return "-" if is_private(name) else "+"


def _field_line(field: Field) -> str:
    return f"{_visibility(field.name)} {field.name} {field.type}"


def _parameter_text(parameter: Field) -> str:
    return f"{parameter.name} {parameter.type}" if parameter.name else parameter.type


def _method_line(method: Method) -> str:
    params = ", ".join(_parameter_text(p) for p in method.parameters)
    line = f"{_visibility(method.name)} {method.name}({params})"
    returns = format_return_values(method.return_values)
    return f"{line} {returns}" if returns else line


# -- relationship edges ----------------------------------------------------


def _qualified_target(target: str, package_path: str) -> str:
    if "." in target:
        return target
    if is_primitive(target):
        return f"{BUILTIN_PACKAGE}.{target}"
    return f"{package_path}.{target}"


def _label(options: RenderingOptions, text: str) -> str:
    return f" : {text}" if options.show_connection_labels else ""


def _render_aliases(
    out: _LineWriter, model: EntityModel, options: RenderingOptions
) -> None:
    aliases = []
    for alias in model.sorted_aliases():
        if _NAMED_TYPE.match(alias.target):
            aliases.append(alias)
        else:
            logger.debug("No alias edge for %s: %s is not a named type", alias.name, alias.target)
    if not aliases:
        return
    out.line()
    for alias in aliases:
        out.edge(f'"{alias.name}" {ALIAS_ARROW} "{alias.target}"{_label(options, "alias of")}')


def _render_edges(
    out: _LineWriter, model: EntityModel, options: RenderingOptions, relation: str
) -> None:
    lines: list[str] = []
    for record in model.records():
        owner = record.qualified_name
        if relation == "composition":
            for target in sorted(record.composition):
                target = _qualified_target(target, record.package_path)
                lines.append(
                    f'"{target}" {COMPOSITION_ARROW} "{owner}"{_label(options, "embeds")}'
                )
        elif relation == "extends":
            for target in sorted(record.extends):
                target = _qualified_target(target, record.package_path)
                known = model.lookup(target)
                label = "implements" if known is not None and known.kind == KIND_INTERFACE else "extends"
                lines.append(
                    f'"{target}" {EXTENSION_ARROW} "{owner}"{_label(options, label)}'
                )
        else:
            targets = set(record.aggregations)
            if options.aggregate_private_members:
                targets |= record.private_aggregations
            for target in sorted(targets):
                target = _qualified_target(target, record.package_path)
                lines.append(
                    f'"{owner}" {AGGREGATION_ARROW} "{target}"{_label(options, "uses")}'
                )
    if not lines:
        return
    out.line()
    for line in lines:
        out.edge(line)
