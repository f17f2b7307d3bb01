"""Turn tree-sitter-go type expression nodes into canonical type strings.

Every resolver returns ``(text, dependencies)``. *text* is the display form
of the type with same-package names prefixed by the package placeholder;
*dependencies* lists the named types the expression refers to. Structural
types (anonymous structs and interfaces, function types) contribute no
dependencies. Unknown node types resolve to ``("", [])``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping

from gouml.model import PACKAGE_PLACEHOLDER, format_return_values, is_primitive, qualify

logger = logging.getLogger(__name__)

Resolved = tuple[str, list[str]]

# Wrappers whose element type is the "basic" type of an alias declaration.
_ELEMENT_FIELDS = {
    "slice_type": "element",
    "array_type": "element",
    "implicit_length_array_type": "element",
    "map_type": "value",
    "channel_type": "value",
}


def _text(node) -> str:
    return node.text.decode("utf-8")


def named_children(node) -> list:
    """Named children of *node*, without comments."""
    return [child for child in node.named_children if child.type != "comment"]


def resolve_type(node, imports: Mapping[str, str]) -> Resolved:
    """Resolve a type expression node to ``(text, dependencies)``."""
    if node is None:
        return "", []
    handler = _HANDLERS.get(node.type)
    if handler is None:
        logger.debug("Unrecognized type expression: %s", node.type)
        return "", []
    text, deps = handler(node, imports)
    return text, list(dict.fromkeys(deps))


def _resolve_identifier(node, imports: Mapping[str, str]) -> Resolved:
    name = _text(node)
    if is_primitive(name):
        return name, []
    placeholder = PACKAGE_PLACEHOLDER + name
    return placeholder, [placeholder]


def _resolve_qualified(node, imports: Mapping[str, str]) -> Resolved:
    package = _text(node.child_by_field_name("package"))
    package = imports.get(package, package)
    name = f"{package}.{_text(node.child_by_field_name('name'))}"
    return name, [name]


def _resolve_slice(node, imports: Mapping[str, str]) -> Resolved:
    element, deps = resolve_type(node.child_by_field_name("element"), imports)
    return f"[]{element}", deps


def _resolve_map(node, imports: Mapping[str, str]) -> Resolved:
    key, key_deps = resolve_type(node.child_by_field_name("key"), imports)
    value, value_deps = resolve_type(node.child_by_field_name("value"), imports)
    return f"map[{key}]{value}", key_deps + value_deps


def _resolve_pointer(node, imports: Mapping[str, str]) -> Resolved:
    children = named_children(node)
    if not children:
        return "", []
    pointee, deps = resolve_type(children[0], imports)
    return f"*{pointee}", deps


def _resolve_channel(node, imports: Mapping[str, str]) -> Resolved:
    value, deps = resolve_type(node.child_by_field_name("value"), imports)
    tokens = [child.type for child in node.children if not child.is_named]
    if tokens[:2] == ["<-", "chan"]:
        return f"<-chan {value}", deps
    if tokens[:2] == ["chan", "<-"]:
        return f"chan<- {value}", deps
    return f"chan {value}", deps


def _resolve_struct(node, imports: Mapping[str, str]) -> Resolved:
    members: list[str] = []
    for field_list in named_children(node):
        for declaration in named_children(field_list):
            if declaration.type != "field_declaration":
                continue
            member, _ = resolve_type(declaration.child_by_field_name("type"), imports)
            members.append(qualify(member, ""))
    return f"struct{{{', '.join(members)}}}", []


def _resolve_interface(node, imports: Mapping[str, str]) -> Resolved:
    return "interface{}", []


def _resolve_function(node, imports: Mapping[str, str]) -> Resolved:
    params = [
        qualify(text, "")
        for _, text in parameter_types(node.child_by_field_name("parameters"), imports)
    ]
    results = [
        qualify(text, "")
        for text in result_types(node.child_by_field_name("result"), imports)
    ]
    signature = f"func({', '.join(params)})"
    returns = format_return_values(results)
    return (f"{signature} {returns}" if returns else signature), []


def _resolve_generic(node, imports: Mapping[str, str]) -> Resolved:
    base, deps = resolve_type(node.child_by_field_name("type"), imports)
    args: list[str] = []
    arguments = node.child_by_field_name("type_arguments")
    if arguments is not None:
        for argument in named_children(arguments):
            text, _ = resolve_type(argument, imports)
            args.append(text)
    return f"{base}[{', '.join(args)}]", deps


def _resolve_type_elem(node, imports: Mapping[str, str]) -> Resolved:
    parts: list[str] = []
    deps: list[str] = []
    for child in named_children(node):
        text, child_deps = resolve_type(child, imports)
        parts.append(text)
        deps.extend(child_deps)
    return " | ".join(parts), deps


def _resolve_negated(node, imports: Mapping[str, str]) -> Resolved:
    children = named_children(node)
    if not children:
        return "", []
    text, deps = resolve_type(children[0], imports)
    return f"~{text}", deps


def _resolve_parenthesized(node, imports: Mapping[str, str]) -> Resolved:
    children = named_children(node)
    if not children:
        return "", []
    return resolve_type(children[0], imports)


_HANDLERS: dict[str, Callable[..., Resolved]] = {
    "type_identifier": _resolve_identifier,
    "identifier": _resolve_identifier,
    "qualified_type": _resolve_qualified,
    "slice_type": _resolve_slice,
    "array_type": _resolve_slice,
    "implicit_length_array_type": _resolve_slice,
    "map_type": _resolve_map,
    "pointer_type": _resolve_pointer,
    "channel_type": _resolve_channel,
    "struct_type": _resolve_struct,
    "interface_type": _resolve_interface,
    "function_type": _resolve_function,
    "generic_type": _resolve_generic,
    "type_elem": _resolve_type_elem,
    "constraint_elem": _resolve_type_elem,
    "negated_type": _resolve_negated,
    "parenthesized_type": _resolve_parenthesized,
}


def parameter_types(parameter_list, imports: Mapping[str, str]) -> list[tuple[str, str]]:
    """Return ``(name, type)`` for each parameter; unnamed parameters get ``""``.

    ``a, b int`` yields two entries. Variadic parameters are prefixed ``...``.
    """
    result: list[tuple[str, str]] = []
    if parameter_list is None:
        return result
    for declaration in named_children(parameter_list):
        if declaration.type not in (
            "parameter_declaration",
            "variadic_parameter_declaration",
        ):
            continue
        text, _ = resolve_type(declaration.child_by_field_name("type"), imports)
        if declaration.type == "variadic_parameter_declaration":
            text = f"...{text}"
        names = declaration.children_by_field_name("name")
        if names:
            result.extend((_text(name), text) for name in names)
        else:
            result.append(("", text))
    return result


def result_types(result, imports: Mapping[str, str]) -> list[str]:
    """Return the result types of a signature, one entry per returned value."""
    if result is None:
        return []
    if result.type != "parameter_list":
        text, _ = resolve_type(result, imports)
        return [text]
    return [text for _, text in parameter_types(result, imports)]


def basic_type(node):
    """Strip slices, arrays, maps, channels, pointers and parentheses."""
    while node is not None:
        element_field = _ELEMENT_FIELDS.get(node.type)
        if element_field is not None:
            node = node.child_by_field_name(element_field)
        elif node.type in ("pointer_type", "parenthesized_type"):
            children = named_children(node)
            node = children[0] if children else None
        else:
            return node
    return None


def render_constraint(node, imports: Mapping[str, str]) -> str:
    """Render a type parameter constraint (``any``, ``~int | string``, ...)."""
    if node is None:
        return ""
    if node.type in ("type_constraint", "type_elem", "constraint_elem"):
        parts: list[str] = []
        approximate = False
        for child in node.children:
            if child.type == "~":
                approximate = True
            elif child.is_named and child.type != "comment":
                rendered = render_constraint(child, imports)
                parts.append(f"~{rendered}" if approximate else rendered)
                approximate = False
        return " | ".join(parts)
    if node.type == "negated_type":
        children = named_children(node)
        return f"~{render_constraint(children[0], imports)}" if children else ""
    if node.type == "interface_type":
        members = [
            _render_interface_member(member, imports)
            for member in named_children(node)
        ]
        return f"interface{{{'; '.join(m for m in members if m)}}}"
    text, _ = resolve_type(node, imports)
    return qualify(text, "")


def _render_interface_member(member, imports: Mapping[str, str]) -> str:
    if member.type in ("method_elem", "method_spec"):
        name = _text(member.child_by_field_name("name"))
        params = [
            qualify(text, "")
            for _, text in parameter_types(member.child_by_field_name("parameters"), imports)
        ]
        results = [
            qualify(text, "")
            for text in result_types(member.child_by_field_name("result"), imports)
        ]
        returns = format_return_values(results)
        signature = f"{name}({', '.join(params)})"
        return f"{signature} {returns}" if returns else signature
    return render_constraint(member, imports)


def parse_type_parameters(node, imports: Mapping[str, str]) -> list[tuple[str, str]]:
    """Return ``(name, constraint)`` pairs from a ``type_parameter_list`` node."""
    result: list[tuple[str, str]] = []
    if node is None:
        return result
    for declaration in named_children(node):
        if declaration.type != "type_parameter_declaration":
            continue
        constraint = render_constraint(declaration.child_by_field_name("type"), imports)
        for name in declaration.children_by_field_name("name"):
            result.append((_text(name), constraint))
    return result
