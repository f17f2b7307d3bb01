"""Populate the entity model from the top-level declarations of one Go file."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from gouml.extractors.go.classify import FunctionClassifier
from gouml.extractors.go.type_expr import (
    basic_type,
    named_children,
    parameter_types,
    parse_type_parameters,
    resolve_type,
    result_types,
)
from gouml.model import (
    BUILTIN_PACKAGE,
    KIND_ALIAS,
    KIND_FUNCTIONS,
    KIND_INTERFACE,
    KIND_STRUCT,
    PACKAGE_PLACEHOLDER,
    Alias,
    EntityModel,
    Field,
    Method,
    TypeParameter,
    TypeRecord,
    is_exported,
    is_primitive,
    qualify,
    strip_pointer,
)

logger = logging.getLogger(__name__)

# Interface members that embed another interface by name.
_EMBEDDED_NAME_TYPES = {"type_identifier", "qualified_type", "generic_type"}


def _text(node) -> str:
    return node.text.decode("utf-8")


def _strip_type_arguments(type_name: str) -> str:
    return type_name.split("[", 1)[0]


class GoDeclarationBuilder:
    """Walk a file's declarations in order and record them under *package_path*."""

    def __init__(
        self,
        model: EntityModel,
        package_path: str,
        imports: Mapping[str, str],
        classifier: FunctionClassifier | None = None,
    ):
        self._model = model
        self._package_path = package_path
        self._imports = imports
        self._classifier = classifier or FunctionClassifier()

    def consume(self, root_node) -> None:
        for node in named_children(root_node):
            if node.type == "type_declaration":
                for spec in named_children(node):
                    if spec.type in ("type_spec", "type_alias"):
                        self._consume_type_spec(spec)
            elif node.type == "method_declaration":
                self._consume_method(node)
            elif node.type == "function_declaration":
                self._consume_function(node)

    # -- type declarations -------------------------------------------------

    def _consume_type_spec(self, spec) -> None:
        name = _text(spec.child_by_field_name("name"))
        record = self._model.get_or_create(self._package_path, name)
        record.type_parameters = [
            TypeParameter(param_name, constraint)
            for param_name, constraint in parse_type_parameters(
                spec.child_by_field_name("type_parameters"), self._imports
            )
        ]

        type_node = spec.child_by_field_name("type")
        shape = type_node.type if type_node is not None else ""
        if spec.type == "type_spec" and shape == "struct_type":
            record.kind = KIND_STRUCT
            for field_list in named_children(type_node):
                for declaration in named_children(field_list):
                    if declaration.type == "field_declaration":
                        self.add_field(record, declaration)
        elif spec.type == "type_spec" and shape == "interface_type":
            record.kind = KIND_INTERFACE
            for member in named_children(type_node):
                self._add_interface_member(record, member)
        else:
            record.kind = KIND_ALIAS
            self._add_alias(name, type_node)

    def add_field(self, record: TypeRecord, declaration) -> None:
        """Record a struct field, or an embedding when the field has no name."""
        type_node = declaration.child_by_field_name("type")
        text, dependencies = resolve_type(type_node, self._imports)
        names = declaration.children_by_field_name("name")

        if not names:
            pointer = text.startswith("*") or any(
                child.type == "*" for child in declaration.children
            )
            target = _strip_type_arguments(strip_pointer(qualify(text, self._package_path)))
            if pointer:
                record.add_to_composition(target)
            else:
                record.add_to_extends(target)
            return

        for name_node in names:
            name = _text(name_node)
            record.fields.append(
                Field(
                    name=name,
                    type=qualify(text, ""),
                    full_type=qualify(text, self._package_path),
                )
            )
            for dependency in dependencies:
                if record.is_type_parameter(dependency):
                    continue
                dependency = qualify(dependency, self._package_path)
                if is_primitive(dependency):
                    continue
                record.add_to_aggregations(dependency, private=not is_exported(name))

    def _add_interface_member(self, record: TypeRecord, member) -> None:
        if member.type in ("method_elem", "method_spec"):
            record.methods.append(
                self._build_method(
                    _text(member.child_by_field_name("name")),
                    member.child_by_field_name("parameters"),
                    member.child_by_field_name("result"),
                )
            )
            return

        embedded = member
        if member.type in ("type_elem", "constraint_elem"):
            parts = named_children(member)
            if len(parts) != 1:
                # A union of terms constrains type sets; nothing is embedded.
                return
            embedded = parts[0]
        if embedded.type not in _EMBEDDED_NAME_TYPES:
            return
        text, _ = resolve_type(embedded, self._imports)
        record.add_to_composition(
            _strip_type_arguments(qualify(text, self._package_path))
        )

    def _add_alias(self, name: str, type_node) -> None:
        aliased, _ = resolve_type(basic_type(type_node), self._imports)
        aliased = qualify(aliased, "")
        if not aliased:
            logger.debug("Alias %s.%s has an unrecognized underlying type", self._package_path, name)
            return
        alias_name = name if is_primitive(name) else f"{self._package_path}.{name}"
        package_name = BUILTIN_PACKAGE if is_primitive(aliased) else self._package_path
        self._model.add_alias(Alias(alias_name, package_name, aliased))

    # -- functions and methods --------------------------------------------

    def _consume_method(self, node) -> None:
        receiver = node.child_by_field_name("receiver")
        receivers = [
            child for child in named_children(receiver)
            if child.type == "parameter_declaration"
        ] if receiver is not None else []
        if not receivers:
            return
        text, _ = resolve_type(receivers[0].child_by_field_name("type"), self._imports)
        type_name = _strip_type_arguments(strip_pointer(qualify(text, "")))
        if not type_name:
            return

        record = self._model.get_or_create(self._package_path, type_name)
        if not record.kind:
            record.kind = KIND_STRUCT
        record.methods.append(
            self._build_method(
                _text(node.child_by_field_name("name")),
                node.child_by_field_name("parameters"),
                node.child_by_field_name("result"),
            )
        )

    def _consume_function(self, node) -> None:
        name = _text(node.child_by_field_name("name"))
        bucket = self._model.get_or_create(
            self._package_path, self._classifier.bucket_name(name)
        )
        if not bucket.kind:
            bucket.kind = KIND_FUNCTIONS

        parameters = node.child_by_field_name("parameters")
        result = node.child_by_field_name("result")
        bucket.methods.append(self._build_method(name, parameters, result))

        type_params = {
            PACKAGE_PLACEHOLDER + param_name
            for param_name, _ in parse_type_parameters(
                node.child_by_field_name("type_parameters"), self._imports
            )
        }
        for dependency in self._signature_dependencies(parameters, result):
            if dependency in type_params:
                continue
            dependency = qualify(dependency, self._package_path)
            if is_primitive(dependency) or dependency == bucket.qualified_name:
                continue
            bucket.add_to_aggregations(dependency, private=not is_exported(name))

    def _signature_dependencies(self, parameters, result) -> list[str]:
        type_nodes = []
        for parameter_list in (parameters, result):
            if parameter_list is None:
                continue
            if parameter_list.type != "parameter_list":
                type_nodes.append(parameter_list)
                continue
            for declaration in named_children(parameter_list):
                type_node = declaration.child_by_field_name("type")
                if type_node is not None:
                    type_nodes.append(type_node)

        dependencies: list[str] = []
        for type_node in type_nodes:
            _, deps = resolve_type(type_node, self._imports)
            dependencies.extend(deps)
        return list(dict.fromkeys(dependencies))

    def _build_method(self, name: str, parameters, result) -> Method:
        params = parameter_types(parameters, self._imports)
        results = result_types(result, self._imports)
        return Method(
            name=name,
            parameters=[
                Field(
                    name=param_name,
                    type=qualify(param_type, ""),
                    full_type=qualify(param_type, self._package_path),
                )
                for param_name, param_type in params
            ],
            return_values=[qualify(r, "") for r in results],
            full_return_values=[qualify(r, self._package_path) for r in results],
            package_path=self._package_path,
        )
