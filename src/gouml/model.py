"""Semantic model of the declared Go types in an analysis session."""

from __future__ import annotations

from dataclasses import dataclass, field

# Placeholder standing in for "the package being parsed" inside resolved type
# strings. Replaced through qualify() once the owning package is known.
PACKAGE_PLACEHOLDER = "{packageName}"

# Pseudo package used to qualify built-in primitive names in edges.
BUILTIN_PACKAGE = "__builtin__"

KIND_STRUCT = "struct"
KIND_INTERFACE = "interface"
KIND_ALIAS = "alias"
KIND_FUNCTIONS = "functions"  # synthetic bucket of free functions

_PRIMITIVE_NAMES = (
    "bool",
    "string",
    "int",
    "int8",
    "int16",
    "int32",
    "int64",
    "uint",
    "uint8",
    "uint16",
    "uint32",
    "uint64",
    "uintptr",
    "byte",
    "rune",
    "float32",
    "float64",
    "complex64",
    "complex128",
    "error",
    "any",
)

PRIMITIVES = frozenset(_PRIMITIVE_NAMES) | frozenset(
    f"*{name}" for name in _PRIMITIVE_NAMES
)


def is_primitive(type_name: str) -> bool:
    return type_name in PRIMITIVES


def qualify(text: str, package_path: str) -> str:
    """Replace the package placeholder in *text* with *package_path*.

    An empty *package_path* removes the placeholder, leaving the bare name.
    """
    prefix = f"{package_path}." if package_path else ""
    return text.replace(PACKAGE_PLACEHOLDER, prefix)


def is_private(name: str) -> bool:
    """Go visibility: a lowercase first character means unexported."""
    return bool(name) and name[0].islower()


def is_exported(name: str) -> bool:
    return bool(name) and name[0].isupper()


def strip_pointer(type_name: str) -> str:
    return type_name.lstrip("*")


def format_return_values(return_values: list[str]) -> str:
    """``""`` for none, the bare type for one, ``(a, b)`` for several."""
    if len(return_values) > 1:
        return f"({', '.join(return_values)})"
    return "".join(return_values)


@dataclass
class Field:
    """A struct field or a function parameter."""

    name: str  # empty for unnamed parameters
    type: str
    full_type: str = ""  # qualified against the declaring package


@dataclass
class Method:
    """A method, interface member or free function signature."""

    name: str
    parameters: list[Field] = field(default_factory=list)
    return_values: list[str] = field(default_factory=list)
    full_return_values: list[str] = field(default_factory=list)
    package_path: str = ""

    def signature_equals(self, other: Method) -> bool:
        """Compare name, parameter types and return types in declared order.

        Parameter names are ignored. Types are compared in their fully
        qualified form so that same-named types of different packages differ.
        """
        if self.name != other.name:
            return False
        if len(self.parameters) != len(other.parameters):
            return False
        for mine, theirs in zip(self.parameters, other.parameters):
            if (mine.full_type or mine.type) != (theirs.full_type or theirs.type):
                return False
        return self._full_returns() == other._full_returns()

    def _full_returns(self) -> list[str]:
        return self.full_return_values or self.return_values


@dataclass
class TypeParameter:
    name: str
    constraint: str


@dataclass(frozen=True)
class Alias:
    """A non-struct, non-interface type declaration (``type ID int``)."""

    name: str
    package_name: str
    alias_of: str

    @property
    def sort_key(self) -> tuple[str, str, str]:
        return (self.name, self.package_name, self.alias_of)

    @property
    def target(self) -> str:
        if "." in self.alias_of or not self.package_name:
            return self.alias_of
        return f"{self.package_name}.{self.alias_of}"


@dataclass
class TypeRecord:
    """One declared type name within a package.

    Records are created as placeholders (``kind == ""``) on first reference;
    the declaration fills in the kind.
    """

    name: str
    package_path: str
    kind: str = ""  # "struct", "interface", "alias", "functions" or "" (placeholder)
    fields: list[Field] = field(default_factory=list)
    methods: list[Method] = field(default_factory=list)
    composition: set[str] = field(default_factory=set)
    extends: set[str] = field(default_factory=set)
    aggregations: set[str] = field(default_factory=set)
    private_aggregations: set[str] = field(default_factory=set)
    type_parameters: list[TypeParameter] = field(default_factory=list)

    @property
    def qualified_name(self) -> str:
        return f"{self.package_path}.{self.name}"

    def add_to_composition(self, type_name: str) -> None:
        if type_name:
            self.composition.add(strip_pointer(type_name))

    def add_to_extends(self, type_name: str) -> None:
        if type_name:
            self.extends.add(strip_pointer(type_name))

    def add_to_aggregations(self, type_name: str, *, private: bool = False) -> None:
        if not type_name:
            return
        target = self.private_aggregations if private else self.aggregations
        target.add(strip_pointer(type_name))

    def is_type_parameter(self, dependency: str) -> bool:
        """Return True if *dependency* names one of this type's own type parameters."""
        for param in self.type_parameters:
            if dependency in (
                PACKAGE_PLACEHOLDER + param.name,
                qualify(PACKAGE_PLACEHOLDER + param.name, self.package_path),
            ):
                return True
        return False


@dataclass(eq=False)
class PackageNode:
    """A namespace in the package hierarchy."""

    short_name: str
    full_path: str  # dotted, e.g. "project.pkg.client"
    parent: PackageNode | None = None
    children: dict[str, PackageNode] = field(default_factory=dict)

    @property
    def depth(self) -> int:
        return self.full_path.count(".") + 1

    def add_child(self, child: PackageNode) -> None:
        child.parent = self
        self.children[child.full_path] = child


def package_tree(package_paths) -> list[PackageNode]:
    """Build a hierarchy from dotted package paths; return the top-level nodes.

    Every dotted prefix of a path becomes a node of its own.
    """
    nodes: dict[str, PackageNode] = {}
    top_level: dict[str, PackageNode] = {}
    for package_path in sorted(package_paths):
        parent: PackageNode | None = None
        parts = package_path.split(".")
        for i, part in enumerate(parts):
            path = ".".join(parts[: i + 1])
            node = nodes.get(path)
            if node is None:
                node = PackageNode(short_name=part, full_path=path)
                nodes[path] = node
                if parent is None:
                    top_level[path] = node
                else:
                    parent.add_child(node)
            parent = node
    return [top_level[path] for path in sorted(top_level)]


@dataclass
class EntityModel:
    """All types of one analysis session, keyed by package path then type name."""

    packages: dict[str, dict[str, TypeRecord]] = field(default_factory=dict)
    aliases: dict[str, Alias] = field(default_factory=dict)

    def get_or_create(self, package_path: str, name: str) -> TypeRecord:
        """Return the record for *name*, inserting a placeholder if needed."""
        types = self.packages.setdefault(package_path, {})
        record = types.get(name)
        if record is None:
            record = TypeRecord(name=name, package_path=package_path)
            types[name] = record
        return record

    def lookup(self, qualified_name: str) -> TypeRecord | None:
        """Find a record by ``package.path.Name``; None if unknown."""
        package_path, _, name = qualified_name.rpartition(".")
        if not package_path:
            return None
        return self.packages.get(package_path, {}).get(name)

    def records(self, kind: str | None = None) -> list[TypeRecord]:
        """All records (optionally of one *kind*) in stable package/name order."""
        result: list[TypeRecord] = []
        for package_path in sorted(self.packages):
            types = self.packages[package_path]
            for name in sorted(types):
                record = types[name]
                if kind is None or record.kind == kind:
                    result.append(record)
        return result

    def add_alias(self, alias: Alias) -> None:
        self.aliases[alias.name] = alias

    def sorted_aliases(self) -> list[Alias]:
        return sorted(self.aliases.values(), key=lambda a: a.sort_key)
