"""Post-extraction analysis: structural interface conformance."""

from __future__ import annotations

import logging

from gouml.model import KIND_INTERFACE, KIND_STRUCT, EntityModel, Method, TypeRecord

logger = logging.getLogger(__name__)


def interface_methods(
    model: EntityModel,
    interface: TypeRecord,
    _seen: set[str] | None = None,
) -> list[Method]:
    """Return the interface's own methods plus those of embedded interfaces.

    Embedded interfaces are looked up in *model*; unknown names (for instance
    from packages outside the scan) contribute nothing.
    """
    seen = _seen if _seen is not None else set()
    seen.add(interface.qualified_name)
    methods = list(interface.methods)
    for embedded_name in sorted(interface.composition):
        qualified = embedded_name if "." in embedded_name else (
            f"{interface.package_path}.{embedded_name}"
        )
        if qualified in seen:
            continue
        embedded = model.lookup(qualified)
        if embedded is not None and embedded.kind == KIND_INTERFACE:
            methods.extend(interface_methods(model, embedded, seen))
    return methods


def conforms(record: TypeRecord, methods: list[Method]) -> bool:
    """True if *record* has a method with an equal signature for each of *methods*.

    An empty method list never conforms.
    """
    if not methods:
        return False
    return all(
        any(own.signature_equals(wanted) for own in record.methods)
        for wanted in methods
    )


def resolve_implementations(model: EntityModel) -> int:
    """Add every interface a struct structurally implements to its ``extends``.

    Returns the number of conformance edges found.
    """
    interfaces = [
        (interface, interface_methods(model, interface))
        for interface in model.records(KIND_INTERFACE)
    ]
    count = 0
    for struct in model.records(KIND_STRUCT):
        for interface, methods in interfaces:
            if conforms(struct, methods):
                struct.add_to_extends(interface.qualified_name)
                count += 1
                logger.debug("%s implements %s", struct.qualified_name, interface.qualified_name)
    logger.debug("Conformance: %d edges", count)
    return count
