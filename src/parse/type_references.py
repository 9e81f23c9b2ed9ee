"""Resolution of Tree-sitter type nodes into metadata type references.

Resolution is best effort: any type shape outside primitive keywords and named
references (unions, arrays, literals, qualified names, function and object
types) resolves to ``None`` instead of raising.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from metadata.models import Primitive, TypeReference

if TYPE_CHECKING:
    from tree_sitter import Node

log = structlog.get_logger(__name__)

PRIMITIVE_TYPES: dict[str, Primitive] = {
    "any": Primitive.UNKNOWN,
    "unknown": Primitive.UNKNOWN,
    "undefined": Primitive.UNDEFINED,
    "never": Primitive.VOID,
    "void": Primitive.VOID,
    "boolean": Primitive.BOOLEAN,
    "bigint": Primitive.BIGINT,
    "number": Primitive.NUMBER,
    "string": Primitive.STRING,
    "symbol": Primitive.SYMBOL,
    "object": Primitive.OBJECT,
    "null": Primitive.OBJECT,
}

# Node types whose text may be a primitive keyword. Depending on the grammar
# version ``undefined``/``null`` surface as literal types and ``bigint`` as a
# plain type identifier.
_KEYWORD_NODE_TYPES = frozenset({"predefined_type", "literal_type", "type_identifier"})


def node_text(node: Node) -> str:
    return node.text.decode("utf8") if node.text else ""


def _primitive(node: Node) -> Primitive | None:
    if node.type not in _KEYWORD_NODE_TYPES:
        return None
    return PRIMITIVE_TYPES.get(node_text(node))


def resolve_type_arguments(node: Node | None) -> tuple[TypeReference, ...] | None:
    """Resolve a ``type_arguments`` node, dropping arguments that do not resolve.

    Returns ``None`` when there is no argument list at all.
    """
    if node is None:
        return None
    resolved = (resolve_type(arg) for arg in node.named_children)
    return tuple(arg for arg in resolved if arg is not None)


def resolve_named_type(
    name_node: Node | None, arguments_node: Node | None = None
) -> TypeReference | None:
    """Resolve a named reference such as ``Foo`` or ``Foo<A, B>``.

    ``name_node`` may be a type identifier, a generic type, or (in class
    ``extends`` clauses) a plain expression identifier.
    """
    if name_node is None:
        return None

    if name_node.type == "generic_type":
        arguments_node = name_node.child_by_field_name("type_arguments")
        name_node = name_node.child_by_field_name("name")
        if name_node is None:
            return None

    if name_node.type not in ("identifier", "type_identifier"):
        log.debug("unresolved_type_reference", node_type=name_node.type)
        return None

    return TypeReference(
        name=node_text(name_node),
        type_arguments=resolve_type_arguments(arguments_node),
    )


def resolve_type(node: Node | None) -> TypeReference | None:
    if node is None:
        return None

    primitive = _primitive(node)
    if primitive is not None:
        return TypeReference(name=primitive)

    if node.type in ("type_identifier", "generic_type"):
        return resolve_named_type(node)

    log.debug("unsupported_type_shape", node_type=node.type)
    return None


def resolve_type_annotation(node: Node | None) -> TypeReference | None:
    """Resolve a ``type_annotation`` node (``: T``) into its type reference."""
    if node is None or node.type != "type_annotation":
        return None
    children = node.named_children
    return resolve_type(children[0]) if children else None


def resolve_type_parameters(node: Node | None) -> list[str] | None:
    """Collect declared type parameter names from a ``type_parameters`` node."""
    if node is None:
        return None
    names: list[str] = []
    for param in node.named_children:
        if param.type != "type_parameter":
            continue
        name_node = param.child_by_field_name("name")
        if name_node is not None:
            names.append(node_text(name_node))
    return names


__all__ = [
    "PRIMITIVE_TYPES",
    "node_text",
    "resolve_named_type",
    "resolve_type",
    "resolve_type_annotation",
    "resolve_type_arguments",
    "resolve_type_parameters",
]
