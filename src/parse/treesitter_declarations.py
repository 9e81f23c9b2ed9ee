"""Tree-sitter based declaration extraction for TypeScript modules."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import TYPE_CHECKING

import structlog
import tree_sitter_typescript
from tree_sitter import Language, Node, Parser

from metadata.builder import ModuleBuilder
from metadata.errors import UnsupportedSourceError
from metadata.models import Access
from parse.type_references import (
    node_text,
    resolve_named_type,
    resolve_type,
    resolve_type_annotation,
    resolve_type_parameters,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from metadata.builder import (
        ClassHandle,
        FunctionHandle,
        InterfaceHandle,
        MethodHandle,
        ParameterHandle,
    )
    from metadata.models import Module, TypeReference

log = structlog.get_logger(__name__)

_GRAMMARS: dict[str, Callable[[], object]] = {
    "typescript": tree_sitter_typescript.language_typescript,
    "tsx": tree_sitter_typescript.language_tsx,
}

_GRAMMAR_BY_SUFFIX = {
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".js": "typescript",
    ".mjs": "typescript",
    ".cjs": "typescript",
    ".tsx": "tsx",
    ".jsx": "tsx",
}

_LANGUAGES: dict[str, Language] = {}

_NAME_NODE_TYPES = frozenset({"identifier", "property_identifier", "type_identifier"})
_PARAMETER_NODE_TYPES = frozenset({"required_parameter", "optional_parameter"})


def grammar_for_path(path: str) -> str:
    """Return the grammar name used to parse ``path``, chosen by its suffix."""
    suffix = PurePosixPath(path.replace("\\", "/")).suffix.lower()
    grammar = _GRAMMAR_BY_SUFFIX.get(suffix)
    if grammar is None:
        msg = f"No grammar available for source path: {path}"
        raise UnsupportedSourceError(msg)
    return grammar


def _get_language(grammar: str) -> Language:
    language = _LANGUAGES.get(grammar)
    if language is None:
        language = Language(_GRAMMARS[grammar]())
        _LANGUAGES[grammar] = language
    return language


def _new_parser(grammar: str) -> Parser:
    """Parsers carry per-parse state, so every extraction gets its own."""
    return Parser(_get_language(grammar))


# ---------------------------------------------------------------------------
# Node helpers
# ---------------------------------------------------------------------------


def _children_of_type(node: Node, node_type: str) -> list[Node]:
    return [child for child in node.named_children if child.type == node_type]


def _declaration_name(node: Node) -> str | None:
    name_node = node.child_by_field_name("name")
    if name_node is not None and name_node.type in _NAME_NODE_TYPES:
        return node_text(name_node)
    return None


def _modifiers(node: Node, name_field: str = "name") -> set[str]:
    """Anonymous keyword tokens (``static``, ``async``, ``*``...) before the name."""
    name_node = node.child_by_field_name(name_field)
    tokens: set[str] = set()
    for child in node.children:
        if name_node is not None and child.start_byte >= name_node.start_byte:
            break
        if not child.is_named:
            tokens.add(child.type)
    return tokens


def _has_token(node: Node, token: str) -> bool:
    return any(not child.is_named and child.type == token for child in node.children)


def _access(node: Node) -> Access | None:
    for child in node.children:
        if child.type == "accessibility_modifier":
            return Access(node_text(child))
    return None


def _is_private_name(node: Node) -> bool:
    name_node = node.child_by_field_name("name")
    return name_node is not None and name_node.type == "private_property_identifier"


def _string_value(node: Node) -> str:
    text = node_text(node)
    if len(text) >= 2 and text[0] in "'\"`" and text[-1] == text[0]:
        return text[1:-1]
    return text


def _resolve_all(nodes: Iterable[Node]) -> list[TypeReference]:
    resolved = (resolve_type(node) for node in nodes)
    return [type_ref for type_ref in resolved if type_ref is not None]


def _skip(node: Node, reason: str) -> None:
    log.debug(
        reason,
        node_type=node.type,
        line=node.start_point[0] + 1,
        col=node.start_point[1] + 1,
    )


# ---------------------------------------------------------------------------
# Parameters and callables
# ---------------------------------------------------------------------------


def _formal_parameters(node: Node | None) -> list[Node]:
    if node is None:
        return []
    return [
        child for child in node.named_children if child.type in _PARAMETER_NODE_TYPES
    ]


def _binding_name(target: Node | None) -> str | None:
    if target is None:
        return None
    if target.type in ("identifier", "this"):
        return node_text(target)
    # Destructuring and member-expression targets have no single name.
    _skip(target, "unnamed_parameter")
    return None


def _apply_parameter(param: ParameterHandle, node: Node) -> None:
    """Fill a parameter handle from a ``required_parameter``/``optional_parameter``."""
    explicit_optional = node.type == "optional_parameter"
    has_default = node.child_by_field_name("value") is not None

    param.set_type(resolve_type_annotation(node.child_by_field_name("type")))
    param.set_optional(explicit_optional or has_default)

    target = node.child_by_field_name("pattern")
    if target is not None and target.type == "rest_pattern":
        param.set_rest(True)
        inner = target.named_children
        target = inner[0] if inner else None

    param.set_name(_binding_name(target))


def _handle_callable(handle: FunctionHandle | MethodHandle, node: Node) -> None:
    handle.set_return_type(
        resolve_type_annotation(node.child_by_field_name("return_type"))
    )
    handle.add_type_params(
        resolve_type_parameters(node.child_by_field_name("type_parameters"))
    )
    for index, param_node in enumerate(
        _formal_parameters(node.child_by_field_name("parameters"))
    ):
        _apply_parameter(handle.add_parameter(index), param_node)


# ---------------------------------------------------------------------------
# Class and interface members
# ---------------------------------------------------------------------------


def _handle_constructor(cls: ClassHandle, node: Node) -> None:
    ctor = cls.add_constructor()
    for index, param_node in enumerate(
        _formal_parameters(node.child_by_field_name("parameters"))
    ):
        param = ctor.add_parameter(index)
        access = _access(param_node)
        readonly = "readonly" in _modifiers(param_node, "pattern")
        if access is not None or readonly:
            param.promote(access, readonly=readonly)
        _apply_parameter(param, param_node)


def _handle_method(
    prototype: ClassHandle | InterfaceHandle, node: Node, *, abstract: bool = False
) -> None:
    tokens = _modifiers(node)
    method = prototype.add_method()
    method.set_name(_declaration_name(node))
    method.set_access(_access(node))
    method.set_static("static" in tokens)
    method.set_abstract(abstract or "abstract" in tokens)
    method.set_async("async" in tokens)
    method.set_generator("*" in tokens)
    _handle_callable(method, node)


def _handle_property(prototype: ClassHandle | InterfaceHandle, node: Node) -> None:
    tokens = _modifiers(node)
    prop = prototype.add_property()
    prop.set_name(_declaration_name(node))
    prop.set_access(_access(node))
    prop.set_static("static" in tokens)
    prop.set_readonly("readonly" in tokens)
    prop.set_optional(_has_token(node, "?"))
    prop.set_type(resolve_type_annotation(node.child_by_field_name("type")))


def _handle_class_body(cls: ClassHandle, body: Node) -> None:
    has_constructor = False
    for member in body.named_children:
        if _is_private_name(member):
            _skip(member, "skipped_private_member")
        elif member.type == "method_definition":
            tokens = _modifiers(member)
            if _declaration_name(member) == "constructor":
                if has_constructor:
                    _skip(member, "skipped_duplicate_constructor")
                    continue
                has_constructor = True
                _handle_constructor(cls, member)
            elif tokens & {"get", "set"}:
                _skip(member, "skipped_accessor")
            else:
                _handle_method(cls, member)
        elif member.type == "abstract_method_signature":
            _handle_method(cls, member, abstract=True)
        elif member.type == "public_field_definition":
            _handle_property(cls, member)
        elif member.type not in ("comment", "decorator"):
            _skip(member, "skipped_class_member")


def _handle_interface_body(iface: InterfaceHandle, body: Node) -> None:
    for member in body.named_children:
        if member.type == "property_signature":
            _handle_property(iface, member)
        elif member.type == "method_signature":
            _handle_method(iface, member)
        elif member.type != "comment":
            # construct, call and index signatures never become members
            _skip(member, "skipped_interface_member")


# ---------------------------------------------------------------------------
# Module-level declarations
# ---------------------------------------------------------------------------


def _first_of_type(node: Node, node_type: str) -> Node | None:
    found = _children_of_type(node, node_type)
    return found[0] if found else None


def _resolve_superclass(clause: Node) -> TypeReference | None:
    value = clause.child_by_field_name("value")
    arguments = clause.child_by_field_name("type_arguments")
    if arguments is None:
        arguments = _first_of_type(clause, "type_arguments")

    # Some grammar versions fold ``Base<T>`` into an instantiation expression.
    if value is not None and value.type == "instantiation_expression":
        arguments = _first_of_type(value, "type_arguments")
        value = value.named_children[0] if value.named_child_count else None

    return resolve_named_type(value, arguments)


def _handle_class(builder: ModuleBuilder, node: Node) -> None:
    cls = builder.add_class(_declaration_name(node))
    cls.set_abstract(node.type == "abstract_class_declaration")
    cls.add_type_params(
        resolve_type_parameters(node.child_by_field_name("type_parameters"))
    )

    for heritage in _children_of_type(node, "class_heritage"):
        for clause in heritage.named_children:
            if clause.type == "extends_clause":
                cls.set_extends(_resolve_superclass(clause))
            elif clause.type == "implements_clause":
                cls.add_implements(_resolve_all(clause.named_children))

    body = node.child_by_field_name("body")
    if body is not None:
        _handle_class_body(cls, body)


def _handle_interface(builder: ModuleBuilder, node: Node) -> None:
    iface = builder.add_interface(_declaration_name(node))
    iface.add_type_params(
        resolve_type_parameters(node.child_by_field_name("type_parameters"))
    )
    for clause in _children_of_type(node, "extends_type_clause"):
        iface.add_extends(_resolve_all(clause.named_children))

    body = node.child_by_field_name("body")
    if body is not None:
        _handle_interface_body(iface, body)


def _handle_function(builder: ModuleBuilder, node: Node) -> None:
    fn = builder.add_function(_declaration_name(node))
    fn.set_async("async" in _modifiers(node))
    fn.set_generator(
        node.type in ("generator_function_declaration", "generator_function")
    )
    _handle_callable(fn, node)


def _variable_keyword(node: Node) -> str:
    kind = node.child_by_field_name("kind")
    if kind is not None:
        return kind.type
    return node.children[0].type if node.child_count else ""


def _handle_variables(builder: ModuleBuilder, node: Node) -> None:
    constant = _variable_keyword(node) == "const"
    for declarator in _children_of_type(node, "variable_declarator"):
        name_node = declarator.child_by_field_name("name")
        if name_node is None or name_node.type != "identifier":
            _skip(declarator, "skipped_destructuring_declarator")
            continue
        variable = builder.add_variable(node_text(name_node))
        variable.set_constant(constant)
        variable.set_type(
            resolve_type_annotation(declarator.child_by_field_name("type"))
        )


def _handle_ambient(builder: ModuleBuilder, node: Node) -> None:
    for child in node.named_children:
        if child.type == "function_signature":
            _handle_function(builder, child)
            return
        if child.type in _DECLARATION_HANDLERS:
            _handle_declaration(builder, child)
            return
    _skip(node, "skipped_statement")


def _handle_overload_signature(_builder: ModuleBuilder, node: Node) -> None:
    # Only the implementing declaration describes the function.
    _skip(node, "skipped_overload_signature")


_DECLARATION_HANDLERS: dict[str, Callable[[ModuleBuilder, Node], None]] = {
    "class_declaration": _handle_class,
    "abstract_class_declaration": _handle_class,
    "interface_declaration": _handle_interface,
    "function_declaration": _handle_function,
    "generator_function_declaration": _handle_function,
    "function_signature": _handle_overload_signature,
    "lexical_declaration": _handle_variables,
    "variable_declaration": _handle_variables,
    "ambient_declaration": _handle_ambient,
}


def _handle_declaration(builder: ModuleBuilder, node: Node) -> None:
    handler = _DECLARATION_HANDLERS.get(node.type)
    if handler is None:
        _skip(node, "skipped_statement")
        return
    handler(builder, node)


def _declared_names(node: Node) -> list[str]:
    if node.type == "ambient_declaration":
        names: list[str] = []
        for child in node.named_children:
            names.extend(_declared_names(child))
        return names
    if node.type in ("lexical_declaration", "variable_declaration"):
        return [
            node_text(name_node)
            for declarator in _children_of_type(node, "variable_declarator")
            if (name_node := declarator.child_by_field_name("name")) is not None
            and name_node.type == "identifier"
        ]
    name = _declaration_name(node)
    return [name] if name is not None else []


def _handle_import(builder: ModuleBuilder, node: Node) -> None:
    source_node = node.child_by_field_name("source")
    if source_node is None:
        return
    source = _string_value(source_node)

    for clause in _children_of_type(node, "import_clause"):
        for binding in clause.named_children:
            if binding.type == "identifier":
                builder.add_import(node_text(binding), source)
            elif binding.type == "namespace_import":
                for ident in _children_of_type(binding, "identifier"):
                    builder.add_import(node_text(ident), source)
            elif binding.type == "named_imports":
                for spec in _children_of_type(binding, "import_specifier"):
                    local = spec.child_by_field_name("alias")
                    if local is None:
                        local = spec.child_by_field_name("name")
                    if local is not None:
                        builder.add_import(node_text(local), source)


# Named class and function expressions in `export default` position declare a
# binding just like their declaration forms.
_DEFAULT_EXPRESSION_HANDLERS: dict[str, Callable[[ModuleBuilder, Node], None]] = {
    "class": _handle_class,
    "function_expression": _handle_function,
    "function": _handle_function,
    "generator_function": _handle_function,
}


def _handle_default_value(builder: ModuleBuilder, value: Node) -> None:
    if value.type == "identifier":
        builder.add_export("default", node_text(value))
        return
    handler = _DEFAULT_EXPRESSION_HANDLERS.get(value.type)
    if handler is None:
        _skip(value, "skipped_default_export")
        return
    name = _declaration_name(value)
    if name is not None:
        builder.add_export("default", name)
    handler(builder, value)


def _handle_export(builder: ModuleBuilder, node: Node) -> None:
    declaration = node.child_by_field_name("declaration")
    if declaration is not None:
        is_default = _has_token(node, "default")
        for local in _declared_names(declaration):
            builder.add_export("default" if is_default else local, local)
        _handle_declaration(builder, declaration)
        return

    if node.child_by_field_name("source") is not None:
        _skip(node, "skipped_reexport")
        return

    value = node.child_by_field_name("value")
    if value is not None:
        _handle_default_value(builder, value)

    for clause in _children_of_type(node, "export_clause"):
        for spec in _children_of_type(clause, "export_specifier"):
            name_node = spec.child_by_field_name("name")
            if name_node is None:
                continue
            local = node_text(name_node)
            alias_node = spec.child_by_field_name("alias")
            builder.add_export(
                node_text(alias_node) if alias_node is not None else local, local
            )


def extract_module(path: str, source: str | bytes) -> Module:
    """Extract declaration metadata from TypeScript source text.

    Args:
        path: Source path recorded on the module; its suffix selects the grammar
        source: Source text, as str or UTF-8 bytes

    Returns:
        The sealed metadata tree for the module.

    Raises:
        UnsupportedSourceError: If no grammar is registered for the path suffix.
    """
    grammar = grammar_for_path(path)
    source_bytes = source.encode("utf8") if isinstance(source, str) else source

    tree = _new_parser(grammar).parse(source_bytes)
    root_node = tree.root_node
    if root_node.has_error:
        log.debug("syntax_errors_present", path=path)

    builder = ModuleBuilder(path)
    for statement in root_node.named_children:
        if statement.type == "comment":
            continue
        if statement.type == "import_statement":
            _handle_import(builder, statement)
        elif statement.type == "export_statement":
            _handle_export(builder, statement)
        else:
            _handle_declaration(builder, statement)

    module = builder.build()
    log.debug("module_extracted", path=path, declarations=len(module.children))
    return module


__all__ = ["extract_module", "grammar_for_path"]
