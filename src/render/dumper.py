"""Canonical text rendering of declaration metadata.

Output depends only on the metadata tree, never on the formatting of the
source it was extracted from, so equal trees always render to identical text.
Rendering never mutates the tree and never raises on a tree the builder can
produce; nodes of an unrecognized kind render as ``<unknown>``.
"""

from __future__ import annotations

from metadata.models import (
    Class,
    Constructor,
    Function,
    Interface,
    Method,
    Module,
    Parameter,
    Primitive,
    Property,
    TypeIdentifier,
    TypeReference,
    Variable,
)

UNKNOWN_RENDERING = "<unknown>"


def render(element: object) -> str:
    """Render any metadata node to its canonical text."""
    match element:
        case Module():
            return _dump_module(element)
        case Class() | Interface():
            return _dump_prototype(element)
        case Variable():
            return _dump_variable(element)
        case Function():
            return f"function {_dump_callable(element)}"
        case Method():
            return _dump_member_prefix(element) + _dump_callable(element)
        case Property():
            return _dump_member_prefix(element) + _dump_value(element)
        case Constructor():
            return _dump_constructor(element)
        case Parameter():
            return _dump_parameter(element)
        case TypeReference():
            return _dump_type(element)
        case _:
            return UNKNOWN_RENDERING


def _dump_module(element: Module) -> str:
    return "\n".join(render(child) for child in element.children)


def _dump_variable(element: Variable) -> str:
    keyword = "const" if element.constant else "let"
    return f"{keyword} {_dump_value(element)}"


def _dump_constructor(element: Constructor) -> str:
    return f"constructor({_dump_parameters(element.parameters)})"


def _dump_member_prefix(element: Property | Method) -> str:
    prefixes: list[str] = []
    if element.access is not None:
        prefixes.append(element.access.value)
    if element.static:
        prefixes.append("static")
    if isinstance(element, Method) and element.abstract:
        prefixes.append("abstract")
    return " ".join(prefixes) + (" " if prefixes else "")


def _dump_callable(element: Method | Function) -> str:
    name = _dump_name(element)
    if element.is_async:
        name = f"async {name}"
    if element.is_generator:
        name += "*"
    type_params = _dump_type_parameter_names(element.type_parameters)
    params = _dump_parameters(element.parameters)
    return f"{name}{type_params}({params}){_dump_type_annotation(element.return_type)}"


def _dump_prototype(element: Class | Interface) -> str:
    head: list[str] = []
    if isinstance(element, Class) and element.abstract:
        head.append("abstract")
    head.append(element.kind)
    head.append(
        _dump_name(element) + _dump_type_parameter_names(element.type_parameters)
    )
    if element.extends:
        head.extend(("extends", _dump_type_list(element.extends)))
    if isinstance(element, Class) and element.implements:
        head.extend(("implements", _dump_type_list(element.implements)))

    body = [render(prop) for prop in element.properties]
    if isinstance(element, Class) and element.constructor is not None:
        body.append(_dump_constructor(element.constructor))
    body.extend(render(method) for method in element.methods)

    header = " ".join(head)
    if not body:
        return f"{header} {{}}"
    lines = "\n".join(f"\t{line}" for line in body)
    return f"{header} {{\n{lines}\n}}"


def _dump_parameters(params: tuple[Parameter, ...]) -> str:
    return ", ".join(_dump_parameter(param) for param in params)


def _dump_parameter(param: Parameter) -> str:
    prefix = f"{param.access.value} " if param.access is not None else ""
    if param.readonly:
        prefix += "readonly "
    if param.rest:
        prefix += "..."
    return prefix + _dump_value(param)


def _dump_value(element: Variable | Property | Parameter) -> str:
    optional = "?" if not isinstance(element, Variable) and element.optional else ""
    return _dump_name(element) + optional + _dump_type_annotation(element.type)


def _dump_name(
    element: Variable | Property | Parameter | Function | Method | Class | Interface,
) -> str:
    if element.name:
        return element.name
    if isinstance(element, Parameter):
        return f"${element.index}"
    return "_"


def _dump_type_list(types: TypeReference | tuple[TypeReference, ...]) -> str:
    if isinstance(types, TypeReference):
        return _dump_type(types)
    return ", ".join(_dump_type(type_ref) for type_ref in types)


def _dump_type_annotation(type_ref: TypeReference | None) -> str:
    rendered = _dump_type(type_ref) if type_ref is not None else ""
    return f": {rendered}" if rendered else ""


def _dump_type(type_ref: TypeReference) -> str:
    return _dump_type_identifier(type_ref.name) + _dump_type_arguments(
        type_ref.type_arguments
    )


def _dump_type_arguments(arguments: tuple[TypeReference, ...] | None) -> str:
    if arguments is None:
        return ""
    return "<" + ", ".join(_dump_type(arg) for arg in arguments) + ">"


def _dump_type_parameter_names(names: tuple[str, ...] | None) -> str:
    if names is None:
        return ""
    return "<" + ", ".join(names) + ">"


def _dump_type_identifier(name: TypeIdentifier) -> str:
    return name.value if isinstance(name, Primitive) else name


__all__ = ["UNKNOWN_RENDERING", "render"]
