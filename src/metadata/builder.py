"""Incremental builders for declaration metadata trees.

Handles collect mutable state while a syntax tree is walked and are sealed
into frozen models by ``build()``. Each handle only exposes the operations
valid for its kind: only a constructor hands out parameters that can be
promoted to class properties, and only a class accepts a constructor.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from metadata.errors import StructuralViolation
from metadata.models import (
    Class,
    Constructor,
    Function,
    Interface,
    Method,
    Module,
    Parameter,
    Property,
    Variable,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from metadata.models import Access, TypeReference


def _next_index(parameters: list[ParameterHandle], index: int | None) -> int:
    expected = len(parameters)
    if index is None:
        return expected
    if index != expected:
        msg = f"Parameter index {index} is out of order; expected {expected}"
        raise StructuralViolation(msg)
    return index


def _extend_names(
    current: list[str] | None, names: Iterable[str] | None
) -> list[str] | None:
    if names is None:
        return current
    return [*(current or []), *names]


def _seal_types(types: list[TypeReference]) -> tuple[TypeReference, ...] | None:
    return tuple(types) if types else None


class ParameterHandle:
    """Parameter of a function or method."""

    def __init__(self, index: int) -> None:
        self.index = index
        self._name: str | None = None
        self._optional = False
        self._rest = False
        self._type: TypeReference | None = None

    def set_name(self, name: str | None) -> None:
        self._name = name

    def set_optional(self, optional: bool) -> None:
        self._optional = optional

    def set_rest(self, rest: bool) -> None:
        self._rest = rest

    def set_type(self, type_ref: TypeReference | None) -> None:
        self._type = type_ref

    def build(self) -> Parameter:
        return Parameter(
            index=self.index,
            name=self._name,
            optional=self._optional,
            rest=self._rest,
            type=self._type,
        )


class ConstructorParameterHandle(ParameterHandle):
    """Constructor parameter that may also declare a property on its class.

    Once promoted, the name, type and optional flag set on the parameter are
    mirrored onto the synthesized property.
    """

    def __init__(self, index: int, owner: ClassHandle) -> None:
        super().__init__(index)
        self._owner = owner
        self._property: PropertyHandle | None = None
        self._access: Access | None = None
        self._readonly = False

    def promote(
        self, access: Access | None, *, readonly: bool = False
    ) -> PropertyHandle:
        if self._property is not None:
            msg = f"Constructor parameter {self.index} is already promoted"
            raise StructuralViolation(msg)

        prop = self._owner.add_property()
        prop.set_access(access)
        prop.set_readonly(readonly)
        prop.set_name(self._name)
        prop.set_optional(self._optional)
        prop.set_type(self._type)

        self._property = prop
        self._access = access
        self._readonly = readonly
        return prop

    def set_name(self, name: str | None) -> None:
        super().set_name(name)
        if self._property is not None:
            self._property.set_name(name)

    def set_optional(self, optional: bool) -> None:
        super().set_optional(optional)
        if self._property is not None:
            self._property.set_optional(optional)

    def set_type(self, type_ref: TypeReference | None) -> None:
        super().set_type(type_ref)
        if self._property is not None:
            self._property.set_type(type_ref)

    def build(self) -> Parameter:
        return super().build().model_copy(
            update={"access": self._access, "readonly": self._readonly}
        )


class _MemberHandle:
    def __init__(self) -> None:
        self._name: str | None = None
        self._access: Access | None = None
        self._static = False

    def set_name(self, name: str | None) -> None:
        self._name = name

    def set_access(self, access: Access | None) -> None:
        self._access = access

    def set_static(self, static: bool) -> None:
        self._static = static


class PropertyHandle(_MemberHandle):
    def __init__(self) -> None:
        super().__init__()
        self._readonly = False
        self._optional = False
        self._type: TypeReference | None = None

    def set_readonly(self, readonly: bool) -> None:
        self._readonly = readonly

    def set_optional(self, optional: bool) -> None:
        self._optional = optional

    def set_type(self, type_ref: TypeReference | None) -> None:
        self._type = type_ref

    def build(self) -> Property:
        return Property(
            name=self._name,
            access=self._access,
            static=self._static,
            readonly=self._readonly,
            optional=self._optional,
            type=self._type,
        )


class _CallableHandle:
    def __init__(self) -> None:
        self._async = False
        self._generator = False
        self._parameters: list[ParameterHandle] = []
        self._type_parameters: list[str] | None = None
        self._return_type: TypeReference | None = None

    def set_async(self, is_async: bool) -> None:
        self._async = is_async

    def set_generator(self, is_generator: bool) -> None:
        self._generator = is_generator

    def set_return_type(self, type_ref: TypeReference | None) -> None:
        self._return_type = type_ref

    def add_type_params(self, names: Iterable[str] | None) -> None:
        self._type_parameters = _extend_names(self._type_parameters, names)

    def add_parameter(self, index: int | None = None) -> ParameterHandle:
        param = ParameterHandle(_next_index(self._parameters, index))
        self._parameters.append(param)
        return param

    def _sealed_parameters(self) -> tuple[Parameter, ...]:
        return tuple(param.build() for param in self._parameters)

    def _sealed_type_parameters(self) -> tuple[str, ...] | None:
        if self._type_parameters is None:
            return None
        return tuple(self._type_parameters)


class MethodHandle(_MemberHandle, _CallableHandle):
    def __init__(self) -> None:
        _MemberHandle.__init__(self)
        _CallableHandle.__init__(self)
        self._abstract = False

    def set_abstract(self, abstract: bool) -> None:
        self._abstract = abstract

    def build(self) -> Method:
        return Method(
            name=self._name,
            access=self._access,
            static=self._static,
            abstract=self._abstract,
            is_async=self._async,
            is_generator=self._generator,
            parameters=self._sealed_parameters(),
            type_parameters=self._sealed_type_parameters(),
            return_type=self._return_type,
        )


class FunctionHandle(_CallableHandle):
    def __init__(self, name: str | None) -> None:
        super().__init__()
        self._name = name

    def build(self) -> Function:
        return Function(
            name=self._name,
            is_async=self._async,
            is_generator=self._generator,
            parameters=self._sealed_parameters(),
            type_parameters=self._sealed_type_parameters(),
            return_type=self._return_type,
        )


class ConstructorHandle:
    def __init__(self, owner: ClassHandle) -> None:
        self._owner = owner
        self._parameters: list[ParameterHandle] = []

    def add_parameter(self, index: int | None = None) -> ConstructorParameterHandle:
        param = ConstructorParameterHandle(
            _next_index(self._parameters, index), self._owner
        )
        self._parameters.append(param)
        return param

    def build(self) -> Constructor:
        return Constructor(
            parameters=tuple(param.build() for param in self._parameters)
        )


class _PrototypeHandle:
    def __init__(self, name: str | None) -> None:
        self._name = name
        self._type_parameters: list[str] | None = None
        self._properties: list[PropertyHandle] = []
        self._methods: list[MethodHandle] = []

    def add_type_params(self, names: Iterable[str] | None) -> None:
        self._type_parameters = _extend_names(self._type_parameters, names)

    def add_property(self) -> PropertyHandle:
        prop = PropertyHandle()
        self._properties.append(prop)
        return prop

    def add_method(self) -> MethodHandle:
        method = MethodHandle()
        self._methods.append(method)
        return method

    def _sealed_type_parameters(self) -> tuple[str, ...] | None:
        if self._type_parameters is None:
            return None
        return tuple(self._type_parameters)


class ClassHandle(_PrototypeHandle):
    def __init__(self, name: str | None) -> None:
        super().__init__(name)
        self._abstract = False
        self._extends: TypeReference | None = None
        self._implements: list[TypeReference] = []
        self._constructor: ConstructorHandle | None = None

    def set_abstract(self, abstract: bool) -> None:
        self._abstract = abstract

    def set_extends(self, type_ref: TypeReference | None) -> None:
        self._extends = type_ref

    def add_implements(self, types: Iterable[TypeReference]) -> None:
        self._implements.extend(types)

    def add_constructor(self) -> ConstructorHandle:
        if self._constructor is not None:
            msg = f"Class {self._name or '_'} already has a constructor"
            raise StructuralViolation(msg)
        self._constructor = ConstructorHandle(self)
        return self._constructor

    def build(self) -> Class:
        return Class(
            name=self._name,
            abstract=self._abstract,
            extends=self._extends,
            implements=_seal_types(self._implements),
            type_parameters=self._sealed_type_parameters(),
            properties=tuple(prop.build() for prop in self._properties),
            methods=tuple(method.build() for method in self._methods),
            constructor=(
                self._constructor.build() if self._constructor is not None else None
            ),
        )


class InterfaceHandle(_PrototypeHandle):
    def __init__(self, name: str | None) -> None:
        super().__init__(name)
        self._extends: list[TypeReference] = []

    def add_extends(self, types: Iterable[TypeReference]) -> None:
        self._extends.extend(types)

    def add_constructor(self) -> ConstructorHandle:
        msg = f"Interface {self._name or '_'} cannot declare a constructor"
        raise StructuralViolation(msg)

    def build(self) -> Interface:
        return Interface(
            name=self._name,
            extends=_seal_types(self._extends),
            type_parameters=self._sealed_type_parameters(),
            properties=tuple(prop.build() for prop in self._properties),
            methods=tuple(method.build() for method in self._methods),
        )


class VariableHandle:
    def __init__(self, name: str | None) -> None:
        self._name = name
        self._constant = False
        self._type: TypeReference | None = None

    def set_constant(self, constant: bool) -> None:
        self._constant = constant

    def set_type(self, type_ref: TypeReference | None) -> None:
        self._type = type_ref

    def build(self) -> Variable:
        return Variable(name=self._name, constant=self._constant, type=self._type)


_DeclarationHandle = ClassHandle | InterfaceHandle | VariableHandle | FunctionHandle


class ModuleBuilder:
    """Root builder; owns the declaration handles of one module.

    A builder is used by exactly one extraction and is not shared.
    """

    def __init__(self, path: str) -> None:
        self._path = path
        self._children: list[_DeclarationHandle] = []
        self._imports: dict[str, str] = {}
        self._exports: dict[str, str] = {}

    def add_class(self, name: str | None) -> ClassHandle:
        handle = ClassHandle(name)
        self._children.append(handle)
        return handle

    def add_interface(self, name: str | None) -> InterfaceHandle:
        handle = InterfaceHandle(name)
        self._children.append(handle)
        return handle

    def add_variable(self, name: str | None) -> VariableHandle:
        handle = VariableHandle(name)
        self._children.append(handle)
        return handle

    def add_function(self, name: str | None) -> FunctionHandle:
        handle = FunctionHandle(name)
        self._children.append(handle)
        return handle

    def add_import(self, local: str, source: str) -> None:
        self._imports[local] = source

    def add_export(self, exported: str, local: str) -> None:
        self._exports[exported] = local

    def build(self) -> Module:
        return Module(
            path=self._path,
            children=tuple(child.build() for child in self._children),
            imports=dict(self._imports),
            exports=dict(self._exports),
        )


__all__ = [
    "ClassHandle",
    "ConstructorHandle",
    "ConstructorParameterHandle",
    "FunctionHandle",
    "InterfaceHandle",
    "MethodHandle",
    "ModuleBuilder",
    "ParameterHandle",
    "PropertyHandle",
    "VariableHandle",
]
