"""Declaration metadata models.

The metadata tree is a closed tagged union keyed on ``kind``. Nodes are frozen
once sealed by the builder and every ordered collection is a tuple, so a tree
handed to a caller can be rendered or serialized any number of times without
coordination.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

# Schema version constant
SCHEMA_VERSION = 1


class Access(str, Enum):
    """Member visibility. An absent modifier is represented by ``None``."""

    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"


class Primitive(str, Enum):
    """Canonical identifiers for built-in type keywords."""

    UNKNOWN = "unknown"
    UNDEFINED = "undefined"
    VOID = "void"
    BOOLEAN = "boolean"
    BIGINT = "bigint"
    NUMBER = "number"
    STRING = "string"
    SYMBOL = "symbol"
    OBJECT = "object"


# Primitive names resolve to the enum first; anything else stays a plain name.
TypeIdentifier = Annotated[Union[Primitive, str], Field(union_mode="left_to_right")]


class _Node(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class TypeReference(_Node):
    """A named type, optionally instantiated with type arguments."""

    kind: Literal["type"] = "type"
    name: TypeIdentifier
    type_arguments: tuple[TypeReference, ...] | None = None


class Parameter(_Node):
    kind: Literal["parameter"] = "parameter"
    index: int = Field(ge=0, description="Position within the owning callable")
    name: str | None = None
    optional: bool = False
    rest: bool = False
    type: TypeReference | None = None
    access: Access | None = Field(
        default=None,
        description="Set only on constructor parameters promoted to properties",
    )
    readonly: bool = False


class Property(_Node):
    kind: Literal["property"] = "property"
    name: str | None = None
    access: Access | None = None
    static: bool = False
    readonly: bool = False
    optional: bool = False
    type: TypeReference | None = None


class Method(_Node):
    kind: Literal["method"] = "method"
    name: str | None = None
    access: Access | None = None
    static: bool = False
    abstract: bool = False
    is_async: bool = False
    is_generator: bool = False
    parameters: tuple[Parameter, ...] = ()
    type_parameters: tuple[str, ...] | None = None
    return_type: TypeReference | None = None


class Constructor(_Node):
    kind: Literal["constructor"] = "constructor"
    parameters: tuple[Parameter, ...] = ()


class Class(_Node):
    kind: Literal["class"] = "class"
    name: str | None = None
    abstract: bool = False
    extends: TypeReference | None = None
    implements: tuple[TypeReference, ...] | None = None
    type_parameters: tuple[str, ...] | None = None
    properties: tuple[Property, ...] = ()
    methods: tuple[Method, ...] = ()
    constructor: Constructor | None = None


class Interface(_Node):
    kind: Literal["interface"] = "interface"
    name: str | None = None
    extends: tuple[TypeReference, ...] | None = None
    type_parameters: tuple[str, ...] | None = None
    properties: tuple[Property, ...] = ()
    methods: tuple[Method, ...] = ()


class Variable(_Node):
    kind: Literal["variable"] = "variable"
    name: str | None = None
    constant: bool = False
    type: TypeReference | None = None


class Function(_Node):
    kind: Literal["function"] = "function"
    name: str | None = None
    is_async: bool = False
    is_generator: bool = False
    parameters: tuple[Parameter, ...] = ()
    type_parameters: tuple[str, ...] | None = None
    return_type: TypeReference | None = None


Declaration = Annotated[
    Union[Class, Interface, Variable, Function],
    Field(discriminator="kind"),
]


class Module(_Node):
    """Root of a metadata tree, one per extracted source file."""

    schema_version: int = Field(default=SCHEMA_VERSION)
    kind: Literal["module"] = "module"
    path: str
    children: tuple[Declaration, ...] = ()
    imports: dict[str, str] = Field(
        default_factory=dict,
        description="Local binding name -> module specifier it is imported from",
    )
    exports: dict[str, str] = Field(
        default_factory=dict,
        description="Exported name -> local declaration name",
    )


Metadata = Union[
    Module,
    Class,
    Interface,
    Variable,
    Function,
    Method,
    Property,
    Constructor,
    Parameter,
    TypeReference,
]


__all__ = [
    "SCHEMA_VERSION",
    "Access",
    "Class",
    "Constructor",
    "Declaration",
    "Function",
    "Interface",
    "Metadata",
    "Method",
    "Module",
    "Parameter",
    "Primitive",
    "Property",
    "TypeIdentifier",
    "TypeReference",
    "Variable",
]
