"""Declaration metadata: tree models, builders and errors."""

from metadata.builder import ModuleBuilder
from metadata.errors import MetadataError, StructuralViolation, UnsupportedSourceError
from metadata.models import (
    Access,
    Class,
    Constructor,
    Function,
    Interface,
    Method,
    Module,
    Parameter,
    Primitive,
    Property,
    TypeReference,
    Variable,
)

__all__ = [
    "Access",
    "Class",
    "Constructor",
    "Function",
    "Interface",
    "MetadataError",
    "Method",
    "Module",
    "ModuleBuilder",
    "Parameter",
    "Primitive",
    "Property",
    "StructuralViolation",
    "TypeReference",
    "UnsupportedSourceError",
    "Variable",
]
