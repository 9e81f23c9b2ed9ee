"""Parsing utilities: TypeScript sources to declaration metadata."""

from parse.batch import extract_many, extract_module_async
from parse.treesitter_declarations import extract_module, grammar_for_path
from parse.type_references import PRIMITIVE_TYPES, resolve_type

__all__ = [
    "PRIMITIVE_TYPES",
    "extract_many",
    "extract_module",
    "extract_module_async",
    "grammar_for_path",
    "resolve_type",
]
