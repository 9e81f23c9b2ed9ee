"""Error types for declaration metadata extraction."""

from __future__ import annotations


class MetadataError(Exception):
    """Base class for errors raised while producing declaration metadata."""


class StructuralViolation(MetadataError):
    """Raised when a builder call would produce a malformed metadata tree.

    These indicate a bug in the caller driving the builder, not a problem with
    the source text being extracted.
    """


class UnsupportedSourceError(MetadataError):
    """Raised when no grammar is available for a source path."""


__all__ = ["MetadataError", "StructuralViolation", "UnsupportedSourceError"]
