"""Artifact contract definitions.

Filenames and formats here are the stable boundary consumed by downstream
tools (documentation generators, API diffing).
"""

from __future__ import annotations

from dataclasses import dataclass

from metadata.models import SCHEMA_VERSION

# Artifact schema version tracks the metadata model schema.
ARTIFACT_SCHEMA_VERSION = SCHEMA_VERSION

# Artifact filename constants (stable contract identifiers).
METADATA_JSONL = "metadata.jsonl"
SIGNATURES_TXT = "signatures.txt"

# Line that opens each module section in signatures.txt.
SIGNATURE_HEADER_PREFIX = "// "


@dataclass(frozen=True)
class ArtifactSpec:
    """Specification for a contract artifact."""

    filename: str
    format: str
    required_fields_note: str


ARTIFACT_SPECS: dict[str, ArtifactSpec] = {
    "metadata": ArtifactSpec(
        filename=METADATA_JSONL,
        format="jsonl",
        required_fields_note="One serialized Module per line, sorted by path.",
    ),
    "signatures": ArtifactSpec(
        filename=SIGNATURES_TXT,
        format="text",
        required_fields_note=(
            "Per module: a '// <path>' header then its canonical rendering; "
            "modules separated by a blank line."
        ),
    ),
}


def signature_header(path: str) -> str:
    return f"{SIGNATURE_HEADER_PREFIX}{path}"
