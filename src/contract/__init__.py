"""Stable artifact contract surface for declmeta.

Treat these exports as the authoritative boundary for tools that consume
generated artifacts.
"""

from contract.artifacts import (
    ARTIFACT_SCHEMA_VERSION,
    ARTIFACT_SPECS,
    METADATA_JSONL,
    SIGNATURES_TXT,
    ArtifactSpec,
)


def __getattr__(name: str) -> object:
    if name in {"ValidationMessage", "ValidationResult", "validate_artifacts"}:
        from contract.validation import (
            ValidationMessage,
            ValidationResult,
            validate_artifacts,
        )

        return {
            "ValidationMessage": ValidationMessage,
            "ValidationResult": ValidationResult,
            "validate_artifacts": validate_artifacts,
        }[name]

    msg = f"module 'contract' has no attribute {name!r}"
    raise AttributeError(msg)


__all__ = [
    "ARTIFACT_SCHEMA_VERSION",
    "ARTIFACT_SPECS",
    "METADATA_JSONL",
    "SIGNATURES_TXT",
    "ArtifactSpec",
    "ValidationMessage",
    "ValidationResult",
    "validate_artifacts",
]
