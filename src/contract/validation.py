"""Validation helpers for declaration metadata artifacts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import orjson
from pydantic import ValidationError

from artifacts.utils import render_signatures
from contract.artifacts import (
    ARTIFACT_SCHEMA_VERSION,
    ARTIFACT_SPECS,
    METADATA_JSONL,
    SIGNATURES_TXT,
)
from metadata.models import Module

if TYPE_CHECKING:
    from pathlib import Path


@dataclass(frozen=True)
class ValidationMessage:
    artifact: str
    path: Path
    message: str
    line: int | None = None

    def location(self) -> str:
        if self.line is None:
            return str(self.path)
        return f"{self.path}:{self.line}"

    def to_dict(self) -> dict[str, object]:
        return {
            "artifact": self.artifact,
            "path": str(self.path),
            "line": self.line,
            "message": self.message,
        }


@dataclass
class ValidationResult:
    errors: list[ValidationMessage] = field(default_factory=list)
    warnings: list[ValidationMessage] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def validate_artifacts(artifacts_dir: Path) -> ValidationResult:
    """Check that the artifacts in ``artifacts_dir`` honor the contract.

    Every metadata line must validate against the Module model, modules must
    be sorted by unique path, and signatures.txt must equal the rendering of
    the metadata it sits beside.
    """
    result = ValidationResult()

    if not artifacts_dir.exists():
        result.errors.append(
            ValidationMessage(
                artifact="artifacts_dir",
                path=artifacts_dir,
                message="Artifacts directory does not exist.",
            )
        )
        return result

    if not artifacts_dir.is_dir():
        result.errors.append(
            ValidationMessage(
                artifact="artifacts_dir",
                path=artifacts_dir,
                message="Artifacts path is not a directory.",
            )
        )
        return result

    missing = False
    for artifact_name, spec in ARTIFACT_SPECS.items():
        path = artifacts_dir / spec.filename
        if not path.is_file():
            missing = True
            result.errors.append(
                ValidationMessage(
                    artifact=artifact_name,
                    path=path,
                    message="Required artifact file is missing.",
                )
            )
    if missing:
        return result

    modules = _validate_metadata(artifacts_dir / METADATA_JSONL, result)
    if modules is not None:
        _validate_signatures(artifacts_dir / SIGNATURES_TXT, modules, result)

    return result


def _validate_metadata(path: Path, result: ValidationResult) -> list[Module] | None:
    """Validate metadata.jsonl; returns the parsed modules when every line is valid."""
    try:
        raw_lines = path.read_bytes().splitlines()
    except OSError as exc:
        result.errors.append(
            ValidationMessage(
                artifact="metadata",
                path=path,
                message=f"Failed to read file: {exc}.",
            )
        )
        return None

    modules: list[Module] = []
    clean = True
    for line_number, raw_line in enumerate(raw_lines, 1):
        line = raw_line.strip()
        if not line:
            continue
        try:
            module = Module.model_validate(orjson.loads(line))
        except orjson.JSONDecodeError as exc:
            clean = False
            result.errors.append(
                ValidationMessage(
                    artifact="metadata",
                    path=path,
                    line=line_number,
                    message=f"Invalid JSON: {exc}.",
                )
            )
            continue
        except ValidationError as exc:
            clean = False
            result.errors.append(
                ValidationMessage(
                    artifact="metadata",
                    path=path,
                    line=line_number,
                    message=f"Schema validation failed: {exc}.",
                )
            )
            continue

        if module.schema_version != ARTIFACT_SCHEMA_VERSION:
            result.errors.append(
                ValidationMessage(
                    artifact="metadata",
                    path=path,
                    line=line_number,
                    message=(
                        "Schema version mismatch: "
                        f"expected {ARTIFACT_SCHEMA_VERSION}, "
                        f"got {module.schema_version}."
                    ),
                )
            )

        if modules and module.path <= modules[-1].path:
            result.errors.append(
                ValidationMessage(
                    artifact="metadata",
                    path=path,
                    line=line_number,
                    message=(
                        f"Module '{module.path}' is out of order or duplicated "
                        f"after '{modules[-1].path}'."
                    ),
                )
            )
        modules.append(module)

    return modules if clean else None


def _validate_signatures(
    path: Path, modules: list[Module], result: ValidationResult
) -> None:
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        result.errors.append(
            ValidationMessage(
                artifact="signatures",
                path=path,
                message=f"Failed to read file: invalid UTF-8 ({exc}).",
            )
        )
        return
    except OSError as exc:
        result.errors.append(
            ValidationMessage(
                artifact="signatures",
                path=path,
                message=f"Failed to read file: {exc}.",
            )
        )
        return

    expected = render_signatures(modules)
    if text == expected:
        return

    actual_lines = text.splitlines()
    expected_lines = expected.splitlines()
    line_number = next(
        (
            index
            for index, (actual, wanted) in enumerate(
                zip(actual_lines, expected_lines, strict=False), 1
            )
            if actual != wanted
        ),
        min(len(actual_lines), len(expected_lines)) + 1,
    )
    result.errors.append(
        ValidationMessage(
            artifact="signatures",
            path=path,
            line=line_number,
            message="Signatures do not match the rendering of metadata.jsonl.",
        )
    )


__all__ = [
    "ValidationMessage",
    "ValidationResult",
    "validate_artifacts",
]
