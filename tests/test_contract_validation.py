from __future__ import annotations

import json
from pathlib import Path

from artifacts.utils import _write_jsonl, render_signatures
from contract.artifacts import (
    ARTIFACT_SCHEMA_VERSION,
    ARTIFACT_SPECS,
    METADATA_JSONL,
    SIGNATURES_TXT,
)
from contract.validation import (
    ValidationMessage,
    ValidationResult,
    validate_artifacts,
)
from metadata.builder import ModuleBuilder
from metadata.models import Module, Primitive, TypeReference


def _modules() -> list[Module]:
    first = ModuleBuilder("src/a.ts")
    first.add_variable("count").set_type(TypeReference(name=Primitive.NUMBER))
    second = ModuleBuilder("src/b.ts")
    second.add_interface("Empty")
    return [first.build(), second.build()]


def _write_valid_artifacts(d: Path) -> None:
    """Write a minimal consistent metadata/signatures pair to directory d."""
    d.mkdir(parents=True, exist_ok=True)
    modules = _modules()
    _write_jsonl(d / METADATA_JSONL, modules)
    (d / SIGNATURES_TXT).write_text(render_signatures(modules), encoding="utf-8")


def _messages_contain(messages: list[ValidationMessage], needle: str) -> bool:
    """Return True when any validation message contains the given substring."""
    return any(needle in message.message for message in messages)


# Group 1: Data class tests


def test_validation_message_location_with_line() -> None:
    """ValidationMessage.location returns path:line when line is present."""
    msg = ValidationMessage("metadata", Path("x.jsonl"), "bad", line=7)
    assert msg.location() == "x.jsonl:7"


def test_validation_message_location_without_line() -> None:
    """ValidationMessage.location returns only path when line is missing."""
    msg = ValidationMessage("metadata", Path("x.jsonl"), "bad")
    assert msg.location() == "x.jsonl"


def test_validation_message_to_dict() -> None:
    """ValidationMessage.to_dict returns the expected payload."""
    msg = ValidationMessage("metadata", Path("x.jsonl"), "bad", line=3)
    assert msg.to_dict() == {
        "artifact": "metadata",
        "path": "x.jsonl",
        "line": 3,
        "message": "bad",
    }


def test_validation_result_ok_when_no_errors() -> None:
    """ValidationResult.ok is true when no errors are present."""
    assert ValidationResult().ok is True


def test_validation_result_not_ok_when_errors() -> None:
    """ValidationResult.ok is false when at least one error exists."""
    result = ValidationResult(errors=[ValidationMessage("x", Path("a"), "boom")])
    assert result.ok is False


# Group 2: Directory handling


def test_missing_directory() -> None:
    """validate_artifacts reports a missing artifacts directory."""
    result = validate_artifacts(Path("/nonexistent"))
    assert result.ok is False
    assert _messages_contain(result.errors, "Artifacts directory does not exist")


def test_not_a_directory(tmp_path: Path) -> None:
    """validate_artifacts reports a path that is not a directory."""
    file_path = tmp_path / "not-a-dir"
    file_path.write_text("x", encoding="utf-8")

    result = validate_artifacts(file_path)

    assert result.ok is False
    assert _messages_contain(result.errors, "Artifacts path is not a directory")


def test_missing_artifact_files(tmp_path: Path) -> None:
    """validate_artifacts reports each required artifact when directory is empty."""
    artifacts_dir = tmp_path / "artifacts"
    artifacts_dir.mkdir()

    result = validate_artifacts(artifacts_dir)

    assert result.ok is False
    assert len(result.errors) == len(ARTIFACT_SPECS)
    assert all("Required artifact file is missing" in m.message for m in result.errors)


# Group 3: Happy path


def test_valid_artifacts_pass(tmp_path: Path) -> None:
    """A consistent artifact set produces no errors or warnings."""
    artifacts_dir = tmp_path / "artifacts"
    _write_valid_artifacts(artifacts_dir)

    result = validate_artifacts(artifacts_dir)

    assert result.ok is True
    assert result.errors == []
    assert result.warnings == []


def test_empty_artifacts_pass(tmp_path: Path) -> None:
    """A repository without sources yields empty, valid artifacts."""
    artifacts_dir = tmp_path / "artifacts"
    artifacts_dir.mkdir()
    (artifacts_dir / METADATA_JSONL).write_bytes(b"")
    (artifacts_dir / SIGNATURES_TXT).write_bytes(b"")

    assert validate_artifacts(artifacts_dir).ok is True


# Group 4: metadata.jsonl validation


def test_metadata_invalid_json(tmp_path: Path) -> None:
    """Invalid JSON produces a line-level JSON error."""
    artifacts_dir = tmp_path / "artifacts"
    _write_valid_artifacts(artifacts_dir)
    (artifacts_dir / METADATA_JSONL).write_text("{not-json}\n", encoding="utf-8")

    result = validate_artifacts(artifacts_dir)

    assert result.ok is False
    assert _messages_contain(result.errors, "Invalid JSON")
    assert result.errors[0].line == 1


def test_metadata_schema_failure(tmp_path: Path) -> None:
    """Records that do not match the Module model produce schema errors."""
    artifacts_dir = tmp_path / "artifacts"
    _write_valid_artifacts(artifacts_dir)
    record = {
        "schema_version": ARTIFACT_SCHEMA_VERSION,
        "kind": "module",
        "path": "src/a.ts",
        "children": [{"kind": "enum", "name": "Color"}],
    }
    (artifacts_dir / METADATA_JSONL).write_text(
        json.dumps(record) + "\n", encoding="utf-8"
    )

    result = validate_artifacts(artifacts_dir)

    assert result.ok is False
    assert _messages_contain(result.errors, "Schema validation failed")


def test_metadata_wrong_schema_version(tmp_path: Path) -> None:
    """A foreign schema_version produces a schema mismatch error."""
    artifacts_dir = tmp_path / "artifacts"
    _write_valid_artifacts(artifacts_dir)
    record = {"schema_version": 999, "kind": "module", "path": "src/a.ts"}
    (artifacts_dir / METADATA_JSONL).write_text(
        json.dumps(record) + "\n", encoding="utf-8"
    )

    result = validate_artifacts(artifacts_dir)

    assert result.ok is False
    assert _messages_contain(result.errors, "Schema version mismatch")


def test_metadata_out_of_order_modules(tmp_path: Path) -> None:
    """Modules must be sorted by path without duplicates."""
    artifacts_dir = tmp_path / "artifacts"
    artifacts_dir.mkdir()
    modules = list(reversed(_modules()))
    _write_jsonl(artifacts_dir / METADATA_JSONL, modules)
    (artifacts_dir / SIGNATURES_TXT).write_text(
        render_signatures(modules), encoding="utf-8"
    )

    result = validate_artifacts(artifacts_dir)

    assert result.ok is False
    assert _messages_contain(result.errors, "out of order or duplicated")
    assert result.errors[0].line == 2


# Group 5: signatures.txt validation


def test_signatures_mismatch_reports_first_differing_line(tmp_path: Path) -> None:
    """Hand edits to signatures.txt are reported at the first changed line."""
    artifacts_dir = tmp_path / "artifacts"
    _write_valid_artifacts(artifacts_dir)
    signatures = artifacts_dir / SIGNATURES_TXT
    signatures.write_text(
        signatures.read_text(encoding="utf-8").replace(
            "let count: number", "let count: string"
        ),
        encoding="utf-8",
    )

    result = validate_artifacts(artifacts_dir)

    assert result.ok is False
    (error,) = result.errors
    assert error.artifact == "signatures"
    assert error.line == 2
    assert "Signatures do not match" in error.message


def test_signatures_not_checked_when_metadata_invalid(tmp_path: Path) -> None:
    """A broken metadata file is reported alone."""
    artifacts_dir = tmp_path / "artifacts"
    _write_valid_artifacts(artifacts_dir)
    (artifacts_dir / METADATA_JSONL).write_text("{not-json}\n", encoding="utf-8")
    (artifacts_dir / SIGNATURES_TXT).write_text("garbage\n", encoding="utf-8")

    result = validate_artifacts(artifacts_dir)

    assert [error.artifact for error in result.errors] == ["metadata"]


def test_signatures_layout() -> None:
    """Each module renders as a header followed by its declarations."""
    assert render_signatures(_modules()) == (
        "// src/a.ts\nlet count: number\n\n// src/b.ts\ninterface Empty {}\n"
    )
