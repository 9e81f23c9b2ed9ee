from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from artifacts.write import generate_all_artifacts
from contract.artifacts import METADATA_JSONL, SIGNATURES_TXT
from verify.verify import DeterminismResult, verify_determinism

if TYPE_CHECKING:
    from pathlib import Path


def _write_minimal_repo(root: Path) -> None:
    (root / "src").mkdir(parents=True, exist_ok=True)
    (root / "src" / "module.ts").write_text(
        "export function greet(name: string): string {\n  return name;\n}\n",
        encoding="utf-8",
    )


def test_verify_determinism_requires_artifacts_dir(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    repo_root.mkdir()
    _write_minimal_repo(repo_root)

    missing_dir = tmp_path / "missing"
    with pytest.raises(FileNotFoundError, match="Artifacts directory does not exist"):
        verify_determinism(root=repo_root, artifacts_dir=missing_dir)


def test_verify_determinism_rejects_file_path(tmp_path: Path) -> None:
    not_a_dir = tmp_path / "artifacts"
    not_a_dir.write_text("x", encoding="utf-8")

    with pytest.raises(NotADirectoryError):
        verify_determinism(root=tmp_path, artifacts_dir=not_a_dir)


def test_verify_determinism_fresh_artifacts_are_ok(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    repo_root.mkdir()
    _write_minimal_repo(repo_root)
    artifacts_dir = tmp_path / "artifacts"
    generate_all_artifacts(root=repo_root, out_dir=artifacts_dir)

    assert verify_determinism(
        root=repo_root, artifacts_dir=artifacts_dir
    ) == DeterminismResult(ok=True)


def test_verify_determinism_reports_signature_diff(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    repo_root.mkdir()
    _write_minimal_repo(repo_root)
    artifacts_dir = tmp_path / "artifacts"
    generate_all_artifacts(root=repo_root, out_dir=artifacts_dir)

    (repo_root / "src" / "module.ts").write_text(
        "export function greet(name: string, loud?: boolean): string {}\n",
        encoding="utf-8",
    )

    result = verify_determinism(root=repo_root, artifacts_dir=artifacts_dir)

    assert result.ok is False
    assert result.mismatches == (METADATA_JSONL, SIGNATURES_TXT)
    assert "-function greet(name: string): string" in result.signature_diff
    assert "+function greet(name: string, loud?: boolean): string" in (
        result.signature_diff
    )


def test_verify_determinism_relative_paths_and_sorted_mismatches(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    repo_root = tmp_path / "repo"
    repo_root.mkdir()
    _write_minimal_repo(repo_root)

    artifacts_dir = tmp_path / "artifacts"
    artifacts_dir.mkdir()

    for rel_path, content in (
        ("b.txt", "b-original"),
        ("a.txt", "a-original"),
        ("gone.txt", "only-committed"),
    ):
        path = artifacts_dir / rel_path
        path.write_text(content, encoding="utf-8")

    def _fake_generate_all_artifacts(*, root: Path, out_dir: Path) -> dict[str, object]:
        (out_dir / "a.txt").write_text("a-original", encoding="utf-8")
        (out_dir / "b.txt").write_text("b-regenerated", encoding="utf-8")
        (out_dir / "new.txt").write_text("only-regenerated", encoding="utf-8")
        return {"artifacts": [str(out_dir / "a.txt"), str(out_dir / "b.txt")]}

    monkeypatch.setattr(
        "verify.verify.generate_all_artifacts",
        _fake_generate_all_artifacts,
    )

    result = verify_determinism(root=repo_root, artifacts_dir=artifacts_dir)

    assert result == DeterminismResult(
        ok=False,
        mismatches=("b.txt",),
        missing=("gone.txt",),
        extra=("new.txt",),
    )
