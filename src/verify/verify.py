"""Drift verification for declmeta artifacts.

Regenerating artifacts from the current sources and comparing them with a
committed copy detects both nondeterminism and public API changes; for the
signatures file the comparison also yields a unified diff of the changed
declarations.
"""

from __future__ import annotations

import difflib
import filecmp
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from artifacts import generate_all_artifacts
from contract.artifacts import SIGNATURES_TXT


@dataclass(frozen=True)
class DeterminismResult:
    ok: bool
    mismatches: tuple[str, ...] = field(default_factory=tuple)
    missing: tuple[str, ...] = field(default_factory=tuple)
    extra: tuple[str, ...] = field(default_factory=tuple)
    signature_diff: tuple[str, ...] = field(default_factory=tuple)


def _relative_files(root: Path) -> set[Path]:
    return {path.relative_to(root) for path in root.rglob("*") if path.is_file()}


def _signature_diff(original: Path, regenerated: Path) -> tuple[str, ...]:
    before = original.read_text(encoding="utf-8").splitlines()
    after = regenerated.read_text(encoding="utf-8").splitlines()
    return tuple(
        difflib.unified_diff(
            before,
            after,
            fromfile=f"a/{SIGNATURES_TXT}",
            tofile=f"b/{SIGNATURES_TXT}",
            lineterm="",
        )
    )


def verify_determinism(*, root: Path, artifacts_dir: Path) -> DeterminismResult:
    """Verify that committed artifacts match a fresh extraction of root.

    Args:
        root: Repository root to analyze.
        artifacts_dir: Directory containing existing artifacts to verify.

    Returns:
        DeterminismResult with ok status, sorted relative paths of missing,
        extra and mismatched files, and a unified diff of signatures.txt when
        it differs.

    Raises:
        FileNotFoundError: If artifacts_dir does not exist.
        NotADirectoryError: If artifacts_dir is not a directory.
    """
    if not artifacts_dir.exists():
        msg = f"Artifacts directory does not exist: {artifacts_dir}"
        raise FileNotFoundError(msg)
    if not artifacts_dir.is_dir():
        msg = f"Artifacts path is not a directory: {artifacts_dir}"
        raise NotADirectoryError(msg)

    with tempfile.TemporaryDirectory() as temp_dir:
        temp_path = Path(temp_dir)
        generate_all_artifacts(root=root, out_dir=temp_path)

        original_files = _relative_files(artifacts_dir)
        regenerated_files = _relative_files(temp_path)

        missing = sorted(str(path) for path in original_files - regenerated_files)
        extra = sorted(str(path) for path in regenerated_files - original_files)

        mismatches: list[str] = []
        signature_diff: tuple[str, ...] = ()
        for path in sorted(original_files & regenerated_files):
            if filecmp.cmp(artifacts_dir / path, temp_path / path, shallow=False):
                continue
            mismatches.append(str(path))
            if path.as_posix() == SIGNATURES_TXT:
                signature_diff = _signature_diff(artifacts_dir / path, temp_path / path)

    return DeterminismResult(
        ok=not missing and not extra and not mismatches,
        mismatches=tuple(mismatches),
        missing=tuple(missing),
        extra=tuple(extra),
        signature_diff=signature_diff,
    )
