from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from scan.files import _build_gitignore_matcher, find_source_files

if TYPE_CHECKING:
    from pathlib import Path


def _relative(paths: list[Path], root: Path) -> list[str]:
    return [path.relative_to(root).as_posix() for path in paths]


@pytest.mark.skipif(
    os.name == "nt",
    reason="Symlink semantics vary on Windows test runners.",
)
def test_find_source_files_skips_symlinked_dirs(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    repo_root.mkdir()
    (repo_root / "src").mkdir()
    (repo_root / "src" / "module.ts").write_text("let ok = 1;\n", encoding="utf-8")

    external_root = tmp_path / "external"
    external_root.mkdir()
    (external_root / "leak.ts").write_text("let leak = 1;\n", encoding="utf-8")

    symlink_dir = repo_root / "linked"
    symlink_dir.symlink_to(external_root, target_is_directory=True)

    results = _relative(list(find_source_files(repo_root)), repo_root)

    assert "src/module.ts" in results
    assert "linked/leak.ts" not in results


@pytest.mark.skipif(
    os.name == "nt",
    reason="Symlink semantics vary on Windows test runners.",
)
def test_nested_gitignore_skips_symlinked_gitignore(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    repo_root.mkdir()
    (repo_root / "src").mkdir()
    (repo_root / "src" / "module.ts").write_text("let ok = 1;\n", encoding="utf-8")
    (repo_root / ".gitignore").write_text("*.bin\n", encoding="utf-8")

    external_root = tmp_path / "external"
    external_root.mkdir()
    (external_root / "outside.gitignore").write_text(
        "src/module.ts\n", encoding="utf-8"
    )

    symlink_gitignore = repo_root / "linked.gitignore"
    symlink_gitignore.symlink_to(external_root / "outside.gitignore")

    matcher = _build_gitignore_matcher(repo_root, nested_gitignore=True)
    assert matcher is not None
    assert matcher(str(repo_root / "src" / "module.ts")) is False


def test_find_source_files_filters_and_sorts(tmp_path: Path) -> None:
    for rel_path in (
        "src/z.ts",
        "src/a.tsx",
        "src/readme.md",
        "src/types.d.ts",
        "node_modules/dep/index.ts",
        ".declmeta/stale.ts",
        "test/a.spec.ts",
    ):
        path = tmp_path / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("let x = 1;\n", encoding="utf-8")

    results = _relative(
        list(find_source_files(tmp_path, exclude_patterns=["test/*"])), tmp_path
    )

    assert results == ["src/a.tsx", "src/types.d.ts", "src/z.ts"]


def test_find_source_files_include_patterns(tmp_path: Path) -> None:
    for rel_path in ("lib/a.ts", "src/b.ts"):
        path = tmp_path / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("let x = 1;\n", encoding="utf-8")

    results = _relative(
        list(find_source_files(tmp_path, include_patterns=["src/*"])), tmp_path
    )

    assert results == ["src/b.ts"]


def test_find_source_files_custom_extensions(tmp_path: Path) -> None:
    (tmp_path / "a.ts").write_text("", encoding="utf-8")
    (tmp_path / "b.mjs").write_text("", encoding="utf-8")

    results = _relative(
        list(find_source_files(tmp_path, extensions=[".mjs"])), tmp_path
    )

    assert results == ["b.mjs"]
