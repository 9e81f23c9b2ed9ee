"""Source file discovery for declaration extraction."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from fnmatch import fnmatch
from pathlib import Path
from typing import TYPE_CHECKING, cast

from gitignore_parser import parse_gitignore  # type: ignore[import-untyped]

from settings.config import DEFAULT_EXTENSIONS

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator

# Dependency trees are never part of a module's own API surface.
_PRUNED_DIRS = frozenset({"node_modules", ".git"})


def _is_within_root(path: Path, root: Path) -> bool:
    """Return True when the resolved path stays within the resolved root."""
    try:
        return path.resolve().is_relative_to(root.resolve())
    except OSError:
        return False


def _iter_gitignore_files(root: Path) -> list[Path]:
    """Return .gitignore files under root (root first), skipping symlinks."""
    candidates = {root / ".gitignore", *root.rglob(".gitignore")}
    found = [
        path
        for path in candidates
        if path.is_file() and not path.is_symlink() and _is_within_root(path, root)
    ]
    return sorted(found, key=lambda p: p.relative_to(root).as_posix())


def _build_gitignore_matcher(
    root: Path,
    *,
    nested_gitignore: bool,
) -> Callable[[str], bool] | None:
    if not nested_gitignore:
        gitignore_path = root / ".gitignore"
        if gitignore_path.is_file():
            return cast("Callable[[str], bool]", parse_gitignore(gitignore_path))
        return None

    gitignore_paths = _iter_gitignore_files(root)
    if not gitignore_paths:
        return None

    matchers = [parse_gitignore(path) for path in gitignore_paths]

    def matches(path_str: str) -> bool:
        for matcher in matchers:
            try:
                if matcher(path_str):
                    return True
            except ValueError:
                # Matcher belongs to a directory that does not contain path_str.
                continue
        return False

    return matches


@dataclass(frozen=True)
class SourceFilter:
    """Decides which directories to descend into and which files to keep."""

    root: Path
    suffixes: frozenset[str]
    output_dir: str = ""
    include_patterns: list[str] = field(default_factory=list)
    exclude_patterns: list[str] = field(default_factory=list)
    gitignore_matches: Callable[[str], bool] | None = None

    def descend(self, directory: Path) -> bool:
        if directory.name in _PRUNED_DIRS or directory.is_symlink():
            return False
        rel_parts = directory.relative_to(self.root).parts
        if self.output_dir and rel_parts[:1] == (self.output_dir,):
            return False
        return not self._ignored(directory)

    def accepts(self, path: Path) -> bool:
        if path.suffix.lower() not in self.suffixes:
            return False
        if path.is_symlink() or not path.is_file():
            return False
        if not _is_within_root(path, self.root) or self._ignored(path):
            return False

        rel_path = path.relative_to(self.root).as_posix()
        if self.include_patterns and not any(
            fnmatch(rel_path, pattern) for pattern in self.include_patterns
        ):
            return False
        return not any(fnmatch(rel_path, pattern) for pattern in self.exclude_patterns)

    def _ignored(self, path: Path) -> bool:
        return self.gitignore_matches is not None and self.gitignore_matches(str(path))


def find_source_files(
    directory: Path,
    *,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    output_dir: str = ".declmeta",
    include_patterns: list[str] | None = None,
    exclude_patterns: list[str] | None = None,
    nested_gitignore: bool = False,
) -> Iterator[Path]:
    """Find TypeScript source files in a directory, respecting .gitignore.

    Symlinked files and directories are never followed, and ``node_modules``,
    ``.git`` and the output directory are pruned without being walked.

    Args:
        directory: Directory to search
        extensions: File suffixes to collect (e.g. ``.ts``, ``.tsx``)
        output_dir: Directory name to skip (default ".declmeta")
        include_patterns: Optional list of fnmatch patterns; if provided,
            files must match at least one pattern to be included
        exclude_patterns: Optional list of fnmatch patterns; files matching
            any pattern are excluded
        nested_gitignore: Also honor .gitignore files below the root

    Yields:
        Paths sorted lexicographically by relative path for deterministic
        ordering.
    """
    source_filter = SourceFilter(
        root=directory,
        suffixes=frozenset(suffix.lower() for suffix in extensions),
        output_dir=output_dir,
        include_patterns=list(include_patterns or []),
        exclude_patterns=list(exclude_patterns or []),
        gitignore_matches=_build_gitignore_matcher(
            directory, nested_gitignore=nested_gitignore
        ),
    )

    matched_files: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(directory):
        current = Path(dirpath)
        dirnames[:] = [
            name for name in dirnames if source_filter.descend(current / name)
        ]
        matched_files.extend(
            path
            for path in (current / name for name in filenames)
            if source_filter.accepts(path)
        )

    matched_files.sort(key=lambda p: p.relative_to(directory).as_posix())

    yield from matched_files


__all__ = ["SourceFilter", "find_source_files"]
