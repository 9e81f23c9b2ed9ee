from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from artifacts.utils import _get_output_dir_name, _write_jsonl, render_signatures
from contract.artifacts import METADATA_JSONL, SIGNATURES_TXT
from metadata.errors import UnsupportedSourceError
from parse.batch import extract_many
from parse.treesitter_declarations import grammar_for_path
from scan.files import find_source_files
from settings.config import load_config, resolve_output_dir

if TYPE_CHECKING:
    from pathlib import Path

    from settings.config import DeclMetaConfig

log = structlog.get_logger(__name__)


def _collect_sources(
    root: Path, out_dir: Path, config: DeclMetaConfig
) -> list[tuple[str, bytes]]:
    sources: list[tuple[str, bytes]] = []
    for file_path in find_source_files(
        root,
        extensions=config.extensions,
        output_dir=_get_output_dir_name(out_dir, root),
        include_patterns=config.include,
        exclude_patterns=config.exclude,
        nested_gitignore=config.nested_gitignore,
    ):
        relative_path = file_path.relative_to(root).as_posix()
        try:
            grammar_for_path(relative_path)
        except UnsupportedSourceError:
            log.warning("source_without_grammar", path=relative_path)
            continue
        try:
            sources.append((relative_path, file_path.read_bytes()))
        except OSError as exc:
            log.warning("source_unreadable", path=relative_path, error=str(exc))
    return sources


def generate_all_artifacts(
    *,
    root: Path,
    out_dir: Path | None = None,
    config: DeclMetaConfig | None = None,
) -> dict[str, object]:
    """Extract every source module under root and write the artifacts.

    Args:
        root: Root directory of the repository to analyze
        out_dir: Optional output directory for generated artifacts
        config: Optional configuration; loaded from declmeta.toml when omitted

    Returns:
        Dictionary with counts and list of generated artifact paths.
    """
    if config is None:
        config = load_config(root)

    if out_dir is None:
        out_dir = resolve_output_dir(root, config.output_dir)

    out_dir.mkdir(parents=True, exist_ok=True)

    sources = _collect_sources(root, out_dir, config)
    modules = asyncio.run(
        extract_many(sources, max_concurrency=config.max_concurrency)
    )
    modules.sort(key=lambda m: m.path)

    _write_jsonl(out_dir / METADATA_JSONL, modules)
    (out_dir / SIGNATURES_TXT).write_bytes(
        render_signatures(modules).encode("utf-8")
    )

    declaration_count = sum(len(module.children) for module in modules)
    log.info(
        "artifacts_generated",
        out_dir=str(out_dir),
        modules=len(modules),
        declarations=declaration_count,
    )

    return {
        "module_count": len(modules),
        "declaration_count": declaration_count,
        "artifacts": [str(out_dir / name) for name in (METADATA_JSONL, SIGNATURES_TXT)],
    }
