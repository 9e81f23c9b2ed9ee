"""Utility functions for artifact generation."""

from __future__ import annotations

from typing import TYPE_CHECKING

import orjson

from contract.artifacts import signature_header
from render.dumper import render

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from metadata.models import Module


def _to_dict(obj: object) -> object:
    """Convert object to a JSON-compatible payload."""
    if hasattr(obj, "model_dump"):
        return obj.model_dump(mode="json")
    return obj


def _write_jsonl(path: Path, records: Sequence[object]) -> None:
    with path.open("wb") as f:
        for rec in records:
            payload = _to_dict(rec)
            f.write(orjson.dumps(payload, option=orjson.OPT_SORT_KEYS))
            f.write(b"\n")


def render_signatures(modules: Sequence[Module]) -> str:
    """Render modules into the signatures.txt layout.

    Each module gets a header line followed by its canonical rendering (when
    it has any declarations); sections are separated by one blank line.
    """
    sections: list[str] = []
    for module in modules:
        rendered = render(module)
        header = signature_header(module.path)
        sections.append(f"{header}\n{rendered}" if rendered else header)
    return "\n\n".join(sections) + "\n" if sections else ""


def _get_output_dir_name(out_dir: Path, root: Path) -> str:
    """Get the output directory name for filtering."""
    try:
        if out_dir.is_relative_to(root):
            rel = out_dir.relative_to(root)
            if rel.parts:
                return rel.parts[0]
    except ValueError:
        # Non-comparable paths mean out_dir is external; avoid filtering.
        return ""
    return ""
