"""Writing declaration metadata artifacts: metadata.jsonl and signatures.txt."""

from artifacts.utils import render_signatures
from artifacts.write import generate_all_artifacts

__all__ = ["generate_all_artifacts", "render_signatures"]
