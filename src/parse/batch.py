"""Awaitable wrappers around declaration extraction.

Extraction itself is synchronous. These helpers let a caller orchestrate many
independent module extractions at once; each one runs on its own parser and
builder and shares no state with the others.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from parse.treesitter_declarations import extract_module

if TYPE_CHECKING:
    from collections.abc import Iterable

    from metadata.models import Module

DEFAULT_MAX_CONCURRENCY = 8


async def extract_module_async(path: str, source: str | bytes) -> Module:
    """Run :func:`extract_module` off the event loop."""
    return await asyncio.to_thread(extract_module, path, source)


async def extract_many(
    sources: Iterable[tuple[str, str | bytes]],
    *,
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
) -> list[Module]:
    """Extract several modules concurrently.

    Args:
        sources: (path, source) pairs
        max_concurrency: Upper bound on extractions in flight

    Returns:
        Modules in the same order as ``sources``.
    """
    if max_concurrency < 1:
        msg = f"max_concurrency must be at least 1, got {max_concurrency}"
        raise ValueError(msg)

    sem = asyncio.Semaphore(max_concurrency)

    async def run_one(path: str, source: str | bytes) -> Module:
        async with sem:
            return await extract_module_async(path, source)

    tasks = [run_one(path, source) for path, source in sources]
    return list(await asyncio.gather(*tasks))


__all__ = ["DEFAULT_MAX_CONCURRENCY", "extract_many", "extract_module_async"]
