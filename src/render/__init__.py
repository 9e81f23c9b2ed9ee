"""Canonical rendering of declaration metadata."""

from render.dumper import UNKNOWN_RENDERING, render

__all__ = ["UNKNOWN_RENDERING", "render"]
