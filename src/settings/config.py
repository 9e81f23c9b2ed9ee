from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import tomllib
from pydantic import BaseModel, ConfigDict, Field, field_validator

from parse.batch import DEFAULT_MAX_CONCURRENCY

CONFIG_FILENAME = "declmeta.toml"

DEFAULT_EXTENSIONS = (".ts", ".tsx", ".mts", ".cts")

LogFormat = Literal["console", "json"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(extra="forbid")

    level: LogLevel = Field(default="WARNING", description="Minimum log level")
    format: LogFormat = Field(
        default="console",
        description="Render log events for humans (console) or machines (json)",
    )

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            upper = v.upper()
            return "WARNING" if upper == "WARN" else upper
        return v


class DeclMetaConfig(BaseModel):
    """Configuration for declaration metadata artifact generation."""

    model_config = ConfigDict(extra="forbid")

    output_dir: str = Field(
        default=".declmeta",
        description="Output directory for generated artifacts",
    )
    include: list[str] = Field(
        default_factory=list,
        description="Glob patterns for files to include (empty = all sources)",
    )
    exclude: list[str] = Field(
        default_factory=list,
        description="Glob patterns for files to exclude",
    )
    extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXTENSIONS),
        description="Source file suffixes to extract",
    )
    nested_gitignore: bool = Field(
        default=False,
        description=(
            "Enable nested .gitignore composition (default: false for root-only)"
        ),
    )
    max_concurrency: int = Field(
        default=DEFAULT_MAX_CONCURRENCY,
        ge=1,
        description="Maximum number of module extractions in flight",
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging output settings",
    )

    @field_validator("extensions")
    @classmethod
    def validate_extensions(cls, v: list[str]) -> list[str]:
        """Require dotted suffixes such as ``.ts``; an empty list is rejected."""
        if not v:
            msg = "extensions must list at least one suffix"
            raise ValueError(msg)
        for suffix in v:
            if not suffix.startswith(".") or len(suffix) < 2:
                msg = f"Invalid extension '{suffix}': expected a suffix like '.ts'"
                raise ValueError(msg)
        return [suffix.lower() for suffix in v]


class ConfigError(Exception):
    """Raised when config file exists but cannot be parsed."""


def resolve_output_dir(root: Path, output_dir: str) -> Path:
    """Resolve a config-provided output_dir safely within the repo root.

    The config output_dir must be a non-empty relative path that remains
    within the repository root after resolution. Absolute paths and paths
    that escape the root are rejected.
    """
    if not output_dir or output_dir.startswith("~"):
        msg = "output_dir must be a non-empty relative path within the repo root"
        raise ConfigError(msg)

    output_path = Path(output_dir)
    if output_path.is_absolute():
        msg = "output_dir must be a relative path within the repo root"
        raise ConfigError(msg)

    try:
        resolved_root = root.resolve()
        resolved_output = (resolved_root / output_path).resolve()
    except OSError as exc:
        msg = f"Failed to resolve output_dir '{output_dir}': {exc}"
        raise ConfigError(msg) from exc

    if not resolved_output.is_relative_to(resolved_root):
        msg = f"output_dir '{output_dir}' escapes the repository root"
        raise ConfigError(msg)

    return resolved_output


def load_config(root: Path) -> DeclMetaConfig:
    """Load configuration from declmeta.toml if it exists."""
    config_path = Path(root) / CONFIG_FILENAME

    if not config_path.is_file():
        return DeclMetaConfig()

    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return DeclMetaConfig.model_validate(data)
    except Exception as e:
        msg = f"Invalid config in {config_path}: {e}"
        raise ConfigError(msg) from e
