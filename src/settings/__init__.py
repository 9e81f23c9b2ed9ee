"""Repository configuration for declmeta."""

from settings.config import (
    CONFIG_FILENAME,
    ConfigError,
    DeclMetaConfig,
    LoggingConfig,
    load_config,
    resolve_output_dir,
)

__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "DeclMetaConfig",
    "LoggingConfig",
    "load_config",
    "resolve_output_dir",
]
