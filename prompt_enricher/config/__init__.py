"""Configuration management for prompt-enricher."""

from .manager import (
    DEFAULT_CONFIG,
    DEFAULT_CODE_EXTENSIONS,
    DEFAULT_IGNORED_DIRS,
    SEARCH_BACKENDS,
    load_config,
    validate_config,
)

__all__ = [
    "DEFAULT_CONFIG",
    "DEFAULT_CODE_EXTENSIONS",
    "DEFAULT_IGNORED_DIRS",
    "SEARCH_BACKENDS",
    "load_config",
    "validate_config",
]
