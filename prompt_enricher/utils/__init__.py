"""Utility functions for prompt-enricher."""

from .file_utils import (
    ensure_dir,
    is_binary_file,
    is_code_file,
    iter_code_files,
    should_ignore,
    workspace_slug,
)

__all__ = [
    "ensure_dir",
    "is_binary_file",
    "is_code_file",
    "iter_code_files",
    "should_ignore",
    "workspace_slug",
]
