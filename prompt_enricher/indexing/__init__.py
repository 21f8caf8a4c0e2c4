"""Indexing functionality for prompt-enricher."""

from .base import CancellationToken, Indexer, ProgressCallback
from .indexer import RepoIndexer, build_index

__all__ = [
    "CancellationToken",
    "Indexer",
    "ProgressCallback",
    "RepoIndexer",
    "build_index",
]
