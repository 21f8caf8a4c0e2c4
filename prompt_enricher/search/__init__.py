"""Search functionality for prompt-enricher."""

from .base import Searcher
from .searcher import DefaultSearcher, folder_hint_for, format_hit, search

__all__ = [
    "Searcher",
    "DefaultSearcher",
    "folder_hint_for",
    "format_hit",
    "search",
]
