"""Searcher Interface."""

from __future__ import annotations

from typing import List, Tuple

from ..core import CodeChunk


class Searcher:
    """Abstract base class for relevance scoring over the chunk index."""

    def search(self, query: str, top_k: int = 5) -> List[Tuple[float, CodeChunk]]:
        """Rank indexed chunks against a free-text query.

        Args:
            query: Search query text
            top_k: Number of results to return

        Returns:
            List of (score, CodeChunk) tuples sorted by relevance. Empty when
            nothing is indexed.
        """
        raise NotImplementedError
