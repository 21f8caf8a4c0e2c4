"""Relevance scoring over the lexical index."""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Tuple

from ..core import CodeChunk, cosine_similarity, extract_keywords, tokenize
from ..indexing import RepoIndexer
from .base import Searcher

logger = logging.getLogger(__name__)

_CREATE_INTENT_RE = re.compile(r"\b(?:create|add|new|make)\b", re.IGNORECASE)
_FILE_INTENT_RE = re.compile(r"\b(?:files?|features?)\b", re.IGNORECASE)
_FOLDER_HINT_RE = re.compile(r"\b(?:in|to|under)\s+(\w+(?:/\w+)*)", re.IGNORECASE)

DEFAULT_FOLDER_HINT = "test"


def folder_hint_for(query: str) -> Optional[str]:
    """Folder named by a file-creation request, or None for other queries."""
    if not (_CREATE_INTENT_RE.search(query) and _FILE_INTENT_RE.search(query)):
        return None
    match = _FOLDER_HINT_RE.search(query)
    return match.group(1) if match else DEFAULT_FOLDER_HINT


class DefaultSearcher(Searcher):
    """Directory shortcut, then vector ranking or keyword overlap."""

    def __init__(self, indexer: RepoIndexer):
        self.indexer = indexer

    def search(self, query: str, top_k: int = 5) -> List[Tuple[float, CodeChunk]]:
        repo = self.indexer.repo
        if repo is None or not repo.chunks:
            return []

        hint = folder_hint_for(query)
        if hint:
            hits = self._directory_hits(repo.chunks, hint, top_k)
            if hits:
                logger.debug(f"Directory shortcut '{hint}' matched {len(hits)} chunks")
                return hits

        if repo.has_embeddings and self.indexer.vectorizer.builds_index_vectors:
            return self._vector_search(repo.chunks, query, top_k)
        return self._keyword_search(repo.chunks, query, top_k)

    @staticmethod
    def _directory_hits(chunks: List[CodeChunk], hint: str, top_k: int) -> List[Tuple[float, CodeChunk]]:
        needle = hint.lower()
        hits = [c for c in chunks if needle in c.file_path.lower()]
        return [(1.0, c) for c in hits[:top_k]]

    @staticmethod
    def _keyword_search(chunks: List[CodeChunk], query: str, top_k: int) -> List[Tuple[float, CodeChunk]]:
        query_tokens = set(tokenize(query))
        if not query_tokens:
            return []

        scored: List[Tuple[float, CodeChunk]] = []
        for chunk in chunks:
            keywords = chunk.keywords if chunk.keywords is not None else extract_keywords(chunk.content)
            score = len(query_tokens.intersection(keywords))
            if score > 0:
                scored.append((float(score), chunk))

        # sorted() is stable, so ties keep index order
        scored.sort(key=lambda x: x[0], reverse=True)
        return scored[:top_k]

    def _vector_search(self, chunks: List[CodeChunk], query: str, top_k: int) -> List[Tuple[float, CodeChunk]]:
        """Cosine ranking; chunks still waiting for a vector are scored by keyword overlap."""
        query_vector = self.indexer.vectorizer.embed_one(query)
        query_tokens = set(tokenize(query))
        scored: List[Tuple[float, CodeChunk]] = []
        for c in chunks:
            if c.embedding is not None:
                scored.append((cosine_similarity(query_vector, c.embedding), c))
                continue
            if not query_tokens:
                continue
            keywords = c.keywords if c.keywords is not None else extract_keywords(c.content)
            overlap = len(query_tokens.intersection(keywords))
            if overlap > 0:
                # fraction of query tokens, so it shares the cosine scale
                scored.append((overlap / len(query_tokens), c))
        scored.sort(key=lambda x: x[0], reverse=True)
        return scored[:top_k]


def search(indexer: RepoIndexer, query: str, top_k: int = 5) -> List[Tuple[float, CodeChunk]]:
    searcher = DefaultSearcher(indexer)
    return searcher.search(query, top_k)


def format_hit(score: float, c: CodeChunk, max_chars: int = 1200) -> str:
    snippet = c.content
    if len(snippet) > max_chars:
        snippet = snippet[:max_chars] + "\n...(truncated)\n"
    header = f"{score:0.4f}  {c.file_path}:{c.start_line}-{c.end_line}"
    return header + "\n" + snippet.rstrip() + "\n"
