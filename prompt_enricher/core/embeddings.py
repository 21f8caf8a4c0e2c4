"""Deterministic pseudo-embeddings for lexical search.

None of these vectorizers is a trained model: every vector is a fixed-width
projection of hashed tokens, so identical text always maps to the identical
vector across processes and platforms.
"""

from __future__ import annotations

import math
import re
from collections import Counter
from typing import Dict, List, Sequence

DEFAULT_DIM = 384

_PUNCT_RE = re.compile(r"[^\w\s]", re.ASCII)


def tokenize(text: str, min_length: int = 3) -> List[str]:
    """Lowercase, turn punctuation into spaces, split, drop short tokens."""
    cleaned = _PUNCT_RE.sub(" ", text.lower())
    return [t for t in cleaned.split() if len(t) >= min_length]


def rolling_hash(token: str) -> int:
    """32-bit signed rolling hash (h * 31 + code point), absolute value."""
    h = 0
    for ch in token:
        h = ((h << 5) - h + ord(ch)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return abs(h)


def l2_normalize(vector: List[float]) -> List[float]:
    magnitude = math.sqrt(sum(v * v for v in vector))
    if magnitude > 0:
        return [v / magnitude for v in vector]
    return vector


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity; 0.0 when either vector has zero magnitude.

    Raises:
        ValueError: If the vectors have different lengths.
    """
    if len(a) != len(b):
        raise ValueError(f"Vector dimension mismatch: {len(a)} vs {len(b)}")

    dot = 0.0
    mag_a = 0.0
    mag_b = 0.0
    for x, y in zip(a, b):
        dot += x * y
        mag_a += x * x
        mag_b += y * y

    mag_a = math.sqrt(mag_a)
    mag_b = math.sqrt(mag_b)
    if mag_a == 0 or mag_b == 0:
        return 0.0
    return dot / (mag_a * mag_b)


class TextVectorizer:
    """Abstract base class for fixed-width text vectorizers."""

    # Whether chunk vectors from this vectorizer are worth storing in the index.
    builds_index_vectors = True
    requires_fit = False

    def __init__(self, dim: int = DEFAULT_DIM) -> None:
        self.dim = dim

    def fit(self, texts: List[str]) -> None:
        """Learn corpus statistics, if the vectorizer uses any."""

    def embed(self, texts: List[str]) -> List[List[float]]:
        """Embed multiple texts into vectors."""
        return [self.embed_one(t) for t in texts]

    def embed_one(self, text: str) -> List[float]:
        """Embed a single text into a vector."""
        raise NotImplementedError

    def _bucket(self, token: str) -> int:
        return rolling_hash(token) % self.dim


class KeywordSetVectorizer(TextVectorizer):
    """Binary presence of distinct tokens, hashed into buckets."""

    builds_index_vectors = False

    def embed_one(self, text: str) -> List[float]:
        vector = [0.0] * self.dim
        for token in set(tokenize(text)):
            vector[self._bucket(token)] = 1.0
        return l2_normalize(vector)


class HashVectorizer(TextVectorizer):
    """Hash-bucket projection with position-decayed weights 1/(position+1)."""

    def embed_one(self, text: str) -> List[float]:
        vector = [0.0] * self.dim
        for idx, token in enumerate(tokenize(text)):
            vector[self._bucket(token)] += 1.0 / (idx + 1)
        return l2_normalize(vector)


class BM25Vectorizer(TextVectorizer):
    """BM25 term weights with IDF, hashed into buckets.

    Falls back to unit IDF and unit length normalization until fitted.
    """

    requires_fit = True

    def __init__(self, dim: int = DEFAULT_DIM, k1: float = 1.5, b: float = 0.75) -> None:
        super().__init__(dim)
        self.k1 = k1
        self.b = b
        self.doc_count = 0
        self.avg_doc_length = 0.0
        self.doc_freq: Dict[str, int] = {}

    def fit(self, texts: List[str]) -> None:
        doc_freq: Counter = Counter()
        total_length = 0
        for text in texts:
            tokens = tokenize(text)
            total_length += len(tokens)
            doc_freq.update(set(tokens))
        self.doc_count = len(texts)
        self.avg_doc_length = (total_length / len(texts)) if texts else 0.0
        self.doc_freq = dict(doc_freq)

    @property
    def fitted(self) -> bool:
        return self.doc_count > 0

    def idf(self, term: str) -> float:
        if not self.fitted:
            return 1.0
        df = self.doc_freq.get(term, 0)
        return math.log(1 + (self.doc_count - df + 0.5) / (df + 0.5))

    def embed_one(self, text: str) -> List[float]:
        tokens = tokenize(text)
        vector = [0.0] * self.dim
        if not tokens:
            return vector

        doc_length = len(tokens)
        length_ratio = doc_length / self.avg_doc_length if self.avg_doc_length > 0 else 1.0
        normalization = 1 - self.b + self.b * length_ratio

        for term, tf in Counter(tokens).items():
            saturation = (tf * (self.k1 + 1)) / (tf + self.k1 * normalization)
            vector[self._bucket(term)] += self.idf(term) * saturation
        return l2_normalize(vector)


def make_vectorizer(cfg: Dict) -> TextVectorizer:
    """Create vectorizer from config.

    Args:
        cfg: Configuration dictionary

    Returns:
        TextVectorizer instance matching ``search.backend``

    Raises:
        ValueError: If the backend is unknown
    """
    search_cfg = cfg.get("search", {})
    backend = str(search_cfg.get("backend", "hash")).strip().lower()
    dim = int(search_cfg.get("embedding_dim", DEFAULT_DIM))

    if backend == "keyword":
        return KeywordSetVectorizer(dim)
    if backend == "hash":
        return HashVectorizer(dim)
    if backend == "bm25":
        return BM25Vectorizer(dim)
    raise ValueError(f"Unknown search backend: {backend!r}")
