"""Core functionality for prompt-enricher."""

from .models import (
    ActionResult,
    AgentAction,
    CodeChunk,
    EnrichedRequest,
    IndexedRepo,
    IndexingOutcome,
    PromptTemplate,
)
from .chunking import (
    Chunker,
    Declaration,
    DeclarationDetector,
    DefaultChunker,
    RegexDeclarationDetector,
    chunk_path,
    chunk_text,
    extract_keywords,
)
from .embeddings import (
    BM25Vectorizer,
    HashVectorizer,
    KeywordSetVectorizer,
    TextVectorizer,
    cosine_similarity,
    make_vectorizer,
    rolling_hash,
    tokenize,
)

__all__ = [
    "ActionResult",
    "AgentAction",
    "CodeChunk",
    "EnrichedRequest",
    "IndexedRepo",
    "IndexingOutcome",
    "PromptTemplate",
    "Chunker",
    "Declaration",
    "DeclarationDetector",
    "DefaultChunker",
    "RegexDeclarationDetector",
    "chunk_path",
    "chunk_text",
    "extract_keywords",
    "BM25Vectorizer",
    "HashVectorizer",
    "KeywordSetVectorizer",
    "TextVectorizer",
    "cosine_similarity",
    "make_vectorizer",
    "rolling_hash",
    "tokenize",
]
