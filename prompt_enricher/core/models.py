"""Data models for prompt-enricher."""

from __future__ import annotations

import dataclasses
import datetime as _dt
from typing import Any, Dict, List, Optional, Tuple

CHUNK_KINDS = ("function", "class", "method", "snippet")
ACTION_KINDS = ("create", "modify", "delete", "run")


@dataclasses.dataclass
class CodeChunk:
    """A contiguous, 0-based inclusive line range of one workspace file."""

    id: str
    file_path: str
    content: str
    start_line: int
    end_line: int
    kind: str = "snippet"
    name: Optional[str] = None
    keywords: Optional[List[str]] = None
    embedding: Optional[List[float]] = None

    def embedding_text(self) -> str:
        """Text fed to the vectorizer for this chunk."""
        return f"{self.name or 'code'}: {self.content[:300]}"


@dataclasses.dataclass
class IndexedRepo:
    """In-memory index of one workspace."""

    chunks: List[CodeChunk]
    last_indexed: _dt.datetime
    workspace_root: str
    has_embeddings: bool = False

    def file_paths(self) -> List[str]:
        seen: Dict[str, None] = {}
        for chunk in self.chunks:
            seen.setdefault(chunk.file_path, None)
        return list(seen)


@dataclasses.dataclass(frozen=True)
class PromptTemplate:
    id: str
    name: str
    description: str
    category: str
    fields: Tuple[Tuple[str, str], ...]
    example: str

    @property
    def structure(self) -> Dict[str, str]:
        return dict(self.fields)

    def embedding_text(self) -> str:
        return f"{self.name} {self.description} {self.category} {self.example}"


@dataclasses.dataclass
class EnrichedRequest:
    original_text: str
    composed_text: str
    template: Optional[PromptTemplate]
    chunks: List[CodeChunk]
    metadata: Dict[str, Any]


@dataclasses.dataclass
class AgentAction:
    """A filesystem action inferred from text, awaiting approval."""

    kind: str
    target: Optional[str]
    description: str
    content: Optional[str] = None
    command: Optional[str] = None


@dataclasses.dataclass
class ActionResult:
    action: AgentAction
    success: bool
    message: str


@dataclasses.dataclass
class IndexingOutcome:
    """Summary of one indexing request, including rejected ones."""

    accepted: bool
    message: str
    chunk_count: int = 0
    file_count: int = 0
    failed_files: List[str] = dataclasses.field(default_factory=list)
    warnings: List[str] = dataclasses.field(default_factory=list)
