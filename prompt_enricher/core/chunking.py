"""Line-based chunking of source files around declarations."""

from __future__ import annotations

import dataclasses
import logging
import re
from pathlib import Path
from typing import List, Optional

from .embeddings import tokenize
from .models import CodeChunk

logger = logging.getLogger(__name__)

MAX_SNIPPET_LINES = 50
MAX_KEYWORDS_PER_CHUNK = 50

# Language-agnostic on purpose: no parser, so nested or multi-line
# declarations can land in the wrong chunk.
_FUNCTION_RE = re.compile(r"(?:function|def|fn|func|fun|method|async\s+function)\s+(\w+)")
_CLASS_RE = re.compile(r"(?:class|interface|struct|type)\s+(\w+)")


def extract_keywords(text: str, limit: int = MAX_KEYWORDS_PER_CHUNK) -> List[str]:
    """Distinct search tokens of a chunk, in first-occurrence order."""
    return list(dict.fromkeys(tokenize(text)))[:limit]


@dataclasses.dataclass(frozen=True)
class Declaration:
    kind: str
    name: str


# -----------------------------------------------------------------------------
# Interfaces
# -----------------------------------------------------------------------------

class DeclarationDetector:
    """Decides whether a single line opens a named declaration."""

    def detect(self, line: str) -> Optional[Declaration]:
        raise NotImplementedError


class RegexDeclarationDetector(DeclarationDetector):
    """Default multi-language heuristic.

    Indented function declarations are reported as methods.
    """

    def detect(self, line: str) -> Optional[Declaration]:
        match = _FUNCTION_RE.search(line)
        if match:
            kind = "method" if line[:1] in (" ", "\t") else "function"
            return Declaration(kind=kind, name=match.group(1))
        match = _CLASS_RE.search(line)
        if match:
            return Declaration(kind="class", name=match.group(1))
        return None


class Chunker:
    """Abstract base class for file chunking."""

    def chunk(self, content: str, file_path: str) -> List[CodeChunk]:
        """Split one file into ordered chunks.

        Args:
            content: Full file text
            file_path: Workspace-relative path, used for chunk ids

        Returns:
            Chunks covering every line exactly once, 0-based inclusive ranges
        """
        raise NotImplementedError


class DefaultChunker(Chunker):
    """Flushes on every declaration and caps unnamed chunks at a line budget."""

    def __init__(
        self,
        detector: Optional[DeclarationDetector] = None,
        max_snippet_lines: int = MAX_SNIPPET_LINES,
        max_keywords: int = MAX_KEYWORDS_PER_CHUNK,
    ):
        if max_snippet_lines < 1:
            raise ValueError("max_snippet_lines must be >= 1")
        self.detector = detector or RegexDeclarationDetector()
        self.max_snippet_lines = max_snippet_lines
        self.max_keywords = max_keywords

    def chunk(self, content: str, file_path: str) -> List[CodeChunk]:
        lines = content.split("\n")
        chunks: List[CodeChunk] = []

        current: List[str] = []
        start_line = 0
        kind = "snippet"
        name: Optional[str] = None

        def flush(end_line: int) -> None:
            text = "\n".join(current)
            chunks.append(
                CodeChunk(
                    id=f"{file_path}:{start_line}",
                    file_path=file_path,
                    content=text,
                    start_line=start_line,
                    end_line=end_line,
                    kind=kind,
                    name=name,
                    keywords=extract_keywords(text, self.max_keywords),
                )
            )

        for i, line in enumerate(lines):
            declaration = self.detector.detect(line)
            if declaration is not None:
                if current:
                    flush(i - 1)
                current = [line]
                start_line = i
                kind = declaration.kind
                name = declaration.name
                continue

            current.append(line)
            if name is None and len(current) >= self.max_snippet_lines:
                flush(i)
                current = []
                start_line = i + 1
                kind = "snippet"

        if current:
            flush(len(lines) - 1)

        logger.debug(f"Chunked {file_path} into {len(chunks)} chunks ({len(lines)} lines)")
        return chunks


def chunk_text(content: str, file_path: str, max_snippet_lines: int = MAX_SNIPPET_LINES) -> List[CodeChunk]:
    """Chunk text with the default detector (Functional Wrapper)."""
    chunker = DefaultChunker(max_snippet_lines=max_snippet_lines)
    return chunker.chunk(content, file_path)


def chunk_path(path: Path, workspace_root: Path, chunker: Optional[Chunker] = None) -> List[CodeChunk]:
    """Read and chunk one file.

    Raises:
        OSError: If the file cannot be read
        UnicodeDecodeError: If the file is not valid UTF-8
    """
    relative = path.relative_to(workspace_root).as_posix()
    content = path.read_text(encoding="utf-8")
    return (chunker or DefaultChunker()).chunk(content, relative)
