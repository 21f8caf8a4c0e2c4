"""Prompt assembly."""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

import tiktoken

from ..core import CodeChunk, PromptTemplate
from .base import FileTarget, PromptAssembler
from .templates import format_with_template

logger = logging.getLogger(__name__)

MAX_CHUNK_CHARS = 1500
TRUNCATION_MARKER = "...(truncated)"


# ----------------------------
# Token estimation
# ----------------------------

def _get_token_counter(encoding_name: str = "cl100k_base") -> Callable[[str], int]:
    """Return a token counting function, falling back to a character heuristic.

    The encoding is downloaded on first use, so it can fail offline.
    """
    try:
        encoding = tiktoken.get_encoding(encoding_name)

        def count_tokens(text: str) -> int:
            return len(encoding.encode(text))

        return count_tokens
    except Exception as e:
        logger.debug(f"tiktoken encoding '{encoding_name}' unavailable, using heuristic: {e}")

        def count_tokens(text: str) -> int:
            return max(1, int(len(text) / 3.5))

        return count_tokens


_token_counter: Optional[Callable[[str], int]] = None


def estimate_tokens(text: str) -> int:
    """Estimate token count with fallback heuristic."""
    global _token_counter
    if _token_counter is None:
        _token_counter = _get_token_counter()
    return _token_counter(text)


# ----------------------------
# Sections
# ----------------------------

def _truncate(text: str, max_chars: int) -> str:
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + "\n" + TRUNCATION_MARKER


def _format_target_section(target: FileTarget, max_chars: int) -> str:
    if not target.is_update:
        return f"Create a new file named **{target.file_name}**\n**Location:** {target.path}"

    lines = [
        f"**Update the existing file** **{target.file_name}**",
        f"**Location:** {target.path}",
    ]
    if target.existing_content:
        lines.append("")
        lines.append("**Current File Content:**")
        lines.append("```")
        lines.append(_truncate(target.existing_content, max_chars))
        lines.append("```")
    return "\n".join(lines)


def _format_context_item(c: CodeChunk, max_chars: int) -> str:
    title = c.file_path
    if c.name:
        title += f" ({c.name})"
    return (
        f"### {title} lines {c.start_line + 1}-{c.end_line + 1}\n"
        f"```\n{_truncate(c.content.rstrip(), max_chars)}\n```"
    )


def _format_context_section(chunks: List[CodeChunk], max_chars: int) -> str:
    items = [_format_context_item(c, max_chars) for c in chunks]
    return "## Relevant Code Context\n\n" + "\n\n".join(items)


class DefaultPromptAssembler(PromptAssembler):
    """Target file, then retrieved context, then the structured request."""

    def __init__(self, max_chunk_chars: int = MAX_CHUNK_CHARS):
        self.max_chunk_chars = max_chunk_chars

    def assemble(
        self,
        original_text: str,
        chunks: Optional[List[CodeChunk]] = None,
        template: Optional[PromptTemplate] = None,
        formatted: Optional[str] = None,
        file_target: Optional[FileTarget] = None,
    ) -> str:
        sections: List[str] = []

        if file_target is not None:
            sections.append(_format_target_section(file_target, self.max_chunk_chars))

        if chunks:
            sections.append(_format_context_section(chunks, self.max_chunk_chars))

        if template is not None:
            body = formatted if formatted is not None else format_with_template(original_text, template)
            sections.append(f"## {template.name}\n\n{body}")
        else:
            sections.append(f"## User Request\n\n{original_text}")

        return "\n\n".join(sections)


def assemble(
    original_text: str,
    chunks: Optional[List[CodeChunk]] = None,
    template: Optional[PromptTemplate] = None,
    formatted: Optional[str] = None,
    file_target: Optional[FileTarget] = None,
    max_chunk_chars: int = MAX_CHUNK_CHARS,
) -> str:
    """Wrapper for DefaultPromptAssembler."""
    assembler = DefaultPromptAssembler(max_chunk_chars)
    return assembler.assemble(original_text, chunks, template, formatted, file_target)
