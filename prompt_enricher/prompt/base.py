"""PromptAssembler Interface."""

from __future__ import annotations

import dataclasses
from typing import List, Optional

from ..core import CodeChunk, PromptTemplate


@dataclasses.dataclass(frozen=True)
class FileTarget:
    """File the request is about, resolved to a workspace-relative path."""

    path: str
    is_update: bool = False
    existing_content: Optional[str] = None

    @property
    def file_name(self) -> str:
        return self.path.rsplit("/", 1)[-1]


class PromptAssembler:
    """Abstract base class for prompt assembly."""

    def assemble(
        self,
        original_text: str,
        chunks: Optional[List[CodeChunk]] = None,
        template: Optional[PromptTemplate] = None,
        formatted: Optional[str] = None,
        file_target: Optional[FileTarget] = None,
    ) -> str:
        """Compose one augmented instruction.

        Args:
            original_text: The user's request
            chunks: Retrieved context, in relevance order
            template: Selected template, or None for a plain request
            formatted: Template output for ``original_text``; derived when omitted
            file_target: Resolved target file, if the request names one

        Returns:
            The composed text
        """
        raise NotImplementedError
