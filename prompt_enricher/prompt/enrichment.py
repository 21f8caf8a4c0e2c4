"""Prompt enrichment: retrieval + template + target file, assembled into one request."""

from __future__ import annotations

import dataclasses
import datetime as _dt
import logging
import os
import posixpath
import re
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ..agent import ActionInferenceEngine
from ..core import CodeChunk, EnrichedRequest
from ..search import Searcher
from ..surface import WorkspaceSurface
from .base import FileTarget, PromptAssembler
from .builder import DefaultPromptAssembler, estimate_tokens
from .templates import TemplateSelector, format_with_template

logger = logging.getLogger(__name__)

ENRICHMENT_MARKERS = ("**Task:**", "**Location:**", "**Steps:**")
_CREATE_RE = re.compile(r"Create (?:a new file named\s*\*\*)?(.+?)(?:\*\*|\n)")
_LOCATION_RE = re.compile(r"\*\*Location:\*\*\s*([\w/\-.]+)")

EXPLICIT_FILE_PATTERNS = [
    re.compile(r"(?:named?|called)\s+[`\"']?(\w+\.\w+)[`\"']?", re.IGNORECASE),
    re.compile(r"[`\"'](\w+\.\w+)[`\"']", re.IGNORECASE),
    re.compile(r"(\w+\.feature)", re.IGNORECASE),
    re.compile(r"(\w+\.test\.ts)", re.IGNORECASE),
    re.compile(r"(\w+\.spec\.ts)", re.IGNORECASE),
    re.compile(r"(\w+\.tsx?)\b", re.IGNORECASE),
]

TOPIC_PATTERNS = [
    re.compile(r"(?:for|about|of)\s+(?:my\s+)?(\w+)\s+(?:feature|test|functionality)", re.IGNORECASE),
    re.compile(r"(?:create|add|write)\s+(?:a\s+)?(\w+)\s+(?:feature|test)", re.IGNORECASE),
    re.compile(r"(\w+)\s+feature\s+file", re.IGNORECASE),
]

# (wording, extension) checked in order when no file name is given
FILE_KIND_WORDING = [
    (re.compile(r"feature\s+file|feature\s+test|gherkin", re.IGNORECASE), ".feature"),
    (re.compile(r"test\s+file|unit\s+test", re.IGNORECASE), ".test.ts"),
    (re.compile(r"spec\s+file", re.IGNORECASE), ".spec.ts"),
]

FOLDER_FALLBACKS: Dict[str, str] = {
    ".feature": "src/test/features",
    ".test.ts": "test",
    ".spec.ts": "test",
    ".tsx": "src/components",
    ".ts": "src",
}

MAX_SCAN_DEPTH = 4


@dataclasses.dataclass
class FileIntent:
    """A file the request asks to create or update."""

    file_name: str
    extension: str
    base_name: str
    topic: str


def strip_enrichment(text: str) -> str:
    """Reduce an already-enriched request back to its create instruction."""
    if not any(marker in text for marker in ENRICHMENT_MARKERS):
        return text

    match = _CREATE_RE.search(text)
    if not match:
        return text
    clean = "Create " + match.group(1).replace("**", "").strip()
    location = _LOCATION_RE.search(text)
    if location:
        folder = posixpath.dirname(location.group(1).rstrip("."))
        if folder:
            clean += f" in {folder}"
    logger.info(f"Re-enrichment detected, using: {clean}")
    return clean


def _split_name(file_name: str) -> Tuple[str, str]:
    lowered = file_name.lower()
    for compound in (".test.ts", ".spec.ts"):
        if lowered.endswith(compound):
            return file_name[: -len(compound)], compound
    stem, ext = os.path.splitext(file_name)
    return stem, ext


def extract_file_intent(text: str) -> Optional[FileIntent]:
    """Explicit file name first, else a topic plus file-kind wording."""
    for pattern in EXPLICIT_FILE_PATTERNS:
        match = pattern.search(text)
        if match:
            file_name = match.group(1)
            base, ext = _split_name(file_name)
            return FileIntent(file_name=file_name, extension=ext, base_name=base, topic=base.lower())

    for wording, ext in FILE_KIND_WORDING:
        if not wording.search(text):
            continue
        topic = "test"
        for pattern in TOPIC_PATTERNS:
            match = pattern.search(text)
            if match:
                topic = match.group(1).lower()
                break
        return FileIntent(file_name=f"{topic}{ext}", extension=ext, base_name=topic, topic=topic)
    return None


def _walk_files(root: Path, max_depth: int = MAX_SCAN_DEPTH) -> List[str]:
    """Workspace-relative file paths, sorted, skipping hidden and dependency dirs."""
    found: List[str] = []

    def walk(directory: Path, depth: int) -> None:
        if depth > max_depth:
            return
        try:
            entries = sorted(os.scandir(directory), key=lambda e: e.name)
        except OSError as e:
            logger.debug(f"Cannot scan {directory}: {e}")
            return
        for entry in entries:
            if "node_modules" in entry.name or entry.name.startswith("."):
                continue
            if entry.is_dir(follow_symlinks=False):
                walk(Path(entry.path), depth + 1)
            elif entry.is_file():
                found.append(Path(entry.path).relative_to(root).as_posix())

    walk(root, 0)
    return found


class PromptEnrichmentEngine:
    def __init__(
        self,
        workspace_root: Path,
        searcher: Searcher,
        selector: TemplateSelector,
        inference: ActionInferenceEngine,
        surface: WorkspaceSurface,
        cfg: Optional[Dict] = None,
        assembler: Optional[PromptAssembler] = None,
    ):
        prompt_cfg = (cfg or {}).get("prompt", {})
        self.workspace_root = Path(workspace_root)
        self.searcher = searcher
        self.selector = selector
        self.inference = inference
        self.surface = surface
        self.max_context_chunks = int(prompt_cfg.get("max_context_chunks", 3))
        self.assembler = assembler or DefaultPromptAssembler(int(prompt_cfg.get("max_chunk_chars", 1500)))

    def find_existing_file(self, intent: FileIntent) -> Optional[str]:
        wanted = f"{intent.base_name}{intent.extension}".lower()
        for rel in _walk_files(self.workspace_root):
            if posixpath.basename(rel).lower() == wanted:
                return rel
        return None

    def suggest_folder(self, text: str, intent: FileIntent) -> str:
        """Explicit hint, else where files of this kind already live, else a fixed default."""
        if self.inference.find_folder_hint(text) is not None:
            return self.inference.resolve_target_folder(text, intent.file_name)

        for rel in _walk_files(self.workspace_root):
            if rel.lower().endswith(intent.extension.lower()):
                return posixpath.dirname(rel) or "."
        return FOLDER_FALLBACKS.get(intent.extension, "src")

    def resolve_target(self, text: str, intent: FileIntent) -> FileTarget:
        existing = self.find_existing_file(intent)
        if existing and self.surface.choose_update(existing, intent.file_name):
            try:
                content = (self.workspace_root / existing).read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Error reading existing file {existing}: {e}")
                content = None
            return FileTarget(path=existing, is_update=True, existing_content=content)

        folder = self.suggest_folder(text, intent)
        return FileTarget(path=posixpath.normpath(posixpath.join(folder, intent.file_name)))

    @staticmethod
    def _context_summary(chunks: List[CodeChunk]) -> str:
        if not chunks:
            return "No related code was found in the workspace."
        refs = ", ".join(f"{c.file_path}:{c.start_line + 1}-{c.end_line + 1}" for c in chunks)
        return f"See the relevant code above ({refs})."

    def enrich(
        self,
        text: str,
        max_context_chunks: Optional[int] = None,
        template_id: Optional[str] = None,
        include_repo_context: bool = True,
    ) -> EnrichedRequest:
        """Build an enriched request.

        Raises:
            ValueError: If ``template_id`` is not in the catalog
        """
        clean = strip_enrichment(text)

        target: Optional[FileTarget] = None
        intent = extract_file_intent(clean)
        if intent is not None:
            target = self.resolve_target(clean, intent)
            logger.debug(f"Resolved target file: {target.path} (update={target.is_update})")

        chunks: List[CodeChunk] = []
        if include_repo_context:
            top_k = max_context_chunks if max_context_chunks is not None else self.max_context_chunks
            chunks = [c for _, c in self.searcher.search(clean, top_k)]

        if template_id:
            template = self.selector.get_template(template_id)
            if template is None:
                raise ValueError(f"Unknown template: {template_id}")
            reason = f"Template chosen explicitly: {template.name}"
        else:
            template = self.selector.select_best_template(clean)
            reason = self.selector.get_selection_reason(clean, template)

        formatted = None
        if template is not None:
            formatted = format_with_template(clean, template, {"context": self._context_summary(chunks)})

        composed = self.assembler.assemble(clean, chunks, template, formatted, target)

        return EnrichedRequest(
            original_text=clean,
            composed_text=composed,
            template=template,
            chunks=chunks,
            metadata={
                "timestamp": _dt.datetime.now(_dt.timezone.utc),
                "template_id": template.id if template else None,
                "template_used": template.name if template else "direct",
                "context_chunks": len(chunks),
                "selection_reason": reason,
                "estimated_tokens": estimate_tokens(composed),
                "target_path": target.path if target else None,
            },
        )
