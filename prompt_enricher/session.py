"""Per-workspace session controller."""

from __future__ import annotations

import dataclasses
import datetime as _dt
import logging
import threading
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .agent import ActionExecutor, ActionInferenceEngine, ActionSession, DirectoryCatalog, format_results
from .config import load_config
from .core import ActionResult, AgentAction, CodeChunk, EnrichedRequest, IndexingOutcome
from .indexing import CancellationToken, ProgressCallback, RepoIndexer
from .llm import LLMBackend, LLMResponse
from .prompt import PromptEnrichmentEngine, TemplateSelector, make_selector_vectorizer
from .search import DefaultSearcher
from .storage import IndexStore
from .surface import AutoSurface, WorkspaceSurface
from .utils import is_code_file, should_ignore

logger = logging.getLogger(__name__)

MODES = ("chat", "agent")
FILE_EVENT_KINDS = ("created", "changed", "deleted")

AGENT_CONTENT_SUFFIX = (
    "\n\nProvide ONLY the complete file content with proper formatting. "
    "Do not include explanations, just the file content ready to save."
)

__all__ = [
    "AutoSurface",
    "ChatMessage",
    "ChatReply",
    "FileEvent",
    "WorkspaceSession",
    "WorkspaceSurface",
]


@dataclasses.dataclass(frozen=True)
class FileEvent:
    kind: str
    path: Path

    def __post_init__(self) -> None:
        if self.kind not in FILE_EVENT_KINDS:
            raise ValueError(f"Unknown file event kind: {self.kind!r}")


@dataclasses.dataclass
class ChatMessage:
    role: str
    content: str
    timestamp: _dt.datetime = dataclasses.field(default_factory=lambda: _dt.datetime.now(_dt.timezone.utc))


@dataclasses.dataclass
class ChatReply:
    content: str
    model: Optional[str] = None
    actions: List[AgentAction] = dataclasses.field(default_factory=list)

    @property
    def pending_approval(self) -> bool:
        return bool(self.actions)


class WorkspaceSession:
    """Everything one open workspace needs: index, templates, agent state.

    The indexing flag and the pending proposal live here, one instance per
    workspace, so two workspaces never share either.
    """

    def __init__(
        self,
        workspace_root: Path,
        cfg: Optional[Dict] = None,
        surface: Optional[WorkspaceSurface] = None,
        backend: Optional[LLMBackend] = None,
        store: Optional[IndexStore] = None,
    ):
        self.workspace_root = Path(workspace_root).resolve()
        self.cfg = cfg if cfg is not None else load_config(self.workspace_root)
        self.surface = surface or AutoSurface()
        self.backend = backend
        self.mode = "chat"
        self.history: List[ChatMessage] = []

        self.indexer = RepoIndexer(self.cfg, self.workspace_root, store=store)
        self.searcher = DefaultSearcher(self.indexer)
        self.selector = TemplateSelector(vectorizer=make_selector_vectorizer(self.cfg))
        self.catalog = DirectoryCatalog.scan(self.workspace_root)
        self.inference = ActionInferenceEngine(self.catalog)
        self.actions = ActionSession(self.inference, ActionExecutor(self.workspace_root, self.surface))
        self.enricher = PromptEnrichmentEngine(
            self.workspace_root,
            self.searcher,
            self.selector,
            self.inference,
            self.surface,
            cfg=self.cfg,
        )

        self._indexing = False
        self._flag_lock = threading.Lock()
        self._cancel: Optional[CancellationToken] = None
        # replaced only by a build that owns the indexing flag
        self.progress: Dict = {"percent": 0.0, "message": "", "status": "idle"}

    # ------------------------------------------------------------------
    # Indexing
    # ------------------------------------------------------------------

    @property
    def is_indexing(self) -> bool:
        return self._indexing

    def start(self) -> bool:
        """Load the persisted index, or build one when auto-indexing is on."""
        if self.indexer.load():
            return True
        if self.cfg.get("auto_index", True):
            return self.build_index().accepted
        return False

    def build_index(self, progress: Optional[ProgressCallback] = None) -> IndexingOutcome:
        with self._flag_lock:
            if self._indexing:
                logger.warning("Indexing already in progress")
                return IndexingOutcome(accepted=False, message="Indexing already in progress")
            self._indexing = True
            self._cancel = CancellationToken()
            snapshot = {"percent": 0.0, "message": "", "status": "indexing"}
            self.progress = snapshot

        def report(percent: float, message: str) -> None:
            snapshot["percent"] = round(percent, 1)
            snapshot["message"] = message
            if progress:
                progress(percent, message)

        try:
            outcome = self.indexer.rebuild(report)
            if self.indexer.vectorizer.builds_index_vectors:
                completed = self.indexer.generate_embeddings(report, self._cancel)
                if not completed and self._cancel.cancelled:
                    outcome.warnings.append("Embedding generation cancelled; keyword search stays active")
            snapshot.update(
                status="indexed",
                message=outcome.message,
                warnings=outcome.warnings,
                failed_files=outcome.failed_files,
            )
            self.surface.notify(outcome.message)
            return outcome
        except Exception as e:
            logger.error(f"Failed to index repository: {e}")
            snapshot.update(status="error", error=str(e))
            self.surface.notify(f"Failed to index repository: {e}")
            raise
        finally:
            with self._flag_lock:
                self._indexing = False
                self._cancel = None

    def cancel_indexing(self) -> bool:
        token = self._cancel
        if token is None:
            return False
        token.cancel()
        return True

    def on_file_event(self, event: FileEvent) -> bool:
        """Patch the index for one change notification. Returns False when filtered out."""
        try:
            rel = self.indexer.relative_path(event.path)
        except ValueError:
            return False
        if not is_code_file(rel, self.cfg.get("code_extensions", [])):
            return False
        if should_ignore(rel, self.cfg.get("ignored_dirs", [])):
            return False

        logger.debug(f"File {event.kind}: {rel}")
        self.indexer.patch_file(self.workspace_root / rel)
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def search(self, query: str, top_k: Optional[int] = None) -> List[Tuple[float, CodeChunk]]:
        k = top_k if top_k is not None else int(self.cfg.get("search", {}).get("top_k", 5))
        return self.searcher.search(query, k)

    def enrich(self, text: str, **kwargs) -> EnrichedRequest:
        return self.enricher.enrich(text, **kwargs)

    # ------------------------------------------------------------------
    # Chat / agent
    # ------------------------------------------------------------------

    def set_mode(self, mode: str) -> None:
        if mode not in MODES:
            raise ValueError(f"mode must be one of {', '.join(MODES)}, got {mode!r}")
        self.mode = mode
        logger.info(f"Switched to {mode} mode")

    def _complete(self, prompt: str, **options) -> LLMResponse:
        if self.backend is None:
            raise RuntimeError("No AI backend configured")
        return self.backend.complete(prompt, **options)

    def send(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> ChatReply:
        """Send a prompt to the backend; in agent mode stage detected actions.

        Backend errors are recorded in the history and re-raised.
        """
        options = {"system_prompt": system_prompt, "temperature": temperature, "max_tokens": max_tokens}
        self.history.append(ChatMessage("user", prompt))
        try:
            if self.mode == "agent":
                reply = self._send_agent(prompt, options)
            else:
                response = self._complete(prompt, **options)
                reply = ChatReply(content=response.content, model=response.model)
        except Exception as e:
            self.history.append(ChatMessage("assistant", f"Error: {e}"))
            raise

        self.history.append(ChatMessage("assistant", reply.content))
        return reply

    def _send_agent(self, prompt: str, options: Dict) -> ChatReply:
        detected = self.actions.detect(prompt)
        if not detected:
            logger.info("No file actions detected, answering as chat")
            response = self._complete(prompt, **options)
            return ChatReply(content=response.content, model=response.model)

        response = self._complete(prompt + AGENT_CONTENT_SUFFIX, **options)
        staged = self.actions.stage(detected, response.content)
        return ChatReply(content=response.content, model=response.model, actions=staged)

    def approve(self) -> List[ActionResult]:
        results = self.actions.approve()
        for result in results:
            if not result.success:
                self.surface.notify(result.message)
        self.history.append(ChatMessage("assistant", format_results(results)))
        return results

    def reject(self) -> str:
        message = self.actions.reject()
        self.history.append(ChatMessage("assistant", message))
        return message

    def clear_history(self) -> None:
        self.history = []

    def status(self) -> Dict:
        return {
            "workspace_root": str(self.workspace_root),
            "mode": self.mode,
            "is_indexing": self.is_indexing,
            "proposal_state": self.actions.state.value,
            **self.indexer.status(),
        }
