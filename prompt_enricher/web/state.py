"""In-process registry of open workspace sessions."""

from __future__ import annotations

import itertools
import logging
import os
from pathlib import Path
from typing import Dict, Optional, Tuple

from fastapi import HTTPException

from ..config import load_config
from ..core import ActionResult, AgentAction, CodeChunk
from ..llm import LLMBackend, create_client
from ..session import WorkspaceSession
from .schemas import ActionResultSchema, ActionSchema, SearchResult

logger = logging.getLogger(__name__)

sessions: Dict[int, WorkspaceSession] = {}

_ids = itertools.count(1)


def _make_backend(cfg: Dict) -> Optional[LLMBackend]:
    if not os.getenv("HF_TOKEN"):
        logger.info("HF_TOKEN not set; chat endpoints are disabled")
        return None
    return create_client(cfg)


def register_workspace(path: Path) -> Tuple[int, bool]:
    """Session id for ``path`` and whether this call created the session."""
    for workspace_id, session in sessions.items():
        if session.workspace_root == path.resolve():
            return workspace_id, False

    cfg = load_config(path)
    session = WorkspaceSession(path, cfg=cfg, backend=_make_backend(cfg))
    workspace_id = next(_ids)
    sessions[workspace_id] = session
    logger.info(f"Registered workspace {workspace_id}: {session.workspace_root}")
    return workspace_id, True


def get_session(workspace_id: int) -> WorkspaceSession:
    session = sessions.get(workspace_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Workspace not found")
    return session


def reset() -> None:
    sessions.clear()


def to_search_result(score: float, c: CodeChunk) -> SearchResult:
    return SearchResult(
        id=c.id,
        file_path=c.file_path,
        start_line=c.start_line,
        end_line=c.end_line,
        kind=c.kind,
        name=c.name,
        score=score,
        text=c.content,
    )


def to_action_schema(a: AgentAction) -> ActionSchema:
    return ActionSchema(
        kind=a.kind,
        target=a.target,
        description=a.description,
        command=a.command,
        has_content=a.content is not None,
    )


def to_result_schema(r: ActionResult) -> ActionResultSchema:
    return ActionResultSchema(action=to_action_schema(r.action), success=r.success, message=r.message)
