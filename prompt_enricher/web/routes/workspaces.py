"""Workspace registration routes."""

from fastapi import APIRouter, BackgroundTasks, HTTPException
from typing import List
from pathlib import Path

from ...session import FileEvent, WorkspaceSession
from ..schemas import FileEventRequest, ModeRequest, WorkspaceCreate, WorkspaceResponse
from .. import state
from .indexing import index_workspace_task

router = APIRouter(prefix="/workspaces")


def _to_response(workspace_id: int, session: WorkspaceSession) -> WorkspaceResponse:
    status = session.status()
    return WorkspaceResponse(
        id=workspace_id,
        path=status["workspace_root"],
        name=session.workspace_root.name,
        mode=status["mode"],
        is_indexed=status["is_indexed"],
        is_indexing=status["is_indexing"],
        chunk_count=status["chunk_count"],
        has_embeddings=status["has_embeddings"],
        last_indexed=status["last_indexed"],
        proposal_state=status["proposal_state"],
    )


@router.post("", response_model=WorkspaceResponse)
async def register_workspace(request: WorkspaceCreate, background_tasks: BackgroundTasks):
    """Open a workspace; load its index or schedule a build."""
    path = Path(request.path).expanduser()
    if not path.exists():
        raise HTTPException(status_code=404, detail="Workspace path does not exist")
    if not path.is_dir():
        raise HTTPException(status_code=400, detail="Path is not a directory")

    try:
        workspace_id, created = state.register_workspace(path)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    session = state.get_session(workspace_id)
    # an existing session keeps its index, even mid-build
    if created and not session.indexer.load() and session.cfg.get("auto_index", True):
        background_tasks.add_task(index_workspace_task, workspace_id)
    return _to_response(workspace_id, session)


@router.get("", response_model=List[WorkspaceResponse])
async def list_workspaces():
    return [_to_response(wid, s) for wid, s in state.sessions.items()]


@router.get("/{workspace_id}", response_model=WorkspaceResponse)
async def get_workspace(workspace_id: int):
    return _to_response(workspace_id, state.get_session(workspace_id))


@router.put("/{workspace_id}/mode", response_model=WorkspaceResponse)
async def set_mode(workspace_id: int, request: ModeRequest):
    session = state.get_session(workspace_id)
    session.set_mode(request.mode)
    return _to_response(workspace_id, session)


@router.post("/{workspace_id}/events")
def file_event(workspace_id: int, request: FileEventRequest):
    """Apply one file-change notification to the index."""
    session = state.get_session(workspace_id)
    handled = session.on_file_event(FileEvent(request.kind, Path(request.path)))
    return {"handled": handled, "chunk_count": session.indexer.status()["chunk_count"]}
