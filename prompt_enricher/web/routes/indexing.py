"""Indexing routes with SSE support."""

from fastapi import APIRouter, BackgroundTasks, HTTPException
from sse_starlette.sse import EventSourceResponse
import asyncio
import json
import logging

from ..schemas import IndexResponse
from .. import state

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/workspaces")


def index_workspace_task(workspace_id: int):
    """Background task to (re)build one workspace index."""
    session = state.sessions.get(workspace_id)
    if session is None:
        return

    # the session records progress itself, and only for a build it accepted
    try:
        outcome = session.build_index()
        if not outcome.accepted:
            logger.info(f"Workspace {workspace_id} is already indexing; request dropped")
    except Exception as e:
        logger.error(f"Error indexing workspace {workspace_id}: {e}")


@router.post("/{workspace_id}/index", response_model=IndexResponse)
async def start_indexing(workspace_id: int, background_tasks: BackgroundTasks):
    """Rebuild the workspace index in the background."""
    session = state.get_session(workspace_id)
    if session.is_indexing:
        raise HTTPException(status_code=400, detail="Indexing already in progress")

    background_tasks.add_task(index_workspace_task, workspace_id)
    return IndexResponse(accepted=True, message=f"Indexing started for '{session.workspace_root.name}'")


@router.get("/{workspace_id}/index/progress")
async def index_progress(workspace_id: int):
    """SSE endpoint for real-time indexing progress."""
    session = state.get_session(workspace_id)

    async def event_generator():
        while True:
            progress = session.progress
            status = session.status()
            yield {
                "event": "progress",
                "data": json.dumps(
                    {
                        "workspace_id": workspace_id,
                        "is_indexing": status["is_indexing"],
                        "chunk_count": status["chunk_count"],
                        "has_embeddings": status["has_embeddings"],
                        "percent": progress.get("percent", 0.0),
                        "message": progress.get("message", ""),
                        "status": progress.get("status", "idle"),
                        "error": progress.get("error"),
                    }
                ),
            }

            if not session.is_indexing:
                break

            await asyncio.sleep(1)

    return EventSourceResponse(event_generator())


@router.post("/{workspace_id}/index/cancel")
async def cancel_indexing(workspace_id: int):
    """Cancel embedding generation of a running build."""
    session = state.get_session(workspace_id)
    if not session.cancel_indexing():
        raise HTTPException(status_code=400, detail="Workspace is not being indexed")
    return {"success": True, "message": "Indexing cancelled"}
