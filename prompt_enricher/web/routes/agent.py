"""Chat and agent-mode routes."""

from fastapi import APIRouter, HTTPException
import logging

import requests

from ...agent import format_results
from ...llm import LLMError
from ..schemas import (
    ApprovalResponse,
    ChatRequest,
    ChatResponse,
    ProposalResponse,
    ProposeRequest,
    RejectionResponse,
)
from .. import state

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/workspaces")


def _proposal(session) -> ProposalResponse:
    pending = session.actions.pending
    return ProposalResponse(
        state=session.actions.state.value,
        actions=[state.to_action_schema(a) for a in pending.actions] if pending else [],
        content=pending.content if pending else None,
    )


@router.post("/{workspace_id}/agent/propose", response_model=ProposalResponse)
def propose(workspace_id: int, request: ProposeRequest):
    """Stage actions inferred from text; replaces any pending proposal."""
    session = state.get_session(workspace_id)
    session.actions.propose(request.text, request.content)
    return _proposal(session)


@router.get("/{workspace_id}/agent/pending", response_model=ProposalResponse)
def pending(workspace_id: int):
    return _proposal(state.get_session(workspace_id))


@router.post("/{workspace_id}/agent/approve", response_model=ApprovalResponse)
def approve(workspace_id: int):
    session = state.get_session(workspace_id)
    if session.actions.pending is None:
        raise HTTPException(status_code=400, detail="No pending action to execute")
    results = session.approve()
    return ApprovalResponse(
        results=[state.to_result_schema(r) for r in results],
        message=format_results(results),
    )


@router.post("/{workspace_id}/agent/reject", response_model=RejectionResponse)
def reject(workspace_id: int):
    session = state.get_session(workspace_id)
    if session.actions.pending is None:
        raise HTTPException(status_code=400, detail="No pending action to reject")
    return RejectionResponse(message=session.reject())


@router.post("/{workspace_id}/chat", response_model=ChatResponse)
def chat(workspace_id: int, request: ChatRequest):
    """Send a prompt to the AI backend, optionally enriching it first."""
    session = state.get_session(workspace_id)
    if session.backend is None:
        raise HTTPException(status_code=503, detail="No AI backend configured")

    prompt = session.enrich(request.prompt).composed_text if request.enrich else request.prompt
    try:
        reply = session.send(
            prompt,
            system_prompt=request.system_prompt,
            temperature=request.temperature,
            max_tokens=request.max_tokens,
        )
    except (requests.RequestException, LLMError) as e:
        logger.error(f"Backend call failed: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    return ChatResponse(
        content=reply.content,
        model=reply.model,
        pending_approval=reply.pending_approval,
        actions=[state.to_action_schema(a) for a in reply.actions],
    )
