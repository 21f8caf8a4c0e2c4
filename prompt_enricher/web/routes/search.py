"""Search, enrichment and template routes."""

from fastapi import APIRouter, HTTPException
from typing import List, Optional

from ...prompt import TemplateSelector
from ..schemas import (
    EnrichRequest,
    EnrichResponse,
    SearchRequest,
    SearchResponse,
    TemplateResponse,
)
from .. import state

router = APIRouter()

_catalog: Optional[TemplateSelector] = None


@router.post("/search", response_model=SearchResponse)
def search(request: SearchRequest):
    session = state.get_session(request.workspace_id)
    hits = session.search(request.query, request.top_k)
    return SearchResponse(results=[state.to_search_result(score, c) for score, c in hits])


@router.post("/enrich", response_model=EnrichResponse)
def enrich(request: EnrichRequest):
    session = state.get_session(request.workspace_id)
    try:
        enriched = session.enrich(
            request.text,
            max_context_chunks=request.max_context_chunks,
            template_id=request.template_id,
            include_repo_context=request.include_repo_context,
        )
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))

    meta = enriched.metadata
    return EnrichResponse(
        original_text=enriched.original_text,
        composed_text=enriched.composed_text,
        template_id=meta["template_id"],
        template_name=enriched.template.name if enriched.template else None,
        selection_reason=meta["selection_reason"],
        context=[state.to_search_result(0.0, c) for c in enriched.chunks],
        estimated_tokens=meta["estimated_tokens"],
        target_path=meta["target_path"],
        timestamp=meta["timestamp"],
    )


@router.get("/templates", response_model=List[TemplateResponse])
def list_templates(category: Optional[str] = None):
    global _catalog
    if _catalog is None:
        _catalog = TemplateSelector()
    templates = _catalog.templates_by_category(category) if category else _catalog.all_templates()
    return [
        TemplateResponse(
            id=t.id,
            name=t.name,
            description=t.description,
            category=t.category,
            example=t.example,
        )
        for t in templates
    ]
