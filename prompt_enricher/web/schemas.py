from pydantic import BaseModel
from datetime import datetime
from typing import Optional, List, Literal


class WorkspaceCreate(BaseModel):
    path: str


class WorkspaceResponse(BaseModel):
    id: int
    path: str
    name: str
    mode: str
    is_indexed: bool
    is_indexing: bool
    chunk_count: int
    has_embeddings: bool
    last_indexed: Optional[datetime]
    proposal_state: str


class ModeRequest(BaseModel):
    mode: Literal["chat", "agent"]


class FileEventRequest(BaseModel):
    kind: Literal["created", "changed", "deleted"]
    path: str


class IndexResponse(BaseModel):
    accepted: bool
    message: str


class SearchRequest(BaseModel):
    query: str
    workspace_id: int
    top_k: int = 5


class SearchResult(BaseModel):
    id: str
    file_path: str
    start_line: int
    end_line: int
    kind: str
    name: Optional[str]
    score: float
    text: str


class SearchResponse(BaseModel):
    results: List[SearchResult]


class EnrichRequest(BaseModel):
    text: str
    workspace_id: int
    template_id: Optional[str] = None
    max_context_chunks: Optional[int] = None
    include_repo_context: bool = True


class EnrichResponse(BaseModel):
    original_text: str
    composed_text: str
    template_id: Optional[str]
    template_name: Optional[str]
    selection_reason: str
    context: List[SearchResult]
    estimated_tokens: int
    target_path: Optional[str]
    timestamp: datetime


class TemplateResponse(BaseModel):
    id: str
    name: str
    description: str
    category: str
    example: str


class ActionSchema(BaseModel):
    kind: str
    target: Optional[str]
    description: str
    command: Optional[str] = None
    has_content: bool = False


class ProposeRequest(BaseModel):
    text: str
    content: Optional[str] = None


class ProposalResponse(BaseModel):
    state: str
    actions: List[ActionSchema]
    content: Optional[str] = None


class ActionResultSchema(BaseModel):
    action: ActionSchema
    success: bool
    message: str


class ApprovalResponse(BaseModel):
    results: List[ActionResultSchema]
    message: str


class RejectionResponse(BaseModel):
    message: str


class ChatRequest(BaseModel):
    prompt: str
    enrich: bool = False
    system_prompt: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None


class ChatResponse(BaseModel):
    content: str
    model: Optional[str] = None
    pending_approval: bool = False
    actions: List[ActionSchema] = []
