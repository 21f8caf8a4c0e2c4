"""Main FastAPI application."""

import logging

from fastapi import FastAPI, APIRouter
from fastapi.middleware.cors import CORSMiddleware

from .routes import agent, indexing, search, workspaces

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Prompt Enricher")

# Setup CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

api_router = APIRouter(prefix="/api")

api_router.include_router(workspaces.router)
api_router.include_router(indexing.router)
api_router.include_router(search.router)
api_router.include_router(agent.router)

app.include_router(api_router)


@app.get("/health")
async def health():
    return {"status": "ok"}
