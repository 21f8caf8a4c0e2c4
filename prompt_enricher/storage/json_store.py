"""Single-document JSON index storage."""

from __future__ import annotations

import dataclasses
import datetime as _dt
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional

from ..core.models import CodeChunk, IndexedRepo
from ..utils import ensure_dir
from .base import IndexStore

logger = logging.getLogger(__name__)

INDEX_FILENAME = "repo-index.json"


def repo_to_payload(repo: IndexedRepo) -> Dict:
    return {
        "chunks": [dataclasses.asdict(c) for c in repo.chunks],
        "last_indexed": repo.last_indexed.isoformat(),
        "workspace_root": repo.workspace_root,
        "has_embeddings": repo.has_embeddings,
    }


def payload_to_repo(payload: Dict) -> IndexedRepo:
    last_indexed = _dt.datetime.fromisoformat(payload["last_indexed"].replace("Z", "+00:00"))
    chunks = [
        CodeChunk(
            id=c["id"],
            file_path=c["file_path"],
            content=c["content"],
            start_line=int(c["start_line"]),
            end_line=int(c["end_line"]),
            kind=c.get("kind", "snippet"),
            name=c.get("name"),
            keywords=c.get("keywords"),
            embedding=c.get("embedding"),
        )
        for c in payload.get("chunks", [])
    ]
    return IndexedRepo(
        chunks=chunks,
        last_indexed=last_indexed,
        workspace_root=payload.get("workspace_root", ""),
        has_embeddings=bool(payload.get("has_embeddings", False)),
    )


class JsonIndexStore(IndexStore):
    """One JSON document per workspace, replaced atomically on every save.

    There is no schema version: a document written by an incompatible
    release fails to load and the index has to be rebuilt.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def save(self, repo: IndexedRepo) -> None:
        ensure_dir(self.path.parent)
        payload = repo_to_payload(repo)
        fd, tmp_name = tempfile.mkstemp(prefix=".repo-index-", suffix=".tmp", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
        logger.debug(f"Saved {len(repo.chunks)} chunks to {self.path}")

    def load(self) -> Optional[IndexedRepo]:
        if not self.path.exists():
            return None
        with self.path.open("r", encoding="utf-8") as f:
            payload = json.load(f)
        return payload_to_repo(payload)

    def exists(self) -> bool:
        return self.path.is_file()
