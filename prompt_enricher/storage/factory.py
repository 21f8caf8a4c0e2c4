"""Factory for creating index store instances."""

from __future__ import annotations

from pathlib import Path
from typing import Dict

from ..utils import workspace_slug
from .base import IndexStore
from .json_store import INDEX_FILENAME, JsonIndexStore


def create_index_store(cfg: Dict, workspace_root: Path) -> IndexStore:
    storage_dir = Path(cfg.get("storage", {}).get("dir", ".prompt-enricher")).expanduser()
    return JsonIndexStore(storage_dir / workspace_slug(workspace_root) / INDEX_FILENAME)
