"""Configuration management for prompt-enricher."""

from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Dict, List


DEFAULT_CODE_EXTENSIONS: List[str] = [
    ".ts", ".tsx", ".js", ".jsx", ".py", ".java", ".go",
    ".cpp", ".c", ".cs", ".rb", ".php", ".swift", ".kt",
    ".rs", ".scala", ".r", ".m", ".h", ".hpp",
    ".feature",
]

DEFAULT_IGNORED_DIRS: List[str] = [
    "node_modules",
    "dist",
    "build",
    "out",
    ".git",
    ".vscode",
    "venv",
    ".venv",
    "__pycache__",
    ".pytest_cache",
    "target",
    "bin",
    "obj",
    "coverage",
    ".next",
]

SEARCH_BACKENDS = ("keyword", "hash", "bm25")

DEFAULT_CONFIG: Dict = {
    "auto_index": True,
    "indexing": {
        "max_files": 2000,
        "embedding_batch_size": 20,
        "max_keywords_per_chunk": 50,
    },
    "search": {
        "backend": "hash",
        "top_k": 5,
        "embedding_dim": 384,
    },
    "prompt": {
        "max_context_chunks": 3,
        "max_chunk_chars": 1500,
    },
    "storage": {
        "dir": str(Path.home() / ".prompt-enricher"),
    },
    "llm": {
        "api_base": "https://router.huggingface.co",
        "model": "deepseek-ai/DeepSeek-Coder-V2-Lite-Instruct",
        "max_tokens": 4096,
        "temperature": 0.0,
        "timeout": 60,
    },
}


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_config(workspace: Path | None = None) -> Dict:
    """Load configuration.

    Returns a deep copy of the defaults with environment overrides applied.
    Raises ValueError for an unknown search backend or a non-positive file cap.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if "ENRICHER_AUTO_INDEX" in os.environ:
        config["auto_index"] = _env_bool(os.environ["ENRICHER_AUTO_INDEX"])
    config["search"]["backend"] = os.getenv("ENRICHER_SEARCH_BACKEND", config["search"]["backend"])
    config["indexing"]["max_files"] = int(os.getenv("ENRICHER_MAX_FILES", config["indexing"]["max_files"]))
    config["storage"]["dir"] = os.getenv("ENRICHER_STORAGE_DIR", config["storage"]["dir"])
    config["llm"]["model"] = os.getenv("ENRICHER_LLM_MODEL", config["llm"]["model"])

    config["code_extensions"] = list(DEFAULT_CODE_EXTENSIONS)
    config["ignored_dirs"] = list(DEFAULT_IGNORED_DIRS)
    if workspace is not None:
        config["workspace_root"] = str(workspace)

    validate_config(config)
    return config


def validate_config(config: Dict) -> None:
    backend = str(config.get("search", {}).get("backend", "")).strip().lower()
    if backend not in SEARCH_BACKENDS:
        raise ValueError(
            f"search.backend must be one of {', '.join(SEARCH_BACKENDS)}, got {backend!r}"
        )
    config["search"]["backend"] = backend

    max_files = int(config.get("indexing", {}).get("max_files", 0))
    if max_files < 1:
        raise ValueError(f"indexing.max_files must be >= 1, got {max_files}")
