"""Index storage backends (single JSON document per workspace)."""

from .base import IndexStore
from .factory import create_index_store
from .json_store import JsonIndexStore

__all__ = [
    "IndexStore",
    "JsonIndexStore",
    "create_index_store",
]
