"""Abstract index storage interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ..core.models import IndexedRepo


class IndexStore(ABC):
    """Abstract base class for persisted workspace indexes."""

    @abstractmethod
    def save(self, repo: IndexedRepo) -> None:
        """Overwrite the persisted index with ``repo``."""
        pass

    @abstractmethod
    def load(self) -> Optional[IndexedRepo]:
        """Load the persisted index, or None when nothing is stored."""
        pass

    @abstractmethod
    def exists(self) -> bool:
        """Check if a persisted index exists."""
        pass
