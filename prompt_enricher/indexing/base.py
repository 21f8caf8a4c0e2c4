"""Indexer Interface."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Callable, Optional

from ..core.models import IndexingOutcome

# (percent complete, human-readable message)
ProgressCallback = Callable[[float, str], None]


class CancellationToken:
    """Cooperative cancellation flag checked between batches."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class Indexer:
    """Abstract base class for workspace indexing."""

    def rebuild(self, progress: Optional[ProgressCallback] = None) -> IndexingOutcome:
        raise NotImplementedError

    def patch_file(self, path: Path) -> None:
        raise NotImplementedError

    def persist(self) -> bool:
        raise NotImplementedError

    def load(self) -> bool:
        raise NotImplementedError
