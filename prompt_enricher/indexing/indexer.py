"""Workspace indexing logic."""

from __future__ import annotations

import datetime as _dt
import logging
from pathlib import Path
from typing import Dict, List, Optional

from ..core import (
    Chunker,
    CodeChunk,
    DefaultChunker,
    IndexedRepo,
    IndexingOutcome,
    TextVectorizer,
    chunk_path,
    make_vectorizer,
)
from ..storage import IndexStore, create_index_store
from ..utils import iter_code_files
from .base import CancellationToken, Indexer, ProgressCallback

logger = logging.getLogger(__name__)


def _utcnow() -> _dt.datetime:
    return _dt.datetime.now(_dt.timezone.utc)


class RepoIndexer(Indexer):
    """In-memory chunk index of one workspace, persisted as one document."""

    def __init__(
        self,
        cfg: Dict,
        workspace_root: Path,
        store: Optional[IndexStore] = None,
        chunker: Optional[Chunker] = None,
        vectorizer: Optional[TextVectorizer] = None,
    ):
        self.cfg = cfg
        self.workspace_root = Path(workspace_root).resolve()
        self.store = store or create_index_store(cfg, self.workspace_root)
        indexing_cfg = cfg.get("indexing", {})
        self.chunker = chunker or DefaultChunker(
            max_keywords=int(indexing_cfg.get("max_keywords_per_chunk", 50))
        )
        self.vectorizer = vectorizer or make_vectorizer(cfg)
        self.max_files = int(indexing_cfg.get("max_files", 2000))
        self.batch_size = int(indexing_cfg.get("embedding_batch_size", 20))
        self.repo: Optional[IndexedRepo] = None

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------

    def rebuild(self, progress: Optional[ProgressCallback] = None) -> IndexingOutcome:
        files = iter_code_files(
            self.workspace_root,
            self.cfg.get("code_extensions", []),
            self.cfg.get("ignored_dirs", []),
        )
        warnings: List[str] = []
        if len(files) > self.max_files:
            msg = f"Found {len(files)} files. Indexing first {self.max_files} files for performance."
            logger.warning(msg)
            warnings.append(msg)
            files = files[: self.max_files]

        chunks: List[CodeChunk] = []
        failed: List[str] = []
        for i, fp in enumerate(files):
            rel = fp.relative_to(self.workspace_root).as_posix()
            try:
                chunks.extend(chunk_path(fp, self.workspace_root, self.chunker))
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Error parsing file {rel}: {e}")
                failed.append(rel)
            if progress:
                progress((i + 1) / len(files) * 100, rel)

        self.repo = IndexedRepo(
            chunks=chunks,
            last_indexed=_utcnow(),
            workspace_root=str(self.workspace_root),
            has_embeddings=False,
        )
        self.persist()

        indexed_files = len(files) - len(failed)
        message = f"Repository indexed: {len(chunks)} chunks from {indexed_files} files"
        logger.info(message)
        return IndexingOutcome(
            accepted=True,
            message=message,
            chunk_count=len(chunks),
            file_count=indexed_files,
            failed_files=failed,
            warnings=warnings,
        )

    def generate_embeddings(
        self,
        progress: Optional[ProgressCallback] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> bool:
        """Attach vectors to every chunk in fixed-size batches.

        Returns True when all batches completed. A cancelled run keeps the
        vectors of finished batches but leaves ``has_embeddings`` unset.
        """
        repo = self.repo
        if repo is None or not self.vectorizer.builds_index_vectors:
            return False

        chunks = repo.chunks
        if self.vectorizer.requires_fit:
            self.vectorizer.fit([c.embedding_text() for c in chunks])

        total_batches = max(1, -(-len(chunks) // self.batch_size))
        for i in range(0, len(chunks), self.batch_size):
            if cancel is not None and cancel.cancelled:
                logger.info("Embedding generation cancelled")
                return False
            batch = chunks[i : i + self.batch_size]
            vectors = self.vectorizer.embed([c.embedding_text() for c in batch])
            for chunk, vector in zip(batch, vectors):
                chunk.embedding = vector
            current = i // self.batch_size + 1
            if progress:
                progress(current / total_batches * 100, f"{current}/{total_batches} batches")

        # files patched while batches ran replaced repo.chunks with a new list
        missing = [c for c in repo.chunks if c.embedding is None]
        if missing:
            for chunk, vector in zip(missing, self.vectorizer.embed([c.embedding_text() for c in missing])):
                chunk.embedding = vector
            logger.debug(f"Backfilled {len(missing)} chunks added during embedding")

        repo.has_embeddings = True
        self.persist()
        logger.info(f"Generated embeddings for {len(repo.chunks)} chunks")
        return True

    # ------------------------------------------------------------------
    # Incremental updates
    # ------------------------------------------------------------------

    def relative_path(self, path: Path) -> str:
        p = Path(path)
        if not p.is_absolute():
            p = self.workspace_root / p
        return p.resolve().relative_to(self.workspace_root).as_posix()

    def patch_file(self, path: Path) -> None:
        """Drop every chunk of ``path`` and re-chunk it from scratch."""
        if self.repo is None:
            return

        try:
            rel = self.relative_path(path)
        except ValueError:
            logger.warning(f"Ignoring file outside workspace: {path}")
            return

        self.repo.chunks = [c for c in self.repo.chunks if c.file_path != rel]

        abs_path = self.workspace_root / rel
        if abs_path.exists():
            try:
                new_chunks = chunk_path(abs_path, self.workspace_root, self.chunker)
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Error updating file {rel}: {e}")
                new_chunks = []
            if self.vectorizer.builds_index_vectors and new_chunks:
                vectors = self.vectorizer.embed([c.embedding_text() for c in new_chunks])
                for chunk, vector in zip(new_chunks, vectors):
                    chunk.embedding = vector
            self.repo.chunks.extend(new_chunks)
            logger.debug(f"Patched {rel}: {len(new_chunks)} chunks")
        else:
            logger.debug(f"Removed chunks of deleted file {rel}")

        self.persist()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def persist(self) -> bool:
        if self.repo is None:
            return False
        try:
            self.store.save(self.repo)
            return True
        except OSError as e:
            logger.error(f"Error saving index: {e}")
            return False

    def load(self) -> bool:
        try:
            repo = self.store.load()
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.error(f"Error loading index: {e}")
            return False
        if repo is None:
            return False

        if repo.has_embeddings:
            dims = {len(c.embedding) for c in repo.chunks if c.embedding is not None}
            if dims and dims != {self.vectorizer.dim}:
                logger.warning(
                    f"Stored vectors have dimension {sorted(dims)}, expected {self.vectorizer.dim}; "
                    f"dropping them"
                )
                for chunk in repo.chunks:
                    chunk.embedding = None
                repo.has_embeddings = False
            elif self.vectorizer.requires_fit:
                self.vectorizer.fit([c.embedding_text() for c in repo.chunks])

        self.repo = repo
        logger.info(f"Loaded index with {len(repo.chunks)} chunks from {self.store}")
        return True

    def status(self) -> Dict:
        return {
            "is_indexed": self.repo is not None,
            "chunk_count": len(self.repo.chunks) if self.repo else 0,
            "last_indexed": self.repo.last_indexed if self.repo else None,
            "has_embeddings": self.repo.has_embeddings if self.repo else False,
        }


def build_index(cfg: Dict, workspace_root: Path, progress: Optional[ProgressCallback] = None) -> RepoIndexer:
    """Build and persist a fresh index (Wrapper)."""
    indexer = RepoIndexer(cfg, workspace_root)
    indexer.rebuild(progress)
    indexer.generate_embeddings()
    return indexer
