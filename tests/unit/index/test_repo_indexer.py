from __future__ import annotations

from pathlib import Path

import pytest

from prompt_enricher.config import load_config
from prompt_enricher.core import CodeChunk
from prompt_enricher.indexing import CancellationToken, RepoIndexer, build_index
from prompt_enricher.search import DefaultSearcher


def _cfg(tmp_path: Path, backend: str = "keyword", **indexing) -> dict:
    cfg = load_config()
    cfg["storage"]["dir"] = str(tmp_path / "store")
    cfg["search"]["backend"] = backend
    cfg["indexing"].update(indexing)
    return cfg


def _workspace(tmp_path: Path) -> Path:
    root = tmp_path / "ws"
    (root / "src").mkdir(parents=True)
    (root / "src" / "auth.ts").write_text(
        "function login(user) {\n  return user;\n}\n", encoding="utf-8"
    )
    (root / "src" / "session.ts").write_text(
        "class Session {\n  constructor() {}\n}\n", encoding="utf-8"
    )
    (root / "node_modules" / "lib").mkdir(parents=True)
    (root / "node_modules" / "lib" / "index.ts").write_text("function vendored() {}\n", encoding="utf-8")
    (root / "README.md").write_text("# docs\n", encoding="utf-8")
    return root


def test_rebuild_indexes_code_files_only(tmp_path: Path) -> None:
    indexer = RepoIndexer(_cfg(tmp_path), _workspace(tmp_path))

    outcome = indexer.rebuild()

    assert outcome.accepted
    assert outcome.file_count == 2
    assert outcome.message == f"Repository indexed: {outcome.chunk_count} chunks from 2 files"
    assert indexer.repo is not None
    assert indexer.repo.file_paths() == ["src/auth.ts", "src/session.ts"]
    assert indexer.repo.has_embeddings is False
    assert indexer.store.exists()


def test_rebuild_caps_file_count_in_traversal_order(tmp_path: Path) -> None:
    root = tmp_path / "ws"
    root.mkdir()
    for name in ("a.py", "b.py", "c.py"):
        (root / name).write_text(f"def {name[0]}_fn():\n    pass\n", encoding="utf-8")
    indexer = RepoIndexer(_cfg(tmp_path, max_files=2), root)

    outcome = indexer.rebuild()

    assert outcome.file_count == 2
    assert len(outcome.warnings) == 1
    assert "Indexing first 2 files" in outcome.warnings[0]
    assert indexer.repo.file_paths() == ["a.py", "b.py"]


def test_rebuild_skips_unreadable_files(tmp_path: Path) -> None:
    root = _workspace(tmp_path)
    (root / "src" / "bad.ts").write_bytes(b"\xff\xfe\xfa broken")
    indexer = RepoIndexer(_cfg(tmp_path), root)

    outcome = indexer.rebuild()

    assert outcome.failed_files == ["src/bad.ts"]
    assert outcome.file_count == 2
    assert "src/bad.ts" not in indexer.repo.file_paths()


def test_rebuild_reports_progress(tmp_path: Path) -> None:
    indexer = RepoIndexer(_cfg(tmp_path), _workspace(tmp_path))
    seen: list = []

    indexer.rebuild(lambda percent, message: seen.append((percent, message)))

    assert seen == [(50.0, "src/auth.ts"), (100.0, "src/session.ts")]


def test_patch_file_rechunks_changed_file(tmp_path: Path) -> None:
    root = _workspace(tmp_path)
    indexer = RepoIndexer(_cfg(tmp_path), root)
    indexer.rebuild()
    before = [c for c in indexer.repo.chunks if c.file_path == "src/session.ts"]

    (root / "src" / "auth.ts").write_text(
        "function login(user) {\n  return user;\n}\nfunction logout(user) {\n  return null;\n}\n",
        encoding="utf-8",
    )
    indexer.patch_file(root / "src" / "auth.ts")

    names = [c.name for c in indexer.repo.chunks if c.file_path == "src/auth.ts"]
    assert names == ["login", "logout"]
    assert [c for c in indexer.repo.chunks if c.file_path == "src/session.ts"] == before


def test_patch_file_drops_deleted_file(tmp_path: Path) -> None:
    root = _workspace(tmp_path)
    indexer = RepoIndexer(_cfg(tmp_path), root)
    indexer.rebuild()

    (root / "src" / "session.ts").unlink()
    indexer.patch_file(Path("src/session.ts"))

    assert indexer.repo.file_paths() == ["src/auth.ts"]
    reloaded = RepoIndexer(_cfg(tmp_path), root)
    assert reloaded.load()
    assert reloaded.repo.file_paths() == ["src/auth.ts"]


def test_patch_file_without_index_is_a_no_op(tmp_path: Path) -> None:
    root = _workspace(tmp_path)
    indexer = RepoIndexer(_cfg(tmp_path), root)

    indexer.patch_file(root / "src" / "auth.ts")

    assert indexer.repo is None
    assert not indexer.store.exists()


def test_persist_and_load_round_trip(tmp_path: Path) -> None:
    root = _workspace(tmp_path)
    indexer = RepoIndexer(_cfg(tmp_path), root)
    indexer.rebuild()

    reloaded = RepoIndexer(_cfg(tmp_path), root)
    assert reloaded.load()

    def fields(repo):
        return [(c.id, c.file_path, c.content, c.start_line, c.end_line, c.kind, c.name) for c in repo.chunks]

    assert fields(reloaded.repo) == fields(indexer.repo)
    assert reloaded.repo.last_indexed == indexer.repo.last_indexed
    assert reloaded.repo.workspace_root == str(root.resolve())


def test_load_without_document_or_with_corrupt_document(tmp_path: Path) -> None:
    root = _workspace(tmp_path)
    indexer = RepoIndexer(_cfg(tmp_path), root)
    assert indexer.load() is False

    indexer.store.path.parent.mkdir(parents=True)
    indexer.store.path.write_text("{not json", encoding="utf-8")
    assert indexer.load() is False
    assert indexer.repo is None


def test_generate_embeddings_attaches_vectors(tmp_path: Path) -> None:
    cfg = _cfg(tmp_path, backend="hash")
    cfg["search"]["embedding_dim"] = 64
    indexer = RepoIndexer(cfg, _workspace(tmp_path))
    indexer.rebuild()

    assert indexer.generate_embeddings()
    assert indexer.repo.has_embeddings
    assert all(c.embedding is not None and len(c.embedding) == 64 for c in indexer.repo.chunks)


def test_generate_embeddings_is_skipped_for_keyword_backend(tmp_path: Path) -> None:
    indexer = RepoIndexer(_cfg(tmp_path), _workspace(tmp_path))
    indexer.rebuild()

    assert indexer.generate_embeddings() is False
    assert all(c.embedding is None for c in indexer.repo.chunks)


def test_cancelled_embedding_keeps_finished_batches(tmp_path: Path) -> None:
    indexer = RepoIndexer(_cfg(tmp_path, backend="hash", embedding_batch_size=1), _workspace(tmp_path))
    indexer.rebuild()
    token = CancellationToken()

    completed = indexer.generate_embeddings(lambda percent, message: token.cancel(), token)

    assert completed is False
    assert indexer.repo.has_embeddings is False
    assert indexer.repo.chunks[0].embedding is not None
    assert all(c.embedding is None for c in indexer.repo.chunks[1:])


def test_load_drops_vectors_of_another_width(tmp_path: Path) -> None:
    root = _workspace(tmp_path)
    wide = _cfg(tmp_path, backend="hash")
    wide["search"]["embedding_dim"] = 64
    indexer = RepoIndexer(wide, root)
    indexer.rebuild()
    indexer.generate_embeddings()

    narrow = _cfg(tmp_path, backend="hash")
    narrow["search"]["embedding_dim"] = 32
    reloaded = RepoIndexer(narrow, root)

    assert reloaded.load()
    assert reloaded.repo.has_embeddings is False
    assert all(c.embedding is None for c in reloaded.repo.chunks)


def test_relative_path_rejects_outside_paths(tmp_path: Path) -> None:
    root = _workspace(tmp_path)
    indexer = RepoIndexer(_cfg(tmp_path), root)

    assert indexer.relative_path(root / "src" / "auth.ts") == "src/auth.ts"
    with pytest.raises(ValueError):
        indexer.relative_path(tmp_path / "elsewhere.ts")


def test_build_index_wrapper_embeds_with_hash_backend(tmp_path: Path) -> None:
    indexer = build_index(_cfg(tmp_path, backend="hash"), _workspace(tmp_path))

    assert indexer.status()["is_indexed"] is True
    assert indexer.status()["has_embeddings"] is True
    assert indexer.status()["chunk_count"] == 2


def test_file_patched_during_embedding_stays_searchable(tmp_path: Path) -> None:
    root = _workspace(tmp_path)
    indexer = RepoIndexer(_cfg(tmp_path, backend="hash", embedding_batch_size=1), root)
    indexer.rebuild()
    patched: list = []

    def progress(percent: float, message: str) -> None:
        if not patched:
            (root / "src" / "session.ts").write_text("function checkout() {}\n", encoding="utf-8")
            indexer.patch_file(root / "src" / "session.ts")
            patched.append(message)

    assert indexer.generate_embeddings(progress)

    assert indexer.repo.has_embeddings
    assert all(c.embedding is not None for c in indexer.repo.chunks)
    hits = DefaultSearcher(indexer).search("checkout", top_k=5)
    assert hits[0][1].file_path == "src/session.ts"


def test_chunks_added_without_vector_are_backfilled(tmp_path: Path) -> None:
    indexer = RepoIndexer(_cfg(tmp_path, backend="hash", embedding_batch_size=1), _workspace(tmp_path))
    indexer.rebuild()
    late = CodeChunk(id="src/late.ts:0", file_path="src/late.ts", content="function late() {}", start_line=0, end_line=0)

    def progress(percent: float, message: str) -> None:
        if late not in indexer.repo.chunks:
            indexer.repo.chunks = indexer.repo.chunks + [late]

    assert indexer.generate_embeddings(progress)

    assert late.embedding is not None
    assert len(late.embedding) == indexer.vectorizer.dim


def test_patch_file_vectorizes_before_embeddings_exist(tmp_path: Path) -> None:
    root = _workspace(tmp_path)
    indexer = RepoIndexer(_cfg(tmp_path, backend="hash"), root)
    indexer.rebuild()
    assert not indexer.repo.has_embeddings

    indexer.patch_file(root / "src" / "auth.ts")

    patched = [c for c in indexer.repo.chunks if c.file_path == "src/auth.ts"]
    assert patched and all(c.embedding is not None for c in patched)
