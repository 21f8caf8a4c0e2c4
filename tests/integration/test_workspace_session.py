from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import pytest

from prompt_enricher.config import load_config
from prompt_enricher.core import HashVectorizer
from prompt_enricher.llm import LLMBackend, LLMError, LLMResponse
from prompt_enricher.session import AGENT_CONTENT_SUFFIX, FileEvent, WorkspaceSession


class FakeBackend(LLMBackend):
    def __init__(self, content: str = "", error: Optional[Exception] = None):
        self.content = content
        self.error = error
        self.prompts: List[str] = []

    def complete(self, prompt, system_prompt=None, temperature=None, max_tokens=None) -> LLMResponse:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return LLMResponse(content=self.content, model="fake-model")


def _workspace(tmp_path: Path) -> Path:
    root = tmp_path / "ws"
    (root / "src" / "test" / "features").mkdir(parents=True)
    (root / "src" / "auth.ts").write_text(
        "function login(user, password) {\n  return check(user, password);\n}\n", encoding="utf-8"
    )
    (root / "src" / "test" / "features" / "auth.feature").write_text(
        "Feature: Auth\n  Scenario: valid login\n", encoding="utf-8"
    )
    return root


def _session(tmp_path: Path, backend: Optional[LLMBackend] = None) -> WorkspaceSession:
    root = _workspace(tmp_path)
    cfg = load_config(root)
    cfg["storage"]["dir"] = str(tmp_path / "store")
    cfg["search"]["backend"] = "keyword"
    cfg["auto_index"] = False
    return WorkspaceSession(root, cfg=cfg, backend=backend)


def test_start_loads_persisted_index(tmp_path: Path) -> None:
    session = _session(tmp_path)
    assert session.start() is False

    outcome = session.build_index()
    assert outcome.accepted
    assert session.surface.messages[-1] == outcome.message

    fresh = WorkspaceSession(session.workspace_root, cfg=session.cfg)
    assert fresh.start() is True
    assert fresh.status()["chunk_count"] == outcome.chunk_count


def test_concurrent_indexing_is_rejected(tmp_path: Path) -> None:
    session = _session(tmp_path)
    inner = []

    def progress(percent: float, message: str) -> None:
        if not inner:
            assert session.is_indexing
            inner.append(session.build_index())

    outer = session.build_index(progress)

    assert outer.accepted
    assert inner[0].accepted is False
    assert inner[0].message == "Indexing already in progress"
    assert session.is_indexing is False
    assert session.cancel_indexing() is False


def test_rejected_build_keeps_running_progress(tmp_path: Path) -> None:
    session = _session(tmp_path)
    seen = []

    def progress(percent: float, message: str) -> None:
        if not seen:
            running = session.progress
            session.build_index()
            seen.append((running, session.progress, dict(session.progress)))

    session.build_index(progress)

    running, after, snapshot = seen[0]
    assert after is running
    assert snapshot["status"] == "indexing"
    assert session.progress is running
    assert session.progress["status"] == "indexed"
    assert session.progress["percent"] == 100.0


def test_search_and_enrich_use_the_index(tmp_path: Path) -> None:
    session = _session(tmp_path)
    session.build_index()

    hits = session.search("login password")
    assert hits[0][1].file_path == "src/auth.ts"

    enriched = session.enrich("Create login.feature in src/test/features")
    assert enriched.metadata["target_path"] == "src/test/features/login.feature"
    assert enriched.metadata["template_id"] == "bdd-feature"
    assert enriched.composed_text.startswith("Create a new file named **login.feature**")
    assert [c.file_path for c in enriched.chunks] == ["src/test/features/auth.feature"]


def test_enrich_offers_update_for_existing_file(tmp_path: Path) -> None:
    session = _session(tmp_path)

    enriched = session.enrich("Add a logout scenario to auth.feature", include_repo_context=False)

    assert enriched.metadata["target_path"] == "src/test/features/auth.feature"
    assert "**Update the existing file** **auth.feature**" in enriched.composed_text
    assert "Feature: Auth" in enriched.composed_text
    assert enriched.chunks == []


def test_enrich_rejects_unknown_template(tmp_path: Path) -> None:
    session = _session(tmp_path)

    with pytest.raises(ValueError):
        session.enrich("Explain login", template_id="does-not-exist")


def test_agent_mode_stages_then_writes_on_approval(tmp_path: Path) -> None:
    backend = FakeBackend("Feature: Login\n  Scenario: good password")
    session = _session(tmp_path, backend)
    session.set_mode("agent")

    reply = session.send("Create login.feature in src/test/features")

    assert reply.pending_approval
    assert backend.prompts[0].endswith(AGENT_CONTENT_SUFFIX)
    target = session.workspace_root / "src/test/features/login.feature"
    assert not target.exists()

    results = session.approve()

    assert [r.success for r in results] == [True]
    assert target.read_text(encoding="utf-8") == "Feature: Login\n  Scenario: good password"
    assert session.status()["proposal_state"] == "idle"


def test_agent_mode_without_file_answers_as_chat(tmp_path: Path) -> None:
    backend = FakeBackend("It checks the password.")
    session = _session(tmp_path, backend)
    session.set_mode("agent")

    reply = session.send("How does login work?")

    assert reply.pending_approval is False
    assert reply.content == "It checks the password."
    assert backend.prompts == ["How does login work?"]


def test_backend_errors_are_recorded_and_raised(tmp_path: Path) -> None:
    session = _session(tmp_path, FakeBackend(error=LLMError("bad payload")))

    with pytest.raises(LLMError):
        session.send("hello")

    assert [m.role for m in session.history] == ["user", "assistant"]
    assert session.history[-1].content == "Error: bad payload"


def test_send_without_backend_fails(tmp_path: Path) -> None:
    session = _session(tmp_path)

    with pytest.raises(RuntimeError):
        session.send("hello")


def test_template_selector_uses_hash_vectors_under_keyword_search(tmp_path: Path) -> None:
    session = _session(tmp_path)
    assert type(session.selector.vectorizer) is HashVectorizer


def test_invalid_mode_is_rejected(tmp_path: Path) -> None:
    session = _session(tmp_path)

    with pytest.raises(ValueError):
        session.set_mode("autopilot")
    assert session.mode == "chat"


def test_file_events_patch_the_index(tmp_path: Path) -> None:
    session = _session(tmp_path)
    session.build_index()
    root = session.workspace_root

    (root / "src" / "cart.ts").write_text("function checkoutCart(items) {}\n", encoding="utf-8")
    assert session.on_file_event(FileEvent("created", root / "src" / "cart.ts"))
    assert session.search("checkoutcart")[0][1].file_path == "src/cart.ts"

    (root / "src" / "cart.ts").unlink()
    assert session.on_file_event(FileEvent("deleted", root / "src" / "cart.ts"))
    assert session.search("checkoutcart") == []


def test_file_events_are_filtered(tmp_path: Path) -> None:
    session = _session(tmp_path)
    session.build_index()
    root = session.workspace_root
    (root / "node_modules").mkdir()

    assert session.on_file_event(FileEvent("changed", root / "README.md")) is False
    assert session.on_file_event(FileEvent("changed", root / "node_modules" / "x.ts")) is False
    assert session.on_file_event(FileEvent("changed", tmp_path / "outside.ts")) is False
    with pytest.raises(ValueError):
        FileEvent("renamed", root / "src" / "auth.ts")


def test_clear_history(tmp_path: Path) -> None:
    session = _session(tmp_path, FakeBackend("hi"))
    session.send("hello")

    session.clear_history()

    assert session.history == []
