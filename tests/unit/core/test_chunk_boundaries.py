from __future__ import annotations

from prompt_enricher.core import DefaultChunker, chunk_text


def _assert_contiguous(chunks, line_count: int) -> None:
    assert chunks[0].start_line == 0
    for prev, nxt in zip(chunks, chunks[1:]):
        assert nxt.start_line == prev.end_line + 1
    assert chunks[-1].end_line == line_count - 1


def test_declarations_split_chunks_and_cover_every_line() -> None:
    lines = [
        "import { db } from './db';",
        "",
        "function login(user, password) {",
        "  return db.check(user, password);",
        "}",
        "class Session {",
        "  constructor() {}",
        "}",
        "",
    ]
    chunks = chunk_text("\n".join(lines), "src/auth.ts")

    _assert_contiguous(chunks, len(lines))
    assert [(c.start_line, c.end_line) for c in chunks] == [(0, 1), (2, 4), (5, 8)]
    assert [(c.kind, c.name) for c in chunks] == [("snippet", None), ("function", "login"), ("class", "Session")]
    assert chunks[1].id == "src/auth.ts:2"
    assert chunks[1].content == "\n".join(lines[2:5])


def test_unnamed_chunks_are_capped() -> None:
    lines = [f"x{i} = {i}" for i in range(120)]
    chunks = chunk_text("\n".join(lines), "config.py")

    _assert_contiguous(chunks, len(lines))
    assert [(c.start_line, c.end_line) for c in chunks] == [(0, 49), (50, 99), (100, 119)]
    assert all(c.kind == "snippet" for c in chunks)


def test_named_chunks_are_not_capped() -> None:
    lines = ["def handler(event):"] + [f"    total_{i} = {i}" for i in range(80)]
    chunks = chunk_text("\n".join(lines), "handler.py")

    assert len(chunks) == 1
    assert (chunks[0].start_line, chunks[0].end_line) == (0, 80)
    assert chunks[0].name == "handler"


def test_indented_function_is_reported_as_method() -> None:
    lines = [
        "class Cart {",
        "  function total(items) {",
        "    return items.length;",
        "  }",
        "}",
    ]
    chunks = chunk_text("\n".join(lines), "cart.ts")

    assert [(c.kind, c.name) for c in chunks] == [("class", "Cart"), ("method", "total")]
    _assert_contiguous(chunks, len(lines))


def test_keywords_are_distinct_long_and_bounded() -> None:
    words = " ".join(f"word{i} word{i} ab" for i in range(100))
    chunks = DefaultChunker(max_keywords=50).chunk(words, "notes.py")

    keywords = chunks[0].keywords
    assert keywords is not None
    assert len(keywords) == 50
    assert len(set(keywords)) == len(keywords)
    assert all(len(k) >= 3 for k in keywords)
    assert keywords[:2] == ["word0", "word1"]


def test_empty_file_yields_single_empty_chunk() -> None:
    chunks = chunk_text("", "empty.py")

    assert len(chunks) == 1
    assert (chunks[0].start_line, chunks[0].end_line) == (0, 0)
    assert chunks[0].content == ""
