from __future__ import annotations

import math

import pytest

from prompt_enricher.core import (
    BM25Vectorizer,
    HashVectorizer,
    KeywordSetVectorizer,
    cosine_similarity,
    make_vectorizer,
    rolling_hash,
    tokenize,
)


def test_tokenize_lowercases_and_drops_short_tokens() -> None:
    assert tokenize("Hello, World! a bc user_id") == ["hello", "world", "user_id"]


def test_rolling_hash_matches_known_values() -> None:
    assert rolling_hash("a") == 97
    assert rolling_hash("ab") == 97 * 31 + 98
    assert rolling_hash("hello") == 99162322


def test_cosine_similarity_properties() -> None:
    a = [1.0, 2.0, 0.0]
    b = [0.5, -1.0, 3.0]

    assert cosine_similarity(a, a) == pytest.approx(1.0)
    assert cosine_similarity(a, b) == pytest.approx(cosine_similarity(b, a))
    assert -1.0 <= cosine_similarity(a, b) <= 1.0
    assert cosine_similarity(a, [-x for x in a]) == pytest.approx(-1.0)
    assert cosine_similarity(a, [0.0, 0.0, 0.0]) == 0.0


def test_cosine_similarity_rejects_dimension_mismatch() -> None:
    with pytest.raises(ValueError):
        cosine_similarity([1.0, 0.0], [1.0, 0.0, 0.0])


def test_hash_vectorizer_is_deterministic_and_normalized() -> None:
    text = "function login(user, password)"
    first = HashVectorizer(dim=64).embed_one(text)
    second = HashVectorizer(dim=64).embed_one(text)

    assert first == second
    assert len(first) == 64
    assert math.sqrt(sum(v * v for v in first)) == pytest.approx(1.0)


def test_empty_text_embeds_to_zero_vector() -> None:
    assert HashVectorizer(dim=16).embed_one("a b") == [0.0] * 16
    assert KeywordSetVectorizer(dim=16).embed_one("") == [0.0] * 16


def test_keyword_set_vectorizer_ignores_repetition() -> None:
    vectorizer = KeywordSetVectorizer(dim=128)

    assert vectorizer.embed_one("login login session") == vectorizer.embed_one("session login")
    assert vectorizer.builds_index_vectors is False


def test_bm25_idf_favours_rare_terms() -> None:
    vectorizer = BM25Vectorizer(dim=64)
    assert vectorizer.idf("alpha") == 1.0

    vectorizer.fit(["alpha common", "beta common", "gamma common"])

    assert vectorizer.fitted
    assert vectorizer.idf("alpha") > vectorizer.idf("common")
    assert len(vectorizer.embed_one("alpha common")) == 64


def test_make_vectorizer_selects_backend() -> None:
    assert isinstance(make_vectorizer({"search": {"backend": "keyword"}}), KeywordSetVectorizer)
    assert isinstance(make_vectorizer({"search": {"backend": "hash"}}), HashVectorizer)
    bm25 = make_vectorizer({"search": {"backend": "BM25", "embedding_dim": 32}})
    assert isinstance(bm25, BM25Vectorizer)
    assert bm25.dim == 32

    with pytest.raises(ValueError):
        make_vectorizer({"search": {"backend": "openai"}})
