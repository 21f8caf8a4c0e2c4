from __future__ import annotations

from pathlib import Path

from prompt_enricher.agent import DirectoryCatalog, SubstringMatcher, infer_folder, resolve_folder
from prompt_enricher.agent.folders import extension_key

PATHS = ["src", "src/test", "src/test/features", "src/components"]


def test_exact_match_is_case_insensitive() -> None:
    assert resolve_folder("src/test/features", PATHS) == "src/test/features"
    assert resolve_folder("SRC/Components/", PATHS) == "src/components"


def test_all_segments_prefers_longest_path() -> None:
    assert resolve_folder("test/features", PATHS) == "src/test/features"
    assert resolve_folder("test", PATHS) == "src/test/features"


def test_all_segments_tie_goes_to_last_listed_path() -> None:
    paths = ["src/test/features", "e2e/test/features", "src/test"]
    assert resolve_folder("test/features", paths) == "e2e/test/features"
    assert resolve_folder("test/features", list(reversed(paths))) == "src/test/features"


def test_substring_matcher_takes_first_path() -> None:
    assert SubstringMatcher().match("test", PATHS) == "src/test"
    assert resolve_folder("test", PATHS, matchers=[SubstringMatcher()]) == "src/test"


def test_unmatched_hint_is_returned_unchanged() -> None:
    assert resolve_folder("e2e/Specs", PATHS) == "e2e/Specs"
    assert resolve_folder("", PATHS) == ""


def test_infer_folder_from_extension() -> None:
    assert infer_folder("login.feature", PATHS) == "src/test/features"
    assert infer_folder("Button.tsx", PATHS) == "src/components"
    assert infer_folder("cart.spec.ts", ["lib", "tests"]) == "tests"
    assert infer_folder("main.py", []) == "src"


def test_extension_key() -> None:
    assert extension_key("cart.spec.ts") == "spec"
    assert extension_key("cart.test.ts") == "test"
    assert extension_key("index.ts") == "ts"
    assert extension_key("Makefile") == ""


def test_catalog_scan_is_bounded_and_filtered(tmp_path: Path) -> None:
    for rel in ("src/test/features", "node_modules/pkg", ".git/hooks", "a/b/c/d/e"):
        (tmp_path / rel).mkdir(parents=True)
    (tmp_path / "src" / "README.md").write_text("docs", encoding="utf-8")

    catalog = DirectoryCatalog.scan(tmp_path)

    assert catalog.paths == ["a", "a/b", "a/b/c", "a/b/c/d", "src", "src/test", "src/test/features"]
    assert "src/test" in catalog
    assert catalog.find_leaf("FEATURES") == "src/test/features"
    assert catalog.find_leaf("missing") is None
    assert "- features: src/test/features" in catalog.summary()
