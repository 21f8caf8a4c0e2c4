"""Target-folder resolution against a directory catalog."""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Sequence

logger = logging.getLogger(__name__)

_TRAILING_RE = re.compile(r"[`\"'/]+$")

# file kind -> folder name fragments, tried in order
EXTENSION_FOLDER_HINTS: Dict[str, List[str]] = {
    "feature": ["features", "test"],
    "spec": ["test", "tests"],
    "test": ["test", "tests"],
    "tsx": ["components", "src"],
    "ts": ["src"],
}
DEFAULT_FOLDER = "src"


def normalize_hint(hint: str) -> str:
    return _TRAILING_RE.sub("", hint.strip().lower())


# -----------------------------------------------------------------------------
# Matcher strategies
# -----------------------------------------------------------------------------

class FolderMatcher:
    """One best-match strategy; returns None when it has no opinion."""

    def match(self, hint: str, paths: Sequence[str]) -> Optional[str]:
        raise NotImplementedError


class ExactMatcher(FolderMatcher):
    def match(self, hint: str, paths: Sequence[str]) -> Optional[str]:
        for p in paths:
            if p.lower() == hint:
                return p
        return None


class AllSegmentsMatcher(FolderMatcher):
    """Longest catalog path containing every segment of the hint.

    Among paths of equal length the one listed last wins.
    """

    def match(self, hint: str, paths: Sequence[str]) -> Optional[str]:
        segments = [s for s in hint.split("/") if s]
        if not segments:
            return None
        candidates = [p for p in paths if all(s in p.lower() for s in segments)]
        if not candidates:
            return None
        best = candidates[0]
        for p in candidates[1:]:
            if len(p) >= len(best):
                best = p
        return best


class SubstringMatcher(FolderMatcher):
    def match(self, hint: str, paths: Sequence[str]) -> Optional[str]:
        for p in paths:
            if hint in p.lower():
                return p
        return None


DEFAULT_MATCHERS: List[FolderMatcher] = [ExactMatcher(), AllSegmentsMatcher(), SubstringMatcher()]


def resolve_folder(
    hint: str,
    paths: Sequence[str],
    matchers: Optional[Sequence[FolderMatcher]] = None,
) -> str:
    """Resolve a folder hint to a catalog path; the raw hint when nothing matches."""
    normalized = normalize_hint(hint)
    if normalized:
        for matcher in matchers if matchers is not None else DEFAULT_MATCHERS:
            result = matcher.match(normalized, paths)
            if result:
                logger.debug(f"{type(matcher).__name__} resolved '{hint}' to '{result}'")
                return result
    return hint


def extension_key(file_name: str) -> str:
    """Kind key for the folder table: ``test``/``spec`` for ``x.test.ts``, else the extension."""
    parts = file_name.lower().split(".")
    if len(parts) >= 3 and parts[-2] in ("test", "spec"):
        return parts[-2]
    return parts[-1] if len(parts) > 1 else ""


def infer_folder(file_name: str, paths: Sequence[str]) -> str:
    """Guess a folder from the file's extension, preferring the deepest match."""
    key = extension_key(file_name)
    for fragment in EXTENSION_FOLDER_HINTS.get(key, [DEFAULT_FOLDER]):
        matching = [p for p in paths if fragment in p.lower()]
        if not matching:
            continue
        if key == "feature":
            for p in matching:
                if "features" in p.lower():
                    return p
        return max(matching, key=len)
    return DEFAULT_FOLDER
