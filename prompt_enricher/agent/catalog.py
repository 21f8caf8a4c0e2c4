"""Bounded-depth directory catalog of a workspace."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)

MAX_SCAN_DEPTH = 4
SCAN_IGNORED_DIRS = ("node_modules", ".git", "dist", "build", "out", ".vscode", "coverage", ".next")


class DirectoryCatalog:
    """Relative directory paths, grouped by lowercase leaf name.

    Built once; directories created later are not picked up.
    """

    def __init__(self, paths: Iterable[str]):
        self.paths: List[str] = list(paths)
        self.by_leaf: Dict[str, List[str]] = {}
        for p in self.paths:
            leaf = p.rsplit("/", 1)[-1].lower()
            self.by_leaf.setdefault(leaf, []).append(p)

    @classmethod
    def scan(
        cls,
        workspace_root: Path,
        max_depth: int = MAX_SCAN_DEPTH,
        ignored: Iterable[str] = SCAN_IGNORED_DIRS,
    ) -> "DirectoryCatalog":
        root = Path(workspace_root)
        ignored_set = set(ignored)
        found: List[str] = []

        def walk(directory: Path, depth: int) -> None:
            if depth <= 0:
                return
            try:
                entries = sorted(os.scandir(directory), key=lambda e: e.name)
            except OSError as e:
                logger.warning(f"Cannot scan {directory}: {e}")
                return
            for entry in entries:
                if entry.name in ignored_set or entry.name.startswith("."):
                    continue
                if not entry.is_dir(follow_symlinks=False):
                    continue
                found.append(Path(entry.path).relative_to(root).as_posix())
                walk(Path(entry.path), depth - 1)

        walk(root, max_depth)
        logger.info(f"Discovered {len(found)} folders under {root}")
        return cls(found)

    def __contains__(self, path: object) -> bool:
        return path in self.paths

    def __len__(self) -> int:
        return len(self.paths)

    def find_leaf(self, name: str) -> Optional[str]:
        matches = self.by_leaf.get(name.lower())
        return matches[0] if matches else None

    def summary(self, limit: int = 20) -> str:
        lines = [f"- {leaf}: {paths[0]}" for leaf, paths in list(self.by_leaf.items())[:limit]]
        return "Repository folder structure:\n" + "\n".join(lines)
