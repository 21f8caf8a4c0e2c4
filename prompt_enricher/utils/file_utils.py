"""File utility functions."""

from __future__ import annotations

import hashlib
import os
import re
from pathlib import Path
from typing import Iterable, List


def ensure_dir(p: Path) -> None:
    """Create directory if it doesn't exist."""
    p.mkdir(parents=True, exist_ok=True)


def is_binary_file(path: Path) -> bool:
    """Check if file is binary by looking for null bytes."""
    try:
        with path.open("rb") as f:
            sample = f.read(2048)
        return b"\x00" in sample
    except OSError:
        return True


def is_code_file(path: str | Path, extensions: Iterable[str]) -> bool:
    return Path(path).suffix.lower() in {e.lower() for e in extensions}


def should_ignore(path: str | Path, ignored_dirs: Iterable[str]) -> bool:
    """True when any path component is an ignored directory name."""
    ignored = set(ignored_dirs)
    return any(part in ignored for part in Path(path).parts)


def iter_code_files(root: Path, extensions: Iterable[str], ignored_dirs: Iterable[str]) -> List[Path]:
    """Walk the workspace in sorted order, skipping ignored and hidden directories."""
    extensions = {e.lower() for e in extensions}
    ignored = set(ignored_dirs)
    files: List[Path] = []

    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in ignored and not d.startswith("."))
        for fname in sorted(filenames):
            p = Path(dirpath, fname)
            if p.suffix.lower() not in extensions:
                continue
            if is_binary_file(p):
                continue
            files.append(p)
    return files


def workspace_slug(root: Path) -> str:
    """Filesystem-safe storage name for a workspace root."""
    name = re.sub(r"[^a-zA-Z0-9_-]", "_", root.resolve().name)
    if name and not name[0].isalpha() and name[0] != "_":
        name = "_" + name
    digest = hashlib.sha256(str(root.resolve()).encode("utf-8")).hexdigest()[:8]
    return f"{name or '_workspace'}-{digest}"
