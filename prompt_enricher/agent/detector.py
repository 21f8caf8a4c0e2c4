"""Infer filesystem actions from free text."""

from __future__ import annotations

import logging
import posixpath
import re
from typing import List, Optional

from ..core import AgentAction
from .catalog import DirectoryCatalog
from .folders import infer_folder, resolve_folder

logger = logging.getLogger(__name__)

LOCATION_RE = re.compile(r"\*\*Location:\*\*\s*([\w/\-.]+)", re.IGNORECASE)

FILE_PATTERNS = [
    re.compile(r"Create file:\s*\*\*(\w+\.\w+)\*\*", re.IGNORECASE),
    re.compile(r"file\s+named?\s+[`\"'*]?(\w+\.\w+)[`\"'*]?", re.IGNORECASE),
    re.compile(r"[`\"'](\w+\.\w+)[`\"']", re.IGNORECASE),
    re.compile(r"(\w+\.feature)", re.IGNORECASE),
    re.compile(r"(\w+\.test\.ts)", re.IGNORECASE),
    re.compile(r"(\w+\.spec\.ts)", re.IGNORECASE),
]

FOLDER_PATTERNS = [
    # "in src/test/" or "to the `e2e` folder"; a slash only counts when it ends the path
    re.compile(
        r"\b(?:in|to|at)\s+(?:the\s+)?[`\"']?([\w/\-]+?)[`\"']?(?:/(?![\w\-])|\s+(?:directory|folder)\b)",
        re.IGNORECASE,
    ),
    re.compile(r"\b(?:in|to|at)\s+(?:the\s+)?([a-zA-Z/\-_]+(?:/[a-zA-Z\-_]+)+)", re.IGNORECASE),
]


def _create_action(target: str, file_name: str, folder: str) -> AgentAction:
    return AgentAction(kind="create", target=target, description=f"Create {file_name} in {folder or '.'}")


class ActionInferenceEngine:
    """Turns a request into at most one create-file action."""

    def __init__(self, catalog: DirectoryCatalog):
        self.catalog = catalog

    @staticmethod
    def find_file_name(text: str) -> Optional[str]:
        for pattern in FILE_PATTERNS:
            match = pattern.search(text)
            if match:
                return match.group(1)
        return None

    @staticmethod
    def find_folder_hint(text: str) -> Optional[str]:
        for pattern in FOLDER_PATTERNS:
            match = pattern.search(text)
            if not match:
                continue
            extracted = match.group(1).rstrip("/")
            if "." not in extracted and len(extracted) > 2:
                return extracted
        return None

    def resolve_target_folder(self, text: str, file_name: str) -> str:
        hint = self.find_folder_hint(text)
        if hint is None:
            folder = infer_folder(file_name, self.catalog.paths)
            logger.debug(f"Inferred folder '{folder}' for {file_name}")
            return folder
        if hint in self.catalog:
            return hint
        folder = resolve_folder(hint, self.catalog.paths)
        if folder not in self.catalog:
            logger.warning(f"Folder '{folder}' is not in the workspace; it will be created")
        return folder

    def detect_actions(self, text: str) -> List[AgentAction]:
        location = LOCATION_RE.search(text)
        if location:
            target = location.group(1).rstrip(".")
            folder, file_name = posixpath.split(target)
            logger.info(f"Target taken from location marker: {target}")
            return [_create_action(target, file_name, folder)]

        file_name = self.find_file_name(text)
        if file_name is None:
            logger.debug("No file name found; no action proposed")
            return []

        folder = self.resolve_target_folder(text, file_name)
        target = posixpath.join(folder, file_name)
        logger.info(f"Detected create action for {target}")
        return [_create_action(target, file_name, folder)]
