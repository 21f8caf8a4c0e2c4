"""Execute approved agent actions against the workspace."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from ..core import ActionResult, AgentAction
from ..surface import WorkspaceSurface

logger = logging.getLogger(__name__)


class ActionExecutor:
    def __init__(self, workspace_root: Path, surface: WorkspaceSurface):
        self.workspace_root = Path(workspace_root)
        self.surface = surface

    def execute(self, action: AgentAction, content: Optional[str] = None) -> ActionResult:
        """Run one action. Failures become a failed result, never an exception."""
        body = content if content is not None else (action.content or "")
        try:
            if action.kind == "create":
                return self._create(action, body)
            if action.kind == "modify":
                return self._modify(action, body)
            if action.kind == "delete":
                return self._delete(action)
            if action.kind == "run":
                return self._run(action)
            return ActionResult(action, False, f"Unknown action kind: {action.kind}")
        except Exception as e:
            logger.error(f"Failed to {action.description}: {e}")
            return ActionResult(action, False, f"Failed to {action.description}: {e}")

    def _path(self, action: AgentAction) -> Path:
        if not action.target:
            raise ValueError(f"{action.kind} action has no target")
        return self.workspace_root / action.target

    def _create(self, action: AgentAction, content: str) -> ActionResult:
        path = self._path(action)
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.exists() and not self.surface.confirm(f"File {action.target} already exists. Overwrite?"):
            return ActionResult(action, False, f"Kept existing {action.target}")
        path.write_text(content, encoding="utf-8")
        logger.info(f"Created {path}")
        return ActionResult(action, True, f"Created {action.target}")

    def _modify(self, action: AgentAction, content: str) -> ActionResult:
        path = self._path(action)
        if not path.is_file():
            return ActionResult(action, False, f"File {action.target} not found")
        path.write_text(content, encoding="utf-8")
        logger.info(f"Modified {path}")
        return ActionResult(action, True, f"Modified {action.target}")

    def _delete(self, action: AgentAction) -> ActionResult:
        path = self._path(action)
        if not path.is_file():
            return ActionResult(action, False, f"File {action.target} not found")
        if not self.surface.confirm(f"Delete {action.target}?"):
            return ActionResult(action, False, f"Kept {action.target}")
        path.unlink()
        logger.info(f"Deleted {path}")
        return ActionResult(action, True, f"Deleted {action.target}")

    def _run(self, action: AgentAction) -> ActionResult:
        if not action.command:
            return ActionResult(action, False, "No command to run")
        self.surface.run_command(action.command)
        return ActionResult(action, True, f"Dispatched: {action.command}")
