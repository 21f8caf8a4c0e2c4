"""Workspace surface: the editor-side collaborator that answers prompts."""

from __future__ import annotations

import logging
from typing import List

logger = logging.getLogger(__name__)


class WorkspaceSurface:
    """Abstract base class for user-facing confirmations and notifications."""

    def confirm(self, message: str) -> bool:
        """Ask a yes/no question, e.g. before overwriting or deleting a file."""
        raise NotImplementedError

    def choose_update(self, existing: str, proposed: str) -> bool:
        """Return True to update ``existing`` instead of creating ``proposed``."""
        raise NotImplementedError

    def notify(self, message: str) -> None:
        raise NotImplementedError

    def run_command(self, command: str) -> None:
        """Hand a shell command to an execution surface."""
        raise NotImplementedError


class AutoSurface(WorkspaceSurface):
    """Non-interactive surface answering from fixed flags.

    Commands are recorded, never executed.
    """

    def __init__(self, confirm_answer: bool = True, prefer_update: bool = True):
        self.confirm_answer = confirm_answer
        self.prefer_update = prefer_update
        self.messages: List[str] = []
        self.commands: List[str] = []

    def confirm(self, message: str) -> bool:
        logger.info(f"{message} -> {'yes' if self.confirm_answer else 'no'}")
        return self.confirm_answer

    def choose_update(self, existing: str, proposed: str) -> bool:
        logger.info(f"'{existing}' already exists; {'updating it' if self.prefer_update else f'creating {proposed}'}")
        return self.prefer_update

    def notify(self, message: str) -> None:
        logger.info(message)
        self.messages.append(message)

    def run_command(self, command: str) -> None:
        logger.info(f"Command dispatched: {command}")
        self.commands.append(command)
