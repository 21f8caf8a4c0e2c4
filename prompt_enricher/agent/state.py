"""Pending-proposal state machine for agent mode."""

from __future__ import annotations

import dataclasses
import datetime as _dt
import enum
import logging
from typing import List, Optional

from ..core import ActionResult, AgentAction
from .detector import ActionInferenceEngine
from .executor import ActionExecutor

logger = logging.getLogger(__name__)


class ProposalState(str, enum.Enum):
    IDLE = "idle"
    PROPOSED = "proposed"
    EXECUTED = "executed"
    REJECTED = "rejected"


@dataclasses.dataclass
class PendingProposal:
    actions: List[AgentAction]
    content: Optional[str]
    created_at: _dt.datetime


class ActionSession:
    """Holds at most one proposal until it is approved or rejected.

    ``EXECUTED`` and ``REJECTED`` are transient: once resolved the session is
    back to ``IDLE`` and ``last_resolution`` records how it ended.
    """

    def __init__(self, engine: ActionInferenceEngine, executor: ActionExecutor):
        self.engine = engine
        self.executor = executor
        self.last_resolution: Optional[ProposalState] = None
        self._pending: Optional[PendingProposal] = None

    @property
    def pending(self) -> Optional[PendingProposal]:
        return self._pending

    @property
    def state(self) -> ProposalState:
        return ProposalState.PROPOSED if self._pending is not None else ProposalState.IDLE

    def detect(self, text: str) -> List[AgentAction]:
        return self.engine.detect_actions(text)

    def propose(self, text: str, content: Optional[str] = None) -> List[AgentAction]:
        actions = self.engine.detect_actions(text)
        if not actions:
            return []
        return self.stage(actions, content)

    def stage(self, actions: List[AgentAction], content: Optional[str] = None) -> List[AgentAction]:
        if self._pending is not None:
            dropped = ", ".join(a.description for a in self._pending.actions)
            logger.info(f"Replacing pending proposal ({dropped})")
        for action in actions:
            if action.kind in ("create", "modify") and content is not None:
                action.content = content
        self._pending = PendingProposal(
            actions=list(actions),
            content=content,
            created_at=_dt.datetime.now(_dt.timezone.utc),
        )
        return list(actions)

    def approve(self) -> List[ActionResult]:
        if self._pending is None:
            logger.warning("Approve requested with no pending proposal")
            return []

        proposal = self._pending
        self._pending = None
        results = [self.executor.execute(a, proposal.content) for a in proposal.actions]
        self.last_resolution = ProposalState.EXECUTED
        ok = sum(1 for r in results if r.success)
        logger.info(f"Executed {ok}/{len(results)} actions")
        return results

    def reject(self) -> str:
        if self._pending is None:
            return "No pending action to reject"

        actions = self._pending.actions
        self._pending = None
        self.last_resolution = ProposalState.REJECTED
        logger.info(f"Rejected {len(actions)} pending actions")
        lines = "\n".join(f"- {a.description}" for a in actions)
        return f"**Action Rejected**\n\nThe following actions were cancelled:\n{lines}"


def format_results(results: List[ActionResult]) -> str:
    if not results:
        return "No pending action to execute"
    lines = [f"✅ {r.message}" if r.success else f"❌ {r.message}" for r in results]
    return "**Actions Executed**\n\n" + "\n".join(lines)
