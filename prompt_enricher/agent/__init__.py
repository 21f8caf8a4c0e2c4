"""Agent mode: action inference, folder resolution and approval."""

from .catalog import DirectoryCatalog
from .detector import ActionInferenceEngine
from .executor import ActionExecutor
from .folders import (
    AllSegmentsMatcher,
    ExactMatcher,
    FolderMatcher,
    SubstringMatcher,
    infer_folder,
    resolve_folder,
)
from .state import ActionSession, PendingProposal, ProposalState, format_results

__all__ = [
    "DirectoryCatalog",
    "ActionInferenceEngine",
    "ActionExecutor",
    "AllSegmentsMatcher",
    "ExactMatcher",
    "FolderMatcher",
    "SubstringMatcher",
    "infer_folder",
    "resolve_folder",
    "ActionSession",
    "PendingProposal",
    "ProposalState",
    "format_results",
]
