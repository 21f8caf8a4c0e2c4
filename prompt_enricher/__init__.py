"""Workspace-aware prompt enrichment."""

__version__ = "0.1.0"
