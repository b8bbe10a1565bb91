"""Data models for git-worktree-keeper."""

from .worktree import WorktreeInfo, WorktreeRecord
from .upstream import UpstreamContext
from .cleanup import (
    CleanupOptions,
    CleanupOutcome,
    ItemResult,
    MergeDecision,
    OutcomeCounter,
)

__all__ = [
    "WorktreeInfo",
    "WorktreeRecord",
    "UpstreamContext",
    "CleanupOptions",
    "CleanupOutcome",
    "ItemResult",
    "MergeDecision",
    "OutcomeCounter",
]
