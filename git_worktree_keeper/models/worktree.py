"""Worktree data models."""

import os
from dataclasses import dataclass
from typing import Optional

from git_worktree_keeper.constants import GIT_MARKER
from git_worktree_keeper.models.upstream import UpstreamContext


@dataclass
class WorktreeInfo:
    """One entry of the repository's worktree registry."""

    path: str
    branch_name: str
    commit_sha: str
    is_main: bool  # Is this the main working tree?
    is_orphaned: bool  # Directory missing?
    is_bare: bool = False
    is_detached: bool = False

    @property
    def name(self) -> str:
        return os.path.basename(self.path.rstrip(os.sep))

    def __str__(self) -> str:
        """String representation of worktree."""
        status = "orphaned" if self.is_orphaned else "active"
        main_marker = " (main)" if self.is_main else ""
        branch = self.branch_name or "(detached)"
        return f"{branch} @ {self.path}{main_marker} [{status}]"


@dataclass(frozen=True)
class WorktreeRecord:
    """A cleanup candidate, resolved once per pass."""

    path: str
    head_commit: str
    current_branch: Optional[str]
    upstream: UpstreamContext

    @property
    def name(self) -> str:
        """Display name: the worktree directory name."""
        return os.path.basename(self.path.rstrip(os.sep))

    @staticmethod
    def has_marker(path: str) -> bool:
        """True if path holds a .git entry.

        Linked worktrees carry a .git file, normal clones a .git directory,
        so this is an existence check and not a directory check.
        """
        return os.path.exists(os.path.join(path, GIT_MARKER))
