"""Git-related services for git-worktree-keeper."""

from .runner import CommandResult, GitRunner
from .client import GitClient, VersionControlClient
from .upstream import UpstreamResolver
from .merge_checker import MergeChecker
from .worktrees import WorktreeInventory, parse_worktree_porcelain

__all__ = [
    "CommandResult",
    "GitRunner",
    "GitClient",
    "VersionControlClient",
    "UpstreamResolver",
    "MergeChecker",
    "WorktreeInventory",
    "parse_worktree_porcelain",
]
