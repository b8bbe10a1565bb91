"""Command implementations for git-worktree-keeper."""

from .worktree_keeper import WorktreeKeeper, split_skip_patterns

__all__ = ["WorktreeKeeper", "split_skip_patterns"]
