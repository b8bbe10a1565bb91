"""Utility functions for git-worktree-keeper."""

from .directory import working_directory, preserved_working_directory

__all__ = [
    "working_directory",
    "preserved_working_directory",
]
