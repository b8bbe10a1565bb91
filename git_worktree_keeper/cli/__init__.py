"""Command-line interface for git-worktree-keeper.

This package provides the CLI entry points and argument parsing.
"""

from .main import main
from .args import CommandParser

__all__ = ["main", "CommandParser"]
