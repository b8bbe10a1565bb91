"""Scoped handling of the process working directory."""

import os
from contextlib import contextmanager

from git_worktree_keeper.exceptions import WorkspaceError
from git_worktree_keeper.constants import EXIT_TOOL_FAILURE
from git_worktree_keeper.logging_config import get_logger

logger = get_logger(__name__)


def _restore(original: str) -> None:
    try:
        os.chdir(original)
    except OSError as e:
        # The original directory can vanish when it was the removed worktree
        logger.warning(f"Could not return to {original}: {e}")


@contextmanager
def preserved_working_directory():
    """Restore the current working directory on exit, including on interrupt."""
    try:
        original = os.getcwd()
    except OSError:
        # Started from a directory that no longer exists
        yield
        return
    try:
        yield original
    finally:
        _restore(original)


@contextmanager
def working_directory(path: str):
    """Change into path for the duration of the block, then change back.

    Raises:
        WorkspaceError: If path cannot be entered (exit code 2)
    """
    with preserved_working_directory():
        try:
            os.chdir(path)
        except OSError as e:
            raise WorkspaceError(f"Cannot change to directory {path}: {e}", EXIT_TOOL_FAILURE) from e
        logger.debug(f"Changed directory to {path}")
        yield path
