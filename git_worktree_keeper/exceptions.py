"""Custom exceptions for git-worktree-keeper.

Every error carries the process exit code the command line reports for it.
"""

from typing import Optional

from git_worktree_keeper.constants import (
    EXIT_POLICY_REFUSAL,
    EXIT_TOOL_FAILURE,
    EXIT_USAGE,
)


class GitWorktreeKeeperError(Exception):
    """Base exception for all git-worktree-keeper errors."""

    exit_code = EXIT_USAGE


class UsageError(GitWorktreeKeeperError):
    """Missing or extra arguments, malformed identifiers, bad flag combinations."""

    def __init__(self, message: str, usage: Optional[str] = None):
        self.usage = usage
        super().__init__(message)


class ConfigError(GitWorktreeKeeperError):
    """The configuration file exists but cannot be used."""


class WorkspaceError(GitWorktreeKeeperError):
    """Target path missing, not a repository, or not accessible."""

    def __init__(self, message: str, exit_code: int = EXIT_USAGE):
        self.exit_code = exit_code
        super().__init__(message)


class PathValidationError(WorkspaceError):
    """A user supplied path failed validation."""

    def __init__(self, label: str, path: str, problem: str):
        self.label = label
        self.path = path
        self.problem = problem
        super().__init__(f"Invalid {label} '{path}': {problem}")


class GitOperationError(GitWorktreeKeeperError):
    """Exception raised when a required git step fails."""

    exit_code = EXIT_TOOL_FAILURE

    def __init__(self, operation: str, target: Optional[str] = None, message: Optional[str] = None):
        self.operation = operation
        self.target = target
        self.message = message

        error_msg = f"Git operation '{operation}' failed"
        if target:
            error_msg += f" for '{target}'"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class SelectionError(GitWorktreeKeeperError):
    """Nothing, or something unusable, was picked in the selector."""

    exit_code = EXIT_TOOL_FAILURE


class PolicyRefusal(GitWorktreeKeeperError):
    """The safety policy blocked an action that was not forced."""

    exit_code = EXIT_POLICY_REFUSAL

    def __init__(self, target: str, reason: str):
        self.target = target
        self.reason = reason
        super().__init__(f"Refusing to remove '{target}': {reason}")
