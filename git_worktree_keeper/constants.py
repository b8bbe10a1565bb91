"""Shared constants for git-worktree-keeper."""

from typing import List

APP_NAME = "git-worktree-keeper"

# Exit codes shared by every command
EXIT_OK = 0
EXIT_USAGE = 1
EXIT_TOOL_FAILURE = 2
EXIT_POLICY_REFUSAL = 3
EXIT_INTERRUPTED = 130

# Configuration defaults
DEFAULT_PROTECTED_BRANCHES: List[str] = ["main", "master", "develop", "trunk"]
DEFAULT_UPSTREAM = "origin/main"
DEFAULT_SYSTEM_DIRECTORIES: List[str] = ["/etc", "/bin", "/usr/bin", "/sbin", "/usr/sbin"]
DEFAULT_MAX_PATH_LENGTH = 4096
DEFAULT_FETCH_TIMEOUT = 30
DEFAULT_REMOTE = "origin"

# Config file lookup, first match wins
CONFIG_DIR_NAME = "git-worktree-keeper"
CONFIG_FILE_NAME = "config.json"
DOTFILE_NAME = ".git-worktree-keeper.json"

# Repository marker; a file in linked worktrees, a directory in normal clones
GIT_MARKER = ".git"

# Shell metacharacters refused in user supplied paths
INJECTION_SEQUENCES = ("|", ";", "&", "$(")

PR_BRANCH_PREFIX = "pr-"

SELECTOR_COMMAND = "fzf"


class SkipReason:
    """Reasons a cleanup candidate is left in place."""

    NOT_A_REPOSITORY = "not a repository"
    MAIN_WORKING_COPY = "main working copy"
    UPSTREAM_BRANCH = "upstream branch"
    PROTECTED_NAME = "protected name"
    SKIP_PATTERN = "matches skip pattern"
    CURRENT_BRANCH = "current branch"
    IN_WORKTREE = "checked out in worktree"
    NOT_MERGED = "not merged"
    CHECK_FAILED = "merge check failed"
    REMOVAL_FAILED = "removal failed"
