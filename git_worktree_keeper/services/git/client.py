"""Version control client: every repository query and mutation goes through here."""

import os
from typing import List, Optional, Protocol, Sequence

import git

from git_worktree_keeper.logging_config import get_logger
from git_worktree_keeper.models.worktree import WorktreeInfo
from git_worktree_keeper.services.git.runner import CommandResult, GitRunner
from git_worktree_keeper.services.git.worktrees import parse_worktree_porcelain

logger = get_logger(__name__)


class VersionControlClient(Protocol):
    """Capabilities the cleanup engine needs from the version-control tool."""

    def discover_repository(self, path: str) -> Optional[str]: ...

    def common_dir(self, path: str) -> Optional[str]: ...

    def head_commit(self, path: str) -> Optional[str]: ...

    def current_branch(self, path: str) -> Optional[str]: ...

    def upstream_ref(self, path: str) -> Optional[str]: ...

    def unique_commits(self, path: str, head: str, upstream: str) -> Optional[List[str]]: ...

    def list_worktrees(self, path: str) -> List[WorktreeInfo]: ...

    def local_branches(self, path: str) -> List[str]: ...

    def branch_exists(self, path: str, branch: str) -> bool: ...

    def fetch(self, path: str, remote: str, timeout: Optional[int] = None) -> CommandResult: ...

    def fetch_refspec(self, path: str, remote: str, refspec: str) -> CommandResult: ...

    def add_worktree(
        self,
        path: str,
        worktree_path: str,
        branch: str,
        create_branch: bool,
        extra_args: Sequence[str] = (),
    ) -> CommandResult: ...

    def remove_worktree(self, path: str, worktree_path: str, force: bool = False) -> CommandResult: ...

    def delete_branch(self, path: str, branch: str, force: bool = False) -> CommandResult: ...


class GitClient:
    """VersionControlClient backed by the git binary through GitRunner."""

    def __init__(self, runner: Optional[GitRunner] = None):
        self.runner = runner or GitRunner()

    def discover_repository(self, path: str) -> Optional[str]:
        """Return the working tree root containing path, or None if not in a repository."""
        try:
            repo = git.Repo(path, search_parent_directories=True)
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
            logger.debug(f"{path} is not inside a repository: {e}")
            return None
        try:
            return repo.working_tree_dir
        finally:
            repo.close()

    def common_dir(self, path: str) -> Optional[str]:
        """Shared git directory; identical for a repository and all its worktrees."""
        result = self.runner.run_in(path, "rev-parse", "--path-format=absolute", "--git-common-dir")
        if not result.ok or not result.stdout:
            return None
        return os.path.realpath(result.stdout)

    def head_commit(self, path: str) -> Optional[str]:
        result = self.runner.run_in(path, "rev-parse", "HEAD")
        return result.stdout if result.ok and result.stdout else None

    def current_branch(self, path: str) -> Optional[str]:
        """Checked-out branch name, None in detached HEAD."""
        result = self.runner.run_in(path, "branch", "--show-current")
        return result.stdout if result.ok and result.stdout else None

    def upstream_ref(self, path: str) -> Optional[str]:
        """Tracking branch of the current HEAD, e.g. "origin/main"."""
        result = self.runner.run_in(
            path, "rev-parse", "--abbrev-ref", "--symbolic-full-name", "@{upstream}"
        )
        return result.stdout if result.ok and result.stdout else None

    def unique_commits(self, path: str, head: str, upstream: str) -> Optional[List[str]]:
        """Commits reachable from head but not from upstream; None if git errored."""
        result = self.runner.run_in(path, "rev-list", head, f"^{upstream}", "--")
        if not result.ok:
            return None
        return result.stdout.split()

    def list_worktrees(self, path: str) -> List[WorktreeInfo]:
        result = self.runner.run_in(path, "worktree", "list", "--porcelain")
        if not result.ok:
            logger.debug(f"Could not list worktrees: {result.error_message()}")
            return []
        return parse_worktree_porcelain(result.stdout)

    def local_branches(self, path: str) -> List[str]:
        result = self.runner.run_in(path, "for-each-ref", "--format=%(refname:short)", "refs/heads/")
        if not result.ok:
            return []
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def branch_exists(self, path: str, branch: str) -> bool:
        result = self.runner.run_in(path, "rev-parse", "--verify", "--quiet", f"refs/heads/{branch}")
        return result.ok

    def fetch(self, path: str, remote: str, timeout: Optional[int] = None) -> CommandResult:
        return self.runner.run_in(path, "fetch", "--prune", remote, timeout=timeout)

    def fetch_refspec(self, path: str, remote: str, refspec: str) -> CommandResult:
        return self.runner.run_in(path, "fetch", remote, refspec)

    def add_worktree(
        self,
        path: str,
        worktree_path: str,
        branch: str,
        create_branch: bool,
        extra_args: Sequence[str] = (),
    ) -> CommandResult:
        args = ["worktree", "add", *extra_args]
        if create_branch:
            args += ["-b", branch, worktree_path]
        else:
            args += [worktree_path, branch]
        return self.runner.run_in(path, *args)

    def remove_worktree(self, path: str, worktree_path: str, force: bool = False) -> CommandResult:
        args = ["worktree", "remove", worktree_path]
        if force:
            args.append("--force")
        result = self.runner.run_in(path, *args)
        if result.ok:
            logger.info(f"Removed worktree at {worktree_path}")
        return result

    def delete_branch(self, path: str, branch: str, force: bool = False) -> CommandResult:
        result = self.runner.run_in(path, "branch", "-D" if force else "-d", branch)
        if result.ok:
            logger.info(f"Deleted branch {branch}{' (forced)' if force else ''}")
        return result
