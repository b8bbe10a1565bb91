"""Merge verification for git-worktree-keeper."""

from typing import TYPE_CHECKING

from git_worktree_keeper.models.cleanup import MergeDecision
from git_worktree_keeper.logging_config import get_logger

if TYPE_CHECKING:
    from git_worktree_keeper.services.git.client import VersionControlClient

logger = get_logger(__name__)


class MergeChecker:
    """Checks whether a commit's whole history is reachable from upstream."""

    def __init__(self, client: "VersionControlClient"):
        self.client = client

    def is_merged(self, head_commit: str, upstream_branch: str, repo_path: str) -> MergeDecision:
        """Compare head_commit against upstream_branch by reachability.

        Lists the commits reachable from head_commit and not from upstream_branch.
        None means every commit is already in upstream. Any error in the query
        yields CHECK_FAILED, which callers must treat as "keep".
        """
        if not head_commit or not upstream_branch:
            logger.debug(f"Cannot check merge status in {repo_path}: missing head or upstream")
            return MergeDecision.CHECK_FAILED

        unique = self.client.unique_commits(repo_path, head_commit, upstream_branch)
        if unique is None:
            logger.debug(f"Merge check of {head_commit[:7]} against {upstream_branch} failed")
            return MergeDecision.CHECK_FAILED

        if unique:
            logger.debug(
                f"{head_commit[:7]} has {len(unique)} commit(s) not in {upstream_branch}"
            )
            return MergeDecision.NOT_MERGED

        logger.debug(f"{head_commit[:7]} is contained in {upstream_branch}")
        return MergeDecision.MERGED
