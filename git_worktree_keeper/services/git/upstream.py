"""Upstream branch resolution for git-worktree-keeper."""

from typing import TYPE_CHECKING

from git_worktree_keeper.models.upstream import UpstreamContext
from git_worktree_keeper.logging_config import get_logger

if TYPE_CHECKING:
    from git_worktree_keeper.services.git.client import VersionControlClient

logger = get_logger(__name__)


class UpstreamResolver:
    """Determines the branch a repository's HEAD should be compared against."""

    def __init__(self, client: "VersionControlClient", default_upstream: str):
        """Initialize the resolver.

        Args:
            client: Version control client used for the tracking-branch query
            default_upstream: Reference used when no tracking branch is configured
        """
        self.client = client
        self.default_upstream = default_upstream

    def resolve(self, repo_path: str) -> UpstreamContext:
        """Return the tracking branch of repo_path's HEAD, or the default. Never raises."""
        ref = self.client.upstream_ref(repo_path)
        if not ref:
            logger.debug(
                f"No upstream configured for {repo_path}, using {self.default_upstream}"
            )
            ref = self.default_upstream
        return UpstreamContext.from_ref(ref)
