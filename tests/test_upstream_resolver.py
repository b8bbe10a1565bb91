"""Tests for UpstreamResolver"""
from git_worktree_keeper.services.git import GitClient, UpstreamResolver

from conftest import add_worktree


class TestUpstreamResolver:
    """Test choosing the branch to compare against."""

    def test_tracking_branch_wins(self, mock_client):
        mock_client.upstream_ref.return_value = "upstream/release/2.0"
        ctx = UpstreamResolver(mock_client, "origin/main").resolve("/repo")

        assert ctx.branch_ref == "upstream/release/2.0"
        assert ctx.remote_name == "upstream"
        assert ctx.branch_name == "release/2.0"

    def test_default_when_no_tracking_branch(self, mock_client):
        mock_client.upstream_ref.return_value = None
        ctx = UpstreamResolver(mock_client, "origin/develop").resolve("/repo")

        assert ctx.branch_ref == "origin/develop"
        assert ctx.remote_name == "origin"

    def test_real_repository(self, git_repo, worktrees_dir):
        resolver = UpstreamResolver(GitClient(), "origin/fallback")
        path = add_worktree(git_repo, worktrees_dir, "feature")

        assert resolver.resolve(git_repo.working_dir).branch_ref == "origin/main"
        assert resolver.resolve(str(path)).branch_ref == "origin/fallback"
