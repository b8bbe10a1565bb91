"""Tests for MergeChecker"""
from git_worktree_keeper.models import MergeDecision
from git_worktree_keeper.services.git import GitClient, MergeChecker

from conftest import add_worktree, commit_file


class TestMergeDecision:
    """Test the tri-state decision from the reachability query."""

    def test_no_unique_commits_is_merged(self, mock_client):
        mock_client.unique_commits.return_value = []
        decision = MergeChecker(mock_client).is_merged("abc", "origin/main", "/repo")

        assert decision is MergeDecision.MERGED
        mock_client.unique_commits.assert_called_once_with("/repo", "abc", "origin/main")

    def test_unique_commits_is_not_merged(self, mock_client):
        mock_client.unique_commits.return_value = ["abc"]
        assert MergeChecker(mock_client).is_merged("abc", "origin/main", "/repo") is MergeDecision.NOT_MERGED

    def test_query_error_fails_closed(self, mock_client):
        mock_client.unique_commits.return_value = None
        assert MergeChecker(mock_client).is_merged("abc", "origin/main", "/repo") is MergeDecision.CHECK_FAILED

    def test_missing_head_fails_closed(self, mock_client):
        assert MergeChecker(mock_client).is_merged("", "origin/main", "/repo") is MergeDecision.CHECK_FAILED
        mock_client.unique_commits.assert_not_called()

    def test_missing_upstream_fails_closed(self, mock_client):
        assert MergeChecker(mock_client).is_merged("abc", "", "/repo") is MergeDecision.CHECK_FAILED


class TestMergeCheckerWithRepository:
    """Test reachability against real history."""

    def test_fresh_branch_is_merged(self, git_repo, worktrees_dir):
        path = add_worktree(git_repo, worktrees_dir, "feature")
        checker = MergeChecker(GitClient())
        assert checker.is_merged("HEAD", "origin/main", str(path)) is MergeDecision.MERGED

    def test_new_commit_is_not_merged(self, git_repo, worktrees_dir):
        path = add_worktree(git_repo, worktrees_dir, "feature")
        sha = commit_file(path, "a.txt", "a\n", "Add a")
        checker = MergeChecker(GitClient())
        assert checker.is_merged(sha, "origin/main", str(path)) is MergeDecision.NOT_MERGED

    def test_fast_forwarded_upstream_is_merged(self, git_repo, worktrees_dir):
        path = add_worktree(git_repo, worktrees_dir, "feature")
        sha = commit_file(path, "a.txt", "a\n", "Add a")
        git_repo.git.merge("--ff-only", "feature")
        git_repo.git.push("origin", "main")

        checker = MergeChecker(GitClient())
        assert checker.is_merged(sha, "origin/main", str(path)) is MergeDecision.MERGED

    def test_unknown_upstream_fails_closed(self, git_repo):
        checker = MergeChecker(GitClient())
        decision = checker.is_merged("HEAD", "origin/does-not-exist", git_repo.working_dir)
        assert decision is MergeDecision.CHECK_FAILED
