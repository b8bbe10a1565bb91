"""Tests for WorktreeKeeper commands"""
import os
from pathlib import Path
from unittest.mock import Mock

import git
import pytest

from git_worktree_keeper.config import Config
from git_worktree_keeper.core import WorktreeKeeper, split_skip_patterns
from git_worktree_keeper.exceptions import (
    GitOperationError,
    PathValidationError,
    SelectionError,
    UsageError,
    WorkspaceError,
)
from git_worktree_keeper.models import WorktreeInfo

from conftest import add_worktree, commit_file


@pytest.fixture
def keeper(console):
    return WorktreeKeeper(Config(), console=console, err_console=console)


@pytest.fixture
def in_repo(git_repo, monkeypatch):
    monkeypatch.chdir(git_repo.working_dir)
    return git_repo


class TestCreateWorktree:
    """Test git-wadd."""

    def test_new_branch_next_to_main(self, in_repo, temp_dir, keeper):
        path = keeper.create_worktree("feature-x")

        assert path == str(temp_dir / "feature-x")
        wt = git.Repo(path)
        try:
            assert wt.active_branch.name == "feature-x"
        finally:
            wt.close()

    def test_existing_branch(self, in_repo, keeper, console):
        in_repo.git.branch("release")

        path = keeper.create_worktree("rel", "release")

        wt = git.Repo(path)
        try:
            assert wt.active_branch.name == "release"
        finally:
            wt.close()
        assert "on branch release" in console.file.getvalue()

    def test_configured_root(self, in_repo, temp_dir, console):
        keeper = WorktreeKeeper(Config(worktree_root="../trees"), console=console, err_console=console)

        path = keeper.create_worktree("feature-y")

        assert path == str(temp_dir / "trees" / "feature-y")
        assert os.path.isdir(path)

    def test_from_inside_a_worktree(self, git_repo, worktrees_dir, temp_dir, keeper, monkeypatch):
        existing = add_worktree(git_repo, worktrees_dir, "first")
        monkeypatch.chdir(existing)

        path = keeper.create_worktree("second")

        assert path == str(temp_dir / "second")

    def test_extra_arguments_are_passed_on(self, in_repo, keeper):
        path = keeper.create_worktree("locked", extra_args=["--lock"])

        porcelain = in_repo.git.worktree("list", "--porcelain")
        assert f"worktree {path}\n" in porcelain
        assert "\nlocked" in porcelain

    def test_existing_path(self, in_repo, temp_dir, keeper):
        (temp_dir / "taken").mkdir()
        with pytest.raises(WorkspaceError, match="already exists"):
            keeper.create_worktree("taken")

    @pytest.mark.parametrize("name", ["", "-b"])
    def test_bad_name(self, in_repo, keeper, name):
        with pytest.raises(UsageError):
            keeper.create_worktree(name)

    def test_traversal_in_name(self, in_repo, keeper):
        with pytest.raises(PathValidationError):
            keeper.create_worktree("../../escape")

    def test_outside_a_repository(self, temp_dir, keeper, monkeypatch):
        monkeypatch.chdir(temp_dir)
        with pytest.raises(WorkspaceError) as excinfo:
            keeper.create_worktree("x")
        assert excinfo.value.exit_code == 1

    def test_git_failure(self, in_repo, keeper):
        with pytest.raises(GitOperationError):
            keeper.create_worktree("bad", "no..such..branch")


class TestCreateWorktreeFromPullRequest:
    """Test git-wadd-pr against a remote that serves pull request refs."""

    @pytest.fixture
    def pr_sha(self, in_repo):
        in_repo.git.checkout("-b", "contributor")
        sha = commit_file(Path(in_repo.working_dir), "pr.txt", "patch\n", "Contribution")
        in_repo.git.push("origin", "contributor:refs/pull/7/head")
        in_repo.git.checkout("main")
        in_repo.git.branch("-D", "contributor")
        return sha

    def test_fetches_and_creates(self, in_repo, pr_sha, temp_dir, keeper):
        path = keeper.create_worktree_from_pr("7")

        assert path == str(temp_dir / "pr-7")
        wt = git.Repo(path)
        try:
            assert wt.active_branch.name == "pr-7"
            assert wt.head.commit.hexsha == pr_sha
        finally:
            wt.close()

    def test_custom_name(self, in_repo, pr_sha, temp_dir, keeper):
        path = keeper.create_worktree_from_pr("7", name="review")
        assert path == str(temp_dir / "review")

    def test_dry_run(self, in_repo, pr_sha, temp_dir, keeper, console):
        assert keeper.create_worktree_from_pr("7", dry_run=True) is None

        assert not (temp_dir / "pr-7").exists()
        assert "pr-7" not in [h.name for h in in_repo.heads]
        assert "Would fetch origin pull/7/head:pr-7" in console.file.getvalue()

    def test_unknown_pull_request(self, in_repo, keeper):
        with pytest.raises(GitOperationError) as excinfo:
            keeper.create_worktree_from_pr("99")
        assert excinfo.value.exit_code == 2

    @pytest.mark.parametrize("number", ["abc", "7a", "-7", ""])
    def test_non_numeric(self, keeper, number):
        with pytest.raises(UsageError):
            keeper.create_worktree_from_pr(number)


class TestJump:
    """Test worktree selection with a stand-in selector."""

    def make_keeper(self, console, selector):
        return WorktreeKeeper(Config(), console=console, err_console=console, selector=selector)

    def test_returns_selected_path(self, git_repo, worktrees_dir, console, monkeypatch):
        path = add_worktree(git_repo, worktrees_dir, "feature")
        monkeypatch.chdir(git_repo.working_dir)
        selector = Mock(command="fzf")
        selector.is_available.return_value = True
        selector.select.return_value = str(path)

        assert self.make_keeper(console, selector).jump("feat") == str(path)

        worktrees, query = selector.select.call_args.args
        assert [wt.name for wt in worktrees] == ["feature"]
        assert query == "feat"

    def test_selector_missing(self, in_repo, console):
        selector = Mock(command="fzf")
        selector.is_available.return_value = False
        with pytest.raises(WorkspaceError) as excinfo:
            self.make_keeper(console, selector).jump()
        assert excinfo.value.exit_code == 1

    def test_nothing_selected(self, git_repo, worktrees_dir, console, monkeypatch):
        add_worktree(git_repo, worktrees_dir, "feature")
        monkeypatch.chdir(git_repo.working_dir)
        selector = Mock(command="fzf")
        selector.is_available.return_value = True
        selector.select.return_value = None

        with pytest.raises(SelectionError) as excinfo:
            self.make_keeper(console, selector).jump()
        assert excinfo.value.exit_code == 2

    def test_no_linked_worktrees(self, in_repo, console):
        selector = Mock(command="fzf")
        selector.is_available.return_value = True
        with pytest.raises(SelectionError):
            self.make_keeper(console, selector).jump()
        selector.select.assert_not_called()

    def test_vanished_selection(self, in_repo, temp_dir, console):
        selector = Mock(command="fzf")
        selector.is_available.return_value = True
        keeper = self.make_keeper(console, selector)
        keeper.client = Mock(wraps=keeper.client)
        keeper.client.list_worktrees.return_value = [
            WorktreeInfo(in_repo.working_dir, "main", "a", is_main=True, is_orphaned=False),
            WorktreeInfo(str(temp_dir / "gone"), "gone", "b", is_main=False, is_orphaned=True),
        ]
        selector.select.return_value = str(temp_dir / "gone")

        with pytest.raises(SelectionError, match="no longer exists"):
            keeper.jump()


class TestCurrentBranchName:
    """Test cwb."""

    def test_on_branch(self, in_repo, keeper):
        assert keeper.current_branch_name() == "main"

    def test_detached(self, in_repo, keeper):
        sha = in_repo.head.commit.hexsha
        in_repo.git.checkout(sha)
        assert keeper.current_branch_name() == sha[:7]

    def test_outside_repository(self, temp_dir, keeper, monkeypatch):
        monkeypatch.chdir(temp_dir)
        with pytest.raises(WorkspaceError) as excinfo:
            keeper.current_branch_name()
        assert excinfo.value.exit_code == 2


class TestSplitSkipPatterns:
    def test_repeated_and_comma_separated(self):
        assert split_skip_patterns(["release/*, hotfix/*", "wip", ""]) == ("release/*", "hotfix/*", "wip")

    def test_none(self):
        assert split_skip_patterns(None) == ()
