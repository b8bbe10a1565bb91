"""Pytest fixtures for git-worktree-keeper tests"""
import io
import tempfile
from pathlib import Path
from unittest.mock import Mock

import git
import pytest
from rich.console import Console

from git_worktree_keeper.config import Config
from git_worktree_keeper.models.worktree import WorktreeInfo
from git_worktree_keeper.services.git.runner import CommandResult


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def config():
    """Default configuration."""
    return Config()


@pytest.fixture
def console():
    """Rich console writing into a buffer; read it with console.file.getvalue()."""
    return Console(file=io.StringIO(), width=200, color_system=None)


@pytest.fixture
def origin_repo(temp_dir):
    """Bare repository acting as the 'origin' remote."""
    origin = git.Repo.init(temp_dir / "origin.git", bare=True)
    yield origin
    origin.close()


@pytest.fixture
def git_repo(temp_dir, origin_repo):
    """Create a real Git repository with main pushed to origin."""
    repo_path = temp_dir / "repo"
    repo_path.mkdir()

    repo = git.Repo.init(repo_path)

    # Configure git user for commits
    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()
    repo.config_writer().set_value("commit", "gpgsign", "false").release()

    test_file = repo_path / "README.md"
    test_file.write_text("# Test Repository\n")
    repo.index.add(["README.md"])
    repo.index.commit("Initial commit")

    # Rename master to main if needed
    repo.git.branch('-M', 'main')

    repo.create_remote('origin', origin_repo.git_dir)
    repo.git.push('-u', 'origin', 'main')

    yield repo

    repo.close()


@pytest.fixture
def worktrees_dir(temp_dir):
    """Directory that holds linked worktrees."""
    path = temp_dir / "worktrees"
    path.mkdir()
    return path


def add_worktree(repo: git.Repo, root: Path, name: str, branch: str = None) -> Path:
    """Create a linked worktree root/name on a new branch (default: name)."""
    path = root / name
    repo.git.worktree("add", "-b", branch or name, str(path))
    return path


def commit_file(path: Path, filename: str, content: str, message: str) -> str:
    """Commit a file in the working copy at path and return the new commit id."""
    (path / filename).write_text(content)
    wt = git.Repo(path)
    try:
        wt.git.add(filename)
        wt.git.commit("-m", message)
        return wt.git.rev_parse("HEAD")
    finally:
        wt.close()


def ok(stdout: str = "") -> CommandResult:
    return CommandResult((), 0, stdout, "")


def failed(stderr: str = "boom", status: int = 1) -> CommandResult:
    return CommandResult((), status, "", stderr)


@pytest.fixture
def mock_client(temp_dir):
    """A VersionControlClient double; by default everything succeeds and is merged.

    The candidate worktree lives at temp_dir/worktrees/feature and the main
    working copy at temp_dir/repo.
    """
    main_path = temp_dir / "repo"
    main_path.mkdir(exist_ok=True)
    (main_path / ".git").mkdir(exist_ok=True)

    client = Mock()
    client.list_worktrees = Mock(return_value=[
        WorktreeInfo(path=str(main_path), branch_name="main", commit_sha="aaa",
                     is_main=True, is_orphaned=False),
    ])
    client.discover_repository = Mock(return_value=str(main_path))
    client.common_dir = Mock(return_value=str(main_path / ".git"))
    client.head_commit = Mock(return_value="abc1234def")
    client.current_branch = Mock(return_value="feature")
    client.upstream_ref = Mock(return_value=None)
    client.unique_commits = Mock(return_value=[])
    client.local_branches = Mock(return_value=[])
    client.fetch = Mock(return_value=ok())
    client.remove_worktree = Mock(return_value=ok())
    client.delete_branch = Mock(return_value=ok())
    return client


@pytest.fixture
def candidate(temp_dir):
    """A directory that looks like a linked worktree (has a .git file)."""
    path = temp_dir / "worktrees" / "feature"
    path.mkdir(parents=True)
    (path / ".git").write_text("gitdir: /nowhere\n")
    return path
