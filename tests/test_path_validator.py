"""Tests for PathValidator"""
import inspect
import os

import pytest

from git_worktree_keeper.exceptions import PathValidationError
from git_worktree_keeper.services.path_validator import PathValidator
from git_worktree_keeper.config import Config
from git_worktree_keeper.core import WorktreeKeeper


@pytest.fixture
def validator():
    return PathValidator.from_config(Config())


class TestPathValidator:
    def test_accepts_ordinary_path(self, validator, temp_dir):
        validator.validate(str(temp_dir / "worktrees"), "worktrees directory")

    def test_accepts_relative_name(self, validator):
        validator.validate("feature/login", "worktree name")

    @pytest.mark.parametrize("path", [
        "../elsewhere",
        "a/../../b",
        "worktrees/..",
    ])
    def test_rejects_parent_traversal(self, validator, path):
        with pytest.raises(PathValidationError, match=r"'\.\.'"):
            validator.validate(path)

    def test_dots_inside_names_are_fine(self, validator, temp_dir):
        validator.validate(str(temp_dir / "v1..2"))

    @pytest.mark.parametrize("path", [
        "dir|cat",
        "dir;rm -rf x",
        "dir && echo",
        "dir$(whoami)",
    ])
    def test_rejects_injection_characters(self, validator, path):
        with pytest.raises(PathValidationError):
            validator.validate(path)

    def test_rejects_null_byte(self, validator):
        with pytest.raises(PathValidationError, match="null byte"):
            validator.validate("dir\0name")

    def test_rejects_empty(self, validator):
        with pytest.raises(PathValidationError):
            validator.validate("")

    def test_rejects_long_path(self):
        validator = PathValidator(["/etc"], max_path_length=10)
        with pytest.raises(PathValidationError, match="longer than 10"):
            validator.validate("/tmp/" + "x" * 20)

    @pytest.mark.parametrize("path", ["/etc", "/etc/ssh", "/usr/sbin/tools"])
    def test_rejects_system_directories(self, validator, path):
        with pytest.raises(PathValidationError, match="system directory"):
            validator.validate(path)

    def test_prefix_that_is_not_a_parent_is_allowed(self, temp_dir):
        validator = PathValidator([str(temp_dir / "sys")])
        validator.validate(str(temp_dir / "system-copy"))

    def test_symlink_into_system_directory(self, temp_dir):
        protected = temp_dir / "protected"
        protected.mkdir()
        link = temp_dir / "link"
        os.symlink(protected, link)

        validator = PathValidator([str(protected)])
        with pytest.raises(PathValidationError):
            validator.validate(str(link / "inside"))

    def test_error_is_a_usage_level_failure(self, validator):
        with pytest.raises(PathValidationError) as excinfo:
            validator.validate("../x", "worktree path")
        assert excinfo.value.exit_code == 1
        assert "worktree path" in str(excinfo.value)


def example_paths(method):
    """Path arguments of the "Examples:" lines in a command's help text."""
    lines = inspect.getdoc(method).splitlines()
    start = lines.index("Examples:") + 1
    paths = []
    for line in lines[start:]:
        if not line.strip():
            break
        paths.append(line.split()[1])
    return paths


class TestHelpExamples:
    """The paths shown in --help must pass validation."""

    @pytest.mark.parametrize("method", [WorktreeKeeper.remove_worktree, WorktreeKeeper.clean_worktrees])
    def test_example_paths_are_accepted(self, validator, method):
        paths = example_paths(method)
        assert paths
        for path in paths:
            validator.validate(path, "example path")
