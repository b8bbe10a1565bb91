"""Validation of user supplied directory paths."""

import os
from typing import Iterable

from git_worktree_keeper.constants import DEFAULT_MAX_PATH_LENGTH, INJECTION_SEQUENCES
from git_worktree_keeper.exceptions import PathValidationError
from git_worktree_keeper.logging_config import get_logger

logger = get_logger(__name__)


class PathValidator:
    """Rejects paths that are malformed or point into system directories."""

    def __init__(self, system_directories: Iterable[str], max_path_length: int = DEFAULT_MAX_PATH_LENGTH):
        self.system_directories = list(system_directories)
        self.max_path_length = max_path_length

    @classmethod
    def from_config(cls, config) -> "PathValidator":
        return cls(config.system_directories, config.max_path_length)

    def validate(self, path: str, label: str = "path") -> None:
        """Check path, raising PathValidationError on the first problem found.

        Args:
            path: Path as given by the user
            label: What the path is, used in the error message
        """
        if not path:
            raise PathValidationError(label, path, "path is empty")

        if "\0" in path:
            raise PathValidationError(label, path.replace("\0", "\\0"), "contains a null byte")

        if len(path) > self.max_path_length:
            raise PathValidationError(
                label, path[:40] + "...", f"longer than {self.max_path_length} characters"
            )

        if ".." in path.replace("\\", "/").split("/"):
            raise PathValidationError(label, path, "contains a '..' segment")

        for sequence in INJECTION_SEQUENCES:
            if sequence in path:
                raise PathValidationError(label, path, f"contains '{sequence}'")

        resolved = os.path.realpath(os.path.abspath(os.path.expanduser(path)))
        for directory in self.system_directories:
            if self._is_within(resolved, directory):
                raise PathValidationError(label, path, f"is inside system directory {directory}")

        logger.debug(f"Validated {label}: {resolved}")

    @staticmethod
    def _is_within(resolved: str, directory: str) -> bool:
        for candidate in {os.path.normpath(directory), os.path.realpath(directory)}:
            if resolved == candidate or resolved.startswith(candidate.rstrip(os.sep) + os.sep):
                return True
        return False
