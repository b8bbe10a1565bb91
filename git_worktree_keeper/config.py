"""Configuration handling for git-worktree-keeper"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional

from git_worktree_keeper.constants import (
    CONFIG_DIR_NAME,
    CONFIG_FILE_NAME,
    DEFAULT_FETCH_TIMEOUT,
    DEFAULT_MAX_PATH_LENGTH,
    DEFAULT_PROTECTED_BRANCHES,
    DEFAULT_SYSTEM_DIRECTORIES,
    DEFAULT_UPSTREAM,
    DOTFILE_NAME,
)
from git_worktree_keeper.exceptions import ConfigError
from git_worktree_keeper.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class Config:
    """Process-wide configuration with validation."""

    protected_branches: List[str] = field(
        default_factory=lambda: list(DEFAULT_PROTECTED_BRANCHES)
    )
    default_upstream: str = DEFAULT_UPSTREAM
    system_directories: List[str] = field(
        default_factory=lambda: list(DEFAULT_SYSTEM_DIRECTORIES)
    )
    max_path_length: int = DEFAULT_MAX_PATH_LENGTH
    fetch_timeout: int = DEFAULT_FETCH_TIMEOUT
    # Directory new worktrees are created in; None means next to the main working copy
    worktree_root: Optional[str] = None

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_protected_branches()
        self._validate_default_upstream()
        self._validate_system_directories()
        self._validate_max_path_length()
        self._validate_fetch_timeout()
        self._validate_worktree_root()

    def _validate_protected_branches(self):
        """Validate protected_branches is a list of names."""
        if not isinstance(self.protected_branches, list) or not all(
            isinstance(name, str) for name in self.protected_branches
        ):
            raise ValueError("protected_branches must be a list of strings")

    def _validate_default_upstream(self):
        """Validate default_upstream is not empty."""
        if not isinstance(self.default_upstream, str) or not self.default_upstream.strip():
            raise ValueError("default_upstream cannot be empty")
        self.default_upstream = self.default_upstream.strip()

    def _validate_system_directories(self):
        """Validate system_directories holds absolute paths."""
        if not isinstance(self.system_directories, list):
            raise ValueError("system_directories must be a list")
        for directory in self.system_directories:
            if not isinstance(directory, str) or not os.path.isabs(directory):
                raise ValueError(f"system_directories entries must be absolute paths, got {directory!r}")

    def _validate_max_path_length(self):
        """Validate max_path_length is positive."""
        if not isinstance(self.max_path_length, int) or self.max_path_length <= 0:
            raise ValueError(f"max_path_length must be positive, got {self.max_path_length}")

    def _validate_fetch_timeout(self):
        """Validate fetch_timeout is positive."""
        if not isinstance(self.fetch_timeout, int) or self.fetch_timeout <= 0:
            raise ValueError(f"fetch_timeout must be positive, got {self.fetch_timeout}")

    def _validate_worktree_root(self):
        if self.worktree_root is not None and not isinstance(self.worktree_root, str):
            raise ValueError("worktree_root must be a string")

    @property
    def protected_names(self) -> frozenset:
        return frozenset(self.protected_branches)

    def to_dict(self) -> dict:
        """Convert config to a plain dictionary."""
        return {
            "protected_branches": self.protected_branches,
            "default_upstream": self.default_upstream,
            "system_directories": self.system_directories,
            "max_path_length": self.max_path_length,
            "fetch_timeout": self.fetch_timeout,
            "worktree_root": self.worktree_root,
        }

    def get(self, key: str, default=None):
        """Get config value by key."""
        return getattr(self, key, default)

    @classmethod
    def from_dict(cls, config_dict: dict) -> "Config":
        """Create Config from dictionary, ignoring unknown keys."""
        known_fields = {
            "protected_branches",
            "default_upstream",
            "system_directories",
            "max_path_length",
            "fetch_timeout",
            "worktree_root",
        }

        filtered = {k: v for k, v in config_dict.items() if k in known_fields}
        return cls(**filtered)


def config_search_paths(
    cwd: Optional[Path] = None,
    home: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> List[Path]:
    """Candidate config file locations in lookup order."""
    environ = os.environ if environ is None else environ
    home = Path.home() if home is None else home
    cwd = Path.cwd() if cwd is None else cwd

    xdg_home = environ.get("XDG_CONFIG_HOME")
    config_home = Path(xdg_home) if xdg_home else home / ".config"

    return [
        config_home / CONFIG_DIR_NAME / CONFIG_FILE_NAME,
        home / DOTFILE_NAME,
        cwd / DOTFILE_NAME,
    ]


def load_config(search_paths: Optional[List[Path]] = None) -> Config:
    """Load configuration from the first config file found.

    Args:
        search_paths: Locations to try; defaults to config_search_paths()

    Returns:
        Config built from the file, or the built-in defaults if no file exists

    Raises:
        ConfigError: If the file found cannot be read, parsed or validated
    """
    if search_paths is None:
        search_paths = config_search_paths()

    for path in search_paths:
        if not path.is_file():
            continue

        logger.debug(f"Loading configuration from {path}")
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Cannot read config file {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a JSON object")

        try:
            return Config.from_dict(data)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid config file {path}: {e}") from e

    logger.debug("No config file found, using defaults")
    return Config()
