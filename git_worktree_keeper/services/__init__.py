"""Services for git-worktree-keeper."""

from .path_validator import PathValidator
from .summary_service import SummaryReporter
from .selector_service import SelectorService
from .cleanup_policy import CleanupPolicy

__all__ = [
    "PathValidator",
    "SummaryReporter",
    "SelectorService",
    "CleanupPolicy",
]
