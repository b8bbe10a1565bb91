"""Cleanup decision and outcome models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class MergeDecision(Enum):
    """Result of the reachability check against upstream."""
    MERGED = "merged"
    NOT_MERGED = "not-merged"
    CHECK_FAILED = "check-failed"


@dataclass(frozen=True)
class CleanupOptions:
    """Per-invocation flags for the cleanup commands."""
    dry_run: bool = False
    force: bool = False
    delete_branch: bool = True
    skip_patterns: tuple = ()


@dataclass
class ItemResult:
    """How a single candidate ended: removed (or would be) or skipped."""
    name: str
    removed: bool
    reason: Optional[str] = None
    warnings: List[str] = field(default_factory=list)
    branch_deleted: bool = False
    kind: str = "worktree"


@dataclass(frozen=True)
class CleanupOutcome:
    """Totals for one run."""
    processed: int
    removed: int
    skipped: int
    dry_run: bool = False


class OutcomeCounter:
    """Running processed/removed/skipped counters for a run."""

    def __init__(self, dry_run: bool = False):
        self.dry_run = dry_run
        self.processed = 0
        self.removed = 0
        self.skipped = 0

    def record(self, result: ItemResult) -> ItemResult:
        self.processed += 1
        if result.removed:
            self.removed += 1
        else:
            self.skipped += 1
        return result

    def freeze(self) -> CleanupOutcome:
        return CleanupOutcome(
            processed=self.processed,
            removed=self.removed,
            skipped=self.skipped,
            dry_run=self.dry_run,
        )
