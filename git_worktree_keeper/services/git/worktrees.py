"""Worktree inventory for git-worktree-keeper."""

import os
from typing import TYPE_CHECKING, Any, Dict, List

from git_worktree_keeper.models.worktree import WorktreeInfo, WorktreeRecord
from git_worktree_keeper.logging_config import get_logger

if TYPE_CHECKING:
    from git_worktree_keeper.services.git.client import VersionControlClient
    from git_worktree_keeper.services.git.upstream import UpstreamResolver

logger = get_logger(__name__)


def _to_info(entry: Dict[str, Any], is_main: bool) -> WorktreeInfo:
    path = entry.get("path", "")
    return WorktreeInfo(
        path=path,
        branch_name=entry.get("branch", ""),
        commit_sha=entry.get("HEAD", ""),
        is_main=is_main,
        is_orphaned=not os.path.exists(path),
        is_bare=entry.get("bare", False),
        is_detached=entry.get("detached", False),
    )


def parse_worktree_porcelain(output: str) -> List[WorktreeInfo]:
    """Parse `git worktree list --porcelain` output.

    Format:
        worktree /path/to/worktree
        HEAD commit_sha
        branch refs/heads/branch-name   (or "detached", or "bare")
        (blank line between worktrees)

    The first entry is always the main working copy.
    """
    worktrees: List[WorktreeInfo] = []
    current: Dict[str, Any] = {}

    for line in output.split("\n"):
        line = line.strip()

        if not line:
            if current.get("path"):
                worktrees.append(_to_info(current, is_main=not worktrees))
            current = {}
            continue

        if line.startswith("worktree "):
            if current.get("path"):
                worktrees.append(_to_info(current, is_main=not worktrees))
            current = {"path": line.split(" ", 1)[1]}
        elif line.startswith("HEAD "):
            current["HEAD"] = line.split(" ", 1)[1]
        elif line.startswith("branch "):
            branch_ref = line.split(" ", 1)[1]
            if branch_ref.startswith("refs/heads/"):
                current["branch"] = branch_ref[len("refs/heads/"):]
            else:
                current["branch"] = ""
        elif line == "detached":
            current["detached"] = True
            current["branch"] = ""
        elif line == "bare":
            current["bare"] = True

    # No trailing blank line after the last entry
    if current.get("path"):
        worktrees.append(_to_info(current, is_main=not worktrees))

    return worktrees


class WorktreeInventory:
    """Enumerates worktree candidates from a directory or from git's registry."""

    def __init__(self, client: "VersionControlClient", resolver: "UpstreamResolver"):
        self.client = client
        self.resolver = resolver

    def scan(self, root: str) -> List[str]:
        """Immediate subdirectories of root that contain a .git entry, sorted by name."""
        candidates = []
        with os.scandir(root) as entries:
            for entry in entries:
                if not entry.is_dir():
                    continue
                if WorktreeRecord.has_marker(entry.path):
                    candidates.append(os.path.abspath(entry.path))
                else:
                    logger.debug(f"Ignoring {entry.path}: no .git entry")
        candidates.sort(key=os.path.basename)
        logger.debug(f"Found {len(candidates)} candidate worktrees under {root}")
        return candidates

    def registry(self, repo_path: str, include_main: bool = False) -> List[WorktreeInfo]:
        """Worktrees known to the repository, in registry order.

        Bare entries are never returned; the main working copy only on request.
        """
        worktrees = [
            wt for wt in self.client.list_worktrees(repo_path)
            if not wt.is_bare and (include_main or not wt.is_main)
        ]
        for wt in worktrees:
            logger.debug(f"  {wt}")
        return worktrees

    def main_working_copy(self, repo_path: str):
        """Resolved path of the repository's main working copy, or None."""
        for wt in self.client.list_worktrees(repo_path):
            if wt.is_main:
                return os.path.realpath(wt.path)
        return None

    def build_record(self, path: str) -> WorktreeRecord:
        """Resolve head, branch and upstream for one candidate directory."""
        return WorktreeRecord(
            path=os.path.abspath(path),
            head_commit=self.client.head_commit(path) or "",
            current_branch=self.client.current_branch(path),
            upstream=self.resolver.resolve(path),
        )
