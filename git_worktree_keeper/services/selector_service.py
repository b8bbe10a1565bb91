"""Fuzzy selection of a worktree through fzf."""

import shutil
import subprocess
from typing import List, Optional

from git_worktree_keeper.constants import SELECTOR_COMMAND
from git_worktree_keeper.logging_config import get_logger
from git_worktree_keeper.models.worktree import WorktreeInfo

logger = get_logger(__name__)


class SelectorService:
    """Presents worktrees in fzf and returns the chosen path."""

    def __init__(self, command: str = SELECTOR_COMMAND):
        self.command = command

    def is_available(self) -> bool:
        return shutil.which(self.command) is not None

    @staticmethod
    def format_row(worktree: WorktreeInfo) -> str:
        """One selector line: "<name>\t<branch>\t<path>", path always last."""
        branch = worktree.branch_name or "(detached)"
        return f"{worktree.name}\t{branch}\t{worktree.path}"

    @staticmethod
    def parse_selection(line: str) -> Optional[str]:
        line = line.strip("\n")
        if not line.strip():
            return None
        return line.split("\t")[-1]

    def select(self, worktrees: List[WorktreeInfo], query: str = "") -> Optional[str]:
        """Run the selector; None when the user picked nothing or aborted."""
        rows = [self.format_row(wt) for wt in worktrees]
        args = [
            self.command,
            "--delimiter=\t",
            "--with-nth=1,2",
            "--select-1",
            "--exit-0",
            "--prompt=worktree> ",
        ]
        if query:
            args.append(f"--query={query}")

        logger.debug(f"Launching {self.command} with {len(rows)} worktrees")
        process = subprocess.run(
            args,
            input="\n".join(rows) + "\n",
            text=True,
            stdout=subprocess.PIPE,
        )
        if process.returncode != 0 or not process.stdout:
            logger.debug(f"{self.command} exited with {process.returncode}")
            return None
        return self.parse_selection(process.stdout.splitlines()[0])
