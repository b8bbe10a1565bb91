"""Command runner: the only place that spawns the git binary."""

import sys
from dataclasses import dataclass
from typing import Optional, Sequence

import git

from git_worktree_keeper.logging_config import get_logger

logger = get_logger(__name__)

# Status reported when git could not be started at all
STATUS_NOT_STARTED = 127


@dataclass(frozen=True)
class CommandResult:
    """Exit status and trimmed output of one git invocation."""

    args: tuple
    status: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.status == 0

    def error_message(self) -> str:
        if self.stderr:
            return f"exit {self.status}: {self.stderr}"
        return f"exit code {self.status}"


class GitRunner:
    """Invoke git with arguments, capture status and output, parse nothing."""

    def __init__(self, executable: str = "git"):
        self.executable = executable

    def _get_git(self, cwd: Optional[str]) -> git.Git:
        return git.Git(cwd)

    def run(
        self,
        *args: str,
        cwd: Optional[str] = None,
        timeout: Optional[int] = None,
    ) -> CommandResult:
        """Run git in cwd (or the current directory).

        Args:
            *args: git arguments, without the executable
            cwd: Working directory for the process
            timeout: Seconds after which the process is killed

        Returns:
            CommandResult with stdout and stderr trimmed
        """
        command = [self.executable, *args]
        kwargs = {
            "with_extended_output": True,
            "with_exceptions": False,
        }
        if timeout is not None:
            kwargs["kill_after_timeout"] = timeout

        logger.debug(f"Running: {' '.join(command)}" + (f" (in {cwd})" if cwd else ""))
        try:
            status, stdout, stderr = self._get_git(cwd).execute(command, **kwargs)
        except (git.exc.GitCommandNotFound, OSError) as e:
            logger.debug(f"Could not start git: {e}")
            return CommandResult(tuple(args), STATUS_NOT_STARTED, "", str(e).strip())

        result = CommandResult(tuple(args), status, (stdout or "").strip(), (stderr or "").strip())
        if not result.ok:
            logger.debug(f"git {args[0] if args else ''} failed ({result.error_message()})")
        return result

    def run_in(self, path: str, *args: str, timeout: Optional[int] = None) -> CommandResult:
        """Run git against path using -C, without depending on the process cwd."""
        return self.run("-C", path, *args, timeout=timeout)

    def passthrough(self, args: Sequence[str], cwd: Optional[str] = None) -> int:
        """Run git, copy its output to our stdout/stderr untouched, return its status."""
        command = [self.executable, *args]
        try:
            status, stdout, stderr = self._get_git(cwd).execute(
                command,
                with_extended_output=True,
                with_exceptions=False,
                strip_newline_in_stdout=False,
            )
        except (git.exc.GitCommandNotFound, OSError) as e:
            sys.stderr.write(f"{e}\n")
            return STATUS_NOT_STARTED

        if stdout:
            sys.stdout.write(stdout)
        if stderr:
            sys.stderr.write(stderr if stderr.endswith("\n") else stderr + "\n")
        sys.stdout.flush()
        return status
