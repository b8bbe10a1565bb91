"""Core functionality for git-worktree-keeper.

Each public method of WorktreeKeeper is one command; its docstring is the
documentation shown by that command's --help.
"""

import os
from typing import Iterable, List, Optional, Sequence

from rich.console import Console
from rich.markup import escape

from git_worktree_keeper.config import Config
from git_worktree_keeper.constants import (
    DEFAULT_REMOTE,
    EXIT_TOOL_FAILURE,
    PR_BRANCH_PREFIX,
)
from git_worktree_keeper.exceptions import (
    GitOperationError,
    SelectionError,
    UsageError,
    WorkspaceError,
)
from git_worktree_keeper.logging_config import get_logger
from git_worktree_keeper.models.cleanup import CleanupOptions, CleanupOutcome, ItemResult
from git_worktree_keeper.services.cleanup_policy import CleanupPolicy
from git_worktree_keeper.services.git import GitClient, GitRunner
from git_worktree_keeper.services.path_validator import PathValidator
from git_worktree_keeper.services.selector_service import SelectorService
from git_worktree_keeper.services.summary_service import SummaryReporter

logger = get_logger(__name__)


def split_skip_patterns(values: Optional[Iterable[str]]) -> tuple:
    """Flatten repeated and comma separated --skip values."""
    patterns = []
    for value in values or ():
        patterns.extend(part.strip() for part in value.split(","))
    return tuple(p for p in patterns if p)


class WorktreeKeeper:
    """Worktree and branch commands over one git client and configuration."""

    def __init__(
        self,
        config: Optional[Config] = None,
        client: Optional[GitClient] = None,
        console: Optional[Console] = None,
        err_console: Optional[Console] = None,
        selector: Optional[SelectorService] = None,
    ):
        """Initialize WorktreeKeeper.

        Args:
            config: Loaded configuration (defaults when None)
            client: Version control client
            console: Where results go (stdout)
            err_console: Where status goes for commands whose stdout is a path
            selector: Fuzzy selector used by jump
        """
        self.config = config or Config()
        self.client = client or GitClient()
        self.console = console or Console()
        self.err_console = err_console or Console(stderr=True)
        self.selector = selector or SelectorService()
        self.validator = PathValidator.from_config(self.config)

    def _policy(self, console: Console) -> CleanupPolicy:
        return CleanupPolicy(self.client, self.config, SummaryReporter(console))

    def _require_repository(self, path: Optional[str] = None, exit_code: int = 1) -> str:
        path = path or os.getcwd()
        repo = self.client.discover_repository(path)
        if repo is None:
            raise WorkspaceError(f"Not a git repository: {path}", exit_code)
        return repo

    def _worktree_root(self, repo: str) -> str:
        """Directory new worktrees go in: configured root, else next to the main working copy."""
        policy = self._policy(self.err_console)
        main_path = policy.inventory.main_working_copy(repo) or os.path.realpath(repo)
        if self.config.worktree_root:
            root = os.path.expanduser(self.config.worktree_root)
            return os.path.normpath(os.path.join(main_path, root))
        return os.path.dirname(main_path)

    def _worktree_path(self, repo: str, name: str) -> str:
        if not name or name.startswith("-"):
            raise UsageError(f"Invalid worktree name: {name!r}")
        self.validator.validate(name, "worktree name")
        path = os.path.join(self._worktree_root(repo), name)
        if os.path.exists(path):
            raise WorkspaceError(f"Path already exists: {path}")
        return path

    def create_worktree(self, name: str, branch: Optional[str] = None, extra_args: Sequence[str] = ()) -> str:
        """Create a worktree named NAME and switch to it.

        The worktree is created next to the main working copy (or under
        "worktree_root" from the config file). BRANCH defaults to NAME; an
        existing local branch is checked out, otherwise a new branch is
        created from the current HEAD. Arguments after "--" are passed to
        "git worktree add" unchanged; git options that take a value (such as
        --reason) must go there, otherwise the value is read as BRANCH.

        The new worktree's path is printed on stdout so a shell wrapper can
        cd into it.

        Examples:
            git-wadd feature-x
            git-wadd hotfix release/1.2
            git-wadd spike -- --lock --reason experiment

        Exit codes:
            0  created
            1  bad arguments or not inside a repository
            2  git worktree add failed
        """
        repo = self._require_repository()
        path = self._worktree_path(repo, name)
        branch = branch or name

        create_branch = not self.client.branch_exists(repo, branch)
        result = self.client.add_worktree(repo, path, branch, create_branch, extra_args)
        if not result.ok:
            raise GitOperationError("worktree add", path, result.error_message())

        action = "new branch" if create_branch else "branch"
        self.err_console.print(
            f"[green]Created worktree {escape(path)} on {action} {escape(branch)}[/green]"
        )
        return path

    def create_worktree_from_pr(
        self,
        pr_number: str,
        name: Optional[str] = None,
        remote: str = DEFAULT_REMOTE,
        dry_run: bool = False,
    ) -> Optional[str]:
        """Fetch pull request PR from REMOTE and create a worktree for it.

        The pull request head is fetched into the local branch "pr-<PR>" with
        "git fetch <remote> pull/<PR>/head:pr-<PR>", then checked out in a new
        worktree. NAME defaults to the branch name. With --dry-run nothing is
        fetched or created; the planned steps are printed instead.

        Examples:
            git-wadd-pr 42
            git-wadd-pr 42 review-42 --remote upstream
            git-wadd-pr 42 --dry-run

        Exit codes:
            0  created (or would create)
            1  bad arguments or non-numeric PR number
            2  fetch or worktree creation failed
        """
        if not pr_number or not pr_number.isdigit():
            raise UsageError(f"PR number must be numeric, got {pr_number!r}")

        repo = self._require_repository()
        branch = f"{PR_BRANCH_PREFIX}{pr_number}"
        path = self._worktree_path(repo, name or branch)
        refspec = f"pull/{pr_number}/head:{branch}"

        if dry_run:
            self.err_console.print(f"[yellow]Would fetch {escape(remote)} {escape(refspec)}[/yellow]")
            self.err_console.print(
                f"[yellow]Would create worktree {escape(path)} on branch {escape(branch)}[/yellow]"
            )
            return None

        fetch = self.client.fetch_refspec(repo, remote, refspec)
        if not fetch.ok:
            raise GitOperationError("fetch", f"{remote} {refspec}", fetch.error_message())

        result = self.client.add_worktree(repo, path, branch, create_branch=False)
        if not result.ok:
            raise GitOperationError("worktree add", path, result.error_message())

        self.err_console.print(
            f"[green]Created worktree {escape(path)} for PR #{pr_number}[/green]"
        )
        return path

    def remove_worktree(
        self,
        path: str,
        dry_run: bool = False,
        force: bool = False,
        delete_branch: bool = True,
    ) -> ItemResult:
        """Remove the worktree at PATH once its commits are merged upstream.

        The worktree's HEAD is compared with its upstream branch (or the
        configured default, origin/main) after fetching the remote. Only if
        every commit is already reachable from upstream is the worktree
        removed; its branch is deleted afterwards unless --no-delete-branch is
        given. --force removes unmerged worktrees (with a warning) but never
        overrides a failed merge check. The main working copy is never
        removed.

        Examples:
            git-wrm ~/src/worktrees/feature-x
            git-wrm ~/src/worktrees/spike --force --no-delete-branch
            git-wrm ~/src/worktrees/feature-x --dry-run

        Exit codes:
            0  removed (or would remove)
            1  bad arguments, path not found, or not a repository
            2  directory not accessible or git worktree remove failed
            3  commits not merged (and not forced) or merge check failed
        """
        self.validator.validate(path, "worktree path")
        options = CleanupOptions(dry_run=dry_run, force=force, delete_branch=delete_branch)
        return self._policy(self.console).remove_single(path, options)

    def clean_worktrees(
        self,
        root: str,
        dry_run: bool = False,
        force: bool = False,
        delete_branch: bool = True,
    ) -> CleanupOutcome:
        """Remove every merged worktree found directly under ROOT.

        Each subdirectory of ROOT holding a .git entry is checked against its
        upstream branch. Merged worktrees are removed and their branches
        deleted (unless --no-delete-branch). Protected names (main, master,
        develop, trunk by default) are kept unless --force is given; --force
        also removes unmerged worktrees. A summary of processed, removed and
        skipped worktrees is printed at the end.

        Failures on individual worktrees are reported and counted as skipped;
        the command still exits 0.

        Examples:
            git-wclean ~/src/worktrees
            git-wclean ~/src/worktrees --dry-run

        Exit codes:
            0  completed (even if nothing was removed)
            1  bad arguments or ROOT missing or invalid
        """
        self.validator.validate(root, "worktrees directory")
        if not os.path.isdir(root):
            raise WorkspaceError(f"Directory not found: {root}")

        options = CleanupOptions(dry_run=dry_run, force=force, delete_branch=delete_branch)
        return self._policy(self.console).clean_worktrees(root, options)

    def clean_branches(
        self,
        dry_run: bool = False,
        force: bool = False,
        skip: Optional[List[str]] = None,
    ) -> CleanupOutcome:
        """Delete local branches that are fully merged into upstream.

        Branches are compared with the current branch's upstream (or the
        configured default). The current branch, branches checked out in
        worktrees and protected branches are kept; --force deletes protected
        and unmerged branches too. --skip takes glob patterns, may be repeated
        and accepts comma separated lists.

        Examples:
            git-bclean
            git-bclean --dry-run
            git-bclean --skip 'release/*,hotfix/*' --skip wip

        Exit codes:
            0  completed
            1  bad arguments or not a repository
        """
        repo = self._require_repository()
        options = CleanupOptions(
            dry_run=dry_run, force=force, skip_patterns=split_skip_patterns(skip)
        )
        return self._policy(self.console).clean_branches(repo, options)

    def jump(self, query: str = "") -> str:
        """Pick a worktree of the current repository with fzf.

        The chosen worktree's path is printed on stdout; use it from a shell
        function, for example: cd "$(git-wjump)". QUERY pre-fills the search.

        Examples:
            git-wjump
            git-wjump feature

        Exit codes:
            0  a worktree was selected
            1  fzf not installed or not a repository
            2  nothing selected or the selection is no longer valid
        """
        if not self.selector.is_available():
            raise WorkspaceError(f"{self.selector.command} is required for interactive selection")
        repo = self._require_repository()

        policy = self._policy(self.err_console)
        worktrees = policy.inventory.registry(repo)
        if not worktrees:
            raise SelectionError("No worktrees to choose from")

        choice = self.selector.select(worktrees, query)
        if not choice:
            raise SelectionError("Nothing selected")
        if not os.path.isdir(choice):
            raise SelectionError(f"Selected worktree no longer exists: {choice}")
        return choice

    def plain_diff(self, args: Sequence[str] = ()) -> int:
        """Run git diff without pager, colors or external diff tools.

        All arguments are passed to git diff; its output and exit code are
        returned unchanged.

        Examples:
            git-diff-plain
            git-diff-plain --stat HEAD~3
        """
        return self.client.runner.passthrough(
            ["--no-pager", "diff", "--no-color", "--no-ext-diff", *args]
        )

    def plain_show(self, args: Sequence[str] = ()) -> int:
        """Run git show without pager, colors or external diff tools.

        All arguments are passed to git show; its output and exit code are
        returned unchanged.

        Examples:
            git-show-plain
            git-show-plain HEAD~1 -- README.md
        """
        return self.client.runner.passthrough(
            ["--no-pager", "show", "--no-color", "--no-ext-diff", *args]
        )

    def current_branch_name(self) -> str:
        """Print the name of the current branch.

        In detached HEAD the abbreviated commit id is printed instead.

        Exit codes:
            0  printed
            1  unexpected arguments
            2  not a repository
        """
        cwd = os.getcwd()
        self._require_repository(cwd, exit_code=EXIT_TOOL_FAILURE)
        branch = self.client.current_branch(cwd)
        if branch:
            return branch
        head = self.client.head_commit(cwd)
        if not head:
            raise WorkspaceError("HEAD does not point to a commit", EXIT_TOOL_FAILURE)
        return head[:7]
