"""Cleanup decisions for worktrees and branches.

Every candidate walks the same linear chain: repository marker, main working
copy, protected names, skip patterns (branches only), merge check, removal.
A candidate ends either removed (or would-be removed in dry-run) or skipped
with a reason; nothing is retried except the branch force-delete escalation.
"""

import os
from fnmatch import fnmatch
from typing import TYPE_CHECKING, Iterable, Optional, Set

from rich.markup import escape

from git_worktree_keeper.constants import SkipReason
from git_worktree_keeper.exceptions import (
    GitOperationError,
    GitWorktreeKeeperError,
    PolicyRefusal,
    WorkspaceError,
)
from git_worktree_keeper.logging_config import get_logger
from git_worktree_keeper.models.cleanup import (
    CleanupOptions,
    CleanupOutcome,
    ItemResult,
    MergeDecision,
    OutcomeCounter,
)
from git_worktree_keeper.models.upstream import UpstreamContext
from git_worktree_keeper.models.worktree import WorktreeRecord
from git_worktree_keeper.services.git.merge_checker import MergeChecker
from git_worktree_keeper.services.git.upstream import UpstreamResolver
from git_worktree_keeper.services.git.worktrees import WorktreeInventory
from git_worktree_keeper.services.summary_service import SummaryReporter
from git_worktree_keeper.utils.directory import working_directory

if TYPE_CHECKING:
    from git_worktree_keeper.config import Config
    from git_worktree_keeper.services.git.client import VersionControlClient

logger = get_logger(__name__)


def matches_any(name: str, patterns: Iterable[str]) -> bool:
    """True if name matches one of the glob patterns."""
    return any(fnmatch(name, pattern) for pattern in patterns)


class CleanupPolicy:
    """Decides, per candidate, whether to keep or remove, and carries it out."""

    def __init__(
        self,
        client: "VersionControlClient",
        config: "Config",
        reporter: Optional[SummaryReporter] = None,
    ):
        self.client = client
        self.config = config
        self.reporter = reporter or SummaryReporter()
        self.resolver = UpstreamResolver(client, config.default_upstream)
        self.merge_checker = MergeChecker(client)
        self.inventory = WorktreeInventory(client, self.resolver)
        # Repositories (by common git dir) already fetched during this run
        self._fetched: Set[tuple] = set()

    # ------------------------------------------------------------------
    # Shared steps
    # ------------------------------------------------------------------

    def _skip(self, name: str, reason: str, kind: str = "worktree") -> ItemResult:
        logger.info(f"Skipping {kind} {name}: {reason}")
        return ItemResult(name=name, removed=False, reason=reason, kind=kind)

    def _is_protected(self, *names: Optional[str]) -> bool:
        protected = self.config.protected_names
        return any(name in protected for name in names if name)

    def _warn(self, result: ItemResult, message: str) -> None:
        logger.warning(message)
        result.warnings.append(message)
        self.reporter.warn(message)

    def fetch_once(self, repo_path: str, upstream: UpstreamContext, dry_run: bool = False) -> None:
        """Fetch upstream's remote once per repository; failures only warn.

        Dry runs never fetch: a fetch with --prune rewrites remote-tracking refs.
        The merge check then uses the refs already present.
        """
        if not upstream.remote_name:
            return
        if dry_run:
            logger.debug(f"Dry run: not fetching {upstream.remote_name}, using local refs")
            return
        key = (self.client.common_dir(repo_path) or os.path.realpath(repo_path), upstream.remote_name)
        if key in self._fetched:
            return
        self._fetched.add(key)

        logger.debug(f"Fetching {upstream.remote_name} in {repo_path}")
        result = self.client.fetch(repo_path, upstream.remote_name, timeout=self.config.fetch_timeout)
        if not result.ok:
            message = (
                f"Could not fetch {upstream.remote_name} ({result.error_message()}); "
                "using local information"
            )
            logger.warning(message)
            self.reporter.warn(message)

    def _delete_branch(self, repo_path: str, branch: str, allow_force: bool) -> Optional[str]:
        """Delete a local branch, escalating to a forced delete when allowed.

        Returns:
            None on success, otherwise the last error message
        """
        result = self.client.delete_branch(repo_path, branch, force=False)
        if result.ok:
            return None

        logger.info(f"git refused to delete {branch}: {result.error_message()}")
        if allow_force:
            result = self.client.delete_branch(repo_path, branch, force=True)
            if result.ok:
                return None
        return result.error_message()

    @staticmethod
    def _merge_gate(decision: MergeDecision, force: bool) -> Optional[str]:
        """Skip reason for a merge decision, None if removal may proceed."""
        if decision is MergeDecision.CHECK_FAILED:
            return SkipReason.CHECK_FAILED
        if decision is MergeDecision.NOT_MERGED and not force:
            return SkipReason.NOT_MERGED
        return None

    # ------------------------------------------------------------------
    # Worktrees
    # ------------------------------------------------------------------

    def clean_worktrees(self, root: str, options: CleanupOptions) -> CleanupOutcome:
        """Process every worktree directory directly under root."""
        counter = OutcomeCounter(dry_run=options.dry_run)

        for path in self.inventory.scan(root):
            name = os.path.basename(path)
            try:
                result = self.process_worktree(path, options)
            except GitWorktreeKeeperError as e:
                logger.debug(f"Error processing {path}: {e}")
                result = self._skip(name, str(e))
            self.reporter.item(result, dry_run=options.dry_run)
            counter.record(result)

        outcome = counter.freeze()
        self.reporter.report(outcome)
        return outcome

    def process_worktree(self, path: str, options: CleanupOptions) -> ItemResult:
        """Run one worktree directory through the decision chain."""
        path = os.path.abspath(path)
        name = os.path.basename(path.rstrip(os.sep))

        if not WorktreeRecord.has_marker(path):
            return self._skip(name, SkipReason.NOT_A_REPOSITORY)

        main_path = self.inventory.main_working_copy(path)
        if main_path is None:
            return self._skip(name, SkipReason.NOT_A_REPOSITORY)
        if os.path.realpath(path) == main_path:
            return self._skip(name, SkipReason.MAIN_WORKING_COPY)

        branch = self.client.current_branch(path)
        if not options.force and self._is_protected(name, branch):
            return self._skip(name, SkipReason.PROTECTED_NAME)

        record = self.inventory.build_record(path)
        self.fetch_once(path, record.upstream, dry_run=options.dry_run)
        decision = self.merge_checker.is_merged(record.head_commit, record.upstream.branch_ref, path)
        logger.debug(f"{name}: {decision.value} against {record.upstream}")

        reason = self._merge_gate(decision, options.force)
        if reason:
            return self._skip(name, reason)

        result = ItemResult(name=name, removed=False)
        if decision is MergeDecision.NOT_MERGED:
            self._warn(
                result,
                f"{name} has commits not in {record.upstream}; removing because --force was given",
            )
        return self._remove_worktree(record, main_path, options, result)

    def _remove_worktree(
        self,
        record: WorktreeRecord,
        main_path: str,
        options: CleanupOptions,
        result: ItemResult,
    ) -> ItemResult:
        """Remove the worktree, then (and only then) its branch."""
        branch = record.current_branch
        delete_branch = options.delete_branch and bool(branch)
        if delete_branch and self._is_protected(branch):
            self.reporter.info(f"[dim]Keeping protected branch {escape(branch)}[/dim]")
            delete_branch = False

        if options.dry_run:
            result.removed = True
            if delete_branch:
                self.reporter.info(f"[yellow]Would delete branch {escape(branch)}[/yellow]")
            return result

        # Step out of the worktree first; git cannot remove the directory we stand in
        with working_directory(main_path):
            removal = self.client.remove_worktree(main_path, record.path, force=options.force)
        if not removal.ok:
            result.reason = f"{SkipReason.REMOVAL_FAILED}: {removal.error_message()}"
            logger.error(f"Failed to remove worktree at {record.path}: {removal.error_message()}")
            return result
        result.removed = True

        if delete_branch:
            error = self._delete_branch(main_path, branch, allow_force=True)
            if error is None:
                result.branch_deleted = True
                self.reporter.info(f"[green]Deleted branch {escape(branch)}[/green]")
            else:
                self._warn(result, f"Could not delete branch {branch}: {error}")
        return result

    def remove_single(self, path: str, options: CleanupOptions) -> ItemResult:
        """Remove one explicitly named worktree.

        Unlike bulk cleanup, refusals and failures are raised.

        Raises:
            WorkspaceError: Path missing, not a worktree, or the main working copy
            PolicyRefusal: Protected, not merged (without force), or merge check failed
            GitOperationError: git could not remove the worktree
        """
        if not os.path.exists(path):
            raise WorkspaceError(f"Worktree not found: {path}")
        path = os.path.abspath(path)
        name = os.path.basename(path.rstrip(os.sep))

        if not os.path.isdir(path) or not WorktreeRecord.has_marker(path):
            raise WorkspaceError(f"Not a git worktree: {path}")

        main_path = self.inventory.main_working_copy(path)
        if main_path is None:
            raise WorkspaceError(f"Not a git repository: {path}")
        if os.path.realpath(path) == main_path:
            raise WorkspaceError(f"Refusing to remove the main working copy: {path}")

        branch = self.client.current_branch(path)
        if not options.force and self._is_protected(name, branch):
            raise PolicyRefusal(path, f"{SkipReason.PROTECTED_NAME} (use --force to override)")

        record = self.inventory.build_record(path)
        self.fetch_once(path, record.upstream, dry_run=options.dry_run)
        decision = self.merge_checker.is_merged(record.head_commit, record.upstream.branch_ref, path)

        if decision is MergeDecision.CHECK_FAILED:
            raise PolicyRefusal(path, f"could not verify merge status against {record.upstream}")
        if decision is MergeDecision.NOT_MERGED and not options.force:
            raise PolicyRefusal(
                path, f"has commits not merged into {record.upstream} (use --force to override)"
            )

        result = ItemResult(name=name, removed=False)
        if decision is MergeDecision.NOT_MERGED:
            self._warn(
                result,
                f"{name} has commits not in {record.upstream}; removing because --force was given",
            )

        result = self._remove_worktree(record, main_path, options, result)
        if not result.removed:
            raise GitOperationError("worktree remove", path, result.reason)
        self.reporter.item(result, dry_run=options.dry_run)
        return result

    # ------------------------------------------------------------------
    # Branches
    # ------------------------------------------------------------------

    def clean_branches(self, repo_path: str, options: CleanupOptions) -> CleanupOutcome:
        """Delete local branches whose history is contained in upstream."""
        repo = self.client.discover_repository(repo_path)
        if repo is None:
            raise WorkspaceError(f"Not a git repository: {repo_path}")

        upstream = self.resolver.resolve(repo)
        self.fetch_once(repo, upstream, dry_run=options.dry_run)
        current = self.client.current_branch(repo)
        checked_out = {wt.branch_name for wt in self.client.list_worktrees(repo) if wt.branch_name}
        logger.debug(f"Comparing branches against {upstream}")

        counter = OutcomeCounter(dry_run=options.dry_run)
        for branch in self.client.local_branches(repo):
            try:
                result = self.process_branch(
                    repo, branch, upstream, options, current=current, checked_out=checked_out
                )
            except GitWorktreeKeeperError as e:
                logger.debug(f"Error processing branch {branch}: {e}")
                result = self._skip(branch, str(e), kind="branch")
            self.reporter.item(result, dry_run=options.dry_run)
            counter.record(result)

        outcome = counter.freeze()
        self.reporter.report(outcome)
        return outcome

    def process_branch(
        self,
        repo: str,
        branch: str,
        upstream: UpstreamContext,
        options: CleanupOptions,
        current: Optional[str] = None,
        checked_out: Iterable[str] = (),
    ) -> ItemResult:
        """Run one local branch through the decision chain."""
        if branch == current:
            return self._skip(branch, SkipReason.CURRENT_BRANCH, kind="branch")
        if branch in checked_out:
            return self._skip(branch, SkipReason.IN_WORKTREE, kind="branch")
        if not upstream.remote_name and branch == upstream.branch_name:
            # A local default upstream is trivially "merged" into itself
            return self._skip(branch, SkipReason.UPSTREAM_BRANCH, kind="branch")
        if not options.force and self._is_protected(branch):
            return self._skip(branch, SkipReason.PROTECTED_NAME, kind="branch")
        if matches_any(branch, options.skip_patterns):
            return self._skip(branch, SkipReason.SKIP_PATTERN, kind="branch")

        decision = self.merge_checker.is_merged(f"refs/heads/{branch}", upstream.branch_ref, repo)
        reason = self._merge_gate(decision, options.force)
        if reason:
            return self._skip(branch, reason, kind="branch")

        result = ItemResult(name=branch, removed=False, kind="branch")
        if self._is_protected(branch):
            action = "Would delete" if options.dry_run else "Deleting"
            self.reporter.info(
                f"[yellow]{action} protected branch {escape(branch)} because --force was given[/yellow]"
            )
        if decision is MergeDecision.NOT_MERGED:
            self._warn(
                result,
                f"{branch} has commits not in {upstream}; deleting because --force was given",
            )

        if options.dry_run:
            result.removed = True
            return result

        error = self._delete_branch(repo, branch, allow_force=True)
        if error is not None:
            result.reason = f"{SkipReason.REMOVAL_FAILED}: {error}"
            return result
        result.removed = True
        result.branch_deleted = True
        return result
