"""Command-line entry points for git-worktree-keeper.

One console script per command, plus the git-worktree-keeper dispatcher.
Every entry point returns the process exit code.
"""

import argparse
import sys
from typing import Callable, Dict, List, Optional, Tuple

from rich.console import Console
from rich.markup import escape

from git_worktree_keeper.__version__ import __version__
from git_worktree_keeper.cli import args as cli_args
from git_worktree_keeper.config import load_config
from git_worktree_keeper.constants import APP_NAME, EXIT_INTERRUPTED, EXIT_OK, EXIT_USAGE
from git_worktree_keeper.core import WorktreeKeeper
from git_worktree_keeper.exceptions import GitWorktreeKeeperError, UsageError
from git_worktree_keeper.logging_config import get_logger, setup_logging
from git_worktree_keeper.utils.directory import preserved_working_directory

logger = get_logger(__name__)

err_console = Console(stderr=True)

Handler = Callable[[WorktreeKeeper, argparse.Namespace, List[str]], int]


def _print_usage_error(error: UsageError) -> None:
    if error.usage:
        sys.stderr.write(error.usage)
    err_console.print(f"[red]Error: {escape(str(error))}[/red]")


def _parse(
    parser: cli_args.CommandParser, argv: List[str], allow_extra: bool
) -> Tuple[argparse.Namespace, List[str]]:
    if allow_extra:
        # Everything after the first "--" belongs to git, values included.
        tail: List[str] = []
        if "--" in argv:
            split = argv.index("--")
            argv, tail = argv[:split], argv[split + 1 :]
        parsed, unknown = parser.parse_known_args(argv)
        return parsed, unknown + tail
    return parser.parse_args(argv), []


def _run(
    parser: cli_args.CommandParser,
    handler: Handler,
    argv: Optional[List[str]],
    allow_extra: bool = False,
    keeper_factory: Optional[Callable[[], WorktreeKeeper]] = None,
) -> int:
    """Parse, set up logging and config, run handler, map errors to exit codes."""
    argv = list(sys.argv[1:] if argv is None else argv)
    try:
        parsed, extra = _parse(parser, argv, allow_extra)
    except SystemExit as e:
        # --help and --version
        return e.code if isinstance(e.code, int) else EXIT_OK
    except UsageError as e:
        _print_usage_error(e)
        return e.exit_code

    setup_logging(verbose=parsed.verbose, debug=parsed.debug)

    try:
        with preserved_working_directory():
            if keeper_factory is not None:
                keeper = keeper_factory()
            else:
                keeper = WorktreeKeeper(load_config())
            if parsed.debug:
                for key, value in keeper.config.to_dict().items():
                    logger.debug(f"config {key}: {value}")
            return handler(keeper, parsed, extra)
    except KeyboardInterrupt:
        err_console.print("\n[yellow]Interrupted[/yellow]")
        return EXIT_INTERRUPTED
    except UsageError as e:
        _print_usage_error(e)
        return e.exit_code
    except GitWorktreeKeeperError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        return e.exit_code


def _print_path(path: Optional[str]) -> int:
    if path:
        print(path)
    return EXIT_OK


def _passthrough_help(parser: cli_args.CommandParser, argv: List[str]) -> bool:
    """True if -h/--help appears before any "--" separator."""
    for arg in argv:
        if arg == "--":
            return False
        if arg in ("-h", "--help"):
            parser.print_help()
            return True
    return False


def wadd_main(argv: Optional[List[str]] = None, **kwargs) -> int:
    """Entry point for git-wadd."""
    return _run(
        cli_args.create_worktree_parser(),
        lambda keeper, a, extra: _print_path(keeper.create_worktree(a.name, a.branch, extra)),
        argv,
        allow_extra=True,
        **kwargs,
    )


def wadd_pr_main(argv: Optional[List[str]] = None, **kwargs) -> int:
    """Entry point for git-wadd-pr."""
    return _run(
        cli_args.create_worktree_from_pr_parser(),
        lambda keeper, a, extra: _print_path(
            keeper.create_worktree_from_pr(a.pr_number, a.name, a.remote, a.dry_run)
        ),
        argv,
        **kwargs,
    )


def wrm_main(argv: Optional[List[str]] = None, **kwargs) -> int:
    """Entry point for git-wrm."""

    def handler(keeper, a, extra):
        keeper.remove_worktree(a.path, dry_run=a.dry_run, force=a.force, delete_branch=a.delete_branch)
        return EXIT_OK

    return _run(cli_args.remove_worktree_parser(), handler, argv, **kwargs)


def wclean_main(argv: Optional[List[str]] = None, **kwargs) -> int:
    """Entry point for git-wclean."""

    def handler(keeper, a, extra):
        keeper.clean_worktrees(a.root, dry_run=a.dry_run, force=a.force, delete_branch=a.delete_branch)
        return EXIT_OK

    return _run(cli_args.clean_worktrees_parser(), handler, argv, **kwargs)


def bclean_main(argv: Optional[List[str]] = None, **kwargs) -> int:
    """Entry point for git-bclean."""

    def handler(keeper, a, extra):
        keeper.clean_branches(dry_run=a.dry_run, force=a.force, skip=a.skip)
        return EXIT_OK

    return _run(cli_args.clean_branches_parser(), handler, argv, **kwargs)


def wjump_main(argv: Optional[List[str]] = None, **kwargs) -> int:
    """Entry point for git-wjump."""
    return _run(
        cli_args.jump_parser(),
        lambda keeper, a, extra: _print_path(keeper.jump(" ".join(a.query))),
        argv,
        **kwargs,
    )


def _run_passthrough(
    parser: cli_args.CommandParser,
    run: Callable[[WorktreeKeeper, List[str]], int],
    argv: Optional[List[str]],
    keeper_factory: Optional[Callable[[], WorktreeKeeper]] = None,
) -> int:
    """Run a git passthrough command; its exit code is git's."""
    argv = list(sys.argv[1:] if argv is None else argv)
    if _passthrough_help(parser, argv):
        return EXIT_OK
    keeper = keeper_factory() if keeper_factory is not None else WorktreeKeeper()
    try:
        return run(keeper, argv)
    except KeyboardInterrupt:
        return EXIT_INTERRUPTED


def diff_plain_main(argv: Optional[List[str]] = None, **kwargs) -> int:
    """Entry point for git-diff-plain."""
    return _run_passthrough(
        cli_args.plain_diff_parser(), lambda keeper, args: keeper.plain_diff(args), argv, **kwargs
    )


def show_plain_main(argv: Optional[List[str]] = None, **kwargs) -> int:
    """Entry point for git-show-plain."""
    return _run_passthrough(
        cli_args.plain_show_parser(), lambda keeper, args: keeper.plain_show(args), argv, **kwargs
    )


def cwb_main(argv: Optional[List[str]] = None, **kwargs) -> int:
    """Entry point for cwb."""
    return _run(
        cli_args.current_branch_parser(),
        lambda keeper, a, extra: _print_path(keeper.current_branch_name()),
        argv,
        **kwargs,
    )


COMMANDS: Dict[str, Callable[..., int]] = {
    "create-worktree": wadd_main,
    "create-worktree-from-pull-request": wadd_pr_main,
    "remove-worktree": wrm_main,
    "bulk-clean-worktrees": wclean_main,
    "bulk-clean-branches": bclean_main,
    "interactive-jump": wjump_main,
    "plain-diff": diff_plain_main,
    "plain-show": show_plain_main,
    "current-branch-name": cwb_main,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the git-worktree-keeper dispatcher."""
    argv = list(sys.argv[1:] if argv is None else argv)
    parser = cli_args.dispatcher_parser()

    if not argv or argv[0] in ("-h", "--help"):
        parser.print_help()
        print("\nCommands:")
        for name in COMMANDS:
            print(f"  {name}")
        return EXIT_OK if argv else EXIT_USAGE
    if argv[0] == "--version":
        print(f"{APP_NAME} {__version__}")
        return EXIT_OK

    command = COMMANDS.get(argv[0])
    if command is None:
        err_console.print(f"[red]Error: unknown command {escape(argv[0])}[/red]")
        return EXIT_USAGE
    return command(argv[1:])


if __name__ == "__main__":
    sys.exit(main())
