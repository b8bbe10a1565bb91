"""Command-line argument parsing for git-worktree-keeper."""

import argparse
import inspect
from typing import Callable

from git_worktree_keeper.__version__ import __version__
from git_worktree_keeper.constants import APP_NAME
from git_worktree_keeper.core import WorktreeKeeper
from git_worktree_keeper.exceptions import UsageError


class CommandParser(argparse.ArgumentParser):
    """ArgumentParser that reports bad arguments as UsageError (exit 1) instead of exiting 2."""

    def error(self, message):
        raise UsageError(message, usage=self.format_usage())


def _parser_for(prog: str, command: Callable) -> CommandParser:
    """Parser whose help is the command's documentation."""
    doc = inspect.getdoc(command) or ""
    summary, _, details = doc.partition("\n")
    parser = CommandParser(
        prog=prog,
        description=summary,
        epilog=details.strip() or None,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument(
        "--debug", action="store_true", help="Show debug information for troubleshooting"
    )
    return parser


def _add_cleanup_flags(parser: argparse.ArgumentParser, delete_branch: bool = True) -> None:
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Preview mode - show what would be removed without removing anything",
    )
    parser.add_argument(
        "--force", action="store_true", help="Remove protected and unmerged items too"
    )
    if delete_branch:
        parser.add_argument(
            "--no-delete-branch",
            dest="delete_branch",
            action="store_false",
            help="Keep the branch of each removed worktree",
        )


def create_worktree_parser(prog: str = "git-wadd") -> CommandParser:
    parser = _parser_for(prog, WorktreeKeeper.create_worktree)
    parser.add_argument("name", help="Worktree directory name")
    parser.add_argument("branch", nargs="?", help="Branch to check out or create (default: NAME)")
    return parser


def create_worktree_from_pr_parser(prog: str = "git-wadd-pr") -> CommandParser:
    parser = _parser_for(prog, WorktreeKeeper.create_worktree_from_pr)
    parser.add_argument("pr_number", metavar="PR", help="Pull request number")
    parser.add_argument("name", nargs="?", help="Worktree directory name (default: pr-PR)")
    parser.add_argument("--remote", default="origin", help="Remote to fetch from (default: origin)")
    parser.add_argument(
        "--dry-run", action="store_true", help="Show what would be done without doing it"
    )
    return parser


def remove_worktree_parser(prog: str = "git-wrm") -> CommandParser:
    parser = _parser_for(prog, WorktreeKeeper.remove_worktree)
    parser.add_argument("path", help="Path of the worktree to remove")
    _add_cleanup_flags(parser)
    return parser


def clean_worktrees_parser(prog: str = "git-wclean") -> CommandParser:
    parser = _parser_for(prog, WorktreeKeeper.clean_worktrees)
    parser.add_argument("root", help="Directory containing the worktrees")
    _add_cleanup_flags(parser)
    return parser


def clean_branches_parser(prog: str = "git-bclean") -> CommandParser:
    parser = _parser_for(prog, WorktreeKeeper.clean_branches)
    _add_cleanup_flags(parser, delete_branch=False)
    parser.add_argument(
        "--skip",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Glob pattern of branches to keep (repeatable, comma separated)",
    )
    return parser


def jump_parser(prog: str = "git-wjump") -> CommandParser:
    parser = _parser_for(prog, WorktreeKeeper.jump)
    parser.add_argument("query", nargs="*", help="Initial search query")
    return parser


def plain_diff_parser(prog: str = "git-diff-plain") -> CommandParser:
    parser = _parser_for(prog, WorktreeKeeper.plain_diff)
    parser.usage = f"{prog} [-h] [git diff arguments ...]"
    return parser


def plain_show_parser(prog: str = "git-show-plain") -> CommandParser:
    parser = _parser_for(prog, WorktreeKeeper.plain_show)
    parser.usage = f"{prog} [-h] [git show arguments ...]"
    return parser


def current_branch_parser(prog: str = "cwb") -> CommandParser:
    return _parser_for(prog, WorktreeKeeper.current_branch_name)


def dispatcher_parser() -> CommandParser:
    """Parser for the git-worktree-keeper umbrella command."""
    parser = CommandParser(
        prog=APP_NAME,
        usage=f"{APP_NAME} [-h] [--version] COMMAND [ARGS ...]",
        description="Git worktree and branch housekeeping",
        epilog=f"Run '{APP_NAME} COMMAND --help' for help on a command.",
    )
    parser.add_argument("--version", action="version", version=f"{APP_NAME} {__version__}")
    return parser
