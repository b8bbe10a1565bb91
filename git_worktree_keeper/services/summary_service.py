"""Per-item and end-of-run reporting for the cleanup commands."""

from typing import Optional

from rich.console import Console
from rich.markup import escape

from git_worktree_keeper.models.cleanup import CleanupOutcome, ItemResult


class SummaryReporter:
    """Prints one line per candidate and the final processed/removed/skipped totals."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def info(self, message: str) -> None:
        self.console.print(message)

    def warn(self, message: str) -> None:
        self.console.print(f"[yellow]Warning: {escape(message)}[/yellow]")

    def item(self, result: ItemResult, dry_run: bool = False) -> None:
        """Report how a single candidate ended."""
        name = f"{result.kind} {escape(result.name)}"
        if result.removed:
            if dry_run:
                self.console.print(f"[yellow]Would remove {name}[/yellow]")
            else:
                self.console.print(f"[green]Removed {name}[/green]")
        else:
            self.console.print(f"[dim]Skipping {name}: {escape(result.reason or 'unknown')}[/dim]")

    def report(self, outcome: CleanupOutcome) -> None:
        """Print the final totals in a fixed shape."""
        removed_label = "Would remove" if outcome.dry_run else "Removed"
        self.console.print("\nSummary:")
        self.console.print(f"  Processed: {outcome.processed}")
        self.console.print(f"  {removed_label}: {outcome.removed}")
        self.console.print(f"  Skipped: {outcome.skipped}")
