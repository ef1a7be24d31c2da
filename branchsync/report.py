"""Colored console output for branch results."""

from typing import Optional

from rich.console import Console
from rich.text import Text

from .git_sync.reconcile import BranchOutcome, BranchResult, SyncContext
from .git_sync.status import Unknown


class Reporter:
    """Prints one line per branch that changed, warned or failed."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(highlight=False)

    def report(self, result: BranchResult, context: SyncContext) -> None:
        line = self.format(result, context)
        if line is not None:
            self.console.print(line)

    def format(self, result: BranchResult, context: SyncContext) -> Optional[Text]:
        """The line to print for ``result``, or None for silent outcomes."""
        name = result.branch
        outcome = result.outcome

        if result.error is not None:
            return Text.assemble(
                ("Error:", "red"), " ", (name, "bold red"),
                f" failed to process branch: {result.error.message}",
            )

        if outcome in (BranchOutcome.FAST_FORWARDED, BranchOutcome.REPOINTED):
            return Text.assemble(
                ("Updated branch", "green"), " ", (name, "bold green"), f" (was {result.short_id}).",
            )

        if outcome in (BranchOutcome.DELETED, BranchOutcome.CHECKED_OUT_AND_DELETED):
            return Text.assemble(
                ("Deleted branch", "red"), " ", (name, "bold red"), f" (was {result.short_id}).",
            )

        if outcome is BranchOutcome.DIVERGED:
            return Text.assemble(
                ("Warning:", "yellow"), " ", (name, "bold yellow"), " seems to contain unpushed commits",
            )

        if outcome is BranchOutcome.UNMERGED:
            return Text.assemble(
                ("Warning:", "yellow"), " '", (name, "bold yellow"),
                f"' was deleted on {context.remote}, but appears not merged into '{context.default_branch}'",
            )

        if outcome is BranchOutcome.SKIPPED and isinstance(result.status, Unknown):
            return Text.assemble(
                ("Warning:", "yellow"), " '", (name, "bold yellow"),
                f"' tracks '{result.status.remote}', which is not being synced; skipped",
            )

        return None
