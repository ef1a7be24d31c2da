"""Result types for a full reconciliation run."""

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List

from .reconcile import BranchOutcome, BranchResult


@dataclass
class SyncSummary:
    """Result of reconciling every local branch against one remote."""
    remote: str
    default_branch: str
    initial_branch: str
    results: List[BranchResult] = field(default_factory=list)

    @property
    def final_branch(self) -> str:
        """Branch checked out once the run finished."""
        if self.results:
            return self.results[-1].current_branch
        return self.initial_branch

    @property
    def has_errors(self) -> bool:
        return any(result.error is not None for result in self.results)

    def counts(self) -> Dict[str, int]:
        """Number of branches per outcome, keyed by outcome value."""
        return dict(Counter(result.outcome.value for result in self.results))

    def branches_with(self, outcome: BranchOutcome) -> List[str]:
        return [result.branch for result in self.results if result.outcome is outcome]
