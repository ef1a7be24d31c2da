"""Per-branch reconciliation of local branches against a fetched remote."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, List, Mapping, Optional

from ..errors import ActionError, ErrorHandler, ErrorReport, GitBackendError, error_handler as default_error_handler
from .backend import GitBackend
from .commit_range import SHORT_ID_LENGTH, RangeAnalyzer
from .refs import RefResolver, local_ref, remote_ref
from .status import BranchStatus, RemoteExists, RemoteGone, Unknown, classify


class BranchOutcome(Enum):
    """Terminal state of a branch after one reconciliation step."""
    SYNCED = "synced"                                    # Already identical, nothing done
    FAST_FORWARDED = "fast_forwarded"                    # Current branch merged --ff-only
    REPOINTED = "repointed"                              # Other branch moved with update-ref
    DIVERGED = "diverged"                                # Local has commits the remote lacks
    DELETED = "deleted"                                  # Remote gone, merged, deleted
    CHECKED_OUT_AND_DELETED = "checked_out_and_deleted"  # Same, but was the current branch
    UNMERGED = "unmerged"                                # Remote gone, not merged into default
    SKIPPED = "skipped"                                  # Unknown remote or unresolvable refs
    FAILED = "failed"                                    # A mutating action failed

    @property
    def changed(self) -> bool:
        return self in (BranchOutcome.FAST_FORWARDED, BranchOutcome.REPOINTED,
                        BranchOutcome.DELETED, BranchOutcome.CHECKED_OUT_AND_DELETED)


@dataclass(frozen=True)
class SyncContext:
    """What a run syncs against, fixed before the first branch is processed."""
    remote: str
    default_branch: str

    @property
    def full_default_ref(self) -> str:
        return remote_ref(self.remote, self.default_branch)


@dataclass
class BranchResult:
    """Outcome of reconciling one branch, plus the current branch afterwards."""
    branch: str
    outcome: BranchOutcome
    current_branch: str
    status: Optional[BranchStatus] = None
    previous_id: Optional[str] = None
    error: Optional[ErrorReport] = None

    @property
    def short_id(self) -> Optional[str]:
        return self.previous_id[:SHORT_ID_LENGTH] if self.previous_id else None


class BranchReconciler:
    """
    Decides and applies the action for each local branch.

    ``reconcile_branch`` takes the current branch as input and returns it as
    part of the result; deleting the checked out branch moves the current
    branch to the default branch, and ``run`` threads that value into the
    following branches.
    """

    def __init__(self, backend: GitBackend, context: SyncContext, mapping: Mapping[str, str],
                 error_handler: Optional[ErrorHandler] = None):
        self.backend = backend
        self.context = context
        self.mapping = mapping
        self.resolver = RefResolver(backend)
        self.analyzer = RangeAnalyzer(backend)
        self.error_handler = error_handler or default_error_handler
        self.logger = logging.getLogger('branchsync.git_sync.reconcile')

    def run(self, branches: Iterable[str], current_branch: str,
            on_result: Optional[Callable[[BranchResult], None]] = None) -> List[BranchResult]:
        """Reconcile every branch in order; one branch failing never stops the loop."""
        results: List[BranchResult] = []
        for branch in branches:
            result = self.reconcile_branch(branch, current_branch)
            current_branch = result.current_branch
            results.append(result)
            if on_result is not None:
                on_result(result)
        return results

    def reconcile_branch(self, branch: str, current_branch: str) -> BranchResult:
        """Classify ``branch`` and apply the matching action."""
        self.logger.info(f"Checking branch {branch}")
        state = _StepState(branch, current_branch)

        try:
            state.status = classify(branch, self.context.remote, self.mapping, self.resolver)
            self.logger.debug(f"{branch} classified as {state.status}")

            if isinstance(state.status, RemoteExists):
                outcome = self._sync_with_remote(state, state.status.ref)
            elif isinstance(state.status, RemoteGone):
                outcome = self._remove_if_merged(state)
            elif isinstance(state.status, Unknown):
                outcome = BranchOutcome.SKIPPED
            else:
                raise TypeError(f"Unhandled branch status: {state.status!r}")

        except Exception as e:
            report = self.error_handler.handle_branch_error(
                e, branch, context={'current_branch': state.current_branch}
            )
            failed = BranchOutcome.SKIPPED if report.category == "resolution" else BranchOutcome.FAILED
            return state.result(failed, error=report)

        return state.result(outcome)

    def _sync_with_remote(self, state: "_StepState", upstream: str) -> BranchOutcome:
        commit_range = self.analyzer.resolve_range(local_ref(state.branch), upstream)
        state.previous_id = commit_range.a

        if self.analyzer.is_identical(commit_range):
            return BranchOutcome.SYNCED

        if not self.analyzer.is_ancestor(commit_range):
            return BranchOutcome.DIVERGED

        if state.branch == state.current_branch:
            self._act("fast forward merge", self.backend.fast_forward_merge, upstream)
            return BranchOutcome.FAST_FORWARDED

        self._act("update ref", self.backend.update_ref, local_ref(state.branch), upstream)
        return BranchOutcome.REPOINTED

    def _remove_if_merged(self, state: "_StepState") -> BranchOutcome:
        commit_range = self.analyzer.resolve_range(local_ref(state.branch), self.context.full_default_ref)
        state.previous_id = commit_range.a

        if not self.analyzer.is_ancestor(commit_range):
            return BranchOutcome.UNMERGED

        was_current = state.branch == state.current_branch
        if was_current:
            self._act("checkout branch", self.backend.checkout, self.context.default_branch)
            state.current_branch = self.context.default_branch

        self._act("delete branch", self.backend.delete_branch, state.branch)
        return BranchOutcome.CHECKED_OUT_AND_DELETED if was_current else BranchOutcome.DELETED

    def _act(self, description: str, action: Callable[..., None], *args: str) -> None:
        try:
            action(*args)
        except GitBackendError as e:
            raise ActionError(f"Failed to {description}: {e}",
                              error_code=description.upper().replace(" ", "_") + "_FAILED") from e


class _StepState:
    """Mutable scratch state for a single reconcile_branch call."""

    def __init__(self, branch: str, current_branch: str):
        self.branch = branch
        self.current_branch = current_branch
        self.status: Optional[BranchStatus] = None
        self.previous_id: Optional[str] = None

    def result(self, outcome: BranchOutcome, error: Optional[ErrorReport] = None) -> BranchResult:
        return BranchResult(
            branch=self.branch,
            outcome=outcome,
            current_branch=self.current_branch,
            status=self.status,
            previous_id=self.previous_id,
            error=error,
        )
