"""End-to-end branch synchronization for one repository."""

import logging
from typing import Callable, Optional

from ..config import Config
from ..errors import ErrorHandler, error_handler as default_error_handler
from .backend import GitBackend, GitPythonBackend
from .reconcile import BranchReconciler, BranchResult, SyncContext
from .refs import RefResolver
from .remote_utils import (
    fetch_remote, get_default_branch, get_main_remote, list_local_branches, read_branch_remotes
)
from .utils import SyncSummary


class BranchSyncManager:
    """
    Fetches a remote and reconciles every local branch against it.

    Setup (remote, default branch, current branch, fetch, configuration
    and branch listing) raises SetupError and nothing is touched. Once
    branches are being processed, failures are reported per branch and the
    run always completes.
    """

    def __init__(self, config: Config, backend: Optional[GitBackend] = None,
                 error_handler: Optional[ErrorHandler] = None):
        """
        Initialize BranchSyncManager with configuration.

        Args:
            config: Run configuration
            backend: Git access; defaults to GitPython on ``config.repo_dir``
            error_handler: Turns per-branch failures into reports
        """
        self.config = config
        self.backend = backend or GitPythonBackend(config.repo_dir)
        self.error_handler = error_handler or default_error_handler
        self.resolver = RefResolver(self.backend)
        self.logger = logging.getLogger('branchsync.git_sync')

    def prepare(self) -> SyncContext:
        """Determine the remote and default branch to sync against."""
        remote = self.config.remote or get_main_remote(self.backend)
        default_branch = self.config.default_branch or get_default_branch(self.backend, remote)
        self.logger.info(f"Syncing against {remote}, default branch {default_branch}")
        return SyncContext(remote=remote, default_branch=default_branch)

    def run(self, on_result: Optional[Callable[[BranchResult, SyncContext], None]] = None) -> SyncSummary:
        """
        Run a full reconciliation.

        Args:
            on_result: Called with each branch result, and the run context,
                as soon as the branch has been processed

        Returns:
            SyncSummary with one result per local branch
        """
        context = self.prepare()
        current_branch = self.resolver.current_branch()

        if self.config.fetch:
            fetch_remote(self.backend, context.remote)
        else:
            self.logger.info("Fetch disabled, using existing remote-tracking refs")

        mapping = read_branch_remotes(self.backend)
        branches = list_local_branches(self.backend)

        reconciler = BranchReconciler(self.backend, context, mapping, error_handler=self.error_handler)
        report = None
        if on_result is not None:
            def report(result: BranchResult) -> None:
                on_result(result, context)

        results = reconciler.run(branches, current_branch, on_result=report)

        summary = SyncSummary(
            remote=context.remote,
            default_branch=context.default_branch,
            initial_branch=current_branch,
            results=results,
        )
        self.logger.info(f"Processed {len(results)} branches: {summary.counts()}")
        return summary
