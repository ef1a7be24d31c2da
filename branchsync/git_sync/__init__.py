"""Git branch reconciliation for branchsync."""

from .backend import GitBackend, GitPythonBackend
from .commit_range import CommitRange, RangeAnalyzer
from .manager import BranchSyncManager
from .reconcile import BranchOutcome, BranchReconciler, BranchResult, SyncContext
from .refs import RefResolver
from .status import BranchStatus, RemoteExists, RemoteGone, Unknown, classify
from .utils import SyncSummary

__all__ = [
    'GitBackend',
    'GitPythonBackend',
    'CommitRange',
    'RangeAnalyzer',
    'BranchSyncManager',
    'BranchOutcome',
    'BranchReconciler',
    'BranchResult',
    'SyncContext',
    'RefResolver',
    'BranchStatus',
    'RemoteExists',
    'RemoteGone',
    'Unknown',
    'classify',
    'SyncSummary'
]
