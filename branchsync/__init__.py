"""
branchsync - reconcile local git branches with their remote after a fetch.

Every local branch is fast-forwarded, repointed, deleted (when its remote
branch is gone and it has been merged) or reported as holding unmerged
work.
"""

__version__ = "1.0.0"
__description__ = "Reconcile local branches against a fetched remote"

from .config import Config, load_configuration
from .git_sync import BranchSyncManager, SyncSummary

__all__ = ["Config", "load_configuration", "BranchSyncManager", "SyncSummary", "__version__"]
