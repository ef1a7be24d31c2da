"""Ref resolution: symbolic refs, tracking refs and the current branch."""

import logging
from typing import Optional

from ..errors import SetupError
from .backend import GitBackend


def local_ref(branch: str) -> str:
    """Full ref path of a local branch."""
    return f"refs/heads/{branch}"


def remote_ref(remote: str, branch: str) -> str:
    """Full ref path of ``branch`` under the conventional tracking namespace."""
    return f"refs/remotes/{remote}/{branch}"


def upstream_of(branch: str) -> str:
    """Symbolic name of the upstream of ``branch``."""
    return f"{branch}@{{upstream}}"


class RefResolver:
    """Read-only queries that turn names into refs."""

    def __init__(self, backend: GitBackend):
        self.backend = backend
        self.logger = logging.getLogger('branchsync.git_sync.refs')

    def resolve_symbolic(self, name: str) -> Optional[str]:
        """
        Resolve a symbolic name such as ``feature@{upstream}`` to a full ref.

        Returns None when the name does not resolve. For an upstream lookup
        this is how a branch deleted on the remote shows up after a pruning
        fetch.
        """
        resolved = self.backend.symbolic_full_name(name)
        if resolved:
            self.logger.debug(f"Symbolic full name of {name} is {resolved}")
        else:
            self.logger.debug(f"No symbolic full name found for {name}")
        return resolved

    def has_tracking_file(self, ref: str) -> bool:
        """Whether the remote-tracking ref ``ref`` still exists locally."""
        exists = self.backend.ref_exists(ref)
        self.logger.debug(f"Tracking ref {ref} {'exists' if exists else 'is missing'}")
        return exists

    def current_branch(self) -> str:
        """Short name of the checked out branch; SetupError when HEAD is detached."""
        branch = self.backend.symbolic_ref("HEAD", short=True)
        if not branch:
            raise SetupError("Cannot determine the current branch (HEAD is detached)",
                             error_code="DETACHED_HEAD")
        return branch
