"""Classification of a local branch against the remote being synced."""

import logging
from dataclasses import dataclass
from typing import Mapping

from .refs import RefResolver, remote_ref, upstream_of


class BranchStatus:
    """Base of the status variants a local branch can be classified into."""


@dataclass(frozen=True)
class RemoteExists(BranchStatus):
    """The branch has a concrete upstream ref to compare against."""
    ref: str


@dataclass(frozen=True)
class RemoteGone(BranchStatus):
    """The branch tracks the synced remote but its upstream no longer resolves."""


@dataclass(frozen=True)
class Unknown(BranchStatus):
    """The branch tracks another remote which has no matching tracking ref."""
    remote: str


logger = logging.getLogger('branchsync.git_sync.status')


def classify(local_branch: str, sync_remote: str, mapping: Mapping[str, str],
             resolver: RefResolver) -> BranchStatus:
    """
    Classify ``local_branch`` relative to ``sync_remote``.

    Branches without tracking configuration are compared against the
    conventional ``refs/remotes/<remote>/<branch>``. Branches tracking the
    synced remote use their configured upstream, so custom upstream names
    are honored; an upstream that no longer resolves means it was deleted
    remotely. Branches tracking any other remote fall back to the
    conventional ref, or are Unknown when it does not exist.
    """
    default_ref = remote_ref(sync_remote, local_branch)
    tracked_remote = mapping.get(local_branch)

    if tracked_remote is None:
        logger.debug(f"{local_branch} has no tracking configuration, using {default_ref}")
        return RemoteExists(default_ref)

    if tracked_remote == sync_remote:
        upstream = resolver.resolve_symbolic(upstream_of(local_branch))
        if upstream:
            return RemoteExists(upstream)
        return RemoteGone()

    if not resolver.has_tracking_file(default_ref):
        logger.debug(f"{local_branch} tracks {tracked_remote} and {default_ref} is missing")
        return Unknown(tracked_remote)

    return RemoteExists(default_ref)
