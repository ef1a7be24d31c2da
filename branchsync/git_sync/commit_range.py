"""Commit range analysis between a local tip and a remote tip."""

import logging
from dataclasses import dataclass

from ..errors import GitBackendError, ResolutionError
from .backend import GitBackend

SHORT_ID_LENGTH = 7


@dataclass(frozen=True)
class CommitRange:
    """Two resolved commit ids: ``a`` is the local tip, ``b`` the remote one."""
    a: str
    b: str

    @property
    def short_a(self) -> str:
        return self.a[:SHORT_ID_LENGTH]

    def is_identical(self) -> bool:
        return self.a == self.b


class RangeAnalyzer:
    """Resolves pairs of refs and answers ancestry questions about them."""

    def __init__(self, backend: GitBackend):
        self.backend = backend
        self.logger = logging.getLogger('branchsync.git_sync.commit_range')

    def resolve_range(self, a: str, b: str) -> CommitRange:
        """
        Resolve both refs to commit ids with a single rev-parse.

        Raises:
            ResolutionError: if either side does not resolve
        """
        try:
            ids = self.backend.rev_parse(a, b)
        except GitBackendError as e:
            raise ResolutionError(f"Failed to resolve {a} and {b}: {e}") from e

        if len(ids) != 2:
            raise ResolutionError(f"Failed to resolve {a} and {b}: expected 2 commit ids, got {len(ids)}")

        self.logger.debug(f"Range {a}..{b} is {ids[0]}..{ids[1]}")
        return CommitRange(ids[0], ids[1])

    @staticmethod
    def is_identical(commit_range: CommitRange) -> bool:
        return commit_range.is_identical()

    def is_ancestor(self, commit_range: CommitRange) -> bool:
        """
        Whether the local tip is reachable from the remote tip.

        A failed ancestry check counts as "not an ancestor" so that nothing
        is ever moved or deleted on an unconfirmed relation.
        """
        try:
            return self.backend.is_ancestor(commit_range.a, commit_range.b)
        except GitBackendError as e:
            self.logger.warning(f"Ancestry check {commit_range.short_a}..{commit_range.b[:SHORT_ID_LENGTH]} failed: {e}")
            return False
