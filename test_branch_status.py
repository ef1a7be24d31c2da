#!/usr/bin/env python3
"""
Unit tests for branch status classification.

Each local branch is classified as RemoteExists, RemoteGone or Unknown
depending on its tracking configuration and which refs still exist.
"""

import sys
import unittest
from pathlib import Path

# Add the project root to the path so we can import branchsync modules
sys.path.insert(0, str(Path(__file__).parent))

from branchsync.git_sync.refs import RefResolver
from branchsync.git_sync.status import RemoteExists, RemoteGone, Unknown, classify
from fake_git_backend import FakeGitBackend


class TestClassify(unittest.TestCase):
    """Test cases for classify()."""

    def setUp(self):
        self.backend = FakeGitBackend(remotes=("origin", "fork"))
        self.backend.commit("root")
        self.backend.set_ref("refs/remotes/origin/main", "root")
        self.backend.add_branch("main", "root", remote="origin")
        self.backend.check_out("main")
        self.resolver = RefResolver(self.backend)

    def classify(self, branch: str):
        return classify(branch, "origin", self.backend.branch_remotes, self.resolver)

    def test_untracked_branch_uses_conventional_ref(self):
        self.backend.add_branch("local-only", "root")
        self.assertEqual(self.classify("local-only"), RemoteExists("refs/remotes/origin/local-only"))
        # No lookups are needed for the convention
        self.assertFalse([call for call in self.backend.calls if call[0] in ("symbolic_full_name", "ref_exists")])

    def test_tracked_branch_uses_upstream(self):
        self.assertEqual(self.classify("main"), RemoteExists("refs/remotes/origin/main"))

    def test_custom_upstream_name_is_honored(self):
        self.backend.set_ref("refs/remotes/origin/users/me/feature", "root")
        self.backend.add_branch("feature", "root", remote="origin",
                                upstream="refs/remotes/origin/users/me/feature")
        self.assertEqual(self.classify("feature"), RemoteExists("refs/remotes/origin/users/me/feature"))

    def test_upstream_lookup_wins_over_convention(self):
        # The conventional ref exists too, but the upstream is what the branch tracks
        self.backend.set_ref("refs/remotes/origin/feature", "root")
        self.backend.set_ref("refs/remotes/origin/renamed", "root")
        self.backend.add_branch("feature", "root", remote="origin", upstream="refs/remotes/origin/renamed")
        self.assertEqual(self.classify("feature"), RemoteExists("refs/remotes/origin/renamed"))

    def test_deleted_upstream_is_remote_gone(self):
        self.backend.add_branch("old-feature", "root", remote="origin")
        self.assertEqual(self.classify("old-feature"), RemoteGone())

    def test_deleted_custom_upstream_is_remote_gone_even_if_convention_exists(self):
        self.backend.set_ref("refs/remotes/origin/feature", "root")
        self.backend.add_branch("feature", "root", remote="origin", upstream="refs/remotes/origin/renamed")
        self.assertEqual(self.classify("feature"), RemoteGone())

    def test_other_remote_without_tracking_ref_is_unknown(self):
        self.backend.set_ref("refs/remotes/fork/topic", "root")
        self.backend.add_branch("topic", "root", remote="fork")
        self.assertEqual(self.classify("topic"), Unknown("fork"))

    def test_other_remote_with_tracking_ref_uses_convention(self):
        self.backend.set_ref("refs/remotes/origin/topic", "root")
        self.backend.add_branch("topic", "root", remote="fork")
        self.assertEqual(self.classify("topic"), RemoteExists("refs/remotes/origin/topic"))

    def test_classify_has_no_side_effects(self):
        self.backend.add_branch("old-feature", "root", remote="origin")
        refs_before = dict(self.backend.refs)
        for branch in ("main", "old-feature"):
            self.classify(branch)
        self.assertEqual(self.backend.refs, refs_before)
        self.assertEqual(self.backend.mutations(), [])


if __name__ == "__main__":
    unittest.main()
