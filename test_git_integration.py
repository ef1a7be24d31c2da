#!/usr/bin/env python3
"""
Integration test against real git repositories.

A bare "remote", a seed clone that publishes changes, and a work clone
that gets reconciled through GitPythonBackend. Skipped when no git
executable is available.
"""

import shutil
import subprocess
import sys
import tempfile
import unittest
from pathlib import Path

# Add the project root to the path so we can import branchsync modules
sys.path.insert(0, str(Path(__file__).parent))

from branchsync.config import Config
from branchsync.errors import GitBackendError, SetupError
from branchsync.git_sync.backend import GitPythonBackend
from branchsync.git_sync.manager import BranchSyncManager
from branchsync.git_sync.reconcile import BranchOutcome
from branchsync.platform import get_git_executable

GIT = get_git_executable()


def git(cwd: Path, *args: str) -> str:
    """Run git in ``cwd`` and return its stripped stdout."""
    result = subprocess.run(
        [GIT, *args],
        cwd=str(cwd),
        check=True,
        capture_output=True,
        text=True
    )
    return result.stdout.strip()


def configure_identity(repo_dir: Path) -> None:
    git(repo_dir, "config", "user.name", "Test User")
    git(repo_dir, "config", "user.email", "test@example.com")
    git(repo_dir, "config", "commit.gpgsign", "false")


def commit_file(repo_dir: Path, name: str, content: str) -> str:
    (repo_dir / name).write_text(content)
    git(repo_dir, "add", name)
    git(repo_dir, "commit", "--quiet", "-m", f"Update {name}")
    return git(repo_dir, "rev-parse", "HEAD")


@unittest.skipUnless(shutil.which(GIT), "git executable not available")
class TestGitIntegration(unittest.TestCase):
    """Reconciles a real clone after branches change on its remote."""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.remote_dir = self.temp_dir / "remote.git"
        self.seed_dir = self.temp_dir / "seed"
        self.work_dir = self.temp_dir / "work"

        git(self.temp_dir, "init", "--quiet", "--bare", str(self.remote_dir))
        git(self.remote_dir, "symbolic-ref", "HEAD", "refs/heads/main")

        self.seed_dir.mkdir()
        git(self.seed_dir, "init", "--quiet")
        git(self.seed_dir, "symbolic-ref", "HEAD", "refs/heads/main")
        configure_identity(self.seed_dir)
        git(self.seed_dir, "remote", "add", "origin", str(self.remote_dir))
        self.initial = commit_file(self.seed_dir, "README", "hello\n")
        for branch in ("feature", "old-feature", "wip"):
            git(self.seed_dir, "branch", branch)
        git(self.seed_dir, "push", "--quiet", "origin", "main", "feature", "old-feature", "wip")

        git(self.temp_dir, "clone", "--quiet", str(self.remote_dir), str(self.work_dir))
        configure_identity(self.work_dir)
        for branch in ("feature", "old-feature", "wip"):
            git(self.work_dir, "branch", "--track", branch, f"origin/{branch}")

        # wip gets a commit that only exists locally
        git(self.work_dir, "checkout", "--quiet", "wip")
        self.wip_tip = commit_file(self.work_dir, "wip.txt", "unfinished\n")
        git(self.work_dir, "checkout", "--quiet", "old-feature")

        # Remote changes: main and feature move, old-feature and wip are deleted
        git(self.seed_dir, "checkout", "--quiet", "main")
        self.main_tip = commit_file(self.seed_dir, "main.txt", "main\n")
        git(self.seed_dir, "checkout", "--quiet", "feature")
        self.feature_tip = commit_file(self.seed_dir, "feature.txt", "feature\n")
        git(self.seed_dir, "push", "--quiet", "origin", "main", "feature")
        git(self.seed_dir, "push", "--quiet", "origin", "--delete", "old-feature", "wip")

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def run_sync(self):
        manager = BranchSyncManager(Config(repo_dir=self.work_dir))
        return manager.run()

    def test_reconcile_after_remote_changes(self):
        summary = self.run_sync()

        self.assertEqual(summary.remote, "origin")
        self.assertEqual(summary.default_branch, "main")
        self.assertEqual(summary.initial_branch, "old-feature")
        outcomes = {result.branch: result.outcome for result in summary.results}
        self.assertEqual(outcomes, {
            "feature": BranchOutcome.REPOINTED,
            "main": BranchOutcome.REPOINTED,
            "old-feature": BranchOutcome.CHECKED_OUT_AND_DELETED,
            "wip": BranchOutcome.UNMERGED,
        })
        self.assertFalse(summary.has_errors)

        self.assertEqual(git(self.work_dir, "symbolic-ref", "--short", "HEAD"), "main")
        self.assertEqual(git(self.work_dir, "rev-parse", "main"), self.main_tip)
        self.assertEqual(git(self.work_dir, "rev-parse", "feature"), self.feature_tip)
        self.assertEqual(git(self.work_dir, "rev-parse", "wip"), self.wip_tip)
        self.assertEqual(git(self.work_dir, "branch", "--list", "old-feature"), "")
        # The checkout onto main brought its files into the working tree
        self.assertTrue((self.work_dir / "main.txt").exists())

    def test_second_run_changes_nothing(self):
        self.run_sync()
        refs_before = git(self.work_dir, "show-ref")

        summary = self.run_sync()

        outcomes = {result.branch: result.outcome for result in summary.results}
        self.assertEqual(outcomes, {
            "feature": BranchOutcome.SYNCED,
            "main": BranchOutcome.SYNCED,
            "wip": BranchOutcome.UNMERGED,
        })
        self.assertEqual(git(self.work_dir, "show-ref"), refs_before)

    def test_current_branch_is_fast_forwarded(self):
        git(self.work_dir, "checkout", "--quiet", "main")

        summary = self.run_sync()

        outcomes = {result.branch: result.outcome for result in summary.results}
        self.assertEqual(outcomes["main"], BranchOutcome.FAST_FORWARDED)
        self.assertEqual(outcomes["old-feature"], BranchOutcome.DELETED)
        self.assertTrue((self.work_dir / "main.txt").exists())

    def test_backend_queries(self):
        backend = GitPythonBackend(self.work_dir)

        self.assertEqual(backend.list_remotes(), ["origin"])
        self.assertEqual(backend.symbolic_ref("HEAD", short=True), "old-feature")
        self.assertEqual(backend.symbolic_full_name("feature@{upstream}"), "refs/remotes/origin/feature")
        self.assertTrue(backend.ref_exists("refs/remotes/origin/feature"))
        self.assertFalse(backend.ref_exists("refs/remotes/origin/nothing"))
        self.assertTrue(backend.is_ancestor(self.initial, self.wip_tip))
        self.assertFalse(backend.is_ancestor(self.wip_tip, self.initial))
        self.assertEqual(backend.rev_parse("refs/heads/wip", "refs/heads/feature"), [self.wip_tip, self.initial])
        self.assertIn("branch.wip.remote origin", backend.get_config_regexp(r"branch\..*\.remote"))

    def test_branch_shadowed_by_tag_is_reconciled(self):
        # A tag with the same name makes refname:short ambiguous ("heads/feature")
        git(self.work_dir, "tag", "feature", "feature")

        summary = self.run_sync()

        outcomes = {result.branch: result.outcome for result in summary.results}
        self.assertIn("feature", outcomes)
        self.assertNotIn("heads/feature", outcomes)
        self.assertEqual(outcomes["feature"], BranchOutcome.REPOINTED)
        self.assertFalse(summary.has_errors)
        self.assertEqual(git(self.work_dir, "rev-parse", "refs/heads/feature"), self.feature_tip)

    def test_failed_command_message_has_plain_stderr(self):
        backend = GitPythonBackend(self.work_dir)

        with self.assertRaises(GitBackendError) as ctx:
            backend.checkout("no-such-branch")

        self.assertTrue(ctx.exception.stderr.startswith("error:") or ctx.exception.stderr.startswith("fatal:"))
        self.assertNotIn("stderr: '", str(ctx.exception))

    def test_not_a_repository(self):
        with self.assertRaises(SetupError):
            GitPythonBackend(self.temp_dir / "missing")


if __name__ == "__main__":
    unittest.main()
