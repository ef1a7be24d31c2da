"""Capability interface over git and its GitPython implementation."""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from git import Repo
from git.exc import CommandError, GitCommandError, GitCommandNotFound, InvalidGitRepositoryError, NoSuchPathError

from ..errors import GitBackendError, SetupError


def command_error(args, error: CommandError) -> GitBackendError:
    """GitBackendError for a failed GitPython call, without GitPython's stderr wrapper."""
    stderr = str(error.stderr or "").strip()
    # GitPython reports stderr as: stderr: '<text>'
    if stderr.startswith("stderr: '") and stderr.endswith("'"):
        stderr = stderr[len("stderr: '"):-1]
    return GitBackendError(args, error.status, stderr)


class GitBackend(ABC):
    """
    The narrow set of git primitives the reconciliation core relies on.

    Read-only queries never mutate the repository. The mutating primitives
    (fast_forward_merge, update_ref, checkout, delete_branch) each map to a
    single git command and raise GitBackendError when it fails.
    """

    # Resolution

    @abstractmethod
    def symbolic_full_name(self, name: str) -> Optional[str]:
        """Full ref path of ``name`` (e.g. ``feature@{upstream}``), or None."""

    @abstractmethod
    def symbolic_ref(self, name: str, short: bool = False) -> Optional[str]:
        """Target of the symbolic ref ``name``, or None if it is not one."""

    @abstractmethod
    def ref_exists(self, ref: str) -> bool:
        """Whether ``ref`` is present in the local ref store."""

    @abstractmethod
    def rev_parse(self, *revs: str) -> List[str]:
        """Resolve every rev to a commit id in one invocation."""

    @abstractmethod
    def is_ancestor(self, a: str, b: str) -> bool:
        """Whether ``a`` is an ancestor of (or equal to) ``b``."""

    # Listing

    @abstractmethod
    def list_remotes(self) -> List[str]:
        """Remote names in the order git lists them."""

    @abstractmethod
    def get_config_regexp(self, pattern: str) -> List[str]:
        """Raw ``<key> <value>`` lines of local config keys matching ``pattern``."""

    @abstractmethod
    def list_branches(self) -> List[str]:
        """Short names of all local branches."""

    # Mutation

    @abstractmethod
    def fetch(self, remote: str) -> None:
        """Fetch ``remote`` pruning deleted remote branches."""

    @abstractmethod
    def fast_forward_merge(self, ref: str) -> None:
        """Fast-forward the checked out branch to ``ref``."""

    @abstractmethod
    def update_ref(self, full_ref: str, target: str) -> None:
        """Point ``full_ref`` at ``target`` without touching the working tree."""

    @abstractmethod
    def checkout(self, branch: str) -> None:
        """Check out ``branch``."""

    @abstractmethod
    def delete_branch(self, branch: str) -> None:
        """Force-delete the local branch ``branch``."""


class GitPythonBackend(GitBackend):
    """GitBackend that runs git through GitPython's command wrapper."""

    def __init__(self, repo_dir: Path):
        self.logger = logging.getLogger('branchsync.git_sync.backend')
        try:
            self.repo = Repo(repo_dir, search_parent_directories=True)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise SetupError(f"Not a git repository: {repo_dir}", error_code="NOT_A_REPOSITORY") from e

        if self.repo.bare:
            raise SetupError(f"Cannot reconcile branches in a bare repository: {repo_dir}",
                             error_code="BARE_REPOSITORY")

        self.working_dir = Path(self.repo.working_tree_dir)

    def _run(self, *args: str) -> str:
        """Run ``git <args>`` and return its stdout; raise GitBackendError on failure."""
        self.logger.debug(f"Running: git {' '.join(args)}")
        subcommand = getattr(self.repo.git, args[0].replace("-", "_"))
        try:
            return subcommand(*args[1:])
        except (GitCommandError, GitCommandNotFound) as e:
            raise command_error(args, e) from e

    def symbolic_full_name(self, name: str) -> Optional[str]:
        try:
            output = self._run("rev-parse", "--symbolic-full-name", name).strip()
        except GitBackendError as e:
            self.logger.debug(f"No symbolic full name for {name}: {e}")
            return None
        return output or None

    def symbolic_ref(self, name: str, short: bool = False) -> Optional[str]:
        args = ["symbolic-ref", "--quiet"]
        if short:
            args.append("--short")
        args.append(name)
        try:
            output = self._run(*args).strip()
        except GitBackendError:
            return None
        return output or None

    def ref_exists(self, ref: str) -> bool:
        try:
            git_path = self._run("rev-parse", "--quiet", "--git-path", ref).strip()
        except GitBackendError:
            return False

        path = Path(git_path)
        if not path.is_absolute():
            path = self.working_dir / path
        if path.exists():
            return True

        # Loose ref file missing; the ref may still live in packed-refs
        try:
            self._run("show-ref", "--verify", "--quiet", ref)
        except GitBackendError:
            return False
        return True

    def rev_parse(self, *revs: str) -> List[str]:
        output = self._run("rev-parse", "--quiet", *revs)
        return [line.strip() for line in output.splitlines() if line.strip()]

    def is_ancestor(self, a: str, b: str) -> bool:
        try:
            self._run("merge-base", "--is-ancestor", a, b)
        except GitBackendError as e:
            # Exit status 1 is git's "no"; anything else is a real failure
            if e.status == 1:
                return False
            raise
        return True

    def list_remotes(self) -> List[str]:
        output = self._run("remote", "--verbose")
        remotes: List[str] = []
        for line in output.splitlines():
            parts = line.split()
            if parts and parts[0] not in remotes:
                remotes.append(parts[0])
        return remotes

    def get_config_regexp(self, pattern: str) -> List[str]:
        try:
            output = self._run("config", "--local", "--get-regexp", pattern)
        except GitBackendError as e:
            # git config exits 1 when no key matches
            if e.status == 1:
                return []
            raise
        return [line for line in output.splitlines() if line.strip()]

    def list_branches(self) -> List[str]:
        output = self._run("branch", "--list", "--format", "%(refname:lstrip=2)")
        return [line.strip() for line in output.splitlines() if line.strip()]

    def fetch(self, remote: str) -> None:
        args = ("fetch", "--prune", "--progress", remote)
        self.logger.debug(f"Running: git {' '.join(args)}")
        try:
            _, _, progress = self.repo.git.fetch(*args[1:], with_extended_output=True)
        except (GitCommandError, GitCommandNotFound) as e:
            raise command_error(args, e) from e
        for line in progress.splitlines():
            self.logger.debug(f"fetch: {line.strip()}")

    def fast_forward_merge(self, ref: str) -> None:
        self._run("merge", "--ff-only", "--quiet", ref)

    def update_ref(self, full_ref: str, target: str) -> None:
        self._run("update-ref", full_ref, target)

    def checkout(self, branch: str) -> None:
        self._run("checkout", "--quiet", branch)

    def delete_branch(self, branch: str) -> None:
        self._run("branch", "-D", "--quiet", branch)
