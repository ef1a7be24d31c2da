"""In-memory GitBackend used by the test suite."""

import hashlib
from typing import Dict, List, Optional, Tuple

from branchsync.errors import GitBackendError
from branchsync.git_sync.backend import GitBackend

MUTATING = ("fetch", "fast_forward_merge", "update_ref", "checkout", "delete_branch")


def commit_id(label: str) -> str:
    """Deterministic 40 character commit id for a label."""
    return hashlib.sha1(label.encode("utf-8")).hexdigest()


class FakeGitBackend(GitBackend):
    """
    A commit graph plus a ref table.

    ``upstreams`` holds each branch's configured upstream ref, which only
    resolves while that ref exists, like ``<branch>@{upstream}`` does after
    a pruning fetch. ``fail_on`` maps a method name to the stderr it should
    fail with.
    """

    def __init__(self, remotes: Tuple[str, ...] = ("origin",)):
        self.parents: Dict[str, List[str]] = {}
        self.refs: Dict[str, str] = {}
        self.symbolic_refs: Dict[str, str] = {}
        self.upstreams: Dict[str, str] = {}
        self.branch_remotes: Dict[str, str] = {}
        self.remotes: List[str] = list(remotes)
        self.on_fetch: Dict[str, Optional[str]] = {}
        self.fail_on: Dict[str, str] = {}
        self.calls: List[Tuple[str, Tuple[str, ...]]] = []

    # Building the fake repository

    def commit(self, label: str, *parents: str) -> str:
        sha = commit_id(label)
        self.parents[sha] = [commit_id(parent) for parent in parents]
        return sha

    def set_ref(self, ref: str, label: str) -> None:
        self.refs[ref] = commit_id(label)

    def add_branch(self, name: str, label: str, remote: Optional[str] = None,
                   upstream: Optional[str] = None) -> None:
        self.set_ref(f"refs/heads/{name}", label)
        if remote is not None:
            self.branch_remotes[name] = remote
            self.upstreams[name] = upstream or f"refs/remotes/{remote}/{name}"

    def check_out(self, name: str) -> None:
        self.symbolic_refs["HEAD"] = f"refs/heads/{name}"

    def head_branch(self) -> Optional[str]:
        target = self.symbolic_refs.get("HEAD")
        if target and target.startswith("refs/heads/"):
            return target[len("refs/heads/"):]
        return None

    def mutations(self) -> List[Tuple[str, Tuple[str, ...]]]:
        return [call for call in self.calls if call[0] in MUTATING and call[0] != "fetch"]

    def _record(self, name: str, *args: str) -> None:
        self.calls.append((name, args))
        if name in self.fail_on:
            raise GitBackendError([name.replace("_", "-"), *args], 1, self.fail_on[name])

    def _resolve(self, rev: str) -> Optional[str]:
        if rev in self.refs:
            return self.refs[rev]
        if rev in self.parents:
            return rev
        return None

    # Resolution

    def symbolic_full_name(self, name: str) -> Optional[str]:
        self._record("symbolic_full_name", name)
        suffix = "@{upstream}"
        if name.endswith(suffix):
            upstream = self.upstreams.get(name[:-len(suffix)])
            return upstream if upstream in self.refs else None
        return name if name in self.refs else None

    def symbolic_ref(self, name: str, short: bool = False) -> Optional[str]:
        self._record("symbolic_ref", name)
        target = self.symbolic_refs.get(name)
        if target is None:
            return None
        if short and target.startswith("refs/heads/"):
            return target[len("refs/heads/"):]
        return target

    def ref_exists(self, ref: str) -> bool:
        self._record("ref_exists", ref)
        return ref in self.refs

    def rev_parse(self, *revs: str) -> List[str]:
        self._record("rev_parse", *revs)
        ids = []
        for rev in revs:
            sha = self._resolve(rev)
            if sha is None:
                raise GitBackendError(["rev-parse", *revs], 128,
                                      f"fatal: ambiguous argument '{rev}': unknown revision")
            ids.append(sha)
        return ids

    def is_ancestor(self, a: str, b: str) -> bool:
        self._record("is_ancestor", a, b)
        pending = [b]
        seen = set()
        while pending:
            sha = pending.pop()
            if sha == a:
                return True
            if sha in seen:
                continue
            seen.add(sha)
            pending.extend(self.parents.get(sha, []))
        return False

    # Listing

    def list_remotes(self) -> List[str]:
        self._record("list_remotes")
        return list(self.remotes)

    def get_config_regexp(self, pattern: str) -> List[str]:
        self._record("get_config_regexp", pattern)
        return [f"branch.{branch}.remote {remote}" for branch, remote in self.branch_remotes.items()]

    def list_branches(self) -> List[str]:
        self._record("list_branches")
        return [ref[len("refs/heads/"):] for ref in self.refs if ref.startswith("refs/heads/")]

    # Mutation

    def fetch(self, remote: str) -> None:
        self._record("fetch", remote)
        for ref, label in self.on_fetch.items():
            if label is None:
                self.refs.pop(ref, None)
            else:
                self.set_ref(ref, label)
        self.on_fetch = {}

    def fast_forward_merge(self, ref: str) -> None:
        self._record("fast_forward_merge", ref)
        head = self.symbolic_refs["HEAD"]
        target = self._resolve(ref)
        if target is None or not self.is_ancestor(self.refs[head], target):
            raise GitBackendError(["merge", "--ff-only", ref], 128, "fatal: Not possible to fast-forward, aborting.")
        self.refs[head] = target

    def update_ref(self, full_ref: str, target: str) -> None:
        self._record("update_ref", full_ref, target)
        sha = self._resolve(target)
        if sha is None:
            raise GitBackendError(["update-ref", full_ref, target], 128, f"fatal: {target}: not a valid SHA1")
        self.refs[full_ref] = sha

    def checkout(self, branch: str) -> None:
        self._record("checkout", branch)
        local = f"refs/heads/{branch}"
        if local not in self.refs:
            tracking = [ref for ref in self.refs if ref.startswith("refs/remotes/") and ref.endswith(f"/{branch}")]
            if not tracking:
                raise GitBackendError(["checkout", branch], 1,
                                      f"error: pathspec '{branch}' did not match any file(s) known to git")
            self.refs[local] = self.refs[tracking[0]]
        self.symbolic_refs["HEAD"] = local

    def delete_branch(self, branch: str) -> None:
        self._record("delete_branch", branch)
        if self.head_branch() == branch:
            raise GitBackendError(["branch", "-D", branch], 1,
                                  f"error: Cannot delete branch '{branch}' checked out")
        del self.refs[f"refs/heads/{branch}"]
