"""Run setup: remote and default branch discovery, fetch, branch listings."""

import logging
from typing import Dict, Iterable, List

from ..errors import GitBackendError, SetupError
from .backend import GitBackend

BRANCH_REMOTE_PATTERN = r"branch\..*\.remote"
FALLBACK_DEFAULT_BRANCH = "main"

logger = logging.getLogger('branchsync.git_sync.remote_utils')


def get_main_remote(backend: GitBackend) -> str:
    """The first remote git lists; SetupError when there is none."""
    try:
        remotes = backend.list_remotes()
    except GitBackendError as e:
        raise SetupError(f"Failed to get remotes: {e}", error_code="REMOTE_LIST_FAILED") from e

    if not remotes:
        raise SetupError("No remotes found", error_code="NO_REMOTES")

    logger.debug(f"Main remote is {remotes[0]}")
    return remotes[0]


def get_default_branch(backend: GitBackend, remote: str) -> str:
    """
    Detect the default branch of ``remote`` from ``refs/remotes/<remote>/HEAD``.

    That symbolic ref only exists in cloned repositories; when it is
    missing, "main" is assumed.
    """
    prefix = f"refs/remotes/{remote}/"
    head = backend.symbolic_ref(f"{prefix}HEAD")
    if head is None:
        logger.debug(f"{prefix}HEAD is missing, assuming {FALLBACK_DEFAULT_BRANCH}")
        head = f"{prefix}{FALLBACK_DEFAULT_BRANCH}"

    if not head.startswith(prefix) or head == prefix:
        raise SetupError(f"Failed to get default branch: {head} is not under {prefix}",
                         error_code="DEFAULT_BRANCH_UNKNOWN")

    default_branch = head[len(prefix):]
    logger.debug(f"Default branch of {remote} is {default_branch}")
    return default_branch


def fetch_remote(backend: GitBackend, remote: str) -> None:
    """Fetch ``remote`` with pruning; SetupError on failure."""
    logger.info(f"Fetching from remote {remote}")
    try:
        backend.fetch(remote)
    except GitBackendError as e:
        raise SetupError(f"Failed to fetch {remote}: {e}", error_code="FETCH_FAILED") from e


def parse_branch_remotes(lines: Iterable[str]) -> Dict[str, str]:
    """
    Parse ``branch.<name>.remote <remote>`` config lines into a mapping.

    Branch names may contain dots, so the name is everything between the
    leading ``branch.`` and the trailing ``.remote``.
    """
    mapping: Dict[str, str] = {}
    for line in lines:
        parts = line.strip().split(None, 1)
        if len(parts) != 2:
            continue
        key, remote = parts
        if not (key.startswith("branch.") and key.endswith(".remote")):
            continue
        branch = key[len("branch."):-len(".remote")]
        if branch:
            mapping[branch] = remote.strip()
    return mapping


def read_branch_remotes(backend: GitBackend) -> Dict[str, str]:
    """Branch -> remote mapping from the local git configuration."""
    logger.info("Getting branch -> remote mappings")
    try:
        lines = backend.get_config_regexp(BRANCH_REMOTE_PATTERN)
    except GitBackendError as e:
        raise SetupError(f"Failed to get config: {e}", error_code="CONFIG_READ_FAILED") from e

    mapping = parse_branch_remotes(lines)
    logger.debug(f"Map of branches to remotes: {mapping}")
    return mapping


def list_local_branches(backend: GitBackend) -> List[str]:
    """Short names of the local branches, in git's order."""
    logger.info("Getting local branches")
    try:
        return backend.list_branches()
    except GitBackendError as e:
        raise SetupError(f"Failed to get branches: {e}", error_code="BRANCH_LIST_FAILED") from e
