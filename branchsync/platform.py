"""Platform helpers: path normalization and git availability."""

import platform
import shutil
import subprocess
from pathlib import Path
from typing import Optional, Union


def is_windows() -> bool:
    return platform.system().lower() == "windows"


def normalize_path(path: Union[str, Path]) -> Path:
    """Expand ``~`` and resolve a path."""
    return Path(path).expanduser().resolve()


def get_git_executable() -> str:
    """
    Get the Git executable name for the current platform.

    Returns:
        Git executable name
    """
    if is_windows():
        return "git.exe"
    return "git"


def validate_git_availability() -> tuple[bool, Optional[str]]:
    """
    Validate that Git is available on the current platform.

    Returns:
        Tuple of (is_available, error_message)
    """
    git_cmd = get_git_executable()

    if shutil.which(git_cmd) is None:
        return False, f"Git executable '{git_cmd}' not found"

    try:
        result = subprocess.run(
            [git_cmd, "--version"],
            capture_output=True,
            text=True,
            timeout=10
        )
    except subprocess.TimeoutExpired:
        return False, "Git command timed out"
    except OSError as e:
        return False, f"Error checking Git availability: {e}"

    if result.returncode == 0:
        return True, None
    return False, f"Git command failed: {result.stderr}"
