"""Configuration management for branchsync."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .platform import normalize_path

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@dataclass
class Config:
    """Configuration for a reconciliation run with validation and defaults."""

    # Repository
    repo_dir: Path = field(default_factory=Path.cwd)

    # Remote selection; None means detect from the repository
    remote: Optional[str] = None
    default_branch: Optional[str] = None

    # Run `git fetch --prune` before reconciling
    fetch: bool = True

    # Logging
    log_level: str = "WARNING"

    def __post_init__(self):
        """Validate configuration after initialization."""
        if isinstance(self.repo_dir, str):
            self.repo_dir = Path(self.repo_dir)
        self.repo_dir = normalize_path(self.repo_dir)

        self.log_level = self.log_level.upper()
        if self.log_level not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.log_level}. Must be one of {VALID_LOG_LEVELS}")

        # Empty strings from the environment mean "detect"
        if self.remote is not None:
            self.remote = self.remote.strip() or None
        if self.default_branch is not None:
            self.default_branch = self.default_branch.strip() or None

        if self.remote and any(ch.isspace() for ch in self.remote):
            raise ValueError(f"Invalid remote name: {self.remote!r}")


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"Invalid boolean value: {value!r}")


def load_configuration() -> Config:
    """Load configuration from environment variables (and a .env file if present)."""
    load_dotenv()

    try:
        return Config(
            repo_dir=Path(os.getenv("BRANCHSYNC_REPO_DIR", os.getcwd())),
            remote=os.getenv("BRANCHSYNC_REMOTE"),
            default_branch=os.getenv("BRANCHSYNC_DEFAULT_BRANCH"),
            fetch=_parse_bool(os.getenv("BRANCHSYNC_FETCH", "true")),
            log_level=os.getenv("BRANCHSYNC_LOG_LEVEL", "WARNING"),
        )
    except (ValueError, TypeError) as e:
        raise ValueError(f"Configuration error: {e}")
