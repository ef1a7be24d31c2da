"""Error handling framework for branchsync."""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, Any, Optional, Sequence


class ErrorCategory(Enum):
    """Categories of errors for structured error handling."""
    SETUP = "setup"            # Fatal, nothing has been touched yet
    RESOLUTION = "resolution"  # A ref or ancestry query failed for one branch
    ACTION = "action"          # A mutating git command failed for one branch


class BranchSyncError(Exception):
    """Base class for every error raised by branchsync."""

    category = ErrorCategory.ACTION
    error_code = "BRANCHSYNC_ERROR"

    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message)
        if error_code:
            self.error_code = error_code


class SetupError(BranchSyncError):
    """Remote, default branch or current branch could not be determined."""

    category = ErrorCategory.SETUP
    error_code = "SETUP_FAILED"


class ResolutionError(BranchSyncError):
    """A ref did not resolve to a commit."""

    category = ErrorCategory.RESOLUTION
    error_code = "REF_NOT_RESOLVED"


class ActionError(BranchSyncError):
    """A mutating operation (merge, update-ref, checkout, delete) failed."""

    category = ErrorCategory.ACTION
    error_code = "ACTION_FAILED"


class GitBackendError(Exception):
    """A git command exited with a failure status."""

    def __init__(self, args: Sequence[str], status: Optional[int] = None, stderr: str = ""):
        self.command = ["git", *args]
        self.status = status
        self.stderr = stderr.strip()
        detail = self.stderr or f"exit status {status}"
        super().__init__(f"{' '.join(self.command)} failed: {detail}")


@dataclass
class ErrorReport:
    """Structured description of a failure while processing one branch."""
    branch: str
    error_code: str
    message: str
    category: str
    timestamp: str
    context: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert the report to dictionary format."""
        result = {
            "branch": self.branch,
            "error_code": self.error_code,
            "message": self.message,
            "category": self.category,
            "timestamp": self.timestamp,
        }
        if self.context:
            result["context"] = self.context
        return result


class ErrorHandler:
    """Turns exceptions raised while reconciling a branch into reports."""

    def __init__(self):
        self.logger = logging.getLogger('branchsync.error_handler')

    def handle_branch_error(self, error: Exception, branch: str, context: Dict[str, Any] = None) -> ErrorReport:
        """Classify a per-branch failure, log it and return its report."""
        context = context or {}

        if isinstance(error, BranchSyncError):
            error_code = error.error_code
            category = error.category
            message = str(error)
        elif isinstance(error, GitBackendError):
            error_code = "GIT_COMMAND_FAILED"
            category = ErrorCategory.ACTION
            message = str(error)
        elif isinstance(error, PermissionError):
            error_code = "PERMISSION_DENIED"
            category = ErrorCategory.ACTION
            message = f"Permission denied: {error}"
        else:
            error_code = "UNEXPECTED_ERROR"
            category = ErrorCategory.ACTION
            message = f"Unexpected error: {error}"

        report = ErrorReport(
            branch=branch,
            error_code=error_code,
            message=message,
            category=category.value,
            timestamp=datetime.now().isoformat(),
            context=context
        )

        if error_code == "UNEXPECTED_ERROR":
            self.logger.error(f"Branch {branch} failed: {message}", exc_info=error)
        else:
            self.logger.warning(
                f"Branch {branch} failed: {message}",
                extra={
                    'operation': 'branch_error',
                    'error_code': error_code,
                    'branch': branch
                }
            )

        return report


# Initialize global error handler
error_handler = ErrorHandler()
