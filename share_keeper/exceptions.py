"""Custom exceptions for share-keeper"""

from typing import Optional


class ShareKeeperError(Exception):
    """Base exception for all share-keeper errors."""
    pass


class ConfigurationError(ShareKeeperError, ValueError):
    """Exception raised for invalid configuration values."""
    pass


class WorkerError(ShareKeeperError):
    """Exception raised when a sync worker operation fails."""

    def __init__(self, operation: str, repository: Optional[str] = None, message: Optional[str] = None):
        self.operation = operation
        self.repository = repository
        self.message = message

        error_msg = f"Worker operation '{operation}' failed"
        if repository:
            error_msg += f" for repository '{repository}'"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)
