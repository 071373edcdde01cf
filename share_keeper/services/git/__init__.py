"""Git-backed sync worker for share-keeper."""

from .sync_worker import GitSyncWorker, format_commit_message

__all__ = [
    "GitSyncWorker",
    "format_commit_message",
]
