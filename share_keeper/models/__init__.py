"""Data models for share-keeper."""

from .status import SyncState, WorkerEvent, WatchEventKind, STATUS_EVENTS
from .commit import CommitSummary
from .identity import UserIdentity

__all__ = [
    "SyncState",
    "WorkerEvent",
    "WatchEventKind",
    "STATUS_EVENTS",
    "CommitSummary",
    "UserIdentity",
]
