"""Sync state and event enums"""
from enum import Enum


class SyncState(Enum):
    """Aggregated state of all attached repositories."""
    IDLE = "idle"
    SYNCING = "syncing"
    ERROR = "error"


class WorkerEvent(Enum):
    """Lifecycle events emitted by a sync worker."""
    FETCH_STARTED = "fetch-started"
    FETCH_FINISHED = "fetch-finished"
    FETCH_FAILED = "fetch-failed"
    LOCAL_CHANGE_DETECTED = "local-change-detected"
    PUSH_STARTED = "push-started"
    PUSH_FINISHED = "push-finished"
    PUSH_FAILED = "push-failed"
    COMMIT_ENDED_UP_EMPTY = "commit-ended-up-empty"
    CONFLICT_DETECTED = "conflict-detected"
    NEW_COMMIT = "new-commit"  # payload: CommitSummary


# Events after which the aggregated state has to be recomputed
STATUS_EVENTS = frozenset({
    WorkerEvent.FETCH_STARTED,
    WorkerEvent.FETCH_FINISHED,
    WorkerEvent.FETCH_FAILED,
    WorkerEvent.LOCAL_CHANGE_DETECTED,
    WorkerEvent.PUSH_STARTED,
    WorkerEvent.PUSH_FINISHED,
    WorkerEvent.PUSH_FAILED,
    WorkerEvent.COMMIT_ENDED_UP_EMPTY,
})


class WatchEventKind(Enum):
    """How a new entry in the shared root is treated."""
    INVITATION = "invitation"
    REPOSITORY = "repository"
    IGNORED = "ignored"
