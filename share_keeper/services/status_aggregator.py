"""Reduction of worker states into one aggregated state"""

from typing import Iterable

from share_keeper.models.status import SyncState
from share_keeper.services.worker_handle import WorkerHandle


def aggregate_status(handles: Iterable[WorkerHandle]) -> SyncState:
    """Collapse worker states, first match wins.

    Any handle syncing or buffering makes the result SYNCING. Otherwise any
    handle with unsynced changes makes it ERROR; changes that should have
    been pushed by now are reported as a failure, not as pending work.
    Only when neither applies is the result IDLE.
    """
    handles = list(handles)

    if any(h.is_syncing or h.is_buffering for h in handles):
        return SyncState.SYNCING

    if any(h.has_unsynced_changes for h in handles):
        return SyncState.ERROR

    return SyncState.IDLE
