"""Wrapper around one folder's sync worker"""

from pathlib import Path
from threading import Lock
from typing import Any, Callable, Optional, Protocol, runtime_checkable

from share_keeper.models.status import WorkerEvent
from share_keeper.utils.signals import Signal
from share_keeper.logging_config import get_logger

logger = get_logger(__name__)


@runtime_checkable
class Worker(Protocol):
    """What the core needs from a per-folder sync engine.

    ``events`` emits ``(WorkerEvent, payload)``; the payload is a
    ``CommitSummary`` for ``NEW_COMMIT`` and ``None`` otherwise.
    """

    name: str
    path: str
    events: Signal

    @property
    def is_syncing(self) -> bool: ...

    @property
    def is_buffering(self) -> bool: ...

    @property
    def has_unsynced_changes(self) -> bool: ...

    def start(self) -> None: ...

    def dispose(self) -> None: ...


WorkerFactory = Callable[[str], Worker]


class WorkerHandle:
    """A worker attached to the registry.

    Re-emits the worker's events as ``(handle, event, payload)`` on its own
    ``events`` signal until disposed.
    """

    def __init__(self, path: str, worker: Worker):
        self.path = str(path)
        self.name = Path(path).name
        self.worker = worker
        self.events = Signal(f"{self.name}.events")
        self._disposed = False
        self._lock = Lock()
        worker.events.connect(self._forward)

    @property
    def is_syncing(self) -> bool:
        return bool(self.worker.is_syncing)

    @property
    def is_buffering(self) -> bool:
        return bool(self.worker.is_buffering)

    @property
    def has_unsynced_changes(self) -> bool:
        return bool(self.worker.has_unsynced_changes)

    @property
    def disposed(self) -> bool:
        return self._disposed

    def _forward(self, event: WorkerEvent, payload: Optional[Any] = None) -> None:
        if self._disposed:
            logger.debug(f"Dropping {event.value} from disposed worker '{self.name}'")
            return
        self.events.emit(self, event, payload)

    def start(self) -> None:
        """Start the worker, unless the handle was already disposed."""
        if self._disposed:
            logger.debug(f"Not starting disposed worker for '{self.name}'")
            return
        self.worker.start()

    def dispose(self) -> None:
        """Stop forwarding events and dispose the worker. Safe to call twice."""
        with self._lock:
            if self._disposed:
                return
            self._disposed = True

        self.worker.events.disconnect(self._forward)
        self.events.disconnect_all()
        self.worker.dispose()
        logger.debug(f"Disposed worker for '{self.name}'")

    def __repr__(self) -> str:
        return (
            f"WorkerHandle({self.name!r}, syncing={self.is_syncing}, "
            f"buffering={self.is_buffering}, unsynced={self.has_unsynced_changes})"
        )
