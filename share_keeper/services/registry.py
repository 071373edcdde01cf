"""Registry of attached repositories"""

from pathlib import Path
from concurrent.futures import ThreadPoolExecutor
from threading import Lock
from typing import Callable, Dict, Iterable, List, Optional, Union

from share_keeper.constants import VCS_MARKER
from share_keeper.services.worker_handle import WorkerFactory, WorkerHandle
from share_keeper.utils.signals import Signal
from share_keeper.logging_config import get_logger

logger = get_logger(__name__)

EventSink = Callable[..., None]


class RepositoryRegistry:
    """Worker handles keyed by folder name, in the order they were attached.

    Insertions and removals hold the lock only while touching the mapping.
    Building a worker and disposing one happen outside it, so a slow
    repository never blocks ``snapshot()`` callers on other threads.
    """

    def __init__(
        self,
        worker_factory: WorkerFactory,
        event_sink: Optional[EventSink] = None,
        vcs_marker: str = VCS_MARKER,
    ):
        """Initialize the registry.

        Args:
            worker_factory: Builds a worker for a folder path
            event_sink: Connected to every handle's events, called as
                ``sink(handle, event, payload)``
            vcs_marker: Folder that marks a directory as a repository
        """
        self.worker_factory = worker_factory
        self.event_sink = event_sink
        self.vcs_marker = vcs_marker
        self.changed = Signal("repository_list_changed")
        self._handles: Dict[str, WorkerHandle] = {}
        self._lock = Lock()

    def is_repository(self, path: Union[str, Path]) -> bool:
        """Check if a folder contains the version-control marker."""
        return (Path(path) / self.vcs_marker).is_dir()

    def _build(self, path: Path) -> Optional[WorkerHandle]:
        """Create a handle for a repository folder, without inserting it."""
        name = path.name

        if not self.is_repository(path):
            logger.debug(f"Skipping '{name}': no {self.vcs_marker} folder")
            return None

        if name in self:
            logger.debug(f"Skipping '{name}': already attached")
            return None

        try:
            worker = self.worker_factory(str(path))
        except Exception as e:
            logger.warning(f"Could not create worker for '{name}': {e}")
            return None

        handle = WorkerHandle(str(path), worker)
        if self.event_sink is not None:
            handle.events.connect(self.event_sink)
        return handle

    def _insert(self, handle: WorkerHandle, notify: bool) -> bool:
        name = handle.name

        with self._lock:
            inserted = name not in self._handles
            if inserted:
                self._handles[name] = handle

        if not inserted:
            # Another thread attached the same folder while we built ours
            logger.debug(f"Lost attach race for '{name}', disposing duplicate")
            self._dispose(handle)
            return False

        try:
            handle.start()
        except Exception as e:
            logger.warning(f"Worker for '{name}' failed to start: {e}")
            with self._lock:
                if self._handles.get(name) is handle:
                    del self._handles[name]
            self._dispose(handle)
            return False

        with self._lock:
            still_attached = self._handles.get(name) is handle
        if not still_attached:
            # Detached while starting; detach already disposed it
            logger.debug(f"'{name}' was detached while attaching")
            return False

        logger.info(f"Attached '{name}'")
        if notify:
            self.changed.emit()
        return True

    def attach(self, path: Union[str, Path], notify: bool = True) -> bool:
        """Attach a worker to a repository folder.

        Returns:
            True if a handle was added, False if the folder is not a
            repository, is already attached, its worker failed to start,
            or it was detached again before attaching finished
        """
        handle = self._build(Path(path))
        return handle is not None and self._insert(handle, notify)

    def attach_many(
        self,
        paths: Iterable[Union[str, Path]],
        max_workers: int = 1,
        notify: bool = True,
    ) -> List[str]:
        """Attach several folders, building their workers in parallel.

        Handles are inserted in the order of ``paths`` whatever order the
        workers finish building in.

        Returns:
            Names of the folders that were attached
        """
        paths = [Path(p) for p in paths]
        if max_workers <= 1 or len(paths) <= 1:
            handles = [self._build(p) for p in paths]
        else:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                handles = list(executor.map(self._build, paths))

        return [h.name for h in handles if h is not None and self._insert(h, notify)]

    def detach(self, path: Union[str, Path], notify: bool = True) -> bool:
        """Remove a folder's handle, then dispose its worker.

        Returns:
            True if a handle was found
        """
        name = Path(path).name

        with self._lock:
            handle = self._handles.pop(name, None)

        if handle is None:
            return False

        self._dispose(handle)
        logger.info(f"Detached '{name}'")
        if notify:
            self.changed.emit()
        return True

    def snapshot(self) -> List[WorkerHandle]:
        """Point-in-time copy of the attached handles."""
        with self._lock:
            return list(self._handles.values())

    def names(self) -> List[str]:
        with self._lock:
            return list(self._handles)

    def get(self, name: str) -> Optional[WorkerHandle]:
        with self._lock:
            return self._handles.get(name)

    def dispose_all(self) -> int:
        """Detach every handle without notifying. Returns how many were removed."""
        with self._lock:
            handles = list(self._handles.values())
            self._handles.clear()

        for handle in handles:
            self._dispose(handle)
        return len(handles)

    def _dispose(self, handle: WorkerHandle) -> None:
        try:
            handle.dispose()
        except Exception as e:
            logger.warning(f"Failed to dispose worker for '{handle.name}': {e}")

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._handles

    def __len__(self) -> int:
        with self._lock:
            return len(self._handles)
