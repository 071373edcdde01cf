"""Watches the shared root for repositories and invitations"""

import threading
from pathlib import Path
from typing import Callable, Iterable, Optional, Tuple, Union

from watchfiles import Change, watch

from share_keeper.constants import INVITATION_SUFFIX, VCS_MARKER
from share_keeper.models.status import WatchEventKind
from share_keeper.logging_config import get_logger

logger = get_logger(__name__)

PathCallback = Callable[[str], object]


class DirectoryWatcher:
    """Classifies entries created in or deleted from the shared root.

    Only the root itself is watched. What happens inside a repository is
    the worker's business.
    """

    def __init__(
        self,
        root: Union[str, Path],
        on_repository_created: PathCallback,
        on_deleted: PathCallback,
        on_invitation: PathCallback,
        invitation_suffix: str = INVITATION_SUFFIX,
        vcs_marker: str = VCS_MARKER,
        debounce_ms: int = 1600,
    ):
        self.root = Path(root)
        self.on_repository_created = on_repository_created
        self.on_deleted = on_deleted
        self.on_invitation = on_invitation
        self.invitation_suffix = invitation_suffix
        self.vcs_marker = vcs_marker
        self.debounce_ms = debounce_ms
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def classify(self, path: Union[str, Path]) -> WatchEventKind:
        """Decide what a newly created entry is."""
        path = Path(path)
        if path.name.endswith(self.invitation_suffix):
            return WatchEventKind.INVITATION
        if (path / self.vcs_marker).is_dir():
            return WatchEventKind.REPOSITORY
        return WatchEventKind.IGNORED

    def handle_created(self, path: Union[str, Path]) -> WatchEventKind:
        kind = self.classify(path)
        logger.debug(f"Created '{path}' classified as {kind.value}")

        if kind is WatchEventKind.INVITATION:
            self.on_invitation(str(path))
        elif kind is WatchEventKind.REPOSITORY:
            self.on_repository_created(str(path))
        return kind

    def handle_deleted(self, path: Union[str, Path]) -> None:
        logger.debug(f"Deleted '{path}'")
        self.on_deleted(str(path))

    def handle_changes(self, changes: Iterable[Tuple[Change, str]]) -> None:
        """Apply one batch of filesystem changes.

        Deletions go first so a folder removed and recreated within the
        same batch ends up attached exactly once.
        """
        changes = list(changes)
        for change, path in changes:
            if change == Change.deleted:
                self.handle_deleted(path)
        for change, path in changes:
            if change == Change.added:
                self.handle_created(path)

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start watching on a daemon thread. The root must exist."""
        if self.is_running:
            return
        if not self.root.is_dir():
            raise FileNotFoundError(f"Shared root does not exist: {self.root}")

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run, name="share-keeper-watcher", daemon=True
        )
        self._thread.start()
        logger.info(f"Watching {self.root}")

    def stop(self, timeout: float = 2.0) -> None:
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        self._thread = None

    def _run(self) -> None:
        try:
            for changes in watch(
                self.root,
                watch_filter=None,
                debounce=self.debounce_ms,
                stop_event=self._stop_event,
                recursive=False,
                raise_interrupt=False,
            ):
                self.handle_changes(changes)
        except Exception:
            logger.exception(f"Watcher for {self.root} stopped unexpectedly")
