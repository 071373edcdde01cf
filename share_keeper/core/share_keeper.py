"""Controller that keeps the shared root's repositories in sync"""

import os
import sys
import threading
from pathlib import Path
from threading import RLock
from typing import List, Optional, Tuple, Union

from share_keeper.config import Config
from share_keeper.models.commit import CommitSummary
from share_keeper.models.identity import UserIdentity
from share_keeper.models.status import STATUS_EVENTS, SyncState, WorkerEvent
from share_keeper.services.desktop_service import DesktopIntegration
from share_keeper.services.git.sync_worker import GitSyncWorker
from share_keeper.services.identity_service import IdentityService
from share_keeper.services.key_service import KeyAgent
from share_keeper.services.registry import RepositoryRegistry
from share_keeper.services.size_probe import SizeProbe
from share_keeper.services.status_aggregator import aggregate_status
from share_keeper.services.watcher import DirectoryWatcher
from share_keeper.services.worker_handle import WorkerFactory, WorkerHandle
from share_keeper.utils.signals import Signal
from share_keeper.utils.threading import get_optimal_worker_count
from share_keeper.logging_config import get_logger

logger = get_logger(__name__)


class ShareKeeper:
    """Attaches a worker to every repository in the shared root and reports
    one aggregated state for all of them.

    Inputs are directory watcher events and worker events, both arriving on
    arbitrary threads. The registry is the only shared mutable structure;
    the aggregated state is always recomputed from a fresh snapshot of it.

    Signals (connect callbacks with ``keeper.<signal>.connect(fn)``):
        repository_list_changed()
        folder_size_changed(size: str)
        on_idle(), on_syncing(), on_error()
        on_first_run()
        on_invitation(path: str)
        conflict_notification_raised()
        notification_raised(description: str, repository_path: str)
    """

    def __init__(
        self,
        config: Union[Config, dict],
        worker_factory: Optional[WorkerFactory] = None,
        desktop: Optional[DesktopIntegration] = None,
        key_agent: Optional[KeyAgent] = None,
        size_probe: Optional[SizeProbe] = None,
    ):
        """Initialize the controller. Nothing touches the disk until start().

        Args:
            config: Configuration dict or Config object
            worker_factory: Builds a worker for a repository path; defaults
                to a git worker signing commits with the stored identity
            desktop: Desktop integration hooks
            key_agent: SSH key handling
            size_probe: Folder size measurement
        """
        if isinstance(config, dict):
            self.config = Config.from_dict(config)
        else:
            self.config = config

        self.shared_root = Path(self.config.shared_root)
        self.identity_service = IdentityService(self.config)
        self.desktop = desktop or DesktopIntegration()
        self.key_agent = key_agent or KeyAgent(self.config.keys_path)
        self.size_probe = size_probe or SizeProbe(self.config.excluded_size_dirs)

        self.repository_list_changed = Signal("repository_list_changed")
        self.folder_size_changed = Signal("folder_size_changed")
        self.on_idle = Signal("on_idle")
        self.on_syncing = Signal("on_syncing")
        self.on_error = Signal("on_error")
        self.on_first_run = Signal("on_first_run")
        self.on_invitation = Signal("on_invitation")
        self.conflict_notification_raised = Signal("conflict_notification_raised")
        self.notification_raised = Signal("notification_raised")

        self.registry = RepositoryRegistry(
            worker_factory or self._create_git_worker,
            event_sink=self._on_worker_event,
            vcs_marker=self.config.vcs_marker,
        )
        self.registry.changed.connect(self.repository_list_changed.emit)

        self.watcher = DirectoryWatcher(
            self.shared_root,
            on_repository_created=self.add_repository,
            on_deleted=self.remove_repository,
            on_invitation=self.on_invitation.emit,
            invitation_suffix=self.config.invitation_suffix,
            vcs_marker=self.config.vcs_marker,
            debounce_ms=self.config.watch_debounce_ms,
        )

        self.folder_size = ""
        self._last_state: Optional[SyncState] = None
        self._state_lock = RLock()
        self._populated = threading.Event()
        self._populate_thread: Optional[threading.Thread] = None

    def _create_git_worker(self, path: str) -> GitSyncWorker:
        return GitSyncWorker(path, self.config, self.identity_service.load())

    # Startup

    def start(self, populate_in_background: bool = True) -> None:
        """Run the startup sequence.

        Folders are created before anything watches or reads them, and the
        watcher starts before the initial scan so no folder created during
        the scan is missed.
        """
        logger.info(f"Starting with shared root {self.shared_root}")

        self.desktop.install_launcher()
        self.desktop.enable_autostart()
        if not self.shared_root.is_dir():
            self.shared_root.mkdir(parents=True)
            logger.info(f"Created '{self.shared_root}'")
            self.desktop.add_to_bookmarks(self.shared_root)

        self.create_configuration_folders()
        self.write_pid_file()
        self.folder_size = self.get_folder_size()
        self._check_first_run()

        self.watcher.start()

        if populate_in_background:
            self._populate_thread = threading.Thread(
                target=self.populate_repositories, name="share-keeper-populate", daemon=True
            )
            self._populate_thread.start()
        else:
            self.populate_repositories()

    def create_configuration_folders(self) -> None:
        """Create the tmp and config folders.

        Notifications are switched on only when the config folder is new,
        so a user who turned them off keeps them off.
        """
        self.config.tmp_path.mkdir(parents=True, exist_ok=True)

        config_dir = Path(self.config.config_dir)
        if config_dir.exists():
            return

        config_dir.mkdir(parents=True)
        logger.info(f"Created '{config_dir}'")
        self.config.icons_path.mkdir(parents=True, exist_ok=True)
        logger.info(f"Created '{self.config.icons_path}'")
        self.identity_service.enable_notifications()

    def _check_first_run(self) -> None:
        if not self.identity_service.is_configured():
            logger.info("No identity configured, this is a first run")
            self.on_first_run.emit()
            return

        email = self.user_email
        if email:
            self.key_agent.add_key_in_background(email)

    def populate_repositories(self) -> None:
        """Attach every repository already in the shared root.

        The list-changed signal fires once, after all attaches.
        """
        attached, detached = self.reconcile(notify=False)
        logger.info(f"Populated {len(attached)} repositories ({len(detached)} removed)")
        self._populated.set()
        self.repository_list_changed.emit()

    def wait_until_populated(self, timeout: Optional[float] = None) -> bool:
        return self._populated.wait(timeout)

    def find_repositories(self) -> List[Path]:
        """Immediate sub-folders of the shared root that are repositories, sorted by name."""
        try:
            folders = sorted(p for p in self.shared_root.iterdir() if p.is_dir())
        except OSError as e:
            logger.warning(f"Could not list {self.shared_root}: {e}")
            return []
        return [p for p in folders if self.registry.is_repository(p)]

    def reconcile(self, notify: bool = True) -> Tuple[List[str], List[str]]:
        """Make the registry match the repositories on disk.

        Returns:
            Tuple of (attached names, detached names)
        """
        desired = {p.name: p for p in self.find_repositories()}
        current = self.registry.names()

        detached = [
            name for name in current
            if name not in desired and self.registry.detach(self.shared_root / name, notify=notify)
        ]

        pending = [path for name, path in desired.items() if name not in current]
        if self.config.sequential:
            max_workers = 1
        else:
            max_workers = get_optimal_worker_count(self.config.workers, pending=len(pending))
        attached = self.registry.attach_many(pending, max_workers=max_workers, notify=notify)

        return attached, detached

    # Registry changes from the watcher

    def add_repository(self, path: Union[str, Path]) -> bool:
        return self.registry.attach(path)

    def remove_repository(self, path: Union[str, Path]) -> bool:
        return self.registry.detach(path)

    @property
    def repositories(self) -> List[WorkerHandle]:
        return self.registry.snapshot()

    # State aggregation

    def _on_worker_event(self, handle: WorkerHandle, event: WorkerEvent, payload=None) -> None:
        logger.debug(f"'{handle.name}': {event.value}")

        if event is WorkerEvent.CONFLICT_DETECTED:
            self.conflict_notification_raised.emit()
        elif event is WorkerEvent.NEW_COMMIT:
            if self.notifications_enabled:
                description = payload.description if isinstance(payload, CommitSummary) else str(payload)
                self.notification_raised.emit(description, handle.path)
        elif event in STATUS_EVENTS:
            self.update_state()

    @property
    def state(self) -> SyncState:
        """Current aggregated state, without publishing it."""
        return aggregate_status(self.registry.snapshot())

    def update_state(self) -> SyncState:
        """Recompute the aggregated state and publish it.

        Safe to call from any number of threads at once. Exactly one of
        on_syncing, on_error or on_idle is emitted per call; the folder size
        is only recomputed when the state enters IDLE.

        Snapshot, aggregation and publication happen under one re-entrant
        lock, so states are published in the order they were computed and
        the last one published always matches the last snapshot. Receivers
        may call update_state again from the same thread.
        """
        with self._state_lock:
            state = aggregate_status(self.registry.snapshot())
            entering_idle = state is SyncState.IDLE and self._last_state is not SyncState.IDLE
            self._last_state = state

            if state is SyncState.SYNCING:
                self.on_syncing.emit()
            elif state is SyncState.ERROR:
                self.on_error.emit()
            else:
                self.on_idle.emit()
                if entering_idle:
                    self.folder_size = self.get_folder_size()
                    self.folder_size_changed.emit(self.folder_size)

            return state

    def get_folder_size(self) -> str:
        return self.size_probe.folder_size(self.shared_root)

    # Preferences and identity

    @property
    def notifications_enabled(self) -> bool:
        return self.identity_service.notifications_enabled()

    def toggle_notifications(self) -> bool:
        enabled = self.identity_service.toggle_notifications()
        logger.info(f"Notifications {'enabled' if enabled else 'disabled'}")
        return enabled

    @property
    def identity(self) -> UserIdentity:
        return self.identity_service.load()

    @property
    def user_name(self) -> str:
        return self.identity.name

    @user_name.setter
    def user_name(self, value: str) -> None:
        self.identity_service.set_name(value)

    @property
    def user_email(self) -> str:
        return self.identity.email

    @user_email.setter
    def user_email(self, value: str) -> None:
        self.identity_service.set_email(value)

    def generate_key_pair(self) -> bool:
        email = self.user_email
        if not email:
            logger.warning("Cannot generate a key pair without an email address")
            return False
        return self.key_agent.generate_key_pair(email)

    def open_shared_folder(self) -> bool:
        return self.desktop.open_folder(self.shared_root)

    # Shutdown

    def write_pid_file(self) -> None:
        pid_file = self.config.pid_file
        pid_file.parent.mkdir(parents=True, exist_ok=True)
        pid_file.write_text(str(os.getpid()))

    def remove_pid_file(self) -> None:
        try:
            self.config.pid_file.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove '{self.config.pid_file}': {e}")

    def shutdown(self) -> None:
        """Stop watching, dispose all workers and remove the pid file.

        In-flight sync operations are abandoned, not awaited.
        """
        self.watcher.stop()
        disposed = self.registry.dispose_all()
        logger.info(f"Disposed {disposed} workers")
        self.remove_pid_file()

    def quit(self) -> None:
        """Shut down and exit the process."""
        self.shutdown()
        sys.exit(0)
