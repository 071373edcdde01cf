"""Pytest fixtures for share-keeper tests"""
import tempfile
import threading
from pathlib import Path
from unittest.mock import Mock

import git
import pytest

from share_keeper.config import Config
from share_keeper.core.share_keeper import ShareKeeper
from share_keeper.models.status import WorkerEvent
from share_keeper.services.desktop_service import DesktopIntegration
from share_keeper.services.key_service import KeyAgent
from share_keeper.utils.signals import Signal


class FakeWorker:
    """In-memory worker whose flags and events are driven by the test."""

    def __init__(self, path):
        self.path = str(path)
        self.name = Path(path).name
        self.events = Signal(f"{self.name}.fake")
        self.is_syncing = False
        self.is_buffering = False
        self.has_unsynced_changes = False
        self.started = False
        self.dispose_count = 0

    def start(self):
        self.started = True

    def dispose(self):
        self.dispose_count += 1

    @property
    def disposed(self):
        return self.dispose_count > 0

    def emit(self, event: WorkerEvent, payload=None):
        self.events.emit(event, payload)


class FakeWorkerFactory:
    """Records every worker it builds, including ones later discarded."""

    def __init__(self):
        self.created = []
        self._lock = threading.Lock()

    def __call__(self, path):
        worker = FakeWorker(path)
        with self._lock:
            self.created.append(worker)
        return worker

    def latest(self, name):
        return [w for w in self.created if w.name == name][-1]


def make_repository_folder(root: Path, name: str) -> Path:
    """Create a folder that looks like a working copy (has a .git folder)."""
    folder = root / name
    (folder / ".git").mkdir(parents=True)
    return folder


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def shared_root(temp_dir):
    root = temp_dir / "ShareKeeper"
    root.mkdir()
    return root


@pytest.fixture
def config(temp_dir, shared_root):
    """Configuration pointing at temporary folders."""
    return Config(
        shared_root=str(shared_root),
        config_dir=str(temp_dir / "config"),
        poll_interval=0.05,
        fetch_interval=0.05,
        watch_debounce_ms=50,
    )


@pytest.fixture
def worker_factory():
    return FakeWorkerFactory()


@pytest.fixture
def mock_desktop():
    return Mock(spec=DesktopIntegration)


@pytest.fixture
def mock_key_agent():
    return Mock(spec=KeyAgent)


@pytest.fixture
def keeper(config, worker_factory, mock_desktop, mock_key_agent):
    """ShareKeeper with fake workers and mocked desktop/ssh collaborators."""
    keeper = ShareKeeper(
        config,
        worker_factory=worker_factory,
        desktop=mock_desktop,
        key_agent=mock_key_agent,
    )
    yield keeper
    keeper.shutdown()


@pytest.fixture
def signal_log():
    """Connect to keeper signals and record what was emitted, in order."""

    class SignalLog:
        def __init__(self):
            self.events = []
            self._lock = threading.Lock()

        def record(self, name):
            def callback(*args):
                with self._lock:
                    self.events.append((name, args))
            return callback

        def attach(self, keeper):
            for name in (
                "repository_list_changed",
                "folder_size_changed",
                "on_idle",
                "on_syncing",
                "on_error",
                "on_first_run",
                "on_invitation",
                "conflict_notification_raised",
                "notification_raised",
            ):
                getattr(keeper, name).connect(self.record(name))
            return self

        def count(self, name):
            with self._lock:
                return sum(1 for n, _ in self.events if n == name)

        def args(self, name):
            with self._lock:
                return [a for n, a in self.events if n == name]

        def names(self):
            with self._lock:
                return [n for n, _ in self.events]

    return SignalLog()


def _configure_user(repo):
    with repo.config_writer() as writer:
        writer.set_value("user", "name", "Test User")
        writer.set_value("user", "email", "test@example.com")


@pytest.fixture
def bare_remote(temp_dir):
    """A bare repository acting as the shared remote."""
    remote_path = temp_dir / "remote.git"
    repo = git.Repo.init(remote_path, bare=True)
    yield repo
    repo.close()


@pytest.fixture
def git_repo(shared_root, bare_remote):
    """A working copy inside the shared root, pushed to the bare remote."""
    repo_path = shared_root / "notes"
    repo_path.mkdir()

    repo = git.Repo.init(repo_path)
    _configure_user(repo)

    (repo_path / "README.md").write_text("# Notes\n")
    repo.index.add(["README.md"])
    repo.index.commit("Initial commit")
    repo.git.branch("-M", "main")

    repo.create_remote("origin", bare_remote.working_dir)
    repo.git.push("-u", "origin", "main")

    yield repo

    repo.close()


@pytest.fixture
def second_clone(temp_dir, bare_remote, git_repo):
    """Another working copy of the same remote, used to create incoming commits."""
    clone = git.Repo.clone_from(bare_remote.working_dir, temp_dir / "other-clone", branch="main")
    _configure_user(clone)
    yield clone
    clone.close()
