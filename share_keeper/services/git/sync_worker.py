"""Git-backed sync worker for one repository folder"""

import threading
import time
from pathlib import Path
from threading import Lock
from typing import List, Optional, Union, TYPE_CHECKING

import git

from share_keeper.exceptions import WorkerError
from share_keeper.models.commit import CommitSummary
from share_keeper.models.identity import UserIdentity
from share_keeper.models.status import WorkerEvent
from share_keeper.utils.signals import Signal
from share_keeper.logging_config import get_logger

if TYPE_CHECKING:
    from share_keeper.config import Config

logger = get_logger(__name__)

# Commit message lines, keyed by the first letter of `git diff --name-status`
CHANGE_SYMBOLS = {
    "A": "+",
    "M": "/",
    "D": "-",
    "R": ">",
    "C": "+",
    "T": "/",
}
MAX_MESSAGE_LINES = 20

PUSH_ERROR_FLAGS = (
    git.PushInfo.ERROR
    | git.PushInfo.REJECTED
    | git.PushInfo.REMOTE_REJECTED
    | git.PushInfo.REMOTE_FAILURE
)


def format_commit_message(name_status: str) -> str:
    """
    Build a commit message from `git diff --cached --name-status` output.

    Example:
        "A\\tnotes.txt\\nM\\ttodo.md" -> "+ 'notes.txt'\\n/ 'todo.md'"
    """
    lines = []
    entries = [line for line in name_status.splitlines() if line.strip()]

    for entry in entries[:MAX_MESSAGE_LINES]:
        parts = entry.split("\t")
        symbol = CHANGE_SYMBOLS.get(parts[0][:1], "/")
        if len(parts) >= 3:
            lines.append(f"{symbol} '{parts[1]}' -> '{parts[2]}'")
        else:
            lines.append(f"{symbol} '{parts[-1]}'")

    if len(entries) > MAX_MESSAGE_LINES:
        lines.append(f"...and {len(entries) - MAX_MESSAGE_LINES} more")

    return "\n".join(lines)


def summarize_commit(commit: git.Commit) -> CommitSummary:
    return CommitSummary(
        sha=commit.hexsha,
        author_name=commit.author.name or "",
        author_email=commit.author.email or "",
        message=commit.message,
        timestamp=commit.committed_datetime,
    )


class GitSyncWorker:
    """Polls a working copy, commits local changes, fetches and pushes.

    Runs on its own daemon thread once started. Only one git operation runs
    at a time per worker. Flags are updated before the matching event is
    emitted, so a listener always reads the state the event describes.
    """

    def __init__(
        self,
        path: Union[str, Path],
        config: "Config",
        identity: Optional[UserIdentity] = None,
    ):
        """Initialize the worker.

        Args:
            path: Path to the working copy
            config: Configuration with remote name and intervals
            identity: Author for local commits; git's own config is used if unset

        Raises:
            WorkerError: if path is not a working copy git can open
        """
        self.path = str(path)
        self.name = Path(path).name
        self.config = config
        self.identity = identity
        self.remote_name = config.get("remote_name", "origin")
        self.poll_interval = config.get("poll_interval", 5.0)
        self.fetch_interval = config.get("fetch_interval", 60.0)
        self.events = Signal(f"{self.name}.worker")

        self._syncing = False
        self._buffering = False
        self._unsynced = False
        self._last_fetch: Optional[float] = None
        self._operation_lock = Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

        try:
            self._get_repo().close()
        except (git.InvalidGitRepositoryError, git.NoSuchPathError) as e:
            raise WorkerError("open", self.name, str(e)) from e

    @property
    def is_syncing(self) -> bool:
        return self._syncing

    @property
    def is_buffering(self) -> bool:
        return self._buffering

    @property
    def has_unsynced_changes(self) -> bool:
        return self._unsynced

    @property
    def disposed(self) -> bool:
        return self._stop_event.is_set()

    def _get_repo(self) -> git.Repo:
        """Get a fresh git.Repo instance; repos are not shared across threads."""
        return git.Repo(self.path)

    def _emit(self, event: WorkerEvent, payload=None) -> None:
        if not self.disposed:
            self.events.emit(event, payload)

    def _has_remote(self, repo: git.Repo) -> bool:
        return self.remote_name in [remote.name for remote in repo.remotes]

    def _tracking_ref(self, repo: git.Repo) -> Optional[str]:
        """Name of the remote branch HEAD follows, e.g. 'origin/main'."""
        try:
            branch = repo.active_branch
        except TypeError:
            logger.debug(f"'{self.name}' is in detached HEAD state")
            return None

        tracking = branch.tracking_branch()
        if tracking is not None and tracking.is_valid():
            return tracking.name

        candidate = f"{self.remote_name}/{branch.name}"
        if candidate in [ref.name for ref in repo.remote(self.remote_name).refs]:
            return candidate
        return None

    def start(self) -> None:
        if self._thread is not None or self.disposed:
            return
        self._thread = threading.Thread(
            target=self._run, name=f"share-keeper-{self.name}", daemon=True
        )
        self._thread.start()

    def dispose(self) -> None:
        """Stop polling. An operation in flight is not waited for."""
        self._stop_event.set()

    def _run(self) -> None:
        logger.debug(f"Worker for '{self.name}' started")
        while not self._stop_event.is_set():
            try:
                self.sync_once()
            except Exception:
                logger.exception(f"Sync cycle for '{self.name}' failed")
            self._stop_event.wait(self.poll_interval)
        logger.debug(f"Worker for '{self.name}' stopped")

    def sync_once(self) -> None:
        """One polling cycle: fetch when due, then handle local changes."""
        with self._operation_lock:
            now = time.monotonic()
            if self._last_fetch is None or now - self._last_fetch >= self.fetch_interval:
                self._last_fetch = now
                self.fetch_remote_changes()
            self.sync_local_changes()

    def sync_local_changes(self) -> bool:
        """Commit local changes and push them.

        A commit that git rejects is reported as PUSH_FAILED, since the
        changes stay unsynced either way.

        Returns:
            True if a commit was made
        """
        repo = self._get_repo()
        try:
            if not repo.is_dirty(untracked_files=True):
                if self._unsynced and self._has_remote(repo):
                    self.push_changes(repo)
                return False

            self._buffering = True
            self._emit(WorkerEvent.LOCAL_CHANGE_DETECTED)
            try:
                committed = self._commit(repo)
            except git.GitCommandError as e:
                logger.warning(f"Commit in '{self.name}' failed: {e}")
                self._buffering = False
                self._unsynced = True
                self._emit(WorkerEvent.PUSH_FAILED)
                return False
            self._buffering = False

            if not committed:
                self._emit(WorkerEvent.COMMIT_ENDED_UP_EMPTY)
                return False

            if self._has_remote(repo):
                self.push_changes(repo)
            else:
                # Nowhere to push; the local commit is all the syncing there is
                self._emit(WorkerEvent.PUSH_FINISHED)
            return True
        finally:
            repo.close()

    def _commit(self, repo: git.Repo) -> bool:
        repo.git.add(A=True)
        name_status = repo.git.diff("--cached", "--name-status")
        if not name_status.strip():
            logger.debug(f"Nothing to commit in '{self.name}'")
            return False

        message = format_commit_message(name_status)
        kwargs = {}
        if self.identity is not None and self.identity.name and self.identity.email:
            actor = git.Actor(self.identity.name, self.identity.email)
            kwargs = {"author": actor, "committer": actor}

        commit = repo.index.commit(message, **kwargs)
        logger.info(f"Committed {commit.hexsha[:8]} in '{self.name}'")
        return True

    def push_changes(self, repo: Optional[git.Repo] = None) -> bool:
        """Push the current branch to the remote.

        Returns:
            True if the push was accepted
        """
        owned = repo is None
        repo = repo or self._get_repo()

        self._syncing = True
        self._emit(WorkerEvent.PUSH_STARTED)
        pushed = False
        try:
            branch = repo.active_branch.name
            infos = repo.remote(self.remote_name).push(refspec=f"{branch}:{branch}")
            failed = [info for info in infos if info.flags & PUSH_ERROR_FLAGS]
            pushed = bool(infos) and not failed
            for info in failed:
                logger.warning(f"Push of '{self.name}' rejected: {info.summary.strip()}")
        except (git.GitCommandError, TypeError, ValueError) as e:
            logger.warning(f"Push of '{self.name}' failed: {e}")
        finally:
            self._syncing = False
            if owned:
                repo.close()

        self._unsynced = not pushed
        self._emit(WorkerEvent.PUSH_FINISHED if pushed else WorkerEvent.PUSH_FAILED)
        return pushed

    def fetch_remote_changes(self) -> List[CommitSummary]:
        """Fetch and rebase onto the remote branch.

        Emits NEW_COMMIT for each incoming commit, oldest first. If the
        rebase conflicts it is aborted and CONFLICT_DETECTED is emitted.

        Returns:
            The incoming commits that were applied
        """
        repo = self._get_repo()
        try:
            if not self._has_remote(repo):
                return []

            self._syncing = True
            self._emit(WorkerEvent.FETCH_STARTED)

            incoming: List[CommitSummary] = []
            conflict = False
            ahead = False
            try:
                repo.remote(self.remote_name).fetch()
                tracking = self._tracking_ref(repo)
                if tracking is not None and repo.head.is_valid():
                    commits = list(repo.iter_commits(f"HEAD..{tracking}"))
                    incoming = [summarize_commit(c) for c in reversed(commits)]
                    if commits:
                        conflict = not self._rebase(repo, tracking)
                    ahead = any(True for _ in repo.iter_commits(f"{tracking}..HEAD"))
                elif tracking is None and repo.head.is_valid() and not repo.head.is_detached:
                    # Branch was never pushed
                    ahead = True
            except (git.GitCommandError, ValueError) as e:
                logger.warning(f"Fetch of '{self.name}' failed: {e}")
                self._syncing = False
                self._emit(WorkerEvent.FETCH_FAILED)
                return []

            self._syncing = False
            if conflict:
                self._unsynced = True
                self._emit(WorkerEvent.CONFLICT_DETECTED)
                self._emit(WorkerEvent.FETCH_FINISHED)
                return []

            for summary in incoming:
                self._emit(WorkerEvent.NEW_COMMIT, summary)
            self._emit(WorkerEvent.FETCH_FINISHED)

            if ahead:
                self.push_changes(repo)
            return incoming
        finally:
            repo.close()

    def _rebase(self, repo: git.Repo, tracking: str) -> bool:
        try:
            repo.git.rebase("--autostash", tracking)
            return True
        except git.GitCommandError as e:
            logger.warning(f"Rebase of '{self.name}' onto {tracking} conflicted: {e}")
            try:
                repo.git.rebase("--abort")
            except git.GitCommandError:
                logger.debug(f"Nothing to abort in '{self.name}'")
            return False
