"""Thread-safe observer signals."""

from threading import Lock
from typing import Callable, List

from share_keeper.logging_config import get_logger

logger = get_logger(__name__)


class Signal:
    """A list of callbacks invoked with the same arguments on emit.

    Callbacks may be connected and disconnected from any thread, including
    from inside a callback. Emitting iterates over a copy of the callback
    list, so the set of receivers for one emit is fixed when it starts.
    """

    def __init__(self, name: str):
        self.name = name
        self._callbacks: List[Callable] = []
        self._lock = Lock()

    def connect(self, callback: Callable) -> Callable:
        """Register a callback. Returns it so this can be used as a decorator."""
        with self._lock:
            self._callbacks.append(callback)
        return callback

    def disconnect(self, callback: Callable) -> bool:
        """Remove a callback. Returns False if it was not connected."""
        with self._lock:
            try:
                self._callbacks.remove(callback)
            except ValueError:
                return False
        return True

    def disconnect_all(self) -> None:
        with self._lock:
            self._callbacks.clear()

    @property
    def receivers(self) -> int:
        with self._lock:
            return len(self._callbacks)

    def emit(self, *args) -> None:
        """Call every connected callback.

        A failing callback is logged and does not stop the others.
        """
        with self._lock:
            callbacks = list(self._callbacks)

        for callback in callbacks:
            try:
                callback(*args)
            except Exception:
                logger.exception(f"Receiver of '{self.name}' failed")

    def __repr__(self) -> str:
        return f"Signal({self.name!r}, receivers={self.receivers})"
