"""Utility modules for share-keeper.

- signals: thread-safe observer signals
- threading: sizing of the repository population pool
"""

from .signals import Signal
from .threading import (
    is_free_threading_enabled,
    get_python_threading_mode,
    get_optimal_worker_count,
    get_threading_info,
)

__all__ = [
    "Signal",
    "is_free_threading_enabled",
    "get_python_threading_mode",
    "get_optimal_worker_count",
    "get_threading_info",
]
