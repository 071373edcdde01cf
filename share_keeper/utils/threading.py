"""Threading utilities for sizing the repository population pool."""

import os
import sys
from typing import Dict, Any, Optional


def is_free_threading_enabled() -> bool:
    """Detect if Python is running with the GIL disabled (3.13+ free-threading)."""
    try:
        return hasattr(sys, "_is_gil_enabled") and not sys._is_gil_enabled()
    except Exception:
        return False


def get_python_threading_mode() -> str:
    """Describe the current threading mode.

    Returns:
        "free-threading", "GIL-enabled" or "GIL-enabled (Python < 3.13)"
    """
    if not hasattr(sys, "_is_gil_enabled"):
        return "GIL-enabled (Python < 3.13)"
    return "free-threading" if is_free_threading_enabled() else "GIL-enabled"


def get_optimal_worker_count(user_specified: Optional[int] = None, pending: Optional[int] = None) -> int:
    """Calculate how many threads to use when attaching folders.

    Attaching a folder opens a git repository, which is mostly waiting on
    the filesystem, so the pool may be larger than the CPU count.

    Args:
        user_specified: User-specified worker count, if provided
        pending: Number of folders waiting to be attached, caps the result

    Returns:
        Number of threads to use (at least 1)
    """
    if user_specified is not None and user_specified > 0:
        count = user_specified
    else:
        cpu_count = os.cpu_count() or 1
        if is_free_threading_enabled():
            count = min(64, cpu_count * 2)
        else:
            count = min(32, cpu_count + 4)

    if pending is not None:
        count = min(count, max(1, pending))
    return count


def get_threading_info() -> Dict[str, Any]:
    """Collect threading details for the --debug report."""
    return {
        "mode": get_python_threading_mode(),
        "free_threading": is_free_threading_enabled(),
        "cpu_count": os.cpu_count() or 1,
        "optimal_workers": get_optimal_worker_count(),
        "python_version": f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
    }
