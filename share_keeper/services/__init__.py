"""Services used by the share-keeper controller."""

from .size_probe import SizeProbe
from .worker_handle import Worker, WorkerHandle, WorkerFactory
from .registry import RepositoryRegistry
from .status_aggregator import aggregate_status
from .watcher import DirectoryWatcher
from .identity_service import IdentityService
from .key_service import KeyAgent
from .desktop_service import DesktopIntegration

__all__ = [
    "SizeProbe",
    "Worker",
    "WorkerHandle",
    "WorkerFactory",
    "RepositoryRegistry",
    "aggregate_status",
    "DirectoryWatcher",
    "IdentityService",
    "KeyAgent",
    "DesktopIntegration",
]
