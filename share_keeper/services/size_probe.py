"""Service for measuring the size of the shared root"""

from pathlib import Path
from typing import Iterable, Optional, Union

from share_keeper.constants import EXCLUDED_SIZE_DIRS
from share_keeper.formatters.size import format_folder_size
from share_keeper.logging_config import get_logger

logger = get_logger(__name__)


class SizeProbe:
    """Recursively sums file sizes, skipping folders workers rewrite mid-sync.

    Measuring is best-effort: a folder that disappears, cannot be listed,
    or loses a file between listing and stat counts as 0. The probe holds
    no state between calls.
    """

    def __init__(self, excluded_names: Optional[Iterable[str]] = None):
        self.excluded_names = frozenset(
            EXCLUDED_SIZE_DIRS if excluded_names is None else excluded_names
        )

    def measure(self, root: Union[str, Path]) -> int:
        """Get the size of a folder in bytes."""
        parent = Path(root)

        if parent.name in self.excluded_names:
            return 0

        try:
            entries = list(parent.iterdir())
        except OSError as e:
            logger.debug(f"Cannot list {parent}: {e}")
            return 0

        size = 0
        directories = []

        for entry in entries:
            try:
                if entry.is_dir() and not entry.is_symlink():
                    directories.append(entry)
                    continue
                size += entry.lstat().st_size
            except OSError as e:
                # The worker removed it after we listed the folder
                logger.debug(f"{entry} vanished while measuring {parent}: {e}")
                return 0

        for directory in directories:
            size += self.measure(directory)

        return size

    def folder_size(self, root: Union[str, Path]) -> str:
        """Measure a folder and format the result."""
        return format_folder_size(self.measure(root))
