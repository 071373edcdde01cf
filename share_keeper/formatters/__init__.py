"""Formatting utilities for share-keeper.

- size: human readable folder sizes
- status: aggregated state display text and colors
"""

from .size import format_folder_size
from .status import format_state, format_state_markup

__all__ = [
    "format_folder_size",
    "format_state",
    "format_state_markup",
]
