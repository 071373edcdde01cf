"""Folder size formatting."""

from typing import Union

from share_keeper.constants import SIZE_UNITS


def format_folder_size(byte_count: Union[int, float]) -> str:
    """
    Format a byte count using the largest unit it fills.

    Args:
        byte_count: Size in bytes

    Returns:
        Value rounded to one decimal with the unit label, e.g. "1.5 ᴋʙ".
        Below 1024 the plain count is used, e.g. "500 bytes".

    Example:
        format_folder_size(1048576) -> "1 ᴍʙ"
    """
    for factor, label in SIZE_UNITS:
        if byte_count >= factor:
            text = f"{round(byte_count / factor, 1):.1f}"
            if text.endswith(".0"):
                text = text[:-2]
            return f"{text} {label}"

    return f"{int(byte_count)} bytes"
