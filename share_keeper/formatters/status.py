"""Aggregated state formatting utilities."""

from share_keeper.constants import CLI_COLORS, STATE_DISPLAY
from share_keeper.models.status import SyncState


def format_state(state: SyncState) -> str:
    """Display text for an aggregated state."""
    return STATE_DISPLAY.get(state, state.value)


def format_state_markup(state: SyncState, folder_size: str = "") -> str:
    """
    Rich markup line for an aggregated state.

    Args:
        state: Aggregated state
        folder_size: Formatted size of the shared root, shown when idle

    Returns:
        e.g. "[green]Up to date[/green] (12.3 ᴍʙ)"
    """
    color = CLI_COLORS.get(state)
    text = format_state(state)
    if color:
        text = f"[{color}]{text}[/{color}]"
    if folder_size and state is SyncState.IDLE:
        text += f" ({folder_size})"
    return text
