"""Shared constants for share-keeper."""

from share_keeper.models.status import SyncState

APP_NAME = "share-keeper"

# Names inside the shared root and the config folder
DEFAULT_ROOT_NAME = "ShareKeeper"
VCS_MARKER = ".git"
INVITATION_SUFFIX = ".invitation"
TMP_DIR_NAME = ".tmp"
REBASE_DIR_NAME = "rebase-apply"
PID_FILE_NAME = f"{APP_NAME}.pid"
NOTIFY_FILE_NAME = f"{APP_NAME}.notify"
IDENTITY_FILE_NAME = "config"
CONFIG_FILE_NAME = f"{APP_NAME}.json"
LOG_FILE_NAME = f"{APP_NAME}.log"
KEY_FILE_PREFIX = f"{APP_NAME}."
KEY_FILE_SUFFIX = ".key"

# Directories skipped by the size probe; workers mutate them while syncing
EXCLUDED_SIZE_DIRS = [REBASE_DIR_NAME, TMP_DIR_NAME]


# Size units, largest first (small-caps labels)
SIZE_UNITS = [
    (1024 ** 4, "ᴛʙ"),
    (1024 ** 3, "ɢʙ"),
    (1024 ** 2, "ᴍʙ"),
    (1024, "ᴋʙ"),
]


# Status display names
STATE_DISPLAY = {
    SyncState.IDLE: "Up to date",
    SyncState.SYNCING: "Syncing…",
    SyncState.ERROR: "Not everything is synced",
}


# CLI colors (Rich color names)
CLI_COLORS = {
    SyncState.IDLE: "green",
    SyncState.SYNCING: "cyan",
    SyncState.ERROR: "red",
}
