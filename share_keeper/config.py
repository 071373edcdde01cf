"""Configuration handling for share-keeper"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from share_keeper.constants import (
    CONFIG_FILE_NAME,
    DEFAULT_ROOT_NAME,
    EXCLUDED_SIZE_DIRS,
    IDENTITY_FILE_NAME,
    INVITATION_SUFFIX,
    LOG_FILE_NAME,
    NOTIFY_FILE_NAME,
    PID_FILE_NAME,
    TMP_DIR_NAME,
    VCS_MARKER,
)
from share_keeper.exceptions import ConfigurationError


def _default_shared_root() -> str:
    return str(Path.home() / DEFAULT_ROOT_NAME)


def _default_config_dir() -> str:
    return str(Path.home() / ".config" / "share-keeper")


@dataclass
class Config:
    """Configuration for share-keeper with validation."""

    # Locations
    shared_root: str = field(default_factory=_default_shared_root)
    config_dir: str = field(default_factory=_default_config_dir)

    # Shared root layout
    invitation_suffix: str = INVITATION_SUFFIX
    vcs_marker: str = VCS_MARKER
    excluded_size_dirs: List[str] = field(default_factory=lambda: list(EXCLUDED_SIZE_DIRS))

    # Worker timing (seconds)
    poll_interval: float = 5.0
    fetch_interval: float = 60.0
    remote_name: str = "origin"

    # Directory watcher
    watch_debounce_ms: int = 1600

    # Execution modes
    sequential: bool = False  # Attach folders one at a time during population
    workers: Optional[int] = None  # Population thread pool size (None = auto-detect)
    verbose: bool = False
    debug: bool = False

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_paths()
        self._validate_invitation_suffix()
        self._validate_vcs_marker()
        self._validate_intervals()
        self._validate_debounce()
        self._validate_workers()

    def _validate_paths(self):
        """Expand and normalise the root and config folders."""
        if not self.shared_root or not str(self.shared_root).strip():
            raise ConfigurationError("shared_root cannot be empty")
        if not self.config_dir or not str(self.config_dir).strip():
            raise ConfigurationError("config_dir cannot be empty")
        self.shared_root = str(Path(self.shared_root).expanduser().absolute())
        self.config_dir = str(Path(self.config_dir).expanduser().absolute())

    def _validate_invitation_suffix(self):
        """Validate invitation_suffix looks like a file extension."""
        if not self.invitation_suffix.startswith(".") or len(self.invitation_suffix) < 2:
            raise ConfigurationError(
                f"invitation_suffix must start with '.', got '{self.invitation_suffix}'"
            )

    def _validate_vcs_marker(self):
        """Validate vcs_marker is a plain folder name."""
        marker = self.vcs_marker.strip() if self.vcs_marker else ""
        if not marker or "/" in marker:
            raise ConfigurationError(f"vcs_marker must be a folder name, got '{self.vcs_marker}'")
        self.vcs_marker = marker

    def _validate_intervals(self):
        """Validate worker intervals are positive."""
        if self.poll_interval <= 0:
            raise ConfigurationError(f"poll_interval must be positive, got {self.poll_interval}")
        if self.fetch_interval <= 0:
            raise ConfigurationError(f"fetch_interval must be positive, got {self.fetch_interval}")

    def _validate_debounce(self):
        """Validate watch_debounce_ms is not negative."""
        if self.watch_debounce_ms < 0:
            raise ConfigurationError(
                f"watch_debounce_ms cannot be negative, got {self.watch_debounce_ms}"
            )

    def _validate_workers(self):
        """Validate workers is positive when given."""
        if self.workers is not None and self.workers <= 0:
            raise ConfigurationError(f"workers must be positive, got {self.workers}")

    @property
    def tmp_path(self) -> Path:
        return Path(self.shared_root) / TMP_DIR_NAME

    @property
    def pid_file(self) -> Path:
        return self.tmp_path / PID_FILE_NAME

    @property
    def notify_file(self) -> Path:
        return Path(self.config_dir) / NOTIFY_FILE_NAME

    @property
    def identity_file(self) -> Path:
        return Path(self.config_dir) / IDENTITY_FILE_NAME

    @property
    def keys_path(self) -> Path:
        return Path(self.config_dir) / "keys"

    @property
    def icons_path(self) -> Path:
        return Path(self.config_dir) / "icons"

    @property
    def log_file(self) -> Path:
        return Path(self.config_dir) / LOG_FILE_NAME

    def to_dict(self) -> dict:
        """Convert config to a plain dictionary."""
        return {
            "shared_root": self.shared_root,
            "config_dir": self.config_dir,
            "invitation_suffix": self.invitation_suffix,
            "vcs_marker": self.vcs_marker,
            "excluded_size_dirs": self.excluded_size_dirs,
            "poll_interval": self.poll_interval,
            "fetch_interval": self.fetch_interval,
            "remote_name": self.remote_name,
            "watch_debounce_ms": self.watch_debounce_ms,
            "sequential": self.sequential,
            "workers": self.workers,
            "verbose": self.verbose,
            "debug": self.debug,
        }

    def get(self, key: str, default=None):
        """Get config value by key."""
        return getattr(self, key, default)

    @classmethod
    def from_dict(cls, config_dict: dict) -> "Config":
        """Create Config from dictionary, ignoring unknown keys."""
        known_fields = set(cls.__dataclass_fields__)
        filtered = {k: v for k, v in config_dict.items() if k in known_fields}
        return cls(**filtered)

    @classmethod
    def from_file(cls, path: Union[str, Path], **overrides) -> "Config":
        """Load a JSON config file. Keyword overrides win over file values.

        A missing file yields the defaults (plus overrides).
        """
        path = Path(path)
        data: dict = {}
        if path.exists():
            try:
                data = json.loads(path.read_text())
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e
            if not isinstance(data, dict):
                raise ConfigurationError(f"{path} must contain a JSON object")
        data.update({k: v for k, v in overrides.items() if v is not None})
        return cls.from_dict(data)

    @staticmethod
    def default_config_file() -> Path:
        return Path(_default_config_dir()) / CONFIG_FILE_NAME
