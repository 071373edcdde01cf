"""Service for the user identity file and notification preference"""

from pathlib import Path
from typing import TYPE_CHECKING

from share_keeper.constants import KEY_FILE_PREFIX, KEY_FILE_SUFFIX
from share_keeper.models.identity import UserIdentity
from share_keeper.logging_config import get_logger

if TYPE_CHECKING:
    from share_keeper.config import Config

logger = get_logger(__name__)


def parse_identity(text: str) -> UserIdentity:
    """Parse an identity file.

    Every ``key = value`` line is split on the first '=' and trimmed.
    Section headers and unknown keys are ignored.
    """
    identity = UserIdentity()
    for line in text.splitlines():
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip().lower()
        if key == "name":
            identity.name = value.strip()
        elif key == "email":
            identity.email = value.strip()
    return identity


def format_identity(identity: UserIdentity) -> str:
    return (
        "[user]\n"
        f"\tname  = {identity.name}\n"
        f"\temail = {identity.email}\n"
    )


class IdentityService:
    """Reads and writes the identity file and the notify marker.

    Neither file is locked: a read racing a write may see either value.
    """

    def __init__(self, config: "Config"):
        self.config = config

    @property
    def identity_file(self) -> Path:
        return self.config.identity_file

    def is_configured(self) -> bool:
        """Check if an identity file exists (returning user)."""
        return self.identity_file.exists()

    def load(self) -> UserIdentity:
        """Load the identity, falling back to the key file name for the email."""
        identity = UserIdentity()
        try:
            identity = parse_identity(self.identity_file.read_text())
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not read {self.identity_file}: {e}")

        if not identity.email:
            identity.email = self.email_from_key_file()
        return identity

    def email_from_key_file(self) -> str:
        """Find 'share-keeper.<email>.key' in the keys folder."""
        keys_path = self.config.keys_path
        if not keys_path.is_dir():
            return ""

        for key_file in sorted(keys_path.iterdir()):
            name = key_file.name
            if name.startswith(KEY_FILE_PREFIX) and name.endswith(KEY_FILE_SUFFIX):
                email = name[len(KEY_FILE_PREFIX):-len(KEY_FILE_SUFFIX)]
                if email:
                    return email
        return ""

    def save(self, identity: UserIdentity) -> None:
        self.identity_file.parent.mkdir(parents=True, exist_ok=True)
        self.identity_file.write_text(format_identity(identity))
        logger.info(f"Wrote identity to '{self.identity_file}'")

    def set_name(self, name: str) -> UserIdentity:
        identity = self.load()
        identity.name = name.strip()
        self.save(identity)
        return identity

    def set_email(self, email: str) -> UserIdentity:
        identity = self.load()
        identity.email = email.strip()
        self.save(identity)
        return identity

    # Notification preference: the file existing means notifications are on

    @property
    def notify_file(self) -> Path:
        return self.config.notify_file

    def notifications_enabled(self) -> bool:
        return self.notify_file.exists()

    def enable_notifications(self) -> None:
        self.notify_file.parent.mkdir(parents=True, exist_ok=True)
        self.notify_file.touch(exist_ok=True)

    def toggle_notifications(self) -> bool:
        """Flip the preference. Returns the new value."""
        if self.notifications_enabled():
            self.notify_file.unlink(missing_ok=True)
            return False
        self.enable_notifications()
        return True
