"""SSH key pair handling"""

import subprocess
import threading
from pathlib import Path
from typing import Optional

from share_keeper.constants import KEY_FILE_PREFIX, KEY_FILE_SUFFIX
from share_keeper.logging_config import get_logger

logger = get_logger(__name__)


class KeyAgent:
    """Generates the user's key pair and registers it with ssh-agent.

    Failures are logged and reported through return values; nothing here
    raises into the caller.
    """

    def __init__(self, keys_path: Path):
        self.keys_path = Path(keys_path)

    def key_file(self, email: str) -> Path:
        return self.keys_path / f"{KEY_FILE_PREFIX}{email}{KEY_FILE_SUFFIX}"

    def _run(self, args: list, cwd: Optional[Path] = None) -> bool:
        try:
            result = subprocess.run(
                args, cwd=cwd, capture_output=True, text=True, check=False
            )
        except OSError as e:
            logger.warning(f"Could not run {args[0]}: {e}")
            return False

        if result.returncode != 0:
            logger.warning(f"{args[0]} exited with {result.returncode}: {result.stderr.strip()}")
            return False
        return True

    def add_key(self, email: str) -> bool:
        """Add the user's key to ssh-agent."""
        key_file = self.key_file(email)
        if not key_file.exists():
            logger.debug(f"No key at '{key_file}', not adding it to ssh-agent")
            return False

        added = self._run(["ssh-add", str(key_file)])
        if added:
            logger.info(f"Added key '{key_file.name}' to ssh-agent")
        return added

    def add_key_in_background(self, email: str) -> threading.Thread:
        thread = threading.Thread(
            target=self.add_key, args=(email,), name="share-keeper-ssh-add", daemon=True
        )
        thread.start()
        return thread

    def generate_key_pair(self, email: str) -> bool:
        """Create an RSA key pair without passphrase if none exists yet."""
        key_file = self.key_file(email)
        if key_file.exists():
            logger.debug(f"Key '{key_file.name}' already exists")
            return False

        self.keys_path.mkdir(parents=True, exist_ok=True)
        created = self._run(
            ["ssh-keygen", "-t", "rsa", "-P", "", "-f", key_file.name],
            cwd=self.keys_path,
        )
        if created:
            logger.info(f"Created key '{key_file.name}'")
            logger.info(f"Created key '{key_file.name}.pub'")
        return created
